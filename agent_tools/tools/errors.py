"""Executor error types. Each carries a stable code rendered into error blocks."""


class ToolError(Exception):
    """Base exception for executor failures."""

    code = "TOOL_ERROR"

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        if code:
            self.code = code


class UpstreamUnavailableError(ToolError):
    """Database or third-party service could not be reached."""

    code = "UPSTREAM_UNAVAILABLE"


class MalformedDataError(ToolError):
    """Upstream returned data the executor cannot use."""

    code = "MALFORMED_DATA"


class MissingCredentialError(ToolError):
    """The tenant has not configured the integration this tool needs."""

    code = "MISSING_CREDENTIAL"


class ToolTimeoutError(ToolError):
    code = "TIMEOUT"

    def __init__(self, timeout_s: float):
        super().__init__(f"timed out after {timeout_s:.1f}s")
        self.timeout_s = timeout_s


class ToolNotFoundError(ToolError):
    code = "TOOL_NOT_FOUND"

    def __init__(self, tool_name: str):
        super().__init__(f"no executor registered for {tool_name}")
        self.tool_name = tool_name


class ToolCancelledError(ToolError):
    """The executor was cancelled from inside (not by the caller)."""

    code = "CANCELLED"

    def __init__(self):
        super().__init__("executor was cancelled before returning a result")

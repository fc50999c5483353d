from pydantic import BaseModel
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Load .env file if it exists (before reading os.getenv)
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    with open(_env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Only set if not already in environment (env vars take precedence)
                if key not in os.environ:
                    os.environ[key] = value

_DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "data" / "agent_tools.db"


def _sanitize_ascii(val: str) -> str:
    """Strip non-ASCII characters from config values (URLs and tokens)"""
    return val.encode('ascii', errors='ignore').decode('ascii').strip()


class Settings(BaseModel):
    # Storage
    database_url: str = os.getenv("AGENT_TOOLS_DATABASE_URL", f"sqlite+aiosqlite:///{_DEFAULT_DB_PATH}")

    # Dispatch
    tool_timeout_s: float = float(os.getenv("AGENT_TOOLS_TIMEOUT_S", "10"))
    http_timeout_s: float = float(os.getenv("AGENT_TOOLS_HTTP_TIMEOUT_S", "8"))

    # Capability table override (JSON: {"agent": ["calendar", ...]})
    capabilities_file: str = os.getenv("AGENT_TOOLS_CAPABILITIES_FILE", "")

    # Side-effect tools
    notify_webhook_url: str = _sanitize_ascii(os.getenv("NOTIFY_WEBHOOK_URL", ""))
    social_webhook_url: str = _sanitize_ascii(os.getenv("SOCIAL_WEBHOOK_URL", ""))
    social_webhook_token: str = _sanitize_ascii(os.getenv("SOCIAL_WEBHOOK_TOKEN", ""))

    # Executor limits
    knowledge_query_chars: int = 200
    memory_turns: int = 10


settings = Settings()

_social_token = '***' + settings.social_webhook_token[-4:] if len(settings.social_webhook_token) > 4 else 'EMPTY'
logger.info(f"Config: tool timeout={settings.tool_timeout_s}s, db={settings.database_url}")
logger.info(f"Config: notify webhook={'set' if settings.notify_webhook_url else 'EMPTY'}, "
            f"social webhook={'set' if settings.social_webhook_url else 'EMPTY'} (token={_social_token})")

"""Helpers shared by builtin executors: DB sessions and outbound webhooks."""
import logging
from contextlib import asynccontextmanager

import httpx
from sqlalchemy.exc import SQLAlchemyError

from ...config import settings
from ..errors import UpstreamUnavailableError, MalformedDataError, MissingCredentialError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def db_session(tool: str):
    """Open a DB session; storage errors surface as UpstreamUnavailableError."""
    from ...database import async_session_factory

    try:
        async with async_session_factory() as db:
            yield db
    except SQLAlchemyError as e:
        logger.error(f"{tool} store error: {e}")
        raise UpstreamUnavailableError(f"{tool} store unavailable ({type(e).__name__})") from e


async def post_json(url: str, payload: dict, token: str = "") -> dict:
    """POST a JSON payload and return the decoded JSON object ({} for empty bodies)."""
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_s) as client:
            resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        if status in (401, 403):
            raise MissingCredentialError(f"webhook rejected credentials (HTTP {status})") from e
        raise UpstreamUnavailableError(f"webhook returned HTTP {status}") from e
    except httpx.HTTPError as e:
        raise UpstreamUnavailableError(f"webhook unreachable ({type(e).__name__})") from e

    if not resp.content:
        return {}
    try:
        data = resp.json()
    except ValueError as e:
        raise MalformedDataError("webhook returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise MalformedDataError("webhook returned JSON that is not an object")
    return data

"""
Mirror Client

HTTP client for the secondary service that receives copies of every
project, todo, link, note and configuration mutation.

Wire format:
    create  POST   /{resource}  full row
    update  PUT    /{resource}  {key, ...changes}
    delete  DELETE /{resource}  {key}

The key is "id", except for configurations which are keyed by
"project_id". Every call carries the acting user's bearer token.
"""
from enum import Enum
from typing import Any, Optional, Protocol
import logging

import httpx
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class MirrorError(Exception):
    """Base exception for mirror call failures."""
    pass


class NoActiveSessionError(MirrorError):
    """No bearer token is available for the call."""
    pass


class MirrorUnavailableError(MirrorError):
    """The secondary service could not be reached."""
    pass


class MirrorHTTPError(MirrorError):
    """The secondary service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Mirror returned HTTP {status_code}: {body[:200]}")


class MirrorResource(str, Enum):
    """Endpoints exposed by the secondary service."""
    PROJECTS = "projects"
    TODOS = "todos"
    LINKS = "links"
    NOTES = "vps-notes"
    CONFIGURATIONS = "vps-configurations"

    @property
    def key_field(self) -> str:
        if self is MirrorResource.CONFIGURATIONS:
            return "project_id"
        return "id"


class MirrorOp(str, Enum):
    """Mutation kinds replicated to the mirror."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def method(self) -> str:
        return {
            MirrorOp.CREATE: "POST",
            MirrorOp.UPDATE: "PUT",
            MirrorOp.DELETE: "DELETE",
        }[self]


class SessionProvider(Protocol):
    """Anything that can hand out the current user's bearer token."""

    async def get_access_token(self) -> str:
        ...


class MirrorClient:
    """
    Thin client for the secondary service.

    A client with no base URL is disabled; callers check `enabled`
    before sending. `transport` lets tests plug in httpx.MockTransport.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionProvider,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.session = session
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def _headers(self) -> dict:
        token = await self.session.get_access_token()
        if not token:
            raise NoActiveSessionError("No active session")
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def send(
        self,
        op: MirrorOp,
        resource: MirrorResource,
        payload: dict,
    ) -> Any:
        """
        Send one mutation to the mirror.

        Raises:
            MirrorError: on missing session, transport failure or non-2xx status
        """
        if not self.enabled:
            raise MirrorUnavailableError("Mirror API URL is not configured")

        headers = await self._headers()
        url = f"{self.base_url}/{resource.value}"
        body = jsonable_encoder(payload)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(op.method, url, headers=headers, json=body)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MirrorHTTPError(e.response.status_code, e.response.text or "") from e
        except httpx.HTTPError as e:
            raise MirrorUnavailableError(f"{type(e).__name__}: {e}") from e

        logger.debug(f"Mirror {op.method} /{resource.value} -> {response.status_code}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None


def update_body(resource: MirrorResource, key: str, changes: dict) -> dict:
    """Build the PUT body: the resource key plus the changed fields."""
    return {resource.key_field: key, **changes}


def delete_body(resource: MirrorResource, key: str) -> dict:
    """Build the DELETE body: just the resource key."""
    return {resource.key_field: key}

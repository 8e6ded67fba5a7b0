"""Bearer token validation strategies.

A deployment picks exactly one strategy at start-up (``AUTH_STRATEGY``):

* ``remote`` forwards the token to the OAuth2 authority's verify endpoint;
* ``local`` verifies self-issued JWTs with the shared secret and derives
  permissions from the user's role.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from app.config.settings import Settings
from app.core.exceptions import UnauthorizedException
from app.core.permissions import has_all_permissions, has_any_role, permissions_for_role
from app.core.security import verify_token
from app.schemas.auth import Identity

logger = structlog.get_logger(__name__)


class TokenValidator(ABC):
    """Resolve a bearer token into an :class:`Identity`."""

    @abstractmethod
    async def validate(self, token: str) -> Identity:
        """Return the token's identity or raise ``UnauthorizedException``."""

    async def get_user_info(self, token: str) -> Identity:
        return await self.validate(token)

    async def check_permissions(self, token: str, required: List[str]) -> bool:
        """True iff every required permission is held."""
        try:
            identity = await self.get_user_info(token)
        except UnauthorizedException:
            logger.warning("permission_check_failed", required=required)
            return False
        return has_all_permissions(identity.permissions, required)

    async def check_roles(self, token: str, required: List[str]) -> bool:
        """True iff at least one required role is held."""
        try:
            identity = await self.get_user_info(token)
        except UnauthorizedException:
            logger.warning("role_check_failed", required=required)
            return False
        return has_any_role(identity.roles, required)

    async def aclose(self) -> None:
        pass


class RemoteTokenValidator(TokenValidator):
    """Delegate verification to an external OAuth2 authority."""

    VERIFY_PATH = "/api/verify-token"
    USERINFO_PATH = "/api/userinfo"

    def __init__(
        self,
        server_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.server_url = server_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def validate(self, token: str) -> Identity:
        if not token:
            raise UnauthorizedException(detail="No token provided")
        identity = await self._call("POST", self.VERIFY_PATH, token, failure="Invalid token")
        logger.info("token_validated", username=identity.username)
        return identity

    async def get_user_info(self, token: str) -> Identity:
        if not token:
            raise UnauthorizedException(detail="No token provided")
        return await self._call("GET", self.USERINFO_PATH, token, failure="Failed to get user info")

    async def _call(self, method: str, path: str, token: str, failure: str) -> Identity:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.request(
                method, f"{self.server_url}{path}", headers=headers
            )
        except httpx.HTTPError as exc:
            # Transport details are logged, never returned to the caller
            logger.error("authority_unreachable", path=path, error=repr(exc))
            raise UnauthorizedException(detail="Token validation failed") from exc

        if not response.is_success:
            logger.warning(
                "authority_rejected_token",
                path=path,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
            raise UnauthorizedException(detail=failure)

        try:
            return Identity.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error("authority_bad_payload", path=path, error=repr(exc))
            raise UnauthorizedException(detail="Token validation failed") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class LocalTokenValidator(TokenValidator):
    """Verify self-issued access tokens (signature and expiry)."""

    async def validate(self, token: str) -> Identity:
        if not token:
            raise UnauthorizedException(detail="No token provided")

        payload = verify_token(token, token_type="access")
        if payload is None:
            raise UnauthorizedException(detail="Invalid or expired token")

        return identity_from_payload(payload)


def identity_from_payload(payload: Dict[str, Any]) -> Identity:
    role = payload.get("role")
    roles = [role] if role else []
    return Identity(
        sub=str(payload["sub"]),
        username=payload.get("email") or str(payload["sub"]),
        email=payload.get("email"),
        roles=roles,
        permissions=sorted(permissions_for_role(role)) if role else [],
        company_id=payload.get("companyId"),
    )


def build_token_validator(
    settings: Settings, client: Optional[httpx.AsyncClient] = None
) -> TokenValidator:
    """Create the validator selected by ``settings.auth_strategy``."""
    if settings.auth_strategy == "remote":
        logger.info("token_validator_selected", strategy="remote", authority=settings.oauth2_server_url)
        return RemoteTokenValidator(
            settings.oauth2_server_url,
            timeout=settings.oauth2_timeout_seconds,
            client=client,
        )
    logger.info("token_validator_selected", strategy="local")
    return LocalTokenValidator()

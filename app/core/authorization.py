"""Request authorization pipeline.

Guards run in a fixed order and stop at the first decision:

    public route -> authenticate -> role check -> permission check

The pipeline is assembled once at application start with the configured
token validator. Each endpoint declares a static :class:`RoutePolicy`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

import structlog

from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.core.permissions import has_all_permissions, has_any_role
from app.core.token_validator import TokenValidator
from app.schemas.auth import Identity

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RoutePolicy:
    """Static access requirements of one endpoint."""

    public: bool = False
    roles: Tuple[str, ...] = ()
    permissions: Tuple[str, ...] = ()

    @classmethod
    def require(
        cls,
        roles: Iterable[str] = (),
        permissions: Iterable[str] = (),
    ) -> "RoutePolicy":
        return cls(roles=tuple(roles), permissions=tuple(permissions))


PUBLIC = RoutePolicy(public=True)
AUTHENTICATED = RoutePolicy()


class Decision(Enum):
    ALLOW = "allow"
    CONTINUE = "continue"


@dataclass
class AuthContext:
    """Per-request state threaded through the guards."""

    policy: RoutePolicy
    authorization: Optional[str] = None
    token: Optional[str] = None
    identity: Optional[Identity] = field(default=None)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


class Guard:
    """One step of the pipeline. Raise to deny."""

    async def check(self, context: AuthContext) -> Decision:
        raise NotImplementedError


class PublicRouteGuard(Guard):
    async def check(self, context: AuthContext) -> Decision:
        if context.policy.public:
            return Decision.ALLOW
        return Decision.CONTINUE


class AuthenticationGuard(Guard):
    def __init__(self, validator: TokenValidator):
        self.validator = validator

    async def check(self, context: AuthContext) -> Decision:
        token = extract_bearer_token(context.authorization)
        if not token:
            raise UnauthorizedException(detail="No token provided")

        context.token = token
        context.identity = await self.validator.validate(token)
        structlog.contextvars.bind_contextvars(subject=context.identity.sub)
        return Decision.CONTINUE


class RoleGuard(Guard):
    """Decides on the identity attached by authentication, no extra lookups."""

    async def check(self, context: AuthContext) -> Decision:
        required = list(context.policy.roles)
        if not required:
            return Decision.CONTINUE

        if not has_any_role(context.identity.roles, required):
            logger.info("role_denied", required=required)
            raise ForbiddenException(detail="Insufficient role")
        return Decision.CONTINUE


class PermissionGuard(Guard):
    async def check(self, context: AuthContext) -> Decision:
        required = list(context.policy.permissions)
        if not required:
            return Decision.CONTINUE

        if not has_all_permissions(context.identity.permissions, required):
            logger.info("permission_denied", required=required)
            raise ForbiddenException(detail="Insufficient permissions")
        return Decision.CONTINUE


class AuthorizationPipeline:
    """Ordered, short-circuiting guard chain."""

    def __init__(self, guards: Sequence[Guard]):
        self.guards = tuple(guards)

    @classmethod
    def for_validator(cls, validator: TokenValidator) -> "AuthorizationPipeline":
        return cls([
            PublicRouteGuard(),
            AuthenticationGuard(validator),
            RoleGuard(),
            PermissionGuard(),
        ])

    async def authorize(self, policy: RoutePolicy, authorization: Optional[str]) -> AuthContext:
        context = AuthContext(policy=policy, authorization=authorization)
        for guard in self.guards:
            if await guard.check(context) is Decision.ALLOW:
                break
        return context

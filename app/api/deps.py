"""API dependencies for authentication and authorization."""

import uuid
from typing import Callable, Iterable, Optional

from fastapi import Depends, Query, Request

from app.core.authorization import (
    AUTHENTICATED,
    PUBLIC,
    AuthContext,
    AuthorizationPipeline,
    RoutePolicy,
)
from app.core.exceptions import BadRequestException, UnauthorizedException
from app.core.token_validator import TokenValidator
from app.schemas.auth import Identity
from app.services.session import parse_uuid


def get_token_validator(request: Request) -> TokenValidator:
    return request.app.state.token_validator


def get_auth_pipeline(request: Request) -> AuthorizationPipeline:
    return request.app.state.auth_pipeline


def authorize(policy: RoutePolicy) -> Callable:
    """Dependency factory running the pipeline with a static route policy."""

    async def run_pipeline(
        request: Request,
        pipeline: AuthorizationPipeline = Depends(get_auth_pipeline),
    ) -> AuthContext:
        context = await pipeline.authorize(policy, request.headers.get("Authorization"))
        request.state.auth = context
        return context

    return run_pipeline


get_current_context = authorize(AUTHENTICATED)
public_route = authorize(PUBLIC)


async def get_current_identity(context: AuthContext = Depends(get_current_context)) -> Identity:
    return context.identity


async def get_current_token(context: AuthContext = Depends(get_current_context)) -> str:
    return context.token


def require(
    roles: Iterable[str] = (),
    permissions: Iterable[str] = (),
) -> Callable:
    """Authenticated route with optional role and permission requirements."""
    if not roles and not permissions:
        return get_current_identity
    policy = RoutePolicy.require(roles=roles, permissions=permissions)
    authorized = authorize(policy)

    async def identity_of(context: AuthContext = Depends(authorized)) -> Identity:
        return context.identity

    return identity_of


def get_company_scope(
    identity: Identity,
    company_id: Optional[uuid.UUID],
) -> uuid.UUID:
    """Tenant to operate on: the token's company, else the explicit query value."""
    scope = parse_uuid(identity.company_id) or company_id
    if scope is None:
        raise BadRequestException(detail="company_id is required")
    return scope


def company_scope(
    roles: Iterable[str] = (),
    permissions: Iterable[str] = (),
) -> Callable:
    """Like :func:`require` but resolves the caller's company id."""
    identity_dep = require(roles=roles, permissions=permissions)

    async def scope(
        identity: Identity = Depends(identity_dep),
        company_id: Optional[uuid.UUID] = Query(None),
    ) -> uuid.UUID:
        return get_company_scope(identity, company_id)

    return scope


async def get_current_user_id(identity: Identity = Depends(get_current_identity)) -> uuid.UUID:
    user_id = parse_uuid(identity.sub)
    if user_id is None:
        raise UnauthorizedException(detail="Invalid token payload")
    return user_id


# Predefined policy
require_admin = require(roles=["admin"])

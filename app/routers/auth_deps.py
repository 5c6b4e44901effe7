"""
Role-based access dependencies.
Turns the bearer token into an explicit SessionContext for each request.
"""
import logging
from typing import Callable, List

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AccessDeniedError, AuthenticationError
from app.schemas.auth import Role, SessionContext
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_context(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> SessionContext:
    """
    Validates the bearer token and builds the caller's session context.
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")

    payload = auth_service.decode_access_token(credentials.credentials)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise AuthenticationError("Could not validate credentials")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("TOKEN_EXPIRED")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise AuthenticationError("Invalid token type")

    employee_id = payload.get("sub")
    if not employee_id:
        logger.warning("Authentication failed: Missing subject in token")
        raise AuthenticationError("Missing subject in token")

    roles = []
    for raw in payload.get("roles") or [Role.EMPLOYEE.value]:
        try:
            roles.append(Role(raw))
        except ValueError:
            logger.debug(f"Ignoring unknown role '{raw}' for {employee_id}")

    return SessionContext(
        employee_id=str(employee_id),
        display_name=payload.get("name"),
        email=payload.get("email"),
        team_id=payload.get("team_id"),
        roles=roles or [Role.EMPLOYEE],
    )


def require_role(allowed_roles: List[Role]) -> Callable:
    """
    Dependency factory that checks the caller holds one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(ctx: SessionContext = Depends(require_role([Role.ADMIN]))):
            ...
    """
    def role_checker(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        if not any(role in ctx.roles for role in allowed_roles):
            raise AccessDeniedError(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return ctx
    return role_checker


def require_manager():
    """Shorthand for managers and admins."""
    return require_role([Role.MANAGER, Role.ADMIN])


def require_admin():
    return require_role([Role.ADMIN])


def ensure_team_access(ctx: SessionContext, team_id) -> None:
    """
    Managers act on their own team only; admins on any team.
    """
    if ctx.is_admin:
        return
    if not ctx.is_manager or not ctx.team_id or ctx.team_id != team_id:
        raise AccessDeniedError("Access denied. You can only manage leave for your own team.")


def ensure_owner_or_team_access(ctx: SessionContext, employee_id: str, team_id) -> None:
    if ctx.employee_id == employee_id:
        return
    ensure_team_access(ctx, team_id)


def ensure_owner(ctx: SessionContext, employee_id: str) -> None:
    if ctx.employee_id != employee_id:
        raise AccessDeniedError("Only the employee who requested this leave can cancel it.")

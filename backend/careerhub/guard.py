"""
Route guard: decides whether a principal may reach a route annotated with a
required role.

    any       → any signed-in principal
    admin     → administrators only
    counselor → counselors only

Unauthenticated requests go to the login screen; signed-in principals with
the wrong role go back to the dashboard home.
"""

from enum import Enum
from typing import Optional

from fastapi import Depends, HTTPException, status

from careerhub.auth import get_optional_principal
from careerhub.schemas import Principal, RequiredRole, Role


class GuardDecision(str, Enum):
    RENDER = "render"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"


def evaluate_route(
    principal: Optional[Principal], required: RequiredRole = RequiredRole.ANY
) -> GuardDecision:
    if principal is None:
        return GuardDecision.REDIRECT_LOGIN

    if required == RequiredRole.ANY:
        return GuardDecision.RENDER
    if required == RequiredRole.ADMIN:
        return GuardDecision.RENDER if principal.role == Role.ADMIN else GuardDecision.REDIRECT_HOME
    if required == RequiredRole.COUNSELOR:
        return GuardDecision.RENDER if principal.role == Role.COUNSELOR else GuardDecision.REDIRECT_HOME

    raise ValueError(f"Unhandled required role: {required!r}")


def require_role(required: RequiredRole = RequiredRole.ANY):
    """
    FastAPI dependency enforcing ``evaluate_route``.

    redirect-to-login maps to 401, redirect-to-home to 403.
    """

    async def dependency(
        principal: Optional[Principal] = Depends(get_optional_principal),
    ) -> Principal:
        decision = evaluate_route(principal, required)
        if decision == GuardDecision.REDIRECT_LOGIN:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )
        if decision == GuardDecision.REDIRECT_HOME:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {required.value} role",
            )
        return principal

    return dependency

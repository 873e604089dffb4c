from fastapi import APIRouter, Depends, Response, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from careerhub.auth import Authenticator, create_session_token, get_current_principal, COOKIE_NAME
from careerhub.config import get_settings
from careerhub.database import get_db
from careerhub.exceptions import InvalidCredentialsError
from careerhub.schemas import LoginRequest, LoginResponse, Principal

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    settings = get_settings()
    try:
        principal = await Authenticator(db, settings).authenticate(
            request.email, request.password, request.role
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    token = create_session_token(principal, settings)
    # Without "remember me" the cookie dies with the browser session
    max_age = settings.session_token_days * 24 * 60 * 60 if request.remember_me else None
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=max_age,
        samesite="lax",
    )
    return LoginResponse(success=True, message="Logged in successfully", user=principal)


@router.post("/logout", response_model=LoginResponse)
async def logout(response: Response):
    response.delete_cookie(COOKIE_NAME)
    return LoginResponse(success=True, message="Logged out successfully")


@router.get("/me", response_model=Principal)
async def me(principal: Principal = Depends(get_current_principal)):
    return principal

# mentor_portal/routers/auth_router.py
from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, File
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta, datetime, timezone

from ..database import get_db
from ..schemas import UserCreate, Token, CurrentUserResponse, ProfileUpdate, AvatarResponse
from ..models import User
from ..security import authenticate_user, create_access_token, get_current_user
from ..services import IdentityService
from ..dependencies.service_dependencies import get_identity_service
from ..config import get_settings
from ..exceptions import BusinessLogicError, to_http_exception

router = APIRouter(tags=["authentication"])
settings = get_settings()

@router.post("/register", response_model=CurrentUserResponse, status_code=201)
async def register_user(
    user: UserCreate,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Self-signup as a mentee or a mentor"""
    try:
        db_user = identity_service.register(user.email, user.password, user.full_name, user.role)
        return identity_service.describe(db_user)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.post("/token", response_model=Token)
async def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Login with email as the username; sets an HttpOnly cookie and returns the token"""
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Incorrect email or password")

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire_time_utc = datetime.now(timezone.utc) + access_token_expires

    access_token = create_access_token(
        data={"sub": user.email},
        expires_delta=access_token_expires
    )

    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        expires=expire_time_utc,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )

    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/users/me", response_model=CurrentUserResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user),
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Who am I, and which dashboard should I land on"""
    return identity_service.describe(current_user)

@router.put("/users/me", response_model=CurrentUserResponse)
async def update_current_user_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    identity_service: IdentityService = Depends(get_identity_service)
):
    try:
        identity_service.update_profile(current_user, profile_data.full_name)
        return identity_service.describe(current_user)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.post("/users/me/avatar", response_model=AvatarResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Replace the current user's avatar image"""
    content = await file.read()
    try:
        url = identity_service.upload_avatar(current_user, content, file.content_type)
        return {"avatar_url": url}
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.post("/logout", status_code=200)
async def logout(response: Response):
    """Logout user by clearing cookie"""
    response.delete_cookie(key="access_token")
    return {"message": "Logged out successfully"}

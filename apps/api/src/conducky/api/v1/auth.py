from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from conducky.core.config import settings
from conducky.core.rate_limit import auth_limit
from conducky.core.security import DB, CurrentUser, create_access_token
from conducky.db.models.user import User
from conducky.services.auth_service import authenticate_user, register_user
from conducky.services.role_assignment_service import roles_by_scope

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str | None = None


class DevTokenRequest(BaseModel):
    email: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/register", status_code=status.HTTP_201_CREATED)
@auth_limit
def register(request: Request, body: RegisterRequest, db: DB):
    user = register_user(db, email=body.email, password=body.password, name=body.name)
    return {"id": str(user.id), "email": user.email, "name": user.name}


@router.post("/login", response_model=TokenResponse)
@auth_limit
def login(request: Request, body: LoginRequest, db: DB):
    user = authenticate_user(db, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    return TokenResponse(access_token=create_access_token(subject=str(user.id)))


@router.post("/dev-token", response_model=TokenResponse)
def dev_token(body: DevTokenRequest, db: DB):
    """Issue a JWT without a password. Only available in local/test environments."""
    if settings.APP_ENV not in ("local", "test"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    user = db.query(User).filter(User.email == body.email).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return TokenResponse(access_token=create_access_token(subject=str(user.id)))


@router.get("/me/roles")
def my_roles(user: CurrentUser, db: DB):
    """All of the caller's roles grouped by scope."""
    return roles_by_scope(db, user.id)

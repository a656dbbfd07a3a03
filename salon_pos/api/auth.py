from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from salon_pos.config import settings
from salon_pos.database import get_db
from salon_pos.models.user import User, UserRole
from salon_pos.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    name: str
    role: UserRole
    active: bool = True

    model_config = {"from_attributes": True}


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class CreateUserRequest(BaseModel):
    username: str
    password: str
    name: str = ""
    role: UserRole = UserRole.SELLER


def get_current_user(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None, alias="token"),
    db: Session = Depends(get_db),
) -> User:
    """Dependency: extract user from a Bearer header or the JWT cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
    if not token:
        raise HTTPException(401, "Not authenticated")
    payload = auth_service.decode_token(token)
    if not payload:
        raise HTTPException(401, "Invalid or expired token")
    user = auth_service.get_user_by_id(db, payload["sub"])
    if not user or not user.active:
        raise HTTPException(401, "User not found or disabled")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(403, "Admin only")
    return user


def _issue_token(user: User, response: Response) -> str:
    token = auth_service.create_access_token(user)
    response.set_cookie(
        "token", token, httponly=True, samesite="lax", max_age=3600 * settings.ACCESS_TOKEN_EXPIRE_HOURS
    )
    return token


@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, data.username, data.password)
    if not user:
        raise HTTPException(401, "Invalid username or password")
    token = _issue_token(user, response)
    return {"token": token, "user": UserOut.model_validate(user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie("token")
    return {"ok": True}


@router.post("/refresh")
def refresh(response: Response, user: User = Depends(get_current_user)):
    """Issue a fresh token for the caller and reset the cookie."""
    return {"token": _issue_token(user, response)}


@router.post("/change-password")
def change_password(data: ChangePasswordRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    auth_service.change_password(db, user, data.current_password, data.new_password)
    return {"ok": True}


@router.get("/verify", response_model=UserOut)
def verify(user: User = Depends(get_current_user)):
    return user


@router.get("/users", response_model=list[UserOut])
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.list_users(db)


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(data: CreateUserRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.create_user(db, data.username, data.password, data.name, data.role)

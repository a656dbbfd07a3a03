import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.orm import Session

from salon_pos.config import settings
from salon_pos.exceptions import AuthenticationError, ValidationError
from salon_pos.models.user import User, UserRole

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


def create_access_token(user: User) -> str:
    payload = {
        "sub": user.id,
        "username": user.username,
        "role": user.role.value,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError):
        return None


def authenticate(db: Session, username: str, password: str) -> User | None:
    user = db.query(User).filter(User.username == username, User.active.is_(True)).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create_user(
    db: Session, username: str, password: str, name: str = "", role: UserRole = UserRole.SELLER
) -> User:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required")
    existing = db.query(User).filter(User.username == username).first()
    if existing:
        raise ValidationError(f"Username '{username}' already exists")
    user = User(
        username=username,
        name=name or username,
        password_hash=hash_password(password),
        role=UserRole(role),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    if not current_password or not new_password:
        raise ValidationError("Current and new password are required")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not verify_password(current_password, user.password_hash):
        raise AuthenticationError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()
    db.refresh(user)
    logger.info("Password changed for %s", user.username)
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).all()


def ensure_default_users(db: Session) -> None:
    """Create the default admin and seller if no users exist."""
    if db.query(User).count():
        return
    create_user(
        db,
        username=settings.DEFAULT_ADMIN_USERNAME,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        name="Admin",
        role=UserRole.ADMIN,
    )
    create_user(
        db,
        username=settings.DEFAULT_SELLER_USERNAME,
        password=settings.DEFAULT_SELLER_PASSWORD,
        name="Seller",
        role=UserRole.SELLER,
    )
    logger.info("Seeded default users '%s' and '%s'", settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_SELLER_USERNAME)

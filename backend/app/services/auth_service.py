"""Auth service layer: password hashing, token issuing and account bootstrap."""

import logging
from datetime import datetime, timedelta

import bcrypt
from jose import jwt
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.models.user import User, UserRole
from app.schemas.user import LoginRequest, ProfileUpdate, RegisterRequest
from app.config import settings
from app.middleware.auth_middleware import ALGORITHM

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, AttributeError):
        # malformed hash
        return False


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def _normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def _ensure_email_available(db: Session, email: str, exclude_user_id: int | None = None):
    q = db.query(User).filter(User.email == email)
    if exclude_user_id is not None:
        q = q.filter(User.user_id != exclude_user_id)
    if q.first():
        raise HTTPException(status_code=400, detail="User already exists with this email")


def register(db: Session, data: RegisterRequest) -> User:
    email = _normalize_email(data.email)
    _ensure_email_available(db, email)
    user = User(
        name=data.name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        role=UserRole.MEMBER.value,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.user_id)
    return user


def login(db: Session, data: LoginRequest) -> User:
    user = db.query(User).filter(User.email == _normalize_email(data.email)).first()
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return user


def update_profile(db: Session, data: ProfileUpdate, current_user: User) -> User:
    payload = data.model_dump(exclude_unset=True)
    if payload.get("email") is not None:
        payload["email"] = _normalize_email(payload["email"])
        _ensure_email_available(db, payload["email"], exclude_user_id=current_user.user_id)
    elif "email" in payload:
        payload.pop("email")
    if payload.get("name") is not None:
        payload["name"] = payload["name"].strip()
    elif "name" in payload:
        payload.pop("name")

    for key, value in payload.items():
        setattr(current_user, key, value)
    db.commit()
    db.refresh(current_user)
    return current_user


def ensure_default_admin(db: Session) -> User | None:
    if not settings.SEED_DEFAULT_ADMIN:
        return None
    email = _normalize_email(settings.DEFAULT_ADMIN_EMAIL)
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return existing
    admin = User(
        name=settings.DEFAULT_ADMIN_NAME,
        email=email,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        role=UserRole.ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Default admin user created (%s)", email)
    return admin

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import os
import re
from passlib.context import CryptContext
from jose import jwt
from sqlalchemy.orm import Session
from ..db import models
from ..domain.enums import Role
from ..errors import ConflictError, ValidationAppError

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("APP_SECRET_KEY", "dev-secret-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

PASSWORD_MIN_LENGTH = 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(raw, hashed)

def password_problems(raw: str) -> list[str]:
    """Human readable reasons the password fails the policy (empty when it passes)."""
    problems = []
    if len(raw or "") < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    if not re.search(r"\d", raw or ""):
        problems.append("Password must contain a digit.")
    if not re.search(r"[a-z]", raw or ""):
        problems.append("Password must contain a lowercase letter.")
    if not re.search(r"[A-Z]", raw or ""):
        problems.append("Password must contain an uppercase letter.")
    return problems

def validate_password(raw: str) -> None:
    problems = password_problems(raw)
    if problems:
        raise ValidationAppError("WEAK_PASSWORD", " ".join(problems))

def create_access_token(sub: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": sub, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.email == email).first()

    def authenticate_user(self, email: str, password: str) -> Optional[models.User]:
        user = self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password or ""):
            return None
        return user

    def register_user(
        self,
        email: str,
        password: str,
        organization_id: int,
        user_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> models.User:
        """Create a user with an OrganizationMember membership in ``organization_id``."""
        if self.get_by_email(email):
            raise ConflictError("EMAIL_IN_USE", "Email already in use.")
        validate_password(password)
        user = models.User(
            email=email,
            user_name=user_name or email,
            display_name=display_name,
            hashed_password=hash_password(password),
        )
        self.db.add(user)
        self.db.flush()
        self.db.add(
            models.UserOrganization(
                user_id=user.id,
                organization_id=organization_id,
                role=Role.ORGANIZATION_MEMBER.value,
            )
        )
        self.db.commit()
        self.db.refresh(user)
        logger.info("registered user %s in organization %s", user.id, organization_id)
        return user

    def change_password(self, user: models.User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.hashed_password or ""):
            raise ValidationAppError("INVALID_PASSWORD", "Incorrect password.")
        self.set_password(user, new_password)

    def set_password(self, user: models.User, new_password: str) -> None:
        validate_password(new_password)
        user.hashed_password = hash_password(new_password)
        self.db.commit()
        logger.info("password updated for user %s", user.id)

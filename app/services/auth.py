import logging
from datetime import timedelta
from typing import Optional
from sqlmodel import Session, select
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.user import User, UserRole
from app.core.exceptions import ServerErrorException, ValidationException
from app.core.security import get_password_hash, verify_password, create_access_token

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, session: Session):
        self.session = session

    def create_access_token(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        return create_access_token(
            data={"sub": user.id, "role": user.role.value},
            expires_delta=expires_delta
        )

    def get_user_by_email(self, email: str) -> Optional[User]:
        # Case-insensitive exact match; LIKE would treat _ and % in the address as wildcards
        return self.session.exec(select(User).where(User.email == email)).first() or \
               self.session.exec(select(User).where(func.lower(User.email) == email.lower())).first()

    def _save_new_user(self, user: User) -> User:
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError:
            # Another request registered the same email first
            self.session.rollback()
            raise ValidationException("Email already registered", error_code="EMAIL_TAKEN")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to create user")
            raise ServerErrorException.from_error("Server error while creating the account", e)
        self.session.refresh(user)
        return user

    def register_user(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> User:
        if self.get_user_by_email(email):
            raise ValidationException("Email already registered", error_code="EMAIL_TAKEN")

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=get_password_hash(password),
            role=UserRole.USER,
        )
        self._save_new_user(user)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate_user(self, email: str, password: str) -> tuple[Optional[User], Optional[str]]:
        user = self.get_user_by_email(email)
        if not user:
            return None, "User not found. Please check your email or register a new account."
        if not user.password_hash:
            return None, f"This account signs in with {user.auth_provider}."
        if not verify_password(password, user.password_hash):
            return None, "Incorrect password. Please try again."
        if not user.is_active:
            return None, "This account has been disabled."
        return user, None

    def sign_in_with_provider(self, provider: str, email: str, name: Optional[str] = None) -> User:
        """Find or create the account for an identity already verified by an OAuth provider.

        Accounts created here have no password; they can only sign in through the provider.
        """
        user = self.get_user_by_email(email)
        if user:
            return user

        first_name, _, last_name = (name or "").strip().partition(" ")
        user = User(
            email=email,
            first_name=first_name or None,
            last_name=last_name or None,
            password_hash=None,
            auth_provider=provider,
            role=UserRole.USER,
        )
        try:
            self._save_new_user(user)
        except ValidationException:
            # A concurrent sign-in created the account first
            return self.get_user_by_email(email)
        logger.info("Created %s account %s", provider, user.id)
        return user

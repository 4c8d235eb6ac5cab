import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlmodel import Session, select
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, session: Session):
        self.session = session

    def get_all_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        return self.session.exec(
            select(User).order_by(User.created_at).offset(skip).limit(limit)
        ).all()

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def update_user_status(
        self,
        user_id: str,
        is_active: Optional[bool] = None,
        role: Optional[UserRole] = None
    ) -> Optional[User]:
        user = self.get_user_by_id(user_id)
        if not user:
            return None

        if is_active is not None:
            user.is_active = is_active
        if role is not None:
            user.role = role
        user.updated_at = datetime.now(timezone.utc)

        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        logger.info("Updated user %s: role=%s active=%s", user.id, user.role.value, user.is_active)
        return user

"""User repository - Database operations for users"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...constants import Role
from ...models import User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_users(db: Session) -> list[User]:
        return db.query(User).order_by(User.name.asc()).all()

    @staticmethod
    def get_clients(db: Session) -> list[User]:
        """Consumer users ordered by company name, falling back to name"""
        clients = db.query(User).filter(User.role == Role.CONSUMER.value).all()
        return sorted(clients, key=lambda u: (u.company_name or u.name or "").lower())

    @staticmethod
    def get_users_by_ids(db: Session, user_ids: Iterable[str]) -> dict[str, User]:
        """Batch lookup used to join client names onto lists"""
        ids = set(user_ids)
        if not ids:
            return {}
        return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user


def display_name(user: Optional[User], default: str = "Unknown User") -> str:
    """Client label used across lists: company name, else name"""
    if not user:
        return default
    return user.company_name or user.name or default

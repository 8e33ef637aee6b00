"""User service - Business logic for profiles, roles and client accounts"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import Role
from ...models import User, generate_id
from ...utils.sanitization import sanitize_string
from .repository import UserRepository
from .schemas import ClientCreate, ProfileUpsert

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_user(self, user_id: str) -> User:
        user = self.repo.get_user(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")
        return user

    def get_users(self) -> list[User]:
        return self.repo.get_users(self.db)

    def get_clients(self) -> list[User]:
        return self.repo.get_clients(self.db)

    def upsert_profile(self, data: ProfileUpsert, ctx: SessionContext) -> User:
        """Fill in the caller's profile; role is never touched here"""
        user = self.repo.get_user(self.db, ctx.user_id)
        updates = {
            "name": data.name,
            "phone": data.phone,
            "company_name": data.companyName,
            "address": sanitize_string(data.address),
            "gst_number": data.gstNumber,
        }
        if not user:
            logger.info(f"🆕 Creating profile for {ctx.user_id}")
            return self.repo.create_user(
                self.db, id=ctx.user_id, role=Role.CONSUMER.value, **updates
            )
        return self.repo.update_user(self.db, user, **updates)

    def update_role(self, user_id: str, role: Role, ctx: SessionContext) -> User:
        user = self.get_user(user_id)
        previous = user.role
        user = self.repo.update_user(self.db, user, role=role.value)
        logger.info(f"🔑 {ctx.user_id} changed role of {user_id}: {previous} → {role.value}")
        return user

    def create_client(self, data: ClientCreate, ctx: SessionContext) -> User:
        user_id = data.id or generate_id()
        if self.repo.get_user(self.db, user_id):
            raise HTTPException(status_code=409, detail="A user with this ID already exists")

        logger.info(f"📥 {ctx.user_id} creating client {data.companyName}")
        return self.repo.create_user(
            self.db,
            id=user_id,
            name=data.name,
            phone=data.phone,
            company_name=data.companyName,
            gst_number=data.gstNumber or "",
            address=sanitize_string(data.address),
            role=Role.CONSUMER.value,
        )

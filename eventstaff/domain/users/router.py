"""User router - profiles, role management and client accounts"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context, require_roles
from ...constants import Role
from ...database import get_db
from ...models import User
from .schemas import ClientCreate, ProfileUpsert, RoleUpdate, UserResponse
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        phone=user.phone,
        role=user.role,
        companyName=user.company_name,
        address=user.address,
        gstNumber=user.gst_number,
        created_at=user.created_at,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    return to_user_response(service.get_user(ctx.user_id))


@router.post("/me", response_model=UserResponse)
async def upsert_me(
    data: ProfileUpsert,
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    """Complete the signed-up user's profile (role stays consumer)"""
    return to_user_response(service.upsert_profile(data, ctx))


@router.get("", response_model=list[UserResponse])
async def list_users(
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return [to_user_response(u) for u in service.get_users()]


@router.get("/clients", response_model=list[UserResponse])
async def list_clients(
    ctx: SessionContext = Depends(
        require_roles(Role.SALES, Role.ACCOUNTANT, Role.OPERATIONAL_MANAGER, Role.ADMIN)
    ),
    service: UserService = Depends(get_user_service),
):
    return [to_user_response(u) for u in service.get_clients()]


@router.post("/clients", response_model=UserResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    ctx: SessionContext = Depends(require_roles(Role.SALES, Role.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return to_user_response(service.create_client(data, ctx))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return to_user_response(service.get_user(user_id))


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_role(
    user_id: str,
    data: RoleUpdate,
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    """Change a user's role; grants different permissions across the app"""
    return to_user_response(service.update_role(user_id, data.role, ctx))

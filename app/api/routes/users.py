"""User administration endpoints with per-route role sets."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_user_service
from app.api.guard import (
    AuthContext,
    allow_all_roles,
    exclude_role,
    require_any_of,
    require_exactly,
)
from app.core.responses import ok
from app.core.roles import Role
from app.core.validation import parse_positive_id
from app.schemas.users import UserCreateRequest, UserUpdateRequest
from app.services.users import UserService

router = APIRouter()

UserServiceDep = Annotated[UserService, Depends(get_user_service)]

# Role sets per route.
CanListUsers = Annotated[AuthContext, Depends(exclude_role(Role.CLIENT))]
CanCreateUsers = Annotated[AuthContext, Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN))]
CanViewUser = Annotated[AuthContext, Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN, Role.DEV))]
CanUpdateUser = Annotated[AuthContext, Depends(allow_all_roles())]
CanDeleteUser = Annotated[AuthContext, Depends(require_exactly(Role.SUPERADMIN))]


@router.get("")
def list_users(_ctx: CanListUsers, service: UserServiceDep) -> JSONResponse:
    return ok(service.list_users(), "users")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreateRequest, ctx: CanCreateUsers, service: UserServiceDep) -> JSONResponse:
    """Create a user on behalf of an administrator."""
    user = service.create_user(body.model_dump(exclude_unset=True), actor_role=ctx.role)
    return ok(user, "user", status.HTTP_201_CREATED)


@router.get("/{user_id}")
def get_user(user_id: str, _ctx: CanViewUser, service: UserServiceDep) -> JSONResponse:
    return ok(service.get_user(parse_positive_id(user_id)), "user")


@router.put("/{user_id}")
def update_user(
    user_id: str,
    body: UserUpdateRequest,
    ctx: CanUpdateUser,
    service: UserServiceDep,
) -> JSONResponse:
    """Partial update; non-admins may only edit themselves."""
    user = service.update_user(
        parse_positive_id(user_id),
        body.model_dump(exclude_unset=True),
        actor_id=ctx.user_id,
        actor_role=ctx.role,
    )
    return ok(user, "user")


@router.delete("/{user_id}")
def delete_user(user_id: str, _ctx: CanDeleteUser, service: UserServiceDep) -> JSONResponse:
    uid = parse_positive_id(user_id)
    service.delete_user(uid)
    return ok(f"User {uid} deleted.", "message")

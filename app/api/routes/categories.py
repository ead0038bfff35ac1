"""Category endpoints. Listing is public; changes need a catalog-admin role."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_category_service
from app.api.guard import AuthContext, allow_all_roles, require_any_of
from app.core.responses import ok
from app.core.roles import Role
from app.core.validation import parse_positive_id
from app.schemas.catalog import CategoryRequest
from app.services.categories import CategoryService

router = APIRouter()

CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]

CanViewCategory = Annotated[AuthContext, Depends(allow_all_roles())]
CanEditCategories = Annotated[AuthContext, Depends(require_any_of(Role.SUPERADMIN, Role.ADMIN, Role.DEV))]


@router.get("")
def list_categories(service: CategoryServiceDep) -> JSONResponse:
    return ok(service.list_categories(), "categorias")


@router.get("/{id_cat}")
def get_category(id_cat: str, _ctx: CanViewCategory, service: CategoryServiceDep) -> JSONResponse:
    return ok(service.get_category(parse_positive_id(id_cat)), "categoria")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryRequest, _ctx: CanEditCategories, service: CategoryServiceDep) -> JSONResponse:
    return ok(service.create_category(body.nombre), "categoria", status.HTTP_201_CREATED)


@router.put("/{id_cat}")
def update_category(
    id_cat: str,
    body: CategoryRequest,
    _ctx: CanEditCategories,
    service: CategoryServiceDep,
) -> JSONResponse:
    return ok(service.update_category(parse_positive_id(id_cat), body.nombre), "categoria")


@router.delete("/{id_cat}")
def delete_category(id_cat: str, _ctx: CanEditCategories, service: CategoryServiceDep) -> JSONResponse:
    cid = parse_positive_id(id_cat)
    service.delete_category(cid)
    return ok(f"Category {cid} deleted.", "message")

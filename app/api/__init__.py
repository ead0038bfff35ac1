"""HTTP routers. Every router carries the request guard; public routes are allow-listed in guard.py."""

from fastapi import APIRouter, Depends

from app.api.guard import authenticate
from app.api.routes import auth, banners, categories, health, products, uploads, users

guarded = [Depends(authenticate)]

root_router = APIRouter(dependencies=guarded)
root_router.include_router(health.router, tags=["health"])

auth_router = APIRouter(dependencies=guarded)
auth_router.include_router(auth.router, tags=["auth"])

api_router = APIRouter(dependencies=guarded)
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(categories.router, prefix="/categorias", tags=["categorias"])
api_router.include_router(products.router, prefix="/productos", tags=["productos"])
api_router.include_router(banners.router, prefix="/banners", tags=["banners"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])

"""Request schemas for categories and banners (products accept JSON or multipart, parsed in the route)."""

from pydantic import BaseModel, Field


class CategoryRequest(BaseModel):
    nombre: str | None = Field(default=None, description="Category name (unique, max 150 chars)")


class BannerRequest(BaseModel):
    banner: str | None = Field(default=None, description="Public http/https URL of the banner image")

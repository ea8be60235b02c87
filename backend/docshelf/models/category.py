"""Category schemas."""

from datetime import datetime

from docshelf.models.common import CamelModel


class CategoryCreate(CamelModel):
    """Create a category."""

    name: str
    slug: str
    description: str | None = None


class CategoryUpdate(CamelModel):
    """Partial update for a category. Absent keys are left untouched."""

    name: str | None = None
    slug: str | None = None
    description: str | None = None


class CategoryDocument(CamelModel):
    """Published document listed under a category."""

    id: str
    title: str
    slug: str
    subtitle: str | None = None


class CategoryRef(CamelModel):
    """Category embedded in documents and search results."""

    id: str
    name: str
    slug: str
    description: str | None = None


class CategoryResponse(CamelModel):
    """Category returned to the client."""

    id: str
    name: str
    slug: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    documents: list[CategoryDocument] = []

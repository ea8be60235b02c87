"""Document, version, tag and comment schemas."""

from datetime import datetime

from docshelf.models.category import CategoryRef
from docshelf.models.common import CamelModel
from docshelf.models.user import AuthorSummary


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class DocumentCreate(CamelModel):
    """Create a document."""

    title: str
    slug: str
    content: str
    subtitle: str | None = None
    published: bool = False
    category_id: str | None = None
    tag_ids: list[str] | None = None


class DocumentUpdate(CamelModel):
    """Update a document.

    A key left out of the body leaves that field untouched, an explicit
    ``null`` clears it.
    """

    title: str | None = None
    slug: str | None = None
    subtitle: str | None = None
    content: str | None = None
    published: bool | None = None
    category_id: str | None = None
    tag_ids: list[str] | None = None


class TagCreate(CamelModel):
    """Create a tag."""

    name: str


class CommentCreate(CamelModel):
    """Post a comment on a document."""

    document_id: str
    content: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TagResponse(CamelModel):
    id: str
    name: str


class VersionResponse(CamelModel):
    """One immutable snapshot."""

    id: str
    document_id: str
    version_number: int
    title: str
    subtitle: str = ""
    content: str
    created_at: datetime | None = None


class CommentResponse(CamelModel):
    id: str
    content: str
    document_id: str
    author_id: str
    created_at: datetime | None = None
    author: AuthorSummary


class NavLink(CamelModel):
    """Previous/next neighbour in slug order."""

    title: str
    slug: str


class DocumentSummary(CamelModel):
    """Document row as shown in listings."""

    id: str
    title: str
    slug: str
    subtitle: str | None = None
    content: str
    published: bool
    version: int
    author_id: str
    category_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    author: AuthorSummary
    category: CategoryRef | None = None
    tags: list[TagResponse] = []


class DocumentDetail(DocumentSummary):
    """Document with its version history, newest first."""

    versions: list[VersionResponse] = []


class DocumentPageResponse(DocumentDetail):
    """Everything the public document page needs."""

    comments: list[CommentResponse] = []
    prev_doc: NavLink | None = None
    next_doc: NavLink | None = None

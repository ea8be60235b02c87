"""Search result schema."""

from docshelf.models.common import CamelModel


class SearchCategory(CamelModel):
    id: str
    name: str
    slug: str


class SearchResult(CamelModel):
    """A matching published document and the text around the first hit."""

    id: str
    title: str
    subtitle: str | None = None
    slug: str
    category: SearchCategory | None = None
    content_snippet: str = ""

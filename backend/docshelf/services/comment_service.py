"""Reader comments on documents."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from docshelf.core.permissions import Caller, can_modify
from docshelf.db.models import Comment
from docshelf.db.repositories import comment_repo, document_repo
from docshelf.services.exceptions import ForbiddenError, NotFoundError, ValidationError
from docshelf.services.redis_client import PageCache, doc_page_path

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: AsyncSession, pages: PageCache):
        self.db = db
        self.pages = pages

    async def create(self, document_id: str, content: str, caller: Caller) -> Comment:
        """Post a comment and revalidate the document's public page."""
        if not content or not content.strip():
            raise ValidationError("Comment content is required")

        doc = await document_repo.get_document_by_id(self.db, document_id)
        if doc is None:
            raise NotFoundError("Document not found")

        comment = await comment_repo.create_comment(self.db, doc.id, caller.id, content)
        await self.db.commit()
        logger.info(f"User {caller.id} commented on document {doc.id}")

        await self.pages.invalidate(doc_page_path(doc.slug))
        return comment

    async def delete(self, comment_id: str, caller: Caller) -> None:
        """Remove a comment. Only its author or an admin may do so."""
        comment = await comment_repo.get_comment_by_id(self.db, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if not can_modify(caller, comment.author_id):
            raise ForbiddenError("Not allowed to delete this comment")

        slug = comment.document.slug
        await comment_repo.delete_comment(self.db, comment.id)
        await self.db.commit()
        logger.info(f"Deleted comment {comment_id}")

        await self.pages.invalidate(doc_page_path(slug))

    async def list_for_document(self, document_id: str) -> list[Comment]:
        if await document_repo.get_document_by_id(self.db, document_id) is None:
            raise NotFoundError("Document not found")
        return await comment_repo.list_comments(self.db, document_id)

"""Comment endpoints."""

from fastapi import APIRouter, Query, status

from docshelf.api.dependencies import Comments, CurrentCaller
from docshelf.models.document import CommentCreate, CommentResponse
from docshelf.models.envelope import success_response

router = APIRouter()


@router.get("")
async def list_comments(service: Comments, document_id: str = Query(..., alias="documentId")) -> dict:
    comments = await service.list_for_document(document_id)
    return success_response([CommentResponse.model_validate(c).to_wire() for c in comments])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_comment(body: CommentCreate, caller: CurrentCaller, service: Comments) -> dict:
    comment = await service.create(body.document_id, body.content, caller)
    return success_response(CommentResponse.model_validate(comment).to_wire())


@router.delete("/{comment_id}")
async def delete_comment(comment_id: str, caller: CurrentCaller, service: Comments) -> dict:
    """Delete a comment; only its author or an admin may."""
    await service.delete(comment_id, caller)
    return success_response({"message": "Comment deleted successfully"})

"""Tag endpoints."""

from fastapi import APIRouter, status

from docshelf.api.dependencies import AdminCaller, DbSession
from docshelf.db.repositories import tag_repo
from docshelf.models.document import TagCreate, TagResponse
from docshelf.models.envelope import success_response
from docshelf.services.exceptions import ValidationError

router = APIRouter()


@router.get("")
async def list_tags(db: DbSession) -> dict:
    tags = await tag_repo.list_tags(db)
    return success_response([TagResponse.model_validate(t).to_wire() for t in tags])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tag(body: TagCreate, _admin: AdminCaller, db: DbSession) -> dict:
    name = body.name.strip()
    if not name:
        raise ValidationError("Tag name is required")
    tag = await tag_repo.create_tag(db, name)
    return success_response(TagResponse.model_validate(tag).to_wire())

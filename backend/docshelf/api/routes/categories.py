"""Category endpoints. Writes require the ADMIN role."""

from fastapi import APIRouter, status

from docshelf.api.dependencies import Categories, CurrentCaller
from docshelf.models.category import CategoryCreate, CategoryResponse, CategoryUpdate
from docshelf.models.envelope import success_response
from docshelf.services.category_service import CategoryPatch

router = APIRouter()


@router.get("")
async def list_categories(service: Categories) -> dict:
    categories = await service.list()
    return success_response([CategoryResponse.model_validate(c).to_wire() for c in categories])


@router.get("/{category_id}")
async def get_category(category_id: str, service: Categories) -> dict:
    category = await service.get(category_id)
    return success_response(CategoryResponse.model_validate(category).to_wire())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, caller: CurrentCaller, service: Categories) -> dict:
    category = await service.create(body, caller)
    return success_response(CategoryResponse.model_validate(category).to_wire())


@router.put("/{category_id}")
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    caller: CurrentCaller,
    service: Categories,
) -> dict:
    """Partially update a category; keys left out of the body stay as they are."""
    category = await service.update(category_id, CategoryPatch.from_request(body), caller)
    return success_response(CategoryResponse.model_validate(category).to_wire())


@router.delete("/{category_id}")
async def delete_category(category_id: str, caller: CurrentCaller, service: Categories) -> dict:
    """Delete a category that no document references."""
    await service.delete(category_id, caller)
    return success_response({"message": "Category deleted successfully"})

"""Category API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..core.auth import require_owner
from ..database import get_db
from ..schemas.category import CategoryCreate, CategoryNode, CategoryResponse, CategoryUpdate
from ..services import CategoryService

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    return CategoryService(db).list_categories(owner_id)


# Fixed path, registered before /{name}.
@router.get("/tree", response_model=List[CategoryNode])
def get_category_tree(
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Categories nested under their parents."""
    return CategoryService(db).get_tree(owner_id)


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    return CategoryService(db).create(owner_id, category)


@router.put("/{name}", response_model=CategoryResponse)
def rename_category(
    name: str,
    update: CategoryUpdate,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Rename a category; child categories and posts follow."""
    return CategoryService(db).rename(owner_id, name, update)


@router.delete("/{name}", status_code=204)
def delete_category(
    name: str,
    db: Session = Depends(get_db),
    owner_id: str = Depends(require_owner),
):
    """Delete an empty category."""
    CategoryService(db).delete(owner_id, name)
    return Response(status_code=204)

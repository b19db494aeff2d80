"""Category repository for database operations."""

from typing import List, Optional

import sqlalchemy.exc

from ..exceptions import CategoryConflictError
from ..models import Category
from .base import BaseRepository, translate_storage_errors


class CategoryRepository(BaseRepository[Category]):
    """Repository for category CRUD operations, always scoped to one owner."""

    model_class = Category

    def list_for_owner(self, owner_id: str) -> List[Category]:
        """All of the owner's categories. Expected to be tens, not millions."""
        with translate_storage_errors("category list"):
            return self.db.query(Category).filter(
                Category.owner_id == owner_id
            ).order_by(Category.name).all()

    def get_by_name(self, owner_id: str, name: str) -> Optional[Category]:
        with translate_storage_errors("category lookup"):
            return self.db.query(Category).filter(
                Category.owner_id == owner_id, Category.name == name
            ).first()

    def create(self, owner_id: str, name: str, parent: str) -> Category:
        def _duplicate(error: sqlalchemy.exc.IntegrityError):
            return CategoryConflictError(name)

        category = Category(owner_id=owner_id, name=name, parent=parent)
        with translate_storage_errors("category create", on_integrity_error=_duplicate):
            self.db.add(category)
            self.db.flush()
            self.db.refresh(category)
        return category

    def count_children(self, owner_id: str, name: str) -> int:
        with translate_storage_errors("category children"):
            return self.db.query(Category.id).filter(
                Category.owner_id == owner_id, Category.parent == name
            ).count()

    def rename(self, category: Category, new_name: str) -> Category:
        """Rename a category and re-point its direct children at the new name."""
        old_name = category.name
        with translate_storage_errors("category rename"):
            self.db.query(Category).filter(
                Category.owner_id == category.owner_id, Category.parent == old_name
            ).update({Category.parent: new_name}, synchronize_session=False)
            category.name = new_name
            self.db.flush()
            self.db.refresh(category)
        return category

    def delete(self, category: Category) -> None:
        with translate_storage_errors("category delete"):
            self.db.delete(category)
            self.db.flush()

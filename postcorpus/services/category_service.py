"""Category service - hierarchy resolution and category management.

Categories reference their parent by name. The full set per owner is small,
so every hierarchy question is answered from one in-memory scan rather than
an index.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from ..exceptions import (
    CategoryConflictError,
    CategoryCycleError,
    CategoryNotFoundError,
    ValidationError,
)
from ..models import Category, ROOT_CATEGORY
from ..repositories import CategoryRepository, PostRepository, translate_storage_errors
from ..schemas.category import CategoryCreate, CategoryNode, CategoryUpdate

logger = logging.getLogger(__name__)


def _children_by_parent(categories: Iterable[Category]) -> Dict[str, List[str]]:
    children: Dict[str, List[str]] = defaultdict(list)
    for category in categories:
        children[category.parent or ROOT_CATEGORY].append(category.name)
    return children


def expand_category(categories: Iterable[Category], name: str, owner_id: str = "") -> Set[str]:
    """Return *name* plus every category whose parent chain reaches it.

    Worklist traversal over a parent -> children map. Each name has one
    parent, so reaching a name twice can only mean a cycle.

    A name with no category record expands to just itself.

    Raises:
        CategoryCycleError: the parent links under *name* loop.
    """
    children = _children_by_parent(categories)
    result: Set[str] = set()
    stack = [name]
    while stack:
        current = stack.pop()
        if current in result:
            raise CategoryCycleError(owner_id, current)
        result.add(current)
        stack.extend(children.get(current, ()))
    return result


def build_category_tree(categories: Iterable[Category], owner_id: str = "") -> List[CategoryNode]:
    """Nest categories under their parents.

    A null parent, ``root``, or a parent name with no record all put the
    category at the top level.

    Raises:
        CategoryCycleError: some categories are unreachable from the top
            level because their parent links loop.
    """
    categories = list(categories)
    names = {c.name for c in categories}
    nodes = {c.name: CategoryNode(name=c.name, parent=c.parent) for c in categories}

    top_level: List[CategoryNode] = []
    for category in sorted(categories, key=lambda c: c.name):
        parent = category.parent
        if parent is None or parent == ROOT_CATEGORY or parent not in names:
            top_level.append(nodes[category.name])
        else:
            nodes[parent].children.append(nodes[category.name])

    stuck = names - _reachable_names(top_level)
    if stuck:
        raise CategoryCycleError(owner_id, min(stuck))

    return top_level


def _reachable_names(nodes: List[CategoryNode]) -> Set[str]:
    seen: Set[str] = set()
    stack = list(nodes)
    while stack:
        node = stack.pop()
        seen.add(node.name)
        stack.extend(node.children)
    return seen


class CategoryService:
    """Owner-scoped category operations."""

    def __init__(self, db: Session):
        self.db = db
        self.category_repo = CategoryRepository(db)
        self.post_repo = PostRepository(db)

    def expand(self, owner_id: str, category_name: str) -> Set[str]:
        """Category name plus all transitive children for filtering."""
        return expand_category(self.category_repo.list_for_owner(owner_id), category_name, owner_id)

    def list_categories(self, owner_id: str) -> List[Category]:
        return self.category_repo.list_for_owner(owner_id)

    def get_tree(self, owner_id: str) -> List[CategoryNode]:
        return build_category_tree(self.category_repo.list_for_owner(owner_id), owner_id)

    def create(self, owner_id: str, data: CategoryCreate, commit: bool = True) -> Category:
        """Create a category under an existing parent (or root).

        Raises:
            ValidationError: reserved name, or parent does not exist.
            CategoryConflictError: name already used by this owner.
        """
        name = data.name.strip()
        parent = (data.parent or ROOT_CATEGORY).strip()
        self._check_name(name)
        if parent == name:
            raise ValidationError("A category cannot be its own parent", field="parent")
        if parent != ROOT_CATEGORY and self.category_repo.get_by_name(owner_id, parent) is None:
            raise ValidationError(f"Parent category not found: {parent}", field="parent")
        if self.category_repo.get_by_name(owner_id, name) is not None:
            raise CategoryConflictError(name)

        category = self.category_repo.create(owner_id, name, parent)
        if commit:
            self._commit()
        logger.info("Created category", extra={"owner_id": owner_id, "category": name, "parent": parent})
        return category

    def rename(self, owner_id: str, name: str, data: CategoryUpdate, commit: bool = True) -> Category:
        """Rename a category. Child categories and posts follow the new name.

        Raises:
            CategoryNotFoundError: no such category.
            CategoryConflictError: new name already taken.
        """
        category = self._get(owner_id, name)
        new_name = data.name.strip()
        self._check_name(new_name)
        if new_name == name:
            return category
        if self.category_repo.get_by_name(owner_id, new_name) is not None:
            raise CategoryConflictError(new_name)

        moved = self.post_repo.recategorize(owner_id, name, new_name)
        category = self.category_repo.rename(category, new_name)
        if commit:
            self._commit()
        logger.info(
            "Renamed category",
            extra={"owner_id": owner_id, "from": name, "to": new_name, "posts_moved": moved},
        )
        return category

    def delete(self, owner_id: str, name: str, commit: bool = True) -> None:
        """Delete a category that has no children and no posts.

        Raises:
            CategoryNotFoundError: no such category.
            CategoryConflictError: category still has children or posts.
        """
        category = self._get(owner_id, name)
        if self.category_repo.count_children(owner_id, name) > 0:
            raise CategoryConflictError(name, "Cannot delete category with children")
        if self.post_repo.count_in_category(owner_id, name) > 0:
            raise CategoryConflictError(name, "Cannot delete category with posts")

        self.category_repo.delete(category)
        if commit:
            self._commit()
        logger.info("Deleted category", extra={"owner_id": owner_id, "category": name})

    def _get(self, owner_id: str, name: str) -> Category:
        category = self.category_repo.get_by_name(owner_id, name)
        if category is None:
            raise CategoryNotFoundError(name)
        return category

    @staticmethod
    def _check_name(name: Optional[str]) -> None:
        if not name:
            raise ValidationError("Category name cannot be blank", field="name")
        if name == ROOT_CATEGORY:
            raise ValidationError(f"'{ROOT_CATEGORY}' is reserved", field="name")

    def _commit(self) -> None:
        with translate_storage_errors("category commit"):
            self.db.commit()

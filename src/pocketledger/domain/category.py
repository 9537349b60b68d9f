"""Category domain service."""

from typing import Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import Category
from pocketledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    category_not_found,
    delete_blocked,
    duplicate_name,
)
from pocketledger.utils.names import find_by_name, slugify


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_available(
        self, owner_id: int, display_name: str, slug: str, exclude_id: Optional[int] = None
    ) -> None:
        for cat in self.db.list_categories(owner_id):
            if cat.id == exclude_id:
                continue
            if cat.display_name.lower() == display_name.lower() or cat.name == slug:
                raise ConflictError(duplicate_name("Category", display_name))

    def create_category(self, owner_id: int, display_name: str, description: Optional[str] = None) -> int:
        """Create a category.

        Args:
            owner_id: Owner of the category
            display_name: Name shown to the user; the slug is derived from it
            description: Optional description

        Returns:
            Category ID

        Raises:
            ValidationError: If the name has no usable characters
            ConflictError: If the name or its slug is already used by this owner
        """
        display_name = display_name.strip()
        slug = slugify(display_name)
        if not slug:
            raise ValidationError(f"Category name '{display_name}' must contain letters or digits")
        self._check_available(owner_id, display_name, slug)
        return self.db.create_category(
            owner_id=owner_id, name=slug, display_name=display_name, description=description
        )

    def get_category(self, owner_id: int, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Returns:
            Category or None if not found
        """
        return self.db.get_category(owner_id, category_id)

    def find_category(self, owner_id: int, name: str) -> Optional[Category]:
        """Find a category by display name or slug, ignoring case."""
        return find_by_name(self.db.list_categories(owner_id), name)

    def list_categories(self, owner_id: int, active_only: bool = False) -> list[Category]:
        return self.db.list_categories(owner_id, active_only=active_only)

    def update_category(
        self,
        owner_id: int,
        category_id: int,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update a category. Renaming regenerates the slug.

        Raises:
            NotFoundError: If category not found
            ConflictError: If the new name clashes with another category
        """
        if self.db.get_category(owner_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        slug = None
        if display_name is not None:
            display_name = display_name.strip()
            slug = slugify(display_name)
            if not slug:
                raise ValidationError(f"Category name '{display_name}' must contain letters or digits")
            self._check_available(owner_id, display_name, slug, exclude_id=category_id)
        self.db.update_category(
            owner_id,
            category_id,
            name=slug,
            display_name=display_name,
            description=description,
            is_active=is_active,
        )

    def delete_category(self, owner_id: int, category_id: int) -> None:
        """Delete a category.

        Raises:
            NotFoundError: If category not found
            DependencyError: If transactions or budgets still use it
        """
        if self.db.get_category(owner_id, category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        counts = self.db.count_category_references(owner_id, category_id)
        if any(counts.values()):
            raise DependencyError(delete_blocked("category", category_id, counts))
        self.db.delete_category(owner_id, category_id)

"""Payee domain service."""

from typing import Optional

from pocketledger.database.base import Database
from pocketledger.domain.entities import Payee
from pocketledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    delete_blocked,
    duplicate_name,
    payee_not_found,
)
from pocketledger.utils.names import find_by_name, slugify


class PayeeService:
    """Service for managing payees."""

    def __init__(self, db: Database):
        self.db = db

    def _check_available(
        self, owner_id: int, display_name: str, slug: str, exclude_id: Optional[int] = None
    ) -> None:
        for payee in self.db.list_payees(owner_id):
            if payee.id == exclude_id:
                continue
            if payee.display_name.lower() == display_name.lower() or payee.name == slug:
                raise ConflictError(duplicate_name("Payee", display_name))

    def create_payee(
        self,
        owner_id: int,
        display_name: str,
        description: Optional[str] = None,
        category_hint: Optional[str] = None,
    ) -> int:
        """Create a payee.

        Args:
            owner_id: Owner of the payee
            display_name: Name shown to the user; the slug is derived from it
            description: Optional description
            category_hint: Optional name of the category usually used with this payee

        Returns:
            Payee ID

        Raises:
            ValidationError: If the name has no usable characters
            ConflictError: If the name or its slug is already used by this owner
        """
        display_name = display_name.strip()
        slug = slugify(display_name)
        if not slug:
            raise ValidationError(f"Payee name '{display_name}' must contain letters or digits")
        self._check_available(owner_id, display_name, slug)
        return self.db.create_payee(
            owner_id=owner_id,
            name=slug,
            display_name=display_name,
            description=description,
            category_hint=category_hint,
        )

    def get_payee(self, owner_id: int, payee_id: int) -> Optional[Payee]:
        return self.db.get_payee(owner_id, payee_id)

    def find_payee(self, owner_id: int, name: str) -> Optional[Payee]:
        """Find a payee by display name or slug, ignoring case."""
        return find_by_name(self.db.list_payees(owner_id), name)

    def list_payees(self, owner_id: int, active_only: bool = False) -> list[Payee]:
        return self.db.list_payees(owner_id, active_only=active_only)

    def update_payee(
        self,
        owner_id: int,
        payee_id: int,
        display_name: Optional[str] = None,
        description: Optional[str] = None,
        category_hint: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update a payee. Renaming regenerates the slug.

        Raises:
            NotFoundError: If payee not found
            ConflictError: If the new name clashes with another payee
        """
        if self.db.get_payee(owner_id, payee_id) is None:
            raise NotFoundError(payee_not_found(payee_id))
        slug = None
        if display_name is not None:
            display_name = display_name.strip()
            slug = slugify(display_name)
            if not slug:
                raise ValidationError(f"Payee name '{display_name}' must contain letters or digits")
            self._check_available(owner_id, display_name, slug, exclude_id=payee_id)
        self.db.update_payee(
            owner_id,
            payee_id,
            name=slug,
            display_name=display_name,
            description=description,
            category_hint=category_hint,
            is_active=is_active,
        )

    def delete_payee(self, owner_id: int, payee_id: int) -> None:
        """Delete a payee.

        Raises:
            NotFoundError: If payee not found
            DependencyError: If transactions still use it
        """
        if self.db.get_payee(owner_id, payee_id) is None:
            raise NotFoundError(payee_not_found(payee_id))
        counts = self.db.count_payee_references(owner_id, payee_id)
        if any(counts.values()):
            raise DependencyError(delete_blocked("payee", payee_id, counts))
        self.db.delete_payee(owner_id, payee_id)

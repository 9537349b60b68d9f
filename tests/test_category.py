"""Tests for categories and payees."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.cli.main import cli
from pocketledger.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


OWNER = 1
OTHER_OWNER = 2


class TestCategoryService:
    def test_create_derives_slug(self, category_service):
        category_id = category_service.create_category(OWNER, "Food & Dining", description="Eating")
        category = category_service.get_category(OWNER, category_id)
        assert category.name == "food-dining"
        assert category.display_name == "Food & Dining"
        assert category.description == "Eating"
        assert category.is_active

    def test_duplicate_display_name(self, category_service, sample_categories):
        with pytest.raises(ConflictError):
            category_service.create_category(OWNER, "groceries")

    def test_duplicate_slug(self, category_service):
        category_service.create_category(OWNER, "Food & Dining")
        with pytest.raises(ConflictError):
            category_service.create_category(OWNER, "Food Dining")

    def test_other_owner_may_reuse_name(self, category_service, sample_categories):
        category_service.create_category(OTHER_OWNER, "Groceries")
        assert len(category_service.list_categories(OTHER_OWNER)) == 1

    def test_name_without_letters(self, category_service):
        with pytest.raises(ValidationError):
            category_service.create_category(OWNER, "!!!")

    def test_find_by_display_name_or_slug(self, category_service, sample_categories):
        assert category_service.find_category(OWNER, "dining out").id == sample_categories["Dining Out"]
        assert category_service.find_category(OWNER, "dining-out").id == sample_categories["Dining Out"]
        assert category_service.find_category(OTHER_OWNER, "Dining Out") is None

    def test_update_regenerates_slug(self, category_service, sample_categories):
        category_id = sample_categories["Dining Out"]
        category_service.update_category(OWNER, category_id, display_name="Restaurants", is_active=False)
        category = category_service.get_category(OWNER, category_id)
        assert category.name == "restaurants"
        assert not category.is_active
        assert category_id not in [c.id for c in category_service.list_categories(OWNER, active_only=True)]

    def test_update_missing(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.update_category(OWNER, 404, display_name="X")

    def test_delete_unused(self, category_service, sample_categories):
        category_service.delete_category(OWNER, sample_categories["Transport"])
        assert category_service.get_category(OWNER, sample_categories["Transport"]) is None

    def test_delete_blocked_by_transactions(self, category_service, sample_categories, sample_transactions):
        with pytest.raises(DependencyError, match="2 transactions"):
            category_service.delete_category(OWNER, sample_categories["Groceries"])

    def test_delete_blocked_by_budget(self, category_service, budget_service, sample_categories):
        budget_service.create_budget(OWNER, sample_categories["Transport"], date(2024, 3, 1), Decimal("100"))
        with pytest.raises(DependencyError, match="budget"):
            category_service.delete_category(OWNER, sample_categories["Transport"])


class TestPayeeService:
    def test_create_with_hint(self, payee_service):
        payee_id = payee_service.create_payee(OWNER, "Amazon India", category_hint="Shopping")
        payee = payee_service.get_payee(OWNER, payee_id)
        assert payee.name == "amazon-india"
        assert payee.category_hint == "Shopping"

    def test_duplicate(self, payee_service, sample_payees):
        with pytest.raises(ConflictError):
            payee_service.create_payee(OWNER, "BIG STORE")

    def test_find(self, payee_service, sample_payees):
        assert payee_service.find_payee(OWNER, "big-store").id == sample_payees["Big Store"]
        assert payee_service.find_payee(OWNER, "Unknown") is None

    def test_delete_blocked(self, payee_service, sample_payees, sample_transactions):
        with pytest.raises(DependencyError):
            payee_service.delete_payee(OWNER, sample_payees["Cafe"])

    def test_delete(self, payee_service, sample_payees):
        payee_service.delete_payee(OWNER, sample_payees["Cafe"])
        assert payee_service.find_payee(OWNER, "Cafe") is None


def test_category_create_command(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "category", "create", "Food & Dining"]
    )
    assert result.exit_code == 0
    assert "Created category 'Food & Dining'" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])
    assert "Food & Dining [food-dining]" in result.output


def test_category_list_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])
    assert result.exit_code == 0
    assert "No categories found" in result.output


def test_category_delete_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "delete", "Nope"])
    assert result.exit_code == 1
    assert "Category not found: Nope" in result.output


def test_payee_create_and_list(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "payee", "create", "Big Store", "--category-hint", "Groceries"],
    )
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "payee", "list"])
    assert "Big Store" in result.output

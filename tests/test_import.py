"""Tests for the import command."""

from pocketledger.cli.main import cli
from pocketledger.database.factories import create_sqlite_database


def test_import_command(cli_runner, temp_db, wallet, savings, sample_categories, sample_payees, fixtures_dir):
    csv_file = fixtures_dir / "sample_import.csv"
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "import", str(csv_file)])

    assert result.exit_code == 0
    assert "Imported: 8" in result.output
    assert "Failed: 2" in result.output
    assert "Row 4: Account not found: Credit Union" in result.output
    assert "Row 6: Category not found: Coffee" in result.output


def test_import_command_creates_categories(
    cli_runner, temp_db, wallet, savings, sample_categories, sample_payees, fixtures_dir
):
    csv_file = fixtures_dir / "sample_import.csv"
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "import", str(csv_file), "--create-categories"]
    )

    assert result.exit_code == 0
    assert "Imported: 9" in result.output
    assert "Categories created: 1" in result.output


def test_import_command_dry_run(cli_runner, temp_db, wallet, savings, sample_categories, sample_payees, fixtures_dir):
    csv_file = fixtures_dir / "sample_import.csv"
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "import", str(csv_file), "--dry-run"]
    )
    assert result.exit_code == 0
    assert "dry run complete" in result.output

    fresh = create_sqlite_database(database_path=temp_db.database_path)
    try:
        assert fresh.list_transactions(1) == []
    finally:
        fresh.disconnect()


def test_import_command_skip_duplicates(
    cli_runner, temp_db, wallet, savings, sample_categories, sample_payees, fixtures_dir
):
    csv_file = fixtures_dir / "sample_import.csv"
    args = ["--db-path", temp_db.database_path, "import", str(csv_file), "--skip-duplicates"]
    cli_runner.invoke(cli, args)
    result = cli_runner.invoke(cli, args)

    assert result.exit_code == 0
    assert "Imported: 0" in result.output
    assert "Skipped: 8 duplicates" in result.output


def test_import_command_missing_headers(cli_runner, temp_db, tmp_path):
    csv_file = tmp_path / "bad.csv"
    csv_file.write_text("Date,Account\n01-03-2024,Wallet\n", encoding="utf-8")

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "import", str(csv_file)])

    assert result.exit_code == 1
    assert "Missing required headers" in result.output


def test_import_command_missing_file(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "import", "nope.csv"])
    assert result.exit_code == 2

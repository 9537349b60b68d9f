"""Integration tests for end-to-end workflows."""

import csv
import io

from pocketledger.cli.main import cli
from pocketledger.database.factories import create_sqlite_database


def test_full_workflow(cli_runner, temp_db, fixtures_dir, tmp_path):
    """Test complete workflow: accounts → categories → import → bill → budget → report → export."""
    base = ["--db-path", temp_db.database_path]

    def run(*args):
        result = cli_runner.invoke(cli, base + list(args))
        assert result.exit_code == 0, result.output
        return result.output

    # Step 1: Create accounts
    run("account", "create", "Wallet", "--type", "cash")
    run("account", "create", "Savings", "--type", "savings", "--initial-balance", "10,000")
    output = run(
        "account",
        "create",
        "Visa Card",
        "--type",
        "credit_card",
        "--bill-day",
        "1",
        "--due-day",
        "21",
        "--interest-rate",
        "0.36",
    )
    assert "Created account 'Visa Card'" in output

    # Step 2: Categories and payees used by the import file
    for name in ("Groceries", "Dining Out", "Salary", "Transport"):
        run("category", "create", name)
    for name in ("Big Store", "Employer", "Cafe"):
        run("payee", "create", name)

    # Step 3: Import, creating the missing Coffee category
    output = run("import", str(fixtures_dir / "sample_import.csv"), "--create-categories")
    assert "Imported: 9" in output
    assert "Failed: 1" in output
    assert "Categories created: 1" in output

    # Step 4: Spend on the credit card and bill the cycle
    run(
        "add",
        "--account",
        "Visa Card",
        "--amount",
        "1000",
        "--date",
        "05-03-2024",
        "--category",
        "Groceries",
        "--payee",
        "Big Store",
    )
    output = run("bill", "generate", "Visa Card", "--start-date", "2024-03-01", "--end-date", "2024-03-31")
    assert "Amount: 1,000.00 (1 transaction(s))" in output
    assert "Minimum payment: 50.00" in output

    output = run("bill", "pay", "1", "--amount", "400", "--date", "2024-04-10")
    assert "partial" in output

    # Step 5: Budget against imported spending
    run("budget", "set", "Groceries", "1000", "--month", "2024-03")
    output = run("budget", "list", "--month", "2024-03")
    assert "2,140.00" in output

    # Step 6: Reports
    output = run("report", "summary", "--start-date", "2024-03-01", "--end-date", "2024-03-31")
    assert "51,500.00" in output
    assert "2,495.00" in output

    output = run("report", "categories", "--top", "2")
    assert "Others" in output

    # Step 7: Export
    export_path = tmp_path / "march.csv"
    output = run("export", "csv", "-o", str(export_path), "--type", "transfer")
    assert "Exported 1 transaction(s)" in output
    rows = list(csv.reader(io.StringIO(export_path.read_text(encoding="utf-8"))))
    assert rows[1][6:8] == ["Savings", "Wallet"]

    # Balances reflect imported and manual transactions
    db = create_sqlite_database(database_path=temp_db.database_path)
    try:
        balances = {a.name: a.current_balance for a in db.list_accounts(1)}
    finally:
        db.disconnect()
    assert str(balances["Savings"]) == "59500.00"
    assert str(balances["Visa Card"]) == "-1000.00"

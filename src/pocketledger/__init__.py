"""Pocketledger - personal finance tracker."""

__version__ = "0.1.0"


# Resolve the CLI entry point lazily so importing the domain layer does not load click commands
def __getattr__(name):
    if name == "main":
        from pocketledger.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

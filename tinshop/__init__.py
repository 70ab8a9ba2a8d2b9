"""Stock and sales ledger for a corrugated-sheet (tin) shop."""

__version__ = "1.0.0"

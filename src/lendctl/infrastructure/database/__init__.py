"""SQLite schema and engine for the lending ledger."""

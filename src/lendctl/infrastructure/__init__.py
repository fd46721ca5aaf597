"""Infrastructure layer — SQLite ledger, repositories, and transactions."""

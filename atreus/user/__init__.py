"""User accounts: use case, SQLite storage and service replies."""
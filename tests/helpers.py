"""Helper utilities for tests."""

import time

from models.account import hash_password


def run_migrations(db_manager) -> None:
    """Run all SQL migrations in order.

    Args:
        db_manager: Database manager whose database gets the schema.
    """
    migration_files = sorted(db_manager.get_migrations_dir().glob("*.sql"))

    with db_manager.connect() as conn:
        for migration_file in migration_files:
            with open(migration_file, "r") as f:
                conn.executescript(f.read())
        conn.commit()


def insert_account_row(
    db_manager,
    name="test",
    password="123",
    type=1,
    premdays=30,
    lastday=0,
    email="dummy@mail.com",
    creation=None,
) -> int:
    """Insert an account row directly, bypassing the account service.

    Returns:
        The id of the inserted row.
    """
    with db_manager.connect() as conn:
        cursor = conn.execute(
            "INSERT INTO accounts (name, password, type, premdays, lastday, email, creation) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                name,
                hash_password(password),
                type,
                premdays,
                lastday,
                email,
                creation if creation is not None else int(time.time() * 1000),
            ),
        )
        conn.commit()
        return cursor.lastrowid


def count_rows(db_manager, name=None) -> int:
    """Count account rows, optionally only those with a given name."""
    with db_manager.connect() as conn:
        if name is None:
            cursor = conn.execute("SELECT COUNT(*) FROM accounts")
        else:
            cursor = conn.execute("SELECT COUNT(*) FROM accounts WHERE name = ?", (name,))
        return cursor.fetchone()[0]

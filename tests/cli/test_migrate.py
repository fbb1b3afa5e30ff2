from cli.migrate import apply_pending, get_applied_migrations, get_available_migrations


class TestMigrate:
    """Tests for the schema migration commands."""

    def test_apply_pending_creates_accounts_table(self, db_manager):
        """Test that applying migrations creates the accounts table."""
        applied = apply_pending(db_manager)

        assert applied == ["001_create_accounts.sql"]
        result = db_manager.query(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = :table",
            {"table": "accounts"},
        )
        assert len(result.rows) == 1

    def test_apply_pending_is_idempotent(self, db_manager):
        """Test that applied migrations are not applied again."""
        apply_pending(db_manager)

        assert apply_pending(db_manager) == []

    def test_applied_migrations_recorded(self, db_manager):
        """Test that applied migrations are recorded."""
        apply_pending(db_manager)

        with db_manager.connect() as conn:
            applied = get_applied_migrations(conn)

        assert applied == set(get_available_migrations(db_manager))

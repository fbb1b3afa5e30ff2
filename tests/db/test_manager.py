import threading

import pytest

from db.manager import DatabaseManager, QueryResult, format_query
from exceptions import StoreError


class TestFormatQuery:
    """Tests for named placeholder substitution."""

    def test_substitutes_values_as_literals(self, db_manager):
        """Test that supplied values are substituted as SQL literals."""
        with db_manager.connect() as conn:
            sql = format_query(
                conn.cursor(),
                "SELECT * FROM accounts WHERE name = :name AND type = :type",
                {"name": "test", "type": 2},
            )

        assert sql == "SELECT * FROM accounts WHERE name = 'test' AND type = 2"

    def test_escapes_quotes(self, db_manager):
        """Test that quotes inside strings are escaped."""
        with db_manager.connect() as conn:
            sql = format_query(conn.cursor(), "SELECT :value", {"value": "it's"})

        assert sql == "SELECT 'it''s'"

    def test_null_value(self, db_manager):
        """Test that None renders as NULL."""
        with db_manager.connect() as conn:
            sql = format_query(conn.cursor(), "SELECT :value", {"value": None})

        assert sql == "SELECT NULL"

    def test_missing_key_left_verbatim(self, db_manager):
        """Test that placeholders without a value are left in place."""
        with db_manager.connect() as conn:
            sql = format_query(
                conn.cursor(), "SELECT :known, :unknown", {"known": 1}
            )

        assert sql == "SELECT 1, :unknown"

    def test_substituted_text_not_rescanned(self, db_manager):
        """Test that substituted text is not scanned for placeholders again."""
        with db_manager.connect() as conn:
            sql = format_query(
                conn.cursor(), "SELECT :a, :b", {"a": ":b", "b": "x"}
            )

        assert sql == "SELECT ':b', 'x'"

    def test_no_values_returns_template(self, db_manager):
        """Test that a template without values is returned unchanged."""
        with db_manager.connect() as conn:
            assert format_query(conn.cursor(), "SELECT :a", None) == "SELECT :a"


class TestQuery:
    """Tests for DatabaseManager.query."""

    def test_select_returns_rows(self, db_manager):
        """Test that a select returns its rows."""
        result = db_manager.query("SELECT :a AS a, :b AS b", {"a": 1, "b": "x"})

        assert isinstance(result, QueryResult)
        assert len(result.rows) == 1
        assert result.rows[0]["a"] == 1
        assert result.rows[0]["b"] == "x"
        assert result.affected_rows == 0

    def test_write_reports_affected_rows(self, db_manager):
        """Test that writes report affected rows and the last rowid."""
        db_manager.query("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")

        first = db_manager.query("INSERT INTO items (label) VALUES (:label)", {"label": "a"})
        second = db_manager.query("INSERT INTO items (label) VALUES (:label)", {"label": "b"})
        deleted = db_manager.query("DELETE FROM items WHERE label IS NOT NULL")

        assert first.affected_rows == 1
        assert second.last_row_id == first.last_row_id + 1
        assert deleted.affected_rows == 2

    def test_writes_are_committed(self, db_manager, test_config):
        """Test that writes are visible to another connection."""
        db_manager.query("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
        db_manager.query("INSERT INTO items (label) VALUES (:label)", {"label": "a"})

        other = DatabaseManager(test_config)
        try:
            result = other.query("SELECT label FROM items")
        finally:
            other.dispose()

        assert [row["label"] for row in result.rows] == ["a"]

    def test_sql_error_raises_store_error(self, db_manager):
        """Test that an SQL error is raised as StoreError."""
        with pytest.raises(StoreError, match="no such table") as exc_info:
            db_manager.query("SELECT * FROM missing_table")

        assert exc_info.value.__cause__ is not None

    def test_unsupplied_placeholder_fails(self, db_manager):
        """Test that a placeholder left without a value fails to execute."""
        with pytest.raises(StoreError):
            db_manager.query("SELECT :a, :b", {"a": 1})

    def test_connection_released_after_error(self, db_manager, test_config):
        """Test that failing queries return their connection to the pool."""
        for _ in range(test_config.pool_size + 1):
            with pytest.raises(StoreError):
                db_manager.query("SELECT * FROM missing_table")

        assert db_manager.pool.checkedout() == 0
        assert db_manager.query("SELECT 1 AS one").rows[0]["one"] == 1

    def test_connection_released_after_success(self, db_manager):
        """Test that a successful query returns its connection to the pool."""
        db_manager.query("SELECT 1")

        assert db_manager.pool.checkedout() == 0


class TestPool:
    """Tests for the bounded connection pool."""

    def test_exhausted_pool_times_out(self, db_manager, test_config):
        """Test that a query fails with StoreError when the pool stays exhausted."""
        held = [db_manager.pool.connect() for _ in range(test_config.pool_size)]
        try:
            with pytest.raises(StoreError):
                db_manager.query("SELECT 1")
        finally:
            for conn in held:
                conn.close()

    def test_waiting_query_gets_released_connection(self, db_manager, test_config):
        """Test that a waiting query runs once a connection is released."""
        held = [db_manager.pool.connect() for _ in range(test_config.pool_size)]
        results = []

        worker = threading.Thread(
            target=lambda: results.append(db_manager.query("SELECT 1 AS one"))
        )
        worker.start()
        held.pop().close()
        worker.join(timeout=5)

        for conn in held:
            conn.close()

        assert len(results) == 1
        assert results[0].rows[0]["one"] == 1

    def test_connect_context_returns_connection(self, db_manager):
        """Test that connect() holds a connection only inside the block."""
        with db_manager.connect():
            assert db_manager.pool.checkedout() == 1

        assert db_manager.pool.checkedout() == 0

    def test_database_directory_created(self, db_manager, test_config):
        """Test that the database directory is created on first use."""
        db_manager.query("SELECT 1")

        assert test_config.db_path.exists()


class TestTransaction:
    """Tests for DatabaseManager.transaction."""

    @pytest.fixture
    def items(self, db_manager):
        db_manager.query("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
        return db_manager

    def test_transaction_commits_every_statement(self, items):
        """Test that statements in a finished block are all committed."""
        with items.transaction() as tx:
            tx.query("INSERT INTO items (label) VALUES (:label)", {"label": "a"})
            found = tx.query("SELECT label FROM items WHERE label = :label", {"label": "a"})
            tx.query("INSERT INTO items (label) VALUES (:label)", {"label": "b"})

        assert [row["label"] for row in found.rows] == ["a"]
        labels = [row["label"] for row in items.query("SELECT label FROM items ORDER BY id").rows]
        assert labels == ["a", "b"]

    def test_transaction_rolls_back_on_error(self, items):
        """Test that an exception in the block undoes its writes and propagates."""
        with pytest.raises(ValueError, match="stop"):
            with items.transaction() as tx:
                tx.query("INSERT INTO items (label) VALUES (:label)", {"label": "a"})
                raise ValueError("stop")

        assert items.query("SELECT label FROM items").rows == []

    def test_transaction_sql_error_raises_store_error(self, items):
        """Test that a failing statement raises StoreError and rolls back."""
        with pytest.raises(StoreError, match="no such table"):
            with items.transaction() as tx:
                tx.query("INSERT INTO items (label) VALUES (:label)", {"label": "a"})
                tx.query("SELECT * FROM missing_table")

        assert items.query("SELECT label FROM items").rows == []

    def test_transaction_releases_connection(self, items):
        """Test that the connection goes back to the pool on success and error."""
        with items.transaction() as tx:
            tx.query("SELECT 1")
        with pytest.raises(ValueError):
            with items.transaction():
                raise ValueError("stop")

        assert items.pool.checkedout() == 0

    def test_transaction_reports_affected_rows(self, items):
        """Test that statements in a transaction report their own results."""
        with items.transaction() as tx:
            inserted = tx.query("INSERT INTO items (label) VALUES (:label)", {"label": "a"})

        assert inserted.affected_rows == 1
        assert inserted.last_row_id == 1

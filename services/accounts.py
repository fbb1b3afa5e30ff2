"""Account service for database operations."""

from typing import List, Optional

from db.manager import QueryResult
from exceptions import ValidationError
from logger import get_logger
from models.account import Account, PERSISTABLE_FIELDS
from models.criteria import ById, ByFields, ByName, Criteria

logger = get_logger()

COLUMNS = ", ".join(PERSISTABLE_FIELDS)

STORED_ID_SQL = "SELECT id FROM accounts WHERE name = :name"

# Replaces any row with the same name, keeping that row's id
SAVE_SQL = """
    REPLACE INTO accounts (id, name, password, type, premdays, lastday, email, creation)
    VALUES (
        (SELECT id FROM accounts WHERE name = :name),
        :name, :password, :type, :premdays, :lastday, :email, :creation
    )
"""

DELETE_SQL = "DELETE FROM accounts WHERE id = :id"


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db_manager):
        """Initialize the account service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find(self, criteria: Criteria) -> List[Account]:
        """Get every account matching the criteria.

        Args:
            criteria: ById, ByName or ByFields. Field criteria are ANDed.

        Returns:
            List of Account objects ordered by id, empty if nothing matches.

        Raises:
            StoreError: If the query fails.
        """
        filters = criteria.filters()
        sql = f"SELECT {COLUMNS} FROM accounts"
        if filters:
            sql += " WHERE " + " AND ".join(f"{key} = :{key}" for key in filters)
        sql += " ORDER BY id"

        result = self.db_manager.query(sql, filters)
        return [Account.from_row(row) for row in result.rows]

    def find_one(self, criteria: Criteria) -> Optional[Account]:
        """Get the first account matching the criteria.

        Returns:
            Account object if found, None otherwise.
        """
        accounts = self.find(criteria)
        if accounts:
            return accounts[0]
        return None

    def find_all(self) -> List[Account]:
        """Get all accounts from the database, ordered by id."""
        return self.find(ByFields())

    def fetch(self, account: Account) -> Optional[Account]:
        """Load the stored state of an account by its id, or else its name.

        Args:
            account: Account with at least an id or a name.

        Returns:
            A freshly loaded Account, or None if it is not stored.

        Raises:
            ValidationError: If the account has neither id nor name.
        """
        if account.id:
            return self.find_one(ById(account.id))
        if account.name:
            return self.find_one(ByName(account.name))
        raise ValidationError("Account id or name not set")

    def save(self, account: Account) -> QueryResult:
        """Insert the account, or replace the stored account with the same name.

        The lookup of the stored row and the write share one transaction. A
        replaced row keeps its id, and the account's id is assigned from the
        database when it has none.

        Args:
            account: Account with name and password set.

        Returns:
            QueryResult of the write. affected_rows is 1 for an insert and 2
            when an existing row was replaced (deleted and inserted again).

        Raises:
            ValidationError: If name or password is missing, or if the account
                already holds an id other than the one stored for its name.
                Nothing is written in either case.
            StoreError: If the write fails.
        """
        if not account.name or not account.password:
            raise ValidationError("Account name or password not set")

        values = account.to_dict()
        del values["id"]

        with self.db_manager.transaction() as tx:
            stored = tx.query(STORED_ID_SQL, {"name": account.name}).rows
            stored_id = stored[0]["id"] if stored else None
            if account.has_id and account.id != stored_id:
                raise ValidationError("Account id can not be set")

            result = tx.query(SAVE_SQL, values)

        if stored:
            # SQLite does not count the row deleted by REPLACE
            result.affected_rows += 1

        logger.info(f"Saved account '{account.name}' (id {result.last_row_id})")

        if not account.has_id:
            account.assign_id(result.last_row_id)

        return result

    def delete(self, account: Account) -> QueryResult:
        """Delete the stored account with the account's id.

        Returns:
            QueryResult whose affected_rows is 0 when no such account exists.
        """
        result = self.db_manager.query(DELETE_SQL, {"id": account.id})
        logger.info(
            f"Deleted account id {account.id} ({result.affected_rows} row(s))"
        )
        return result

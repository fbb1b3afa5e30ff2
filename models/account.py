"""Account model with validated fields."""

import hashlib
import time
from datetime import datetime
from typing import Any, List, Mapping, Optional

from exceptions import ValidationError

# Fields that can be set from a mapping, used in filters and persisted
PERSISTABLE_FIELDS = (
    "id",
    "name",
    "password",
    "type",
    "premdays",
    "lastday",
    "email",
    "creation",
)

MIN_TYPE = 1
MAX_TYPE = 5
MIN_PREMDAYS = 0
MAX_PREMDAYS = 65535


def hash_password(password: str) -> str:
    """Return the hex SHA-1 digest stored in place of a password."""
    return hashlib.sha1(password.encode("utf-8")).hexdigest()


def now_millis() -> int:
    return int(time.time() * 1000)


def _require_int(value: Any, message: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(message)
    return value


class Account:
    """A user account.

    Attributes:
        id: Database id, 0 until assigned. Can only be assigned once.
        name: Unique account name.
        password: SHA-1 hex digest of the password, never the raw value.
        type: Account type, 1 to 5.
        premdays: Remaining premium days, 0 to 65535.
        lastday: Last premium day update (epoch seconds).
        email: Contact email, "" when unknown.
        creation: Creation time in epoch milliseconds.
        bans: Bans loaded alongside the account. Not persisted.
    """

    def __init__(
        self,
        id: int = 0,
        name: str = "",
        password: Optional[str] = None,
        type: int = MIN_TYPE,
        premdays: int = MIN_PREMDAYS,
        lastday: int = 0,
        email: str = "",
        creation: Any = 0,
    ):
        self._id: Optional[int] = None
        self._password: Optional[str] = None
        self.assign_id(id)
        self.name = name
        if password is not None:
            self.password = password
        self.type = type
        self.premdays = premdays
        self.lastday = lastday
        self.email = email
        self.creation = creation
        self.bans: List[Any] = []

    @classmethod
    def create(
        cls, name: Optional[str] = None, password: Optional[str] = None
    ) -> "Account":
        """Create a new, unsaved account stamped with the current time.

        Raises:
            ValidationError: If name or password is empty.
        """
        if not name:
            raise ValidationError("New account name not set")
        if not password:
            raise ValidationError("New account password not set")

        return cls(name=name, password=password, creation=now_millis())

    @classmethod
    def from_dict(cls, properties: Optional[Mapping[str, Any]]) -> "Account":
        """Build an account from client supplied properties.

        Keys outside PERSISTABLE_FIELDS are ignored; every other value goes
        through its validating setter, so passwords get hashed.
        """
        properties = properties or {}
        return cls(**{k: v for k, v in properties.items() if k in PERSISTABLE_FIELDS})

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Account":
        """Build an account from a database row.

        The stored password is already hashed and is kept as is.
        """
        values = {k: row[k] for k in row.keys() if k in PERSISTABLE_FIELDS}
        stored_password = values.pop("password", None)
        account = cls(**values)
        account._password = stored_password
        return account

    @property
    def id(self) -> int:
        return self._id or 0

    @id.setter
    def id(self, value: int):
        self.assign_id(value)

    @property
    def has_id(self) -> bool:
        return self._id is not None

    def assign_id(self, value: int):
        """Assign the database id.

        Assigning 0 leaves the id unassigned.

        Raises:
            ValidationError: If an id is already assigned.
        """
        if self._id is not None:
            raise ValidationError("Account id can not be set")
        if value:
            self._id = _require_int(value, "Account id must be an integer")

    @property
    def password(self) -> Optional[str]:
        return self._password

    @password.setter
    def password(self, value: str):
        if not value:
            raise ValidationError("Account password not set")
        self._password = hash_password(value)

    @property
    def type(self) -> int:
        return self._type

    @type.setter
    def type(self, value: int):
        message = f"Account type must be between {MIN_TYPE} and {MAX_TYPE}"
        value = _require_int(value, message)
        if not MIN_TYPE <= value <= MAX_TYPE:
            raise ValidationError(message)
        self._type = value

    @property
    def premdays(self) -> int:
        return self._premdays

    @premdays.setter
    def premdays(self, value: int):
        message = (
            f"Account premium days must be between {MIN_PREMDAYS} and {MAX_PREMDAYS}"
        )
        value = _require_int(value, message)
        if not MIN_PREMDAYS <= value <= MAX_PREMDAYS:
            raise ValidationError(message)
        self._premdays = value

    @property
    def email(self) -> str:
        return self._email

    @email.setter
    def email(self, value: Optional[str]):
        self._email = value or ""

    @property
    def creation(self) -> int:
        return self._creation

    @creation.setter
    def creation(self, value: Any):
        # datetimes are stored as epoch milliseconds
        if value is None:
            value = 0
        elif isinstance(value, datetime):
            value = int(value.timestamp() * 1000)
        self._creation = _require_int(
            value, "Account creation must be epoch milliseconds or a datetime"
        )

    def to_dict(self) -> dict:
        """Convert account to dictionary for database storage."""
        return {
            "id": self.id,
            "name": self.name,
            "password": self.password,
            "type": self.type,
            "premdays": self.premdays,
            "lastday": self.lastday,
            "email": self.email,
            "creation": self.creation,
        }

    def __repr__(self) -> str:
        return (
            f"Account(id={self.id!r}, name={self.name!r}, type={self.type!r}, "
            f"premdays={self.premdays!r}, lastday={self.lastday!r}, "
            f"email={self.email!r}, creation={self.creation!r})"
        )

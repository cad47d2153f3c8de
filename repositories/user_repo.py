"""
repositories/user_repo.py
--------------------------
Data access layer for user accounts.

Registering a user also creates the customer record the account is linked
to. Passwords are stored hashed and never returned.
"""

from typing import Any, Callable, Optional

from db.executor import QueryExecutor
from db.query_builder import ColumnMapper, FieldSet, ordered_pairs
from errors import ConflictError, MalformedRequestError, NotFoundError, UnauthorizedError
from repositories.base_repo import BaseRepository
from repositories.customer_repo import CustomerRepository
from security.passwords import hash_password, verify_password
from utils.logger import get_logger

logger = get_logger(__name__)

CUSTOMER_FIELDS = ("firstName", "lastName", "email", "phone")


class UserRepository(BaseRepository):
    """Repository for CRUD operations on the users table."""

    table = "users"
    entity = "user"
    fields = (
        "id",
        "username",
        "firstName",
        "lastName",
        "email",
        "phone",
        "customerId",
        "isAdmin",
    )
    write_only_fields = ("password",)
    columns = ColumnMapper({
        "firstName": "first_name",
        "lastName": "last_name",
        "customerId": "customer_id",
        "isAdmin": "is_admin",
    })

    def __init__(
        self,
        executor: QueryExecutor,
        customers: Optional[CustomerRepository] = None,
        hasher: Callable[[str], str] = hash_password,
        verifier: Callable[[str, str], bool] = verify_password,
    ):
        super().__init__(executor)
        self.customers = customers or CustomerRepository(executor)
        self.hasher = hasher
        self.verifier = verifier

    def register(self, fields: dict[str, Any]) -> dict:
        """
        Create a user account together with its customer record.

        Args:
            fields: username, password, firstName, lastName, email, phone
                and optionally isAdmin.

        Returns:
            The new user row (without the password).

        Raises:
            MalformedRequestError: If username or password is missing.
            ConflictError: If the username is taken.
        """
        username = fields.get("username")
        password = fields.get("password")
        if not username or not password:
            raise MalformedRequestError("username and password are required")
        self._check_fields(fields)

        taken = self.db.execute("SELECT id FROM users WHERE username = $1", [username])
        if taken:
            raise ConflictError(f"Duplicate username: {username}")

        customer = self.customers.insert(
            {field: fields[field] for field in CUSTOMER_FIELDS if field in fields}
        )
        user = self.insert({
            **fields,
            "password": self.hasher(password),
            "customerId": customer["id"],
        })
        logger.info(f"Registered user '{username}' as customer #{customer['id']}")
        return user

    def authenticate(self, username: str, password: str) -> dict:
        """
        Check a username/password pair.

        Returns:
            The user row (without the password).

        Raises:
            UnauthorizedError: If the user is unknown or the password is wrong.
        """
        rows = self.db.execute(
            f"SELECT {self._returning()}, password FROM users WHERE username = $1",
            [username],
        )
        if rows:
            user = rows[0]
            if self.verifier(password, user.pop("password")):
                return user
        logger.warning(f"Failed login attempt for '{username}'")
        raise UnauthorizedError("Invalid username/password")

    def get_by_username(self, username: str) -> dict:
        users = self.find({"username": username})
        if not users:
            raise NotFoundError(f"No user: {username}")
        return users[0]

    def remove_by_username(self, username: str) -> None:
        """
        Delete a user account by username. The linked customer is kept.

        Raises:
            NotFoundError: If no user has this username.
        """
        rows = self.db.execute(
            "DELETE FROM users WHERE username = $1 RETURNING id", [username]
        )
        if not rows:
            raise NotFoundError(f"No user: {username}")
        logger.info(f"Deleted user '{username}' (#{rows[0]['id']})")

    def update(self, row_id: Any, fields: FieldSet) -> dict:
        """Partial update; a new password is hashed before it is stored."""
        pairs = [
            (field, self.hasher(value) if field == "password" else value)
            for field, value in ordered_pairs(fields)
        ]
        return super().update(row_id, pairs)

"""Postgres-backed registrar for manager sign-in identities."""

from __future__ import annotations

import logging
import uuid

import bcrypt
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from ..domain.contracts import IdentityResult

logger = logging.getLogger(__name__)

MANAGER_ROLE = "Manager"


def check_password_policy(password: str, min_length: int = 8) -> list[str]:
    """Return the policy violations for ``password``; an empty list means it is acceptable."""
    problems: list[str] = []
    if len(password) < min_length:
        problems.append(f"Passwords must be at least {min_length} characters.")
    if not any(char.isdigit() for char in password):
        problems.append("Passwords must have at least one digit ('0'-'9').")
    if not any(char.islower() for char in password):
        problems.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(char.isupper() for char in password):
        problems.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(char.isalnum() for char in password):
        problems.append("Passwords must have at least one non alphanumeric character.")
    return problems


def hash_credential(credential: str) -> str:
    """Return the bcrypt hash stored in place of the plaintext credential."""
    return bcrypt.hashpw(credential.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class PostgresIdentityRegistrar:
    """Registers manager principals in the ``app_users`` table."""

    def __init__(self, pool: ConnectionPool, *, min_password_length: int = 8) -> None:
        self._pool = pool
        self._min_password_length = min_password_length

    def register_manager_identity(
        self, manager_id: str, email: str, credential: str
    ) -> IdentityResult:
        """Create a sign-in principal bound to ``manager_id``.

        Policy and uniqueness problems are reported as an unsuccessful
        :class:`IdentityResult`; database errors propagate to the caller.
        """
        problems = check_password_policy(credential, self._min_password_length)
        if problems:
            return IdentityResult(succeeded=False, message=" ".join(problems))

        password_hash = hash_credential(credential)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    INSERT INTO app_users (user_id, manager_id, email, normalized_email, password_hash, role)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (normalized_email) DO NOTHING
                    RETURNING user_id
                    """,
                    (
                        str(uuid.uuid4()),
                        manager_id,
                        email,
                        email.lower(),
                        password_hash,
                        MANAGER_ROLE,
                    ),
                )
                row = cur.fetchone()
                conn.commit()

        if row is None:
            logger.info("identity for manager %s rejected, email already taken", manager_id)
            return IdentityResult(succeeded=False, message=f"Email '{email}' is already taken.")
        return IdentityResult(succeeded=True, message="Manager registered successfully")

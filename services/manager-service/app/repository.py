"""Database repositories for manager accounts and the work items they own."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.contracts import DuplicateAccountError, NewManagerRecord
from .domain.manager import Board, ManagerAccount, Project, Ticket

MANAGER_COLUMNS = """
    manager_id, business_email, company_name, created_at, company_description,
    company_address, business_phone, state, image_url, is_active, updated_at
"""


class ManagerRepository:
    """Postgres-backed manager persistence.

    Business-email uniqueness is enforced by a unique index on
    ``lower(business_email)``; violations surface as :class:`DuplicateAccountError`.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def find_by_email(self, business_email: str) -> list[ManagerAccount]:
        """Return every manager whose business email matches, ignoring case."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    SELECT {MANAGER_COLUMNS}
                    FROM managers
                    WHERE lower(business_email) = lower(%s)
                    """,
                    (business_email,),
                )
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def create(self, record: NewManagerRecord) -> ManagerAccount:
        """Insert a new manager row and return it with its assigned identifier."""
        now = datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO managers (manager_id, business_email, company_name, company_description, is_active, created_at)
                        VALUES (%s, %s, %s, %s, TRUE, %s)
                        RETURNING {MANAGER_COLUMNS}
                        """,
                        (
                            str(uuid.uuid4()),
                            record.business_email,
                            record.company_name,
                            record.company_description,
                            now,
                        ),
                    )
                    row = cur.fetchone()
                    conn.commit()
        except errors.UniqueViolation as exc:
            raise DuplicateAccountError(record.business_email) from exc
        return self._map_record(row)

    def delete(self, account: ManagerAccount) -> None:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM managers WHERE manager_id = %s", (account.manager_id,))
                conn.commit()

    def update(self, account: ManagerAccount) -> ManagerAccount:
        """Persist every mutable column of ``account``."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        UPDATE managers
                        SET business_email = %s,
                            company_name = %s,
                            company_description = %s,
                            company_address = %s,
                            business_phone = %s,
                            state = %s,
                            image_url = %s,
                            is_active = %s,
                            updated_at = %s
                        WHERE manager_id = %s
                        RETURNING {MANAGER_COLUMNS}
                        """,
                        (
                            account.business_email,
                            account.company_name,
                            account.company_description,
                            account.company_address,
                            account.business_phone,
                            account.state,
                            account.image_url,
                            account.is_active,
                            account.updated_at,
                            account.manager_id,
                        ),
                    )
                    row = cur.fetchone()
                    conn.commit()
        except errors.UniqueViolation as exc:
            raise DuplicateAccountError(account.business_email) from exc
        if row is None:
            raise LookupError(f"manager {account.manager_id} disappeared during update")
        return self._map_record(row)

    def get_by_id(self, manager_id: str) -> ManagerAccount | None:
        """Fetch a manager by identifier or return ``None``."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {MANAGER_COLUMNS} FROM managers WHERE manager_id = %s",
                    (manager_id,),
                )
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def get_all(self) -> list[ManagerAccount]:
        # No ORDER BY; callers sort through paginate().
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {MANAGER_COLUMNS} FROM managers")
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def _map_record(self, row: tuple) -> ManagerAccount:
        """Convert a raw database tuple into the domain ``ManagerAccount`` dataclass."""
        return ManagerAccount(
            manager_id=row[0],
            business_email=row[1],
            company_name=row[2],
            created_at=row[3],
            company_description=row[4],
            company_address=row[5],
            business_phone=row[6],
            state=row[7],
            image_url=row[8],
            is_active=row[9],
            updated_at=row[10],
        )


class BoardRepository:
    """Boards looked up by owning manager."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_parent_key(self, key: str) -> list[Board]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT board_id, manager_id, name, created_at, description
                    FROM boards
                    WHERE manager_id = %s
                    ORDER BY created_at, board_id
                    """,
                    (key,),
                )
                return [Board(*row) for row in cur.fetchall()]


class ProjectRepository:
    """Projects looked up by owning board."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_parent_key(self, key: str) -> list[Project]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT project_id, board_id, title, created_at, description
                    FROM projects
                    WHERE board_id = %s
                    ORDER BY created_at, project_id
                    """,
                    (key,),
                )
                return [Project(*row) for row in cur.fetchall()]


class TicketRepository:
    """Tickets looked up by owning project."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_parent_key(self, key: str) -> list[Ticket]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    """
                    SELECT ticket_id, project_id, title, status, created_at, priority, assignee
                    FROM tickets
                    WHERE project_id = %s
                    ORDER BY created_at, ticket_id
                    """,
                    (key,),
                )
                return [Ticket(*row) for row in cur.fetchall()]

"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Flow and route code never touches SQL directly.

Uniqueness:
  id is the primary key. username and email are unique among rows that are
  not soft-deleted, enforced by partial unique indexes (WHERE deleted_at IS
  NULL). create_user() also runs explicit existence checks first so the
  caller learns which field clashed.

  The checks and the insert share one transaction but take no read lock, so
  two concurrent registrations can both pass the checks. The unique indexes
  are the source of truth: an IntegrityError at insert time is reported as
  ConflictError, never as a storage failure.

Errors:
  Lookup misses raise NotFoundError. Any other SQLAlchemyError is logged and
  re-raised as InternalError so raw driver messages never reach a client.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Index, MetaData, String, Table, Text, create_engine, event, func, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import ConflictError, InternalError, NotFoundError
from auth.models import UserRecord

logger = logging.getLogger("bootcamp.auth.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("username", String(255), nullable=False),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("email", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("created_by", String(36), nullable=False),
    Column("updated_at", String(32)),
    Column("updated_by", String(36)),
    Column("deleted_at", String(32)),
    Column("deleted_by", String(36)),
)

_active = _users.c.deleted_at.is_(None)

Index(
    "uq_users_username_active",
    _users.c.username,
    unique=True,
    sqlite_where=_active,
    postgresql_where=_active,
)
Index(
    "uq_users_email_active",
    _users.c.email,
    unique=True,
    sqlite_where=_active,
    postgresql_where=_active,
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


_REASON_BY_IDENTIFIER = (
    ("uq_users_email_active", "email"),
    ("uq_users_username_active", "username"),
    ("users.email", "email"),
    ("users.username", "username"),
)


def _conflict_reason(exc: IntegrityError) -> str:
    """Name the column behind a unique violation.

    Only constraint and column identifiers are matched, never the rejected
    values. psycopg exposes the constraint name on orig.diag; otherwise the
    first line of the driver message is used. SQLite reports "UNIQUE
    constraint failed: users.email", PostgreSQL names the index on its first
    line and keeps the values on the DETAIL line, and MySQL names the index
    after "for key". Anything unrecognized is treated as a primary-key clash.
    """
    constraint = getattr(getattr(exc.orig, "diag", None), "constraint_name", None)
    if constraint:
        message = constraint
    else:
        lines = str(exc.orig).splitlines()
        message = lines[0] if lines else ""
        if "for key" in message:
            message = message.rpartition("for key")[2]
    for identifier, reason in _REASON_BY_IDENTIFIER:
        if identifier in message:
            return reason
    return "id"


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for UserRecord entities.

    Usage:
        store = UserStore("sqlite:///bootcamp_auth.db")
        store.create_user(record)
        user = store.get_by_username("alice")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: UserRecord) -> None:
        """Insert a new account after checking id, email and username are free.

        Raises ConflictError(reason) for the first clashing field, whether the
        clash is caught by a pre-check or by a unique index at insert time.
        Raises InternalError on any other storage failure. Nothing is written
        when an error is raised.
        """
        try:
            with self.engine.begin() as conn:
                self._check_available(conn, user)
                conn.execute(
                    _users.insert().values(
                        id=user.id,
                        name=user.name,
                        username=user.username,
                        password=user.password,
                        email=user.email,
                        created_at=user.created_at,
                        created_by=user.created_by,
                        updated_at=user.updated_at,
                        updated_by=user.updated_by,
                        deleted_at=user.deleted_at,
                        deleted_by=user.deleted_by,
                    )
                )
        except ConflictError as exc:
            logger.info("User create rejected: %s already taken", exc.reason)
            raise
        except IntegrityError as exc:
            reason = _conflict_reason(exc)
            logger.info("User create lost a uniqueness race on %s", reason)
            raise ConflictError(reason) from exc
        except SQLAlchemyError as exc:
            logger.exception("User create failed")
            raise InternalError("user store write failed") from exc
        logger.info("Created user id=%s", user.id)

    def _check_available(self, conn: Connection, user: UserRecord) -> None:
        if self.exists_by_id(user.id, conn):
            raise ConflictError("id")
        if self.exists_by_email(user.email, conn):
            raise ConflictError("email")
        if self.exists_by_username(user.username, conn):
            raise ConflictError("username")

    # ------------------------------------------------------------------
    # Existence checks
    #
    # Pass conn to run inside a caller's transaction (create_user does);
    # without it each check opens its own connection.
    # ------------------------------------------------------------------

    def exists_by_id(self, user_id: str, conn: Connection | None = None) -> bool:
        """True if any row, soft-deleted or not, has this id."""
        return self._exists(_users.c.id == user_id, conn)

    def exists_by_email(self, email: str, conn: Connection | None = None) -> bool:
        return self._exists((_users.c.email == email) & _active, conn)

    def exists_by_username(self, username: str, conn: Connection | None = None) -> bool:
        return self._exists((_users.c.username == username) & _active, conn)

    def _exists(self, clause, conn: Connection | None = None) -> bool:
        query = select(func.count()).select_from(_users).where(clause)
        if conn is not None:
            return (conn.execute(query).scalar() or 0) > 0
        try:
            with self.engine.connect() as own:
                return (own.execute(query).scalar() or 0) > 0
        except SQLAlchemyError as exc:
            logger.exception("User existence check failed")
            raise InternalError("user store read failed") from exc

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> UserRecord:
        """Exact, case-sensitive match among active accounts. Raises NotFoundError."""
        return self._fetch_one((_users.c.username == username) & _active)

    def get_by_email(self, email: str) -> UserRecord:
        """Exact, case-sensitive match among active accounts. Raises NotFoundError."""
        return self._fetch_one((_users.c.email == email) & _active)

    def get_by_id(self, user_id: str) -> UserRecord:
        return self._fetch_one((_users.c.id == user_id) & _active)

    def _fetch_one(self, clause) -> UserRecord:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(clause)).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed")
            raise InternalError("user store read failed") from exc
        if row is None:
            raise NotFoundError("user")
        return _row_to_user(row)

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("User store ping failed", exc_info=True)
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> UserRecord:
    return UserRecord(
        id=row.id,
        name=row.name,
        username=row.username,
        email=row.email,
        password=row.password,
        created_at=row.created_at,
        created_by=row.created_by,
        updated_at=row.updated_at,
        updated_by=row.updated_by,
        deleted_at=row.deleted_at,
        deleted_by=row.deleted_by,
    )

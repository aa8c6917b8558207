"""SQLite-backed persistence for users and rental inquiries."""
from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .errors import DuplicateUsernameError
from .models import RentalInquiry, User
from .schema import RentalInquiryInput, UserInput
from .storage import Storage, build_rental_inquiry, generate_id, next_timestamp


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "rentals.sqlite3").resolve(strict=False)


def _serialize_datetime(value: datetime) -> str:
    # Fixed precision keeps the stored text sortable.
    return value.isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SQLiteStorage(Storage):
    """Storage backend that persists records in a SQLite file."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL UNIQUE,
                    password TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS rental_inquiries (
                    id TEXT PRIMARY KEY,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    phone TEXT NOT NULL,
                    service_address TEXT NOT NULL,
                    package_interest TEXT NOT NULL,
                    preferred_install_date TEXT NOT NULL,
                    dryer_hookup_type TEXT NOT NULL,
                    six_month_agreement TEXT NOT NULL,
                    autopay_agreement TEXT NOT NULL,
                    message TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_rental_inquiries_created_at
                    ON rental_inquiries(created_at);
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ? ORDER BY rowid LIMIT 1",
                (username,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def create_user(self, data: UserInput) -> User:
        user = User(id=generate_id(), username=data.username, password=data.password)
        with self._connect() as conn:
            try:
                conn.execute(
                    "INSERT INTO users (id, username, password) VALUES (?, ?, ?)",
                    (user.id, user.username, user.password),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateUsernameError(data.username) from exc
        return user

    # ------------------------------------------------------------------
    # Rental inquiries
    # ------------------------------------------------------------------
    def create_rental_inquiry(self, data: RentalInquiryInput) -> RentalInquiry:
        with self._write_lock, self._connect() as conn:
            row = conn.execute("SELECT MAX(created_at) AS latest FROM rental_inquiries").fetchone()
            latest = _parse_datetime(row["latest"]) if row["latest"] else None
            inquiry = build_rental_inquiry(
                data,
                inquiry_id=generate_id(),
                created_at=next_timestamp(latest),
            )
            conn.execute(
                """
                INSERT INTO rental_inquiries (
                    id, first_name, last_name, email, phone, service_address,
                    package_interest, preferred_install_date, dryer_hookup_type,
                    six_month_agreement, autopay_agreement, message, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    inquiry.id,
                    inquiry.first_name,
                    inquiry.last_name,
                    inquiry.email,
                    inquiry.phone,
                    inquiry.service_address,
                    inquiry.package_interest,
                    inquiry.preferred_install_date,
                    inquiry.dryer_hookup_type,
                    inquiry.six_month_agreement,
                    inquiry.autopay_agreement,
                    inquiry.message,
                    _serialize_datetime(inquiry.created_at),
                ),
            )
        return inquiry

    def get_all_rental_inquiries(self) -> List[RentalInquiry]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM rental_inquiries ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        return [self._row_to_inquiry(row) for row in rows]

    def get_rental_inquiry(self, inquiry_id: str) -> Optional[RentalInquiry]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM rental_inquiries WHERE id = ?",
                (inquiry_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_inquiry(row)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=str(row["id"]),
            username=str(row["username"]),
            password=str(row["password"]),
        )

    def _row_to_inquiry(self, row: sqlite3.Row) -> RentalInquiry:
        return RentalInquiry(
            id=str(row["id"]),
            first_name=str(row["first_name"]),
            last_name=str(row["last_name"]),
            email=str(row["email"]),
            phone=str(row["phone"]),
            service_address=str(row["service_address"]),
            package_interest=str(row["package_interest"]),
            preferred_install_date=str(row["preferred_install_date"]),
            dryer_hookup_type=str(row["dryer_hookup_type"]),
            six_month_agreement=str(row["six_month_agreement"]),
            autopay_agreement=str(row["autopay_agreement"]),
            message=row["message"],
            created_at=_parse_datetime(str(row["created_at"])),
        )


__all__ = ["SQLiteStorage", "resolve_database_path"]

"""Account handlers: e-mail verification, sign-up on verify and profiles."""

from __future__ import annotations

import os
import smtplib
import sqlite3
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import ExpiredError, InternalError, NotFoundError, UsedError
from .hashing import hash_bytes, random_bytes, random_string
from .schema import EmailVerification

RANDOM_USERNAME_LENGTH = 8
RESEND_WAIT_SECONDS = 20
VERIFICATION_LIFETIME_SECONDS = 70
API_URL_ENV = "API_URL"
VERIFIED_MESSAGE = "Your account has been verifed"

_VERIFICATION_COLUMNS = (
    '"id", "uu_id", "email", "verification_hash", "verified", "used", "created_at"'
)


@dataclass(frozen=True)
class UserProfile:
    """The public profile of a user."""

    username: str
    email: str


def current_time_stamp() -> float:
    """Seconds since the Unix epoch."""
    return time.time()


def generate_uuid() -> str:
    """A new random (version 4) UUID as text."""
    return str(uuid.uuid4())


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise ValueError(f"not a timestamp: {value!r}")


def _epoch_seconds(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())


def _row_to_verification(row: tuple) -> EmailVerification:
    id_, uu_id, email, verification_hash, verified, used, created_at = row
    return EmailVerification(
        id_, uu_id, email, verification_hash, bool(verified), bool(used),
        _to_datetime(created_at),
    )


def get_profile(conn: sqlite3.Connection, user_id: int) -> UserProfile:
    """Return the profile of the user with this id, or raise InternalError."""
    try:
        row = conn.execute(
            'SELECT "name", "email" FROM "user" WHERE "id" = ?', (user_id,)
        ).fetchone()
    except sqlite3.Error as exc:
        raise InternalError() from exc
    if row is None:
        raise InternalError()
    return UserProfile(username=row[0], email=row[1])


def _new_verification(conn: sqlite3.Connection, user_email: str) -> tuple[str, str]:
    """Store a fresh verification code; return its hash and uuid."""
    code_hash = hash_bytes(random_bytes())
    code_uuid = generate_uuid()
    try:
        with conn:
            conn.execute(
                'INSERT INTO "email_verification" '
                '("email", "verification_hash", "verified", "used", "uu_id") '
                "VALUES (?, ?, ?, ?, ?)",
                (user_email, code_hash, False, False, code_uuid),
            )
    except sqlite3.Error as exc:
        raise InternalError() from exc
    return code_hash, code_uuid


def create_verification_url_debug(conn: sqlite3.Connection, user_email: str) -> str:
    """Create a verification code and return its URL path instead of mailing it."""
    code_hash, _ = _new_verification(conn, user_email)
    return f"/verify/{code_hash}"


async def send_verification_url(
    emailer: Any,
    conn: sqlite3.Connection,
    user_email: str,
    api_url: Optional[str] = None,
) -> str:
    """Create a verification code, mail its link and return the code's uuid."""
    try:
        row = conn.execute(
            f'SELECT {_VERIFICATION_COLUMNS} FROM "email_verification" '
            'ORDER BY "created_at" DESC LIMIT 1'
        ).fetchone()
        last = _row_to_verification(row) if row is not None else None
    except (sqlite3.Error, ValueError) as exc:
        raise InternalError() from exc

    now = int(current_time_stamp())
    if last is not None and now - _epoch_seconds(last.created_at) <= RESEND_WAIT_SECONDS:
        raise UsedError("Verification is already sended please wait and try again")

    code_hash, code_uuid = _new_verification(conn, user_email)

    if api_url is None:
        api_url = os.environ.get(API_URL_ENV)
        if api_url is None:
            raise RuntimeError("API_URL must be set")
    link = f"{api_url}/account/verify/{code_hash}"
    body = f'<html><body><a href="{link}">Click to verify you email</a></body></html>'

    try:
        await emailer.send_email(user_email, "Verification Link", body)
    except (OSError, smtplib.SMTPException, ValueError) as exc:
        raise InternalError() from exc

    return code_uuid


async def send_verification_email(
    user_email: str,
    emailer: Any,
    conn: sqlite3.Connection,
    debug: bool = False,
) -> str:
    """In debug mode return the verification path, otherwise mail it."""
    if debug:
        return create_verification_url_debug(conn, user_email)
    return await send_verification_url(emailer, conn, user_email)


def verify(conn: sqlite3.Connection, code: str) -> str:
    """Mark a verification code as verified and create its user if needed."""
    try:
        row = conn.execute(
            f'SELECT {_VERIFICATION_COLUMNS} FROM "email_verification" '
            'WHERE "verification_hash" = ?',
            (code,),
        ).fetchone()
        verification = _row_to_verification(row) if row is not None else None
    except (sqlite3.Error, ValueError):
        verification = None
    if verification is None:
        raise NotFoundError("Verification Code not found")

    if verification.verified:
        raise ExpiredError("This Verification code is already verified")

    now = int(current_time_stamp())
    if now - _epoch_seconds(verification.created_at) >= VERIFICATION_LIFETIME_SECONDS:
        raise ExpiredError("This Verification code is expired")

    try:
        with conn:
            conn.execute(
                'UPDATE "email_verification" SET "verified" = ? WHERE "id" = ?',
                (True, verification.id),
            )
        user = conn.execute(
            'SELECT "id" FROM "user" WHERE "email" = ?', (verification.email,)
        ).fetchone()
    except sqlite3.Error as exc:
        raise InternalError() from exc

    if user is None:
        with conn:
            conn.execute(
                'INSERT INTO "user" ("name", "email", "uu_id") VALUES (?, ?, ?)',
                (
                    f"u{random_string(RANDOM_USERNAME_LENGTH)}",
                    verification.email,
                    generate_uuid(),
                ),
            )

    return VERIFIED_MESSAGE
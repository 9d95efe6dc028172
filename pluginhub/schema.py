"""Database schema: row models, ordered migrations and a migration command."""

from __future__ import annotations

import argparse
import os
import sqlite3
import sys
import time
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Iterable, Optional, Sequence

TRACKING_TABLE = "seaql_migrations"
DATABASE_URL_ENV = "DATABASE_URL"


@dataclass
class User:
    """A registered account."""

    TABLE: ClassVar[str] = "user"

    id: int
    uu_id: str
    name: str
    email: str


@dataclass
class Post:
    """A post written by a user."""

    TABLE: ClassVar[str] = "post"

    id: int
    title: str
    text: str
    author_id: int


@dataclass
class Token:
    """The hash of an access token that belongs to a user."""

    TABLE: ClassVar[str] = "token"

    id: int
    token_hash: str
    user_id: int


@dataclass
class EmailVerification:
    """A verification code sent to an e-mail address."""

    TABLE: ClassVar[str] = "email_verification"

    id: int
    uu_id: str
    email: str
    verification_hash: str
    verified: bool
    used: bool
    created_at: datetime


@dataclass
class Role:
    """A named role held by a user."""

    TABLE: ClassVar[str] = "role"

    id: int
    name: str
    user_id: int


@dataclass
class Permission:
    """An action that roles may be allowed to perform."""

    TABLE: ClassVar[str] = "permission"

    id: int
    action: str


@dataclass
class RolePermission:
    """Links a role to one of its permissions."""

    TABLE: ClassVar[str] = "role_permission"

    role_id: int
    permission_id: int


@dataclass(frozen=True)
class Migration:
    """One named schema change with the statements that apply and revert it."""

    name: str
    up_sql: tuple[str, ...]
    down_sql: tuple[str, ...]


def _drop(table: str) -> tuple[str, ...]:
    return (f'DROP TABLE "{table}"',)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        "m20230418_101322_create_user_table",
        (
            'CREATE TABLE IF NOT EXISTS "user" ('
            '"id" integer NOT NULL PRIMARY KEY AUTOINCREMENT, '
            '"uu_id" varchar NOT NULL, '
            '"name" varchar NOT NULL, '
            '"email" varchar NOT NULL)',
        ),
        _drop("user"),
    ),
    Migration(
        "m20230418_111519_create_post",
        (
            'CREATE TABLE IF NOT EXISTS "post" ('
            '"id" integer NOT NULL PRIMARY KEY AUTOINCREMENT, '
            '"title" varchar NOT NULL, '
            '"text" varchar NOT NULL, '
            '"author_id" integer NOT NULL, '
            'CONSTRAINT "fk-post-author_id" FOREIGN KEY ("author_id") '
            'REFERENCES "user" ("id"))',
        ),
        _drop("post"),
    ),
    Migration(
        "m20230418_121601_create_token",
        (
            'CREATE TABLE IF NOT EXISTS "token" ('
            '"id" integer NOT NULL PRIMARY KEY AUTOINCREMENT, '
            '"token_hash" varchar NOT NULL, '
            '"user_id" integer NOT NULL, '
            'CONSTRAINT "fk-post-author_id" FOREIGN KEY ("user_id") '
            'REFERENCES "user" ("id"))',
        ),
        _drop("token"),
    ),
    Migration(
        "m20230420_093824_create_email_verification",
        (
            'CREATE TABLE IF NOT EXISTS "email_verification" ('
            '"id" integer NOT NULL PRIMARY KEY AUTOINCREMENT, '
            '"uu_id" varchar NOT NULL, '
            '"email" varchar NOT NULL, '
            '"verification_hash" varchar NOT NULL, '
            '"verified" boolean NOT NULL, '
            '"used" boolean NOT NULL, '
            '"created_at" timestamp DEFAULT CURRENT_TIMESTAMP)',
        ),
        _drop("email_verification"),
    ),
    Migration(
        "m20230422_133556_create_role",
        (
            'CREATE TABLE IF NOT EXISTS "role" ('
            '"id" integer NOT NULL PRIMARY KEY AUTOINCREMENT, '
            '"name" varchar NOT NULL, '
            '"user_id" integer NOT NULL, '
            'CONSTRAINT "fk-role-user-id" FOREIGN KEY ("user_id") '
            'REFERENCES "user" ("id"))',
        ),
        _drop("role"),
    ),
    Migration(
        "m20230422_135423_create_permission",
        (
            'CREATE TABLE IF NOT EXISTS "permission" ('
            '"id" integer NOT NULL PRIMARY KEY AUTOINCREMENT, '
            '"action" varchar NOT NULL)',
        ),
        _drop("permission"),
    ),
    Migration(
        "m20230422_140203_create_role_permissions",
        (
            'CREATE TABLE IF NOT EXISTS "role_permission" ('
            '"role_id" integer NOT NULL, '
            '"permission_id" integer NOT NULL, '
            'CONSTRAINT "fk-rolepermissions-role-id" FOREIGN KEY ("role_id") '
            'REFERENCES "role" ("id"), '
            'CONSTRAINT "fk-rolepermissions-permission-id" '
            'FOREIGN KEY ("permission_id") REFERENCES "permission" ("id"))',
        ),
        _drop("role_permission"),
    ),
)


def _check_steps(steps: Optional[int]) -> None:
    if steps is not None and steps < 0:
        raise ValueError("steps must not be negative")


class Migrator:
    """Applies and reverts migrations on a SQLite connection, recording each one."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        migrations: Iterable[Migration] = MIGRATIONS,
    ) -> None:
        self.conn = conn
        self.migrations = tuple(migrations)
        names = [migration.name for migration in self.migrations]
        if len(set(names)) != len(names):
            raise ValueError("migration names must be unique")
        with self.conn:
            self.conn.execute(
                f'CREATE TABLE IF NOT EXISTS "{TRACKING_TABLE}" ('
                '"version" varchar NOT NULL PRIMARY KEY, '
                '"applied_at" bigint NOT NULL)'
            )

    def applied(self) -> list[str]:
        """Names of the applied migrations, oldest first."""
        rows = self.conn.execute(
            f'SELECT "version" FROM "{TRACKING_TABLE}" ORDER BY "version"'
        ).fetchall()
        return [row[0] for row in rows]

    def pending(self) -> list[str]:
        """Names of the migrations not applied yet, in the order they apply."""
        done = set(self.applied())
        return [m.name for m in self.migrations if m.name not in done]

    def up(self, steps: Optional[int] = None) -> list[str]:
        """Apply pending migrations, all of them or at most ``steps``."""
        _check_steps(steps)
        done = set(self.applied())
        todo = [m for m in self.migrations if m.name not in done]
        if steps is not None:
            todo = todo[:steps]
        for migration in todo:
            with self.conn:
                for statement in migration.up_sql:
                    self.conn.execute(statement)
                self.conn.execute(
                    f'INSERT INTO "{TRACKING_TABLE}" ("version", "applied_at") '
                    "VALUES (?, ?)",
                    (migration.name, int(time.time())),
                )
        return [migration.name for migration in todo]

    def down(self, steps: Optional[int] = None) -> list[str]:
        """Revert applied migrations newest first, all of them or at most ``steps``."""
        _check_steps(steps)
        by_name = {migration.name: migration for migration in self.migrations}
        done = [name for name in reversed(self.applied()) if name in by_name]
        if steps is not None:
            done = done[:steps]
        for name in done:
            with self.conn:
                for statement in by_name[name].down_sql:
                    self.conn.execute(statement)
                self.conn.execute(
                    f'DELETE FROM "{TRACKING_TABLE}" WHERE "version" = ?', (name,)
                )
        return done


def _database_path(url: str) -> str:
    if not url.startswith("sqlite:"):
        raise ValueError(f"unsupported database url: {url}")
    rest = url[len("sqlite:"):]
    if rest.startswith("//"):
        rest = rest[2:]
    rest = rest.split("?", 1)[0]
    return rest or ":memory:"


def _drop_all_tables(conn: sqlite3.Connection) -> None:
    rows = conn.execute(
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    ).fetchall()
    with conn:
        for (name,) in rows:
            conn.execute(f'DROP TABLE IF EXISTS "{name}"')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pluginhub-migrate", description="Manage the database schema."
    )
    parser.add_argument(
        "-u",
        "--database-url",
        default=os.environ.get(DATABASE_URL_ENV),
        help=f"database url, defaults to ${DATABASE_URL_ENV}",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    up = commands.add_parser("up", help="apply pending migrations")
    up.add_argument("-n", "--num", type=int, default=None)
    down = commands.add_parser("down", help="revert applied migrations")
    down.add_argument("-n", "--num", type=int, default=1)
    commands.add_parser("status", help="show the state of every migration")
    commands.add_parser("fresh", help="drop all tables, then apply everything")
    commands.add_parser("refresh", help="revert everything, then apply everything")
    commands.add_parser("reset", help="revert every applied migration")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the migration command line."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.database_url:
        parser.error(f"a database url is required (-u or ${DATABASE_URL_ENV})")
    try:
        path = _database_path(args.database_url)
    except ValueError as exc:
        parser.error(str(exc))
    num = getattr(args, "num", None)
    if num is not None and num < 0:
        parser.error("the number of steps must not be negative")

    with closing(sqlite3.connect(path)) as conn:
        if args.command == "fresh":
            _drop_all_tables(conn)
        migrator = Migrator(conn)
        if args.command == "status":
            applied = set(migrator.applied())
            for migration in migrator.migrations:
                state = "Applied" if migration.name in applied else "Pending"
                print(f"{state}\t{migration.name}")
            return 0
        changed: list[str] = []
        if args.command == "up":
            changed = migrator.up(num)
        elif args.command == "down":
            changed = migrator.down(num)
        elif args.command in ("fresh",):
            changed = migrator.up()
        elif args.command == "refresh":
            for name in migrator.down():
                print(f"Reverted\t{name}")
            changed = migrator.up()
        elif args.command == "reset":
            changed = migrator.down()
        verb = "Reverted" if args.command in ("down", "reset") else "Applied"
        for name in changed:
            print(f"{verb}\t{name}")
        if not changed:
            print("Nothing to do", file=sys.stderr)
    return 0
import os

# Keep test runs from writing staff_audit.log into the repo.
os.environ.setdefault("AUDIT_LOG_FILE", "")

import pytest
from sqlalchemy import text

from app.core.database import Database

STEVE_UUID = "069a79f4-44e9-4726-a5be-fca90e38aaf5"
ALEX_UUID = "ec561538-f3fd-461d-aff5-086b22154bce"

_SCHEMA = [
    """
    CREATE TABLE litebans_history (
        id INTEGER PRIMARY KEY,
        date TEXT,
        name TEXT,
        uuid TEXT,
        ip TEXT
    )
    """,
    """
    CREATE TABLE litebans_bans (
        id INTEGER PRIMARY KEY,
        uuid TEXT,
        name TEXT,
        reason TEXT,
        banned_by_name TEXT,
        time INTEGER,
        until INTEGER,
        active INTEGER
    )
    """,
    """
    CREATE TABLE litebans_mutes (
        id INTEGER PRIMARY KEY,
        uuid TEXT,
        name TEXT,
        reason TEXT,
        muted_by_name TEXT,
        time INTEGER,
        until INTEGER,
        active INTEGER
    )
    """,
    """
    CREATE TABLE litebans_kicks (
        id INTEGER PRIMARY KEY,
        uuid TEXT,
        name TEXT,
        reason TEXT,
        kicked_by_name TEXT,
        time INTEGER
    )
    """,
]


def _seed(conn):
    bans = [
        (1, STEVE_UUID, "Steve", "griefing", "Mod", 1700000000000, -1, 1),
        (2, ALEX_UUID, "Alex", "spam", "Mod", 1700000100000, 1700086500000, 0),
        (3, STEVE_UUID, "Steve", "xray", "Admin", 1700000200000, -1, 1),
        (4, ALEX_UUID, "Alex", "toxicity", "Admin", 1700000300000, -1, 1),
        (5, STEVE_UUID, "Steve", "ban evasion", "Admin", 1700000400000, -1, 1),
    ]
    conn.execute(
        text(
            "INSERT INTO litebans_bans (id, uuid, name, reason, banned_by_name, time, until, active) "
            "VALUES (:id, :uuid, :name, :reason, :by, :time, :until, :active)"
        ),
        [
            dict(zip(("id", "uuid", "name", "reason", "by", "time", "until", "active"), row))
            for row in bans
        ],
    )
    conn.execute(
        text(
            "INSERT INTO litebans_mutes (id, uuid, name, reason, muted_by_name, time, until, active) "
            "VALUES (1, :uuid, 'Alex', 'caps', 'Mod', 1700000000000, 1700003600000, 0)"
        ),
        {"uuid": ALEX_UUID},
    )
    conn.execute(
        text(
            "INSERT INTO litebans_kicks (id, uuid, name, reason, kicked_by_name, time) "
            "VALUES (1, :a, 'Alex', 'afk', 'Mod', 1700000000000), "
            "(2, :s, 'Steve', 'afk', 'Mod', 1700000100000)"
        ),
        {"a": ALEX_UUID, "s": STEVE_UUID},
    )
    # "Alex" was first used by another account, then by ALEX_UUID.
    conn.execute(
        text(
            "INSERT INTO litebans_history (id, date, name, uuid, ip) VALUES "
            "(1, '2023-01-01', 'Alex', '11111111-2222-3333-4444-555555555555', '127.0.0.1'), "
            "(2, '2023-06-01', 'Alex', :a, '127.0.0.1')"
        ),
        {"a": ALEX_UUID},
    )


@pytest.fixture
def litebans_db(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'litebans.db'}")
    with db.engine.begin() as conn:
        for statement in _SCHEMA:
            conn.execute(text(statement))
        _seed(conn)
    yield db
    db.dispose()

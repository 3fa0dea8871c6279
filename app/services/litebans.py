# app/services/litebans.py
"""
LiteBans Punishment Queries

Read-only access to the LiteBans bans/mutes/kicks tables. Table and column
names come from config only; caller input is passed as bound parameters.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import column, func, select, table
from sqlalchemy.exc import SQLAlchemyError

from app.core import config
from app.core.database import Database
from app.services import identity

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Longer than any player name or UUID; such queries cannot match.
MAX_QUERY_LENGTH = 64
ORDER_COLUMN = "id"

RECORD_KINDS = ("bans", "mutes", "kicks")


class RecordQueryError(Exception):
    """Listing query failed against the configured schema."""


class StatsQueryError(Exception):
    """One of the count queries failed; no partial stats are reported."""


@dataclass(frozen=True)
class RecordKind:
    name: str
    table: str
    columns: Tuple[str, ...]
    filter_column: str = "uuid"
    resolve_identifier: bool = True
    order_column: str = ORDER_COLUMN


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes"}


def build_record_kinds(overrides: Optional[dict] = None) -> Dict[str, RecordKind]:
    """Combine env defaults with the optional YAML overrides, keyed by kind."""
    if overrides is None:
        overrides = config.load_table_overrides()

    kinds = {}
    for name in RECORD_KINDS:
        defaults = config.TABLE_DEFAULTS[name]
        entry = overrides.get(name, {})

        columns = entry.get("columns", defaults["columns"])
        if isinstance(columns, str):
            columns = config.split_csv(columns)
        columns = tuple(str(c).strip() for c in columns if str(c).strip())

        filter_column = str(entry.get("filter_column", config.FILTER_COLUMN))
        resolve_default = config.RESOLVE_IDENTIFIER
        if resolve_default is None:
            resolve_default = filter_column in config.IDENTIFIER_COLUMNS

        kinds[name] = RecordKind(
            name=name,
            table=str(entry.get("table", defaults["table"])),
            columns=columns,
            filter_column=filter_column,
            resolve_identifier=_to_bool(entry.get("resolve_identifier"), resolve_default),
        )
    return kinds


def _parse_int(raw: Any, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


def clamp_pagination(limit: Any = None, offset: Any = None) -> Tuple[int, int]:
    """Clamp caller pagination: limit into [1, 100] (default 20), offset >= 0."""
    effective_limit = min(max(_parse_int(limit, DEFAULT_LIMIT), 1), MAX_LIMIT)
    effective_offset = max(_parse_int(offset, 0), 0)
    return effective_limit, effective_offset


def build_list_statement(kind: RecordKind, value: str, limit: int, offset: int):
    names = list(dict.fromkeys(kind.columns + (kind.filter_column, kind.order_column)))
    source = table(kind.table, *(column(name) for name in names))

    stmt = select(*(source.c[name] for name in kind.columns))
    if value:
        stmt = stmt.where(source.c[kind.filter_column].contains(value, autoescape=True))
    return stmt.order_by(source.c[kind.order_column].desc()).limit(limit).offset(offset)


def _row_value(value: Any) -> Any:
    # MySQL BIT(1) columns (LiteBans "active") arrive as a single byte.
    if isinstance(value, (bytes, bytearray)) and len(value) == 1:
        return bool(value[0])
    return value


def _fetch_rows_sync(db: Database, stmt) -> List[Dict[str, Any]]:
    with db.connect() as conn:
        result = conn.execute(stmt)
        return [{key: _row_value(val) for key, val in row.items()} for row in result.mappings()]


async def list_records(
    db: Database,
    kind: RecordKind,
    query: str = "",
    limit: Any = None,
    offset: Any = None,
) -> List[Dict[str, Any]]:
    """
    List punishment rows for ``kind``, newest first.

    If ``query`` is a player name and the kind filters by identifier, the name
    is resolved to a UUID first; an unknown name yields an empty list.

    Raises:
        identity.IdentityResolutionError: a lookup step could not run
        RecordQueryError: the listing query failed
    """
    limit, offset = clamp_pagination(limit, offset)
    value = (query or "").strip()

    if len(value) > MAX_QUERY_LENGTH:
        logger.info(f"[LiteBans] Ignoring {len(value)}-char query, returning no {kind.name}")
        return []

    if value and kind.resolve_identifier:
        resolved = await identity.resolve_uuid(db, value)
        if not resolved:
            logger.info(f"[LiteBans] No UUID for {value!r}, returning no {kind.name}")
            return []
        value = resolved

    stmt = build_list_statement(kind, value, limit, offset)
    try:
        return await asyncio.to_thread(_fetch_rows_sync, db, stmt)
    except SQLAlchemyError as e:
        logger.warning(f"[LiteBans] Listing {kind.name} from {kind.table} failed: {e}")
        raise RecordQueryError("query failed") from e


def _count_rows_sync(db: Database, kinds: Iterable[RecordKind]) -> Dict[str, int]:
    counts = {}
    with db.connect() as conn:
        for kind in kinds:
            stmt = select(func.count()).select_from(table(kind.table))
            counts[kind.name] = int(conn.execute(stmt).scalar() or 0)
    return counts


async def collect_stats(db: Database, kinds: Dict[str, RecordKind]) -> Dict[str, int]:
    """Row counts per kind. Any failing count fails the whole call."""
    try:
        return await asyncio.to_thread(_count_rows_sync, db, list(kinds.values()))
    except SQLAlchemyError as e:
        logger.warning(f"[LiteBans] Stats query failed: {e}")
        raise StatsQueryError("stats failed") from e

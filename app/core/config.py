import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

# ==========================================
# Path Configuration
# ==========================================

CORE_DIR = Path(__file__).resolve().parent
APP_DIR = CORE_DIR.parent
ROOT_DIR = APP_DIR.parent

ENV_FILE = ROOT_DIR / ".env"
DATA_DIR = ROOT_DIR / "data"
LOGS_DIR = ROOT_DIR / "logs"
TABLES_FILE = DATA_DIR / "litebans_tables.yml"

load_dotenv(dotenv_path=ENV_FILE)

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: Optional[bool]) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def split_csv(raw: str) -> tuple[str, ...]:
    """Split a comma-separated env value, dropping blanks."""
    return tuple(part.strip() for part in (raw or "").split(",") if part.strip())


# ==========================================
# App Configuration
# ==========================================

APP_NAME = "hyrise-api"
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
PORT = int(os.getenv("PORT", "8080"))
HOST = os.getenv("HOST", "0.0.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = split_csv(os.getenv("CORS_ORIGIN", ""))
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(200 * 1024)))

# ==========================================
# Database (LiteBans MySQL)
# ==========================================

DB_URL = os.getenv("DB_URL", "").strip()
DB_HOST = os.getenv("DB_HOST")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_NAME = os.getenv("DB_NAME")
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_SSL = _env_bool("DB_SSL", False)
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "8"))

REQUIRED_DB_SETTINGS = ("DB_HOST", "DB_NAME", "DB_USER", "DB_PASS")


def missing_db_settings() -> list[str]:
    """Names of required DB env vars that are unset. Empty when DB_URL is given."""
    if os.getenv("DB_URL", "").strip():
        return []
    return [name for name in REQUIRED_DB_SETTINGS if not os.getenv(name)]


# ==========================================
# Staff Account
# ==========================================

_DEFAULT_ADMIN_USER = "admin"
_DEFAULT_ADMIN_PASS = "change-me"
_DEFAULT_JWT_SECRET = "CHANGE_ME_SUPER_SECRET"

ADMIN_USER = os.getenv("ADMIN_USER") or _DEFAULT_ADMIN_USER
ADMIN_PASS = os.getenv("ADMIN_PASS") or _DEFAULT_ADMIN_PASS
JWT_SECRET = os.getenv("JWT_SECRET") or _DEFAULT_JWT_SECRET
JWT_ALGORITHM = "HS256"
TOKEN_TTL_HOURS = 12


def insecure_defaults() -> list[str]:
    """Staff account settings still holding their development defaults."""
    defaults = {
        "ADMIN_USER": (ADMIN_USER, _DEFAULT_ADMIN_USER),
        "ADMIN_PASS": (ADMIN_PASS, _DEFAULT_ADMIN_PASS),
        "JWT_SECRET": (JWT_SECRET, _DEFAULT_JWT_SECRET),
    }
    return [name for name, (value, default) in defaults.items() if value == default]


# ==========================================
# Name Directory (Mojang)
# ==========================================

MOJANG_PROFILE_URL = os.getenv(
    "MOJANG_PROFILE_URL", "https://api.mojang.com/users/profiles/minecraft/"
)
MOJANG_TIMEOUT_SECONDS = float(os.getenv("MOJANG_TIMEOUT_SECONDS", "10"))

# ==========================================
# LiteBans Tables
# ==========================================

T_HISTORY = os.getenv("T_HISTORY", "litebans_history")
FILTER_COLUMN = os.getenv("FILTER_COLUMN", "uuid").strip() or "uuid"
IDENTIFIER_COLUMNS = frozenset({"uuid"})
# None means "resolve names only when filtering on an identifier column".
RESOLVE_IDENTIFIER = _env_bool("RESOLVE_IDENTIFIER", None)

# LiteBans column sets vary between versions; adjust through COL_* env.
TABLE_DEFAULTS = {
    "bans": {
        "table": os.getenv("T_BANS", "litebans_bans"),
        "columns": split_csv(
            os.getenv("COL_BANS", "id,uuid,name,reason,banned_by_name,time,until,active")
        ),
    },
    "mutes": {
        "table": os.getenv("T_MUTES", "litebans_mutes"),
        "columns": split_csv(
            os.getenv("COL_MUTES", "id,uuid,name,reason,muted_by_name,time,until,active")
        ),
    },
    "kicks": {
        "table": os.getenv("T_KICKS", "litebans_kicks"),
        "columns": split_csv(os.getenv("COL_KICKS", "id,uuid,name,reason,kicked_by_name,time")),
    },
}


def load_table_overrides(path: Path = TABLES_FILE) -> dict:
    """Load per-kind table overrides from YAML config file."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"[Config] Ignoring unreadable {path.name}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"[Config] Ignoring {path.name}: expected a mapping")
        return {}
    return {str(kind): entry for kind, entry in data.items() if isinstance(entry, dict)}

"""
querykit - Dialect-aware SQL rendering engine
Copyright © 2025-2026 Ilona Tag

This file is part of querykit.

querykit is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as
published by the Free Software Foundation, either version 3 of
the License, or (at your option) any later version.

querykit is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with querykit. If not, see <https://www.gnu.org/licenses/>.

Contact: <https://github.com/elevata-labs/elevata>.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Type, Union

import yaml

from ...config import profiles
from ...utils.env import env_bool, env_str
from .base import SqlDialect
from .mssql import MssqlDialect
from .mysql import MySqlDialect
from .postgres import PostgresDialect
from .sqlite import SqliteDialect

logger = logging.getLogger(__name__)

"""
Dialect registry and resolution.
"""


class Dialect(str, Enum):
  """Selector for the supported SQL dialects."""
  SQLITE = "sqlite"
  MYSQL = "mysql"
  POSTGRES = "postgres"
  MSSQL = "mssql"


# Registry of known dialects.
_DIALECT_REGISTRY: dict[str, Type[SqlDialect]] = {
  Dialect.SQLITE.value: SqliteDialect,
  Dialect.MYSQL.value: MySqlDialect,
  Dialect.POSTGRES.value: PostgresDialect,
  Dialect.MSSQL.value: MssqlDialect,
}

# Accepted spellings besides the canonical names
_ALIASES = {
  "sqlite3": "sqlite",
  "mariadb": "mysql",
  "postgresql": "postgres",
  "pg": "postgres",
  "sqlserver": "mssql",
  "tsql": "mssql",
}

FALLBACK_DIALECT = Dialect.SQLITE.value

DialectSpec = Union[str, Dialect, SqlDialect, None]


def _normalize_name(name: str) -> str:
  key = name.strip().lower()
  return _ALIASES.get(key, key)


def _load_profile_safely(profiles_path: Optional[str]):
  try:
    return profiles.load_profile(profiles_path)
  except FileNotFoundError:
    logger.debug("No querykit profile file found; using built-in defaults")
  except (KeyError, ValueError, OSError, yaml.YAMLError) as exc:
    logger.warning("Could not load querykit profile, using built-in defaults: %s", exc)
  return None


def _resolve(explicit: Optional[str], profiles_path: Optional[str]) -> tuple[str, bool]:
  """
  Resolve (dialect name, quote_all_identifiers) from, in order:

  1. explicit argument
  2. environment variables (QUERYKIT_SQL_DIALECT, QUERYKIT_DIALECT)
  3. active profile.default_dialect
  4. hard fallback 'sqlite'

  QUERYKIT_QUOTE_ALL_IDENTIFIERS overrides the profile's quote_all_identifiers.
  The profile is only loaded when neither 1. nor 2. decided the dialect.
  """
  env_quote_all = env_bool("QUERYKIT_QUOTE_ALL_IDENTIFIERS", None)

  # 1) Explicit argument
  if explicit:
    logger.debug("SQL dialect %r selected explicitly", explicit)
    return _normalize_name(explicit), bool(env_quote_all)

  # 2) Env overrides
  env_name = env_str("QUERYKIT_SQL_DIALECT") or env_str("QUERYKIT_DIALECT")
  if env_name:
    logger.debug("SQL dialect %r selected from environment", env_name)
    return _normalize_name(env_name), bool(env_quote_all)

  # 3) Profile.default_dialect
  profile = _load_profile_safely(profiles_path)
  if profile is not None:
    quote_all = profile.quote_all_identifiers if env_quote_all is None else env_quote_all
    if profile.default_dialect:
      logger.debug(
        "SQL dialect %r selected from profile %r", profile.default_dialect, profile.name
      )
      return _normalize_name(profile.default_dialect), bool(quote_all)
    return FALLBACK_DIALECT, bool(quote_all)

  # 4) Hard fallback
  logger.debug("SQL dialect %r selected as fallback", FALLBACK_DIALECT)
  return FALLBACK_DIALECT, bool(env_quote_all)


def get_active_dialect(
  name: DialectSpec = None,
  profiles_path: Optional[str] = None,
) -> SqlDialect:
  """
  Return an instance of the active SqlDialect.

  `name` may be a dialect name, a Dialect member or an SqlDialect instance
  (returned unchanged). Without it, the environment and then the active
  profile decide.

  Raises:
      ValueError: if the resolved name is not registered.
  """
  if isinstance(name, SqlDialect):
    return name
  if isinstance(name, Dialect):
    name = name.value

  dialect_name, quote_all = _resolve(name, profiles_path)

  try:
    dialect_cls = _DIALECT_REGISTRY[dialect_name]
  except KeyError as exc:
    available = ", ".join(sorted(_DIALECT_REGISTRY))
    raise ValueError(
      f"Unknown SQL dialect: {dialect_name!r}. "
      f"Available dialects: {available}."
    ) from exc

  return dialect_cls(quote_all_identifiers=quote_all)


def get_available_dialect_names() -> List[str]:
  """Registered dialect names, sorted."""
  return sorted(_DIALECT_REGISTRY)


def get_all_registered_dialects() -> List[SqlDialect]:
  """One default-configured instance per registered dialect."""
  return [_DIALECT_REGISTRY[n]() for n in get_available_dialect_names()]


def assert_all_dialects_define_reserved_keywords() -> None:
  """
  Guardrail: every registered dialect must ship a non-empty RESERVED_KEYWORDS set.

  Raises:
      AssertionError: listing the dialects without keywords.
  """
  missing = [
    name for name, cls in sorted(_DIALECT_REGISTRY.items())
    if not getattr(cls, "RESERVED_KEYWORDS", None)
  ]
  if missing:
    raise AssertionError(
      "Dialects without RESERVED_KEYWORDS: " + ", ".join(missing)
    )

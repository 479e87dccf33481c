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

"""
SQL dialect adapters.

Each dialect implements SqlDialect and knows how to render expressions and
statements into concrete SQL text plus bindings.
"""

from .base import SqlDialect
from .dialect_factory import (
  Dialect,
  get_active_dialect,
  get_all_registered_dialects,
  get_available_dialect_names,
)
from .mssql import MssqlDialect
from .mysql import MySqlDialect
from .postgres import PostgresDialect
from .sqlite import SqliteDialect

__all__ = [
  "Dialect",
  "SqlDialect",
  "SqliteDialect",
  "MySqlDialect",
  "PostgresDialect",
  "MssqlDialect",
  "get_active_dialect",
  "get_all_registered_dialects",
  "get_available_dialect_names",
]

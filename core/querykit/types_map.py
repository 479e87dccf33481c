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

from typing import Optional

"""
Canonical logical types used by CAST expressions.

Dialects map these to physical types in map_logical_type().
"""

STRING = "STRING"
INTEGER = "INTEGER"
BIGINT = "BIGINT"
DECIMAL = "DECIMAL"
FLOAT = "FLOAT"
BOOLEAN = "BOOLEAN"
DATE = "DATE"
TIME = "TIME"
TIMESTAMP = "TIMESTAMP"
BINARY = "BINARY"
UUID = "UUID"
JSON = "JSON"

CANONICAL_TYPES = frozenset({
  STRING, INTEGER, BIGINT, DECIMAL, FLOAT, BOOLEAN,
  DATE, TIME, TIMESTAMP, BINARY, UUID, JSON,
})

_ALIASES = {
  "TEXT": STRING,
  "VARCHAR": STRING,
  "CHAR": STRING,
  "STRING": STRING,

  "INT": INTEGER,
  "INTEGER": INTEGER,
  "INT32": INTEGER,

  "BIGINT": BIGINT,
  "INT64": BIGINT,
  "LONG": BIGINT,

  "DECIMAL": DECIMAL,
  "NUMERIC": DECIMAL,

  "FLOAT": FLOAT,
  "DOUBLE": FLOAT,
  "FLOAT64": FLOAT,

  "BOOL": BOOLEAN,
  "BOOLEAN": BOOLEAN,

  "DATE": DATE,
  "TIME": TIME,
  "TIMESTAMP": TIMESTAMP,
  "DATETIME": TIMESTAMP,

  "BINARY": BINARY,
  "BYTES": BINARY,
  "BLOB": BINARY,

  "UUID": UUID,
  "JSON": JSON,
}


def canonicalize(logical_type: str | None) -> Optional[str]:
  """Normalize a logical type alias ("int", "text", ...) to its canonical name."""
  if not logical_type:
    return None
  return _ALIASES.get(str(logical_type).strip().upper())

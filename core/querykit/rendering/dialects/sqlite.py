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

import datetime
import uuid
from typing import Any, Sequence

from ...values import Value
from ...types_map import (
  STRING, INTEGER, BIGINT, DECIMAL, FLOAT, BOOLEAN, DATE, TIME, TIMESTAMP, BINARY, UUID, JSON
)
from ..binder import Binder
from ..expr import InList, JsonArrayEdge, JsonExtract, json_path_string
from ..logical_plan import LogicalInsert
from .base import SqlDialect
from .keywords.sqlite import RESERVED_KEYWORDS as SQLITE_RESERVED_KEYWORDS


class SqliteDialect(SqlDialect):
  """
  SQL dialect for SQLite (3.35+ for RETURNING, 3.39+ for RIGHT / FULL JOIN).
  """

  DIALECT_NAME = "sqlite"
  PARAMSTYLE = "qmark"
  RESERVED_KEYWORDS = SQLITE_RESERVED_KEYWORDS

  # SQLite has no LIMIT-less OFFSET; a negative limit means "no limit".
  OFFSET_ONLY_LIMIT = "-1"

  TYPE_MAP = {
    STRING: "TEXT",
    INTEGER: "INTEGER",
    BIGINT: "INTEGER",
    DECIMAL: "NUMERIC",
    FLOAT: "REAL",
    BOOLEAN: "INTEGER",
    DATE: "TEXT",
    TIME: "TEXT",
    TIMESTAMP: "TEXT",
    BINARY: "BLOB",
    UUID: "TEXT",
    JSON: "TEXT",
  }

  # ---------------------------------------------------------------------------
  # Capabilities
  # ---------------------------------------------------------------------------
  @property
  def supports_returning(self) -> bool:
    return True

  # ---------------------------------------------------------------------------
  # Identifier quoting
  # ---------------------------------------------------------------------------
  def quote_ident(self, name: str) -> str:
    """
    Quote an identifier using double quotes.
    Internal double quotes are escaped by doubling them.
    """
    escaped = name.replace('"', '""')
    return f'"{escaped}"'

  def placeholder(self, index: int) -> str:
    return "?"

  # ---------------------------------------------------------------------------
  # Value encoding
  # ---------------------------------------------------------------------------
  def encode_value(self, value: Value) -> Any:
    """
    The sqlite3 module only stores NULL, INTEGER, REAL, TEXT and BLOB, so
    richer kinds are handed over as text.
    """
    native = super().encode_value(value)
    if isinstance(native, (datetime.datetime, datetime.date, datetime.time)):
      return native.isoformat()
    if isinstance(native, uuid.UUID):
      return str(native)
    if value.kind == "decimal":
      return str(native)
    return native

  # ---------------------------------------------------------------------------
  # Expression helpers
  # ---------------------------------------------------------------------------
  def concat_expression(self, parts: Sequence[str]) -> str:
    if not parts:
      return "''"
    return "(" + " || ".join(parts) + ")"

  def aggregate_to_string_expression(self, expr: str) -> str:
    return f"GROUP_CONCAT({expr})"

  def row_in_expression(self, node: InList, b: Binder) -> str:
    """(a, b) IN (VALUES (?, ?), (?, ?))"""
    lhs = self.render_expr(node.expr, b)
    rows = ", ".join(self.render_expr(r, b) for r in node.items)
    keyword = "NOT IN" if node.negated else "IN"
    return f"{lhs} {keyword} (VALUES {rows})"

  # ---------------------------------------------------------------------------
  # JSON (JSON1 functions, built in since SQLite 3.38)
  # ---------------------------------------------------------------------------
  JSON_TYPE_FUNCTION = "json_type"
  JSON_TYPE_NAMES = {
    "array": ("array",),
    "boolean": ("true", "false"),
    "number": ("integer", "real"),
    "object": ("object",),
    "string": ("text",),
    "null": ("null",),
  }

  def json_extract_expression(self, node: JsonExtract, b: Binder) -> str:
    # String scalars already come back as SQL text, with or without as_text.
    return f"json_extract({self.render_expr(node.expr, b)}, {b.bind(json_path_string(node.path))})"

  def json_array_edge_expression(self, node: JsonArrayEdge, b: Binder) -> str:
    path = "'$[0]'" if node.edge == "first" else "'$[#-1]'"
    doc = self._render_operand(node.expr, b)
    sql = f"{doc} -> {path} = json({self.render_expr(node.value, b)})"
    return self._negate(sql, node.negated)

  # ---------------------------------------------------------------------------
  # Upsert
  # ---------------------------------------------------------------------------
  def render_insert_source(self, insert: LogicalInsert, b: Binder) -> str:
    if insert.source is not None and insert.on_conflict is not None:
      # INSERT ... SELECT ... ON CONFLICT is ambiguous to the SQLite parser
      # unless the SELECT carries a WHERE clause.
      return f"SELECT * FROM ({self.render_select(insert.source, b)}) WHERE true"
    return super().render_insert_source(insert, b)

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

from typing import Sequence

from ...errors import UnsupportedClause
from ...types_map import (
  STRING, INTEGER, BIGINT, DECIMAL, FLOAT, BOOLEAN, DATE, TIME, TIMESTAMP, BINARY, UUID, JSON
)
from ..binder import Binder
from ..expr import (
  JSON_TYPES,
  JsonArrayContains,
  JsonArrayEdge,
  JsonExtract,
  Matches,
  RowToJson,
  TextSearch,
)
from .base import SqlDialect
from .keywords.postgres import RESERVED_KEYWORDS as POSTGRES_RESERVED_KEYWORDS


class PostgresDialect(SqlDialect):
  """
  SQL dialect for PostgreSQL.

  Positional $n placeholders, native RETURNING and
  INSERT ... ON CONFLICT for upserts.
  """

  DIALECT_NAME = "postgres"
  PARAMSTYLE = "numeric_dollar"
  RESERVED_KEYWORDS = POSTGRES_RESERVED_KEYWORDS

  TYPE_MAP = {
    STRING: "TEXT",
    INTEGER: "INTEGER",
    BIGINT: "BIGINT",
    DECIMAL: "NUMERIC",
    FLOAT: "DOUBLE PRECISION",
    BOOLEAN: "BOOLEAN",
    DATE: "DATE",
    TIME: "TIME",
    TIMESTAMP: "TIMESTAMP",
    BINARY: "BYTEA",
    UUID: "UUID",
    JSON: "JSONB",
  }

  # ---------------------------------------------------------------------------
  # Capabilities
  # ---------------------------------------------------------------------------
  @property
  def supports_returning(self) -> bool:
    return True

  @property
  def supports_arrays(self) -> bool:
    return True

  # ---------------------------------------------------------
  # Identifier quoting
  # ---------------------------------------------------------
  def quote_ident(self, name: str) -> str:
    escaped = name.replace('"', '""')
    return f'"{escaped}"'

  def should_quote(self, name: str) -> bool:
    """
    Unquoted identifiers are folded to lower case by PostgreSQL, so any
    upper case character needs quoting to keep its spelling.
    """
    if name and name != name.lower():
      return True
    return super().should_quote(name)

  def placeholder(self, index: int) -> str:
    return f"${index}"

  # ---------------------------------------------------------
  # Expression helpers
  # ---------------------------------------------------------
  def concat_expression(self, parts: Sequence[str]) -> str:
    if not parts:
      return "''"
    return "(" + " || ".join(parts) + ")"

  def aggregate_to_string_expression(self, expr: str) -> str:
    return f"STRING_AGG(CAST({expr} AS TEXT), ',')"

  # ---------------------------------------------------------
  # JSON
  # ---------------------------------------------------------
  JSON_TYPE_FUNCTION = "JSONB_TYPEOF"
  JSON_TYPE_NAMES = {t: (t,) for t in JSON_TYPES}

  def json_extract_expression(self, node: JsonExtract, b: Binder) -> str:
    """
    (doc #> ARRAY[$1, $2]::text[])

    The keys are bound one by one; ARRAY[...]::text[] survives escaped
    characters that the '{a,b}' literal notation does not.
    """
    if isinstance(node.path, str):
      raise UnsupportedClause(
        self.DIALECT_NAME,
        "JSON path string",
        "pass the path as a sequence of keys",
      )
    operator = "#>>" if node.as_text else "#>"
    keys = ", ".join(b.bind(k) for k in node.path)
    return f"({self._render_operand(node.expr, b)}{operator}ARRAY[{keys}]::text[])"

  def json_array_contains_expression(self, node: JsonArrayContains, b: Binder) -> str:
    sql = f"{self._render_operand(node.expr, b)} @> {self.render_expr(node.value, b)}"
    return self._negate(sql, node.negated)

  def json_array_edge_expression(self, node: JsonArrayEdge, b: Binder) -> str:
    index = "0" if node.edge == "first" else "-1"
    sql = f"{self._render_operand(node.expr, b)}->{index} = {self.render_expr(node.value, b)}"
    return self._negate(sql, node.negated)

  def row_to_json_expression(self, node: RowToJson, b: Binder) -> str:
    alias = self.render_identifier(node.table_alias)
    if node.pretty:
      return f"ROW_TO_JSON({alias}, true)"
    return f"ROW_TO_JSON({alias})"

  # ---------------------------------------------------------
  # Full-text search
  # ---------------------------------------------------------
  def text_search_expression(self, node: TextSearch, b: Binder) -> str:
    columns = [self.render_expr(c, b) for c in node.columns]
    if len(columns) == 1:
      return f"to_tsvector({columns[0]})"
    return f"to_tsvector(concat_ws(' ', {', '.join(columns)}))"

  def matches_expression(self, node: Matches, b: Binder) -> str:
    sql = f"{self.render_expr(node.search, b)} @@ to_tsquery({self.render_expr(node.query, b)})"
    return self._negate(sql, node.negated)

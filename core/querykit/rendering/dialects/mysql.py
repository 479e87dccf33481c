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
import uuid
from typing import Any, Sequence

from ...errors import UnsupportedClause
from ...values import Value
from ...types_map import (
  STRING, INTEGER, BIGINT, DECIMAL, FLOAT, BOOLEAN, DATE, TIME, TIMESTAMP, BINARY, UUID, JSON
)
from ..binder import Binder
from ..expr import (
  ColumnRef,
  Excluded,
  Expr,
  FuncCall,
  JsonArrayContains,
  JsonArrayEdge,
  JsonExtract,
  Matches,
  TextSearch,
  json_path_string,
)
from ..logical_plan import Join, LogicalInsert, OnConflict
from .base import SqlDialect
from .keywords.mysql import RESERVED_KEYWORDS as MYSQL_RESERVED_KEYWORDS

logger = logging.getLogger(__name__)


class MySqlDialect(SqlDialect):
  """
  SQL dialect for MySQL / MariaDB.

  - backtick quoting, `?` placeholders
  - no boolean type: TRUE / FALSE render as 1 / 0
  - no RETURNING
  - upserts via ON DUPLICATE KEY UPDATE
  """

  DIALECT_NAME = "mysql"
  PARAMSTYLE = "qmark"
  RESERVED_KEYWORDS = MYSQL_RESERVED_KEYWORDS

  TRUE_LITERAL = "1"
  FALSE_LITERAL = "0"

  # Largest unsigned BIGINT, the documented way to express "no limit".
  OFFSET_ONLY_LIMIT = "18446744073709551615"

  TYPE_MAP = {
    STRING: "CHAR",
    INTEGER: "SIGNED",
    BIGINT: "SIGNED",
    DECIMAL: "DECIMAL(38, 10)",
    FLOAT: "DOUBLE",
    BOOLEAN: "SIGNED",
    DATE: "DATE",
    TIME: "TIME",
    TIMESTAMP: "DATETIME",
    BINARY: "BINARY",
    UUID: "CHAR(36)",
    JSON: "JSON",
  }

  # ---------------------------------------------------------------------------
  # Capabilities
  # ---------------------------------------------------------------------------
  @property
  def supports_conflict_do_nothing(self) -> bool:
    # Emulated by a no-op assignment in ON DUPLICATE KEY UPDATE.
    return False

  # ---------------------------------------------------------------------------
  # Identifier quoting
  # ---------------------------------------------------------------------------
  def quote_ident(self, name: str) -> str:
    escaped = name.replace("`", "``")
    return f"`{escaped}`"

  def placeholder(self, index: int) -> str:
    return "?"

  def encode_value(self, value: Value) -> Any:
    native = super().encode_value(value)
    if isinstance(native, bool):
      return int(native)
    if isinstance(native, uuid.UUID):
      return str(native)
    return native

  # ---------------------------------------------------------------------------
  # Expression helpers
  # ---------------------------------------------------------------------------
  def concat_expression(self, parts: Sequence[str]) -> str:
    if not parts:
      return "''"
    return f"CONCAT({', '.join(parts)})"

  def aggregate_to_string_expression(self, expr: str) -> str:
    return f"GROUP_CONCAT({expr})"

  def render_join_type(self, join: Join) -> str:
    if join.join_type == "full":
      raise UnsupportedClause(self.DIALECT_NAME, "FULL JOIN")
    return super().render_join_type(join)

  # ---------------------------------------------------------------------------
  # JSON
  # ---------------------------------------------------------------------------
  JSON_TYPE_FUNCTION = "JSON_TYPE"
  JSON_TYPE_NAMES = {
    "array": ("ARRAY",),
    "boolean": ("BOOLEAN",),
    "number": ("INTEGER", "UNSIGNED INTEGER", "DOUBLE", "DECIMAL"),
    "object": ("OBJECT",),
    "string": ("STRING",),
    "null": ("NULL",),
  }

  def json_extract_expression(self, node: JsonExtract, b: Binder) -> str:
    sql = f"JSON_EXTRACT({self.render_expr(node.expr, b)}, {b.bind(json_path_string(node.path))})"
    if node.as_text:
      return f"JSON_UNQUOTE({sql})"
    return sql

  def json_array_contains_expression(self, node: JsonArrayContains, b: Binder) -> str:
    sql = f"JSON_CONTAINS({self.render_expr(node.expr, b)}, {self.render_expr(node.value, b)})"
    return self._negate(sql, node.negated)

  def json_array_edge_expression(self, node: JsonArrayEdge, b: Binder) -> str:
    path = "'$[0]'" if node.edge == "first" else "'$[last]'"
    doc = self.render_expr(node.expr, b)
    sql = f"JSON_EXTRACT({doc}, {path}) = CAST({self.render_expr(node.value, b)} AS JSON)"
    return self._negate(sql, node.negated)

  # ---------------------------------------------------------------------------
  # Full-text search
  # ---------------------------------------------------------------------------
  def matches_expression(self, node: Matches, b: Binder) -> str:
    """MATCH (a, b) AGAINST (? IN BOOLEAN MODE); needs a FULLTEXT index on the columns."""
    columns = node.search.columns if isinstance(node.search, TextSearch) else (node.search,)
    columns_sql = ", ".join(self.render_expr(c, b) for c in columns)
    sql = f"MATCH ({columns_sql}) AGAINST ({self.render_expr(node.query, b)} IN BOOLEAN MODE)"
    return self._negate(sql, node.negated)

  # ---------------------------------------------------------------------------
  # Upsert
  # ---------------------------------------------------------------------------
  def _rewrite_excluded(self, node: Expr) -> Expr:
    if isinstance(node, Excluded):
      return FuncCall("VALUES", (ColumnRef(None, node.column_name),))
    return node

  def render_on_conflict(self, insert: LogicalInsert, conflict: OnConflict, b: Binder) -> str:
    """
    ON DUPLICATE KEY UPDATE fires on any unique key, so the conflict target
    columns only serve as a hint here.
    """
    if conflict.where is not None:
      raise UnsupportedClause(
        self.DIALECT_NAME,
        "conditional upsert",
        "ON DUPLICATE KEY UPDATE has no WHERE clause",
      )

    if conflict.action == "nothing":
      column = (conflict.target_columns or insert.columns)[0]
      ident = self.render_identifier(column)
      logger.debug(
        "Emulating DO NOTHING on %s with a no-op assignment to %s",
        insert.table.name,
        column,
      )
      return f"ON DUPLICATE KEY UPDATE {ident} = {ident}"

    return "ON DUPLICATE KEY UPDATE " + self.render_assignments(
      conflict.assignments, b, self._rewrite_excluded
    )

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

import uuid
from typing import Any, List, Optional, Sequence

from ...errors import PaginationRequiresOrdering, UnsupportedClause
from ...values import Value
from ...types_map import (
  STRING, INTEGER, BIGINT, DECIMAL, FLOAT, BOOLEAN, DATE, TIME, TIMESTAMP, BINARY, UUID, JSON
)
from ..binder import Binder
from ..expr import (
  BoolConst,
  ColumnRef,
  Excluded,
  Expr,
  InList,
  JsonExtract,
  Matches,
  RawSql,
  Star,
  TextSearch,
  json_path_string,
  transform,
)
from ..logical_plan import (
  LogicalDelete,
  LogicalInsert,
  LogicalSelect,
  LogicalUpdate,
  OnConflict,
  SelectItem,
  SourceTable,
)
from .base import SqlDialect
from .keywords.mssql import RESERVED_KEYWORDS as MSSQL_RESERVED_KEYWORDS


class MssqlDialect(SqlDialect):
  """
  SQL dialect for Microsoft SQL Server.

  - bracket quoting, @p1, @p2, ... placeholders
  - pagination via ORDER BY ... OFFSET ... ROWS FETCH NEXT ... ROWS ONLY
  - RETURNING emulated with OUTPUT INSERTED.* / DELETED.*
  - upserts rendered as MERGE
  """

  DIALECT_NAME = "mssql"
  PARAMSTYLE = "named_at"
  RESERVED_KEYWORDS = MSSQL_RESERVED_KEYWORDS

  TRUE_LITERAL = "1"
  FALSE_LITERAL = "0"

  # Alias of the row source in MERGE statements
  MERGE_SOURCE_ALIAS = "dual"

  TYPE_MAP = {
    STRING: "NVARCHAR(MAX)",
    INTEGER: "INT",
    BIGINT: "BIGINT",
    DECIMAL: "DECIMAL(38, 10)",
    FLOAT: "FLOAT",
    BOOLEAN: "BIT",
    DATE: "DATE",
    TIME: "TIME",
    TIMESTAMP: "DATETIME2",
    BINARY: "VARBINARY(MAX)",
    UUID: "UNIQUEIDENTIFIER",
    JSON: "NVARCHAR(MAX)",
  }

  # ---------------------------------------------------------------------------
  # Capabilities
  # ---------------------------------------------------------------------------
  @property
  def supports_returning(self) -> bool:
    """Emulated through the OUTPUT clause."""
    return True

  # ---------------------------------------------------------------------------
  # Identifier quoting
  # ---------------------------------------------------------------------------
  def quote_ident(self, name: str) -> str:
    """
    Quote identifiers using SQL Server bracket style: [name].
    A closing bracket inside the name is escaped as ]].
    """
    escaped = name.replace("]", "]]")
    return f"[{escaped}]"

  def placeholder(self, index: int) -> str:
    return f"@p{index}"

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
    return "(" + " + ".join(parts) + ")"

  def aggregate_to_string_expression(self, expr: str) -> str:
    return f"STRING_AGG({expr}, ',')"

  def render_predicate(self, expr: Expr, b: Binder) -> str:
    # BIT is not a search condition: WHERE 1 is a syntax error.
    if isinstance(expr, BoolConst):
      return "1=1" if expr.value else "1=0"
    return super().render_predicate(expr, b)

  def json_extract_expression(self, node: JsonExtract, b: Binder) -> str:
    """JSON_VALUE for scalars (as_text), JSON_QUERY for objects and arrays."""
    func = "JSON_VALUE" if node.as_text else "JSON_QUERY"
    doc = self.render_expr(node.expr, b)
    return f"{func}({doc}, {b.bind(json_path_string(node.path))})"

  def matches_expression(self, node: Matches, b: Binder) -> str:
    columns = node.search.columns if isinstance(node.search, TextSearch) else (node.search,)
    columns_sql = ", ".join(self.render_expr(c, b) for c in columns)
    if len(columns) > 1:
      columns_sql = f"({columns_sql})"
    sql = f"CONTAINS({columns_sql}, {self.render_expr(node.query, b)})"
    return self._negate(sql, node.negated)

  def row_in_expression(self, node: InList, b: Binder) -> str:
    """
    SQL Server has no row value comparison, so

      (a, b) IN ((1, 2), (3, 4))

    becomes

      ((a = @p1 AND b = @p2) OR (a = @p3 AND b = @p4))
    """
    left_items = node.expr.items
    alternatives = []
    for row in node.items:
      pairs = []
      for left, right in zip(left_items, row.items):
        pairs.append(
          f"{self._render_operand(left, b)} = {self._render_operand(right, b)}"
        )
      alternatives.append("(" + " AND ".join(pairs) + ")")
    expanded = "(" + " OR ".join(alternatives) + ")"
    return f"NOT {expanded}" if node.negated else expanded

  # ---------------------------------------------------------------------------
  # Pagination
  # ---------------------------------------------------------------------------
  def _synthesized_order_by(self, select: LogicalSelect) -> str:
    source = select.from_
    if not isinstance(source, SourceTable) or not source.primary_key:
      raise PaginationRequiresOrdering(self.DIALECT_NAME)
    if select.distinct:
      # ORDER BY items of a SELECT DISTINCT must appear in the select list.
      missing = [k for k in source.primary_key if not self._is_projected(select, source, k)]
      if missing:
        raise PaginationRequiresOrdering(
          self.DIALECT_NAME,
          f"primary key column(s) {', '.join(missing)} not in the DISTINCT select list",
        )
    qualifier = self.render_identifier(source.alias or source.name)
    keys = ", ".join(f"{qualifier}.{self.render_identifier(k)}" for k in source.primary_key)
    return f"ORDER BY {keys}"

  @staticmethod
  def _is_projected(select: LogicalSelect, source: SourceTable, column: str) -> bool:
    qualifiers = (None, source.alias or source.name)
    for item in select.select_list:
      expr = item.expr
      if isinstance(expr, Star) and expr.table_alias in qualifiers:
        return True
      if (
        isinstance(expr, ColumnRef)
        and expr.column_name == column
        and expr.table_alias in qualifiers
        and item.alias in (None, column)
      ):
        return True
    return False

  def render_order_and_pagination(self, select: LogicalSelect, b: Binder) -> List[str]:
    if select.limit is None and select.offset is None:
      return super().render_order_and_pagination(select, b)

    order_sql = self.render_order_by(select, b) or self._synthesized_order_by(select)
    parts = [order_sql, f"OFFSET {int(select.offset or 0)} ROWS"]
    if select.limit is not None:
      parts.append(f"FETCH NEXT {int(select.limit)} ROWS ONLY")
    return parts

  # ---------------------------------------------------------------------------
  # OUTPUT (RETURNING emulation)
  # ---------------------------------------------------------------------------
  def _render_output(self, items: Sequence[SelectItem], pseudo_table: str, b: Binder) -> Optional[str]:
    if not items:
      return None

    def requalify(node: Expr) -> Expr:
      if isinstance(node, ColumnRef):
        return RawSql(f"{pseudo_table}.{self.render_identifier(node.column_name)}")
      if isinstance(node, Star):
        return RawSql(f"{pseudo_table}.*")
      return node

    output_items = [SelectItem(transform(i.expr, requalify), i.alias) for i in items]
    return "OUTPUT " + self._render_select_list(output_items, b)

  def render_insert(self, insert: LogicalInsert, b: Binder) -> str:
    if insert.on_conflict is not None:
      return self.render_merge(insert, insert.on_conflict, b)

    parts: List[str] = [
      f"INSERT INTO {self._render_target(insert.table)} ({self.render_column_list(insert.columns)})"
    ]
    output_sql = self._render_output(insert.returning, "INSERTED", b)
    if output_sql:
      parts.append(output_sql)
    parts.append(self.render_insert_source(insert, b))
    return " ".join(parts)

  def render_update(self, update: LogicalUpdate, b: Binder) -> str:
    parts: List[str] = [
      f"UPDATE {self._render_target(update.table)}",
      "SET " + self.render_assignments(update.assignments, b),
    ]
    output_sql = self._render_output(update.returning, "INSERTED", b)
    if output_sql:
      parts.append(output_sql)
    if update.where is not None:
      parts.append("WHERE " + self.render_predicate(update.where, b))
    return " ".join(parts)

  def render_delete(self, delete: LogicalDelete, b: Binder) -> str:
    parts: List[str] = [f"DELETE FROM {self._render_target(delete.table)}"]
    output_sql = self._render_output(delete.returning, "DELETED", b)
    if output_sql:
      parts.append(output_sql)
    if delete.where is not None:
      parts.append("WHERE " + self.render_predicate(delete.where, b))
    return " ".join(parts)

  # ---------------------------------------------------------------------------
  # Upsert (MERGE)
  # ---------------------------------------------------------------------------
  def render_merge(self, insert: LogicalInsert, conflict: OnConflict, b: Binder) -> str:
    """
    MERGE INTO [t] AS [t]
    USING (VALUES (@p1, @p2)) AS [dual] ([id], [name])
    ON [t].[id] = [dual].[id]
    WHEN MATCHED THEN UPDATE SET [name] = [dual].[name]
    WHEN NOT MATCHED THEN INSERT ([id], [name]) VALUES ([dual].[id], [dual].[name]);
    """
    if not conflict.target_columns:
      raise UnsupportedClause(
        self.DIALECT_NAME,
        "upsert without conflict target",
        "MERGE needs the conflict target columns to match rows",
      )
    missing = [c for c in conflict.target_columns if c not in insert.columns]
    if missing:
      raise UnsupportedClause(
        self.DIALECT_NAME,
        "upsert",
        f"conflict target columns {', '.join(missing)} are not inserted",
      )

    table = insert.table
    target_alias = table.alias or table.name
    tgt = self.render_identifier(target_alias)
    src_alias = self.MERGE_SOURCE_ALIAS
    src = self.render_identifier(src_alias)
    columns = self.render_column_list(insert.columns)

    def rewrite(node: Expr) -> Expr:
      if isinstance(node, Excluded):
        return ColumnRef(src_alias, node.column_name)
      if isinstance(node, ColumnRef) and node.table_alias is None:
        return ColumnRef(target_alias, node.column_name)
      return node

    if insert.source is not None:
      using_sql = self.render_select(insert.source, b)
    else:
      using_sql = self._render_values_rows(insert, b)

    join_on = " AND ".join(
      f"{tgt}.{self.render_identifier(c)} = {src}.{self.render_identifier(c)}"
      for c in conflict.target_columns
    )

    parts: List[str] = [
      f"MERGE INTO {self._render_target(table)} AS {tgt}",
      f"USING ({using_sql}) AS {src} ({columns})",
      f"ON {join_on}",
    ]

    if conflict.action == "update":
      matched = "WHEN MATCHED"
      if conflict.where is not None:
        matched += " AND " + self._render_condition(transform(conflict.where, rewrite), b)
      parts.append(matched)
      parts.append("THEN UPDATE SET " + self.render_assignments(conflict.assignments, b, rewrite))

    inserted_values = ", ".join(f"{src}.{self.render_identifier(c)}" for c in insert.columns)
    parts.append(f"WHEN NOT MATCHED THEN INSERT ({columns}) VALUES ({inserted_values})")

    output_sql = self._render_output(insert.returning, "INSERTED", b)
    if output_sql:
      parts.append(output_sql)

    return " ".join(parts) + ";"

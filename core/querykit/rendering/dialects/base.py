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

import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ...errors import RenderError, UnsupportedClause
from ...values import Array, Json, Value
from ..binder import Binder, RenderedQuery
from ..expr import (
  Expr,
  AggregateToString,
  Between,
  BinaryOp,
  BoolConst,
  BoolOp,
  Cast,
  Coalesce,
  ColumnRef,
  Concat,
  Excluded,
  Exists,
  FuncCall,
  InList,
  InSubquery,
  IsNull,
  JsonArrayContains,
  JsonArrayEdge,
  JsonExtract,
  JsonTypeEquals,
  Literal,
  Matches,
  Not,
  OrderByExpr,
  RawSql,
  Row,
  RowToJson,
  Star,
  Subquery,
  TextSearch,
  WindowFunction,
  WindowSpec,
  transform,
)
from ..logical_plan import (
  Join,
  LogicalDelete,
  LogicalInsert,
  LogicalSelect,
  LogicalUnion,
  LogicalUpdate,
  OnConflict,
  SelectItem,
  SourceTable,
  SubquerySource,
)

_PLAIN_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TEMPLATE_EXPR_RE = re.compile(r"\{expr:([A-Za-z0-9_]+)\}")

# Nodes that need parentheses when they appear as an operand of another
# comparison, NOT, IS NULL, IN or BETWEEN.
_COMPOUND_NODES = (
  BinaryOp,
  BoolOp,
  Not,
  IsNull,
  InList,
  InSubquery,
  Between,
  Exists,
  JsonArrayContains,
  JsonArrayEdge,
  JsonTypeEquals,
  Matches,
)


class SqlDialect(ABC):
  """
  Base class for SQL dialects.

  The traversal (statement layout, clause order, expression walk) lives here;
  subclasses override the hooks where their SQL diverges. Instances hold no
  per-render state: every render() creates its own Binder.
  """

  DIALECT_NAME: ClassVar[str] = ""
  PARAMSTYLE: ClassVar[str] = "qmark"
  RESERVED_KEYWORDS: ClassVar[FrozenSet[str]] = frozenset()

  # Rendered text of boolean constants
  TRUE_LITERAL: ClassVar[str] = "TRUE"
  FALSE_LITERAL: ClassVar[str] = "FALSE"

  # canonical logical type -> physical type used in CAST
  TYPE_MAP: ClassVar[Dict[str, str]] = {}

  def __init__(self, quote_all_identifiers: bool = False):
    self.quote_all_identifiers = bool(quote_all_identifiers)

  def __repr__(self) -> str:
    return f"{self.__class__.__name__}(quote_all_identifiers={self.quote_all_identifiers})"

  # ---------------------------------------------------------------------------
  # Entry point
  # ---------------------------------------------------------------------------
  def render(self, statement) -> RenderedQuery:
    """Render a statement into SQL text plus its ordered bindings."""
    binder = Binder(self)
    sql = self.render_statement(statement, binder)
    bindings = binder.bindings
    return RenderedQuery(
      sql=sql,
      bindings=bindings,
      params=tuple(self.encode_value(v) for v in bindings),
      dialect=self.DIALECT_NAME,
      paramstyle=self.PARAMSTYLE,
    )

  def render_statement(self, statement, b: Binder) -> str:
    if isinstance(statement, LogicalSelect):
      return self.render_select(statement, b)
    if isinstance(statement, LogicalUnion):
      return self.render_union(statement, b)
    if isinstance(statement, LogicalInsert):
      return self.render_insert(statement, b)
    if isinstance(statement, LogicalUpdate):
      return self.render_update(statement, b)
    if isinstance(statement, LogicalDelete):
      return self.render_delete(statement, b)
    raise RenderError(
      f"Unsupported statement type for {self.__class__.__name__}: {type(statement).__name__}"
    )

  # ---------------------------------------------------------------------------
  # Placeholders and value encoding
  # ---------------------------------------------------------------------------
  @abstractmethod
  def placeholder(self, index: int) -> str:
    """Placeholder token for the 1-based parameter position `index`."""
    raise NotImplementedError

  def encode_value(self, value: Value) -> Any:
    """
    Turn a bound Value into the object handed to the driver.
    JSON travels as text; dialects override for their type quirks.
    """
    if isinstance(value, Json):
      return value.text
    if isinstance(value, Array):
      if not self.supports_arrays:
        raise UnsupportedClause(self.DIALECT_NAME, "array value")
      return [self.encode_value(item) for item in value.items]
    return value.to_native()

  # ---------------------------------------------------------------------------
  # Capabilities (can be overridden by concrete dialects)
  # ---------------------------------------------------------------------------
  @property
  def supports_returning(self) -> bool:
    """Whether INSERT / UPDATE / DELETE can return rows (natively or emulated)."""
    return False

  @property
  def supports_upsert(self) -> bool:
    return True

  @property
  def supports_conflict_do_nothing(self) -> bool:
    """Whether 'do nothing on conflict' has a native form."""
    return True

  @property
  def supports_arrays(self) -> bool:
    """Whether Array values can be bound."""
    return False

  # ---------------------------------------------------------------------------
  # Identifiers
  # ---------------------------------------------------------------------------
  @abstractmethod
  def quote_ident(self, name: str) -> str:
    """
    Quote an identifier (schema, table, column) according to the dialect.
    """
    raise NotImplementedError

  def should_quote(self, name: str) -> bool:
    """
    Decide whether identifier must be quoted.
    Rules:
      - quote_all_identifiers set → quote
      - empty or None → quote
      - anything outside [A-Za-z0-9_] or a leading digit → quote
      - reserved keyword of this dialect (case-insensitive) → quote
    """
    if self.quote_all_identifiers:
      return True
    if not name:
      return True
    if not _PLAIN_IDENT_RE.match(name):
      return True
    return name.upper() in self.RESERVED_KEYWORDS

  def render_identifier(self, name: str) -> str:
    """
    Apply quoting only when necessary.
    """
    if self.should_quote(name):
      return self.quote_ident(name)
    return name

  def render_table_identifier(self, schema: str | None, name: str) -> str:
    """
    Render a table identifier with optional schema.

      render_table_identifier("sales", "order") -> sales."order" (quoted as needed)
      render_table_identifier(None, "customer") -> customer
    """
    name_sql = self.render_identifier(name)
    if schema:
      schema_sql = self.render_identifier(schema)
      return f"{schema_sql}.{name_sql}"
    return name_sql

  def render_table_alias(
    self,
    schema: str | None,
    name: str,
    alias: str | None,
  ) -> str:
    """
    Render a table reference including optional alias, e.g.:

      render_table_alias("sales", "customer", "c")
      -> sales.customer AS c
    """
    base = self.render_table_identifier(schema, name)
    if alias:
      return f"{base} AS {self.render_identifier(alias)}"
    return base

  def render_column_list(self, columns: Sequence[str]) -> str:
    return ", ".join(self.render_identifier(c) for c in columns)

  # ---------------------------------------------------------------------------
  # Type mapping
  # ---------------------------------------------------------------------------
  def map_logical_type(self, logical_type: str) -> str:
    """Map a canonical logical type (see types_map) to this dialect's CAST target."""
    try:
      return self.TYPE_MAP[logical_type]
    except KeyError as exc:
      raise RenderError(
        f"Unsupported logical type for {self.DIALECT_NAME}: {logical_type!r}"
      ) from exc

  def cast_expression(self, expr: str, target_type: str) -> str:
    return f"CAST({expr} AS {target_type})"

  # ---------------------------------------------------------------------------
  # Expression helpers
  # ---------------------------------------------------------------------------
  @abstractmethod
  def concat_expression(self, parts: Sequence[str]) -> str:
    """
    Build a dialect-specific concatenation expression from already-rendered
    parts (each element is a SQL expression string).
    """
    raise NotImplementedError

  @abstractmethod
  def aggregate_to_string_expression(self, expr: str) -> str:
    """Comma separated string aggregation over an already-rendered expression."""
    raise NotImplementedError

  def row_in_expression(self, node: InList, b: Binder) -> str:
    """(a, b) [NOT] IN ((?, ?), (?, ?))"""
    lhs = self.render_expr(node.expr, b)
    rows = ", ".join(self.render_expr(r, b) for r in node.items)
    keyword = "NOT IN" if node.negated else "IN"
    return f"{lhs} {keyword} ({rows})"

  def _render_operand(self, expr: Expr, b: Binder, predicate: bool = False) -> str:
    sql = self.render_predicate(expr, b) if predicate else self.render_expr(expr, b)
    if isinstance(expr, _COMPOUND_NODES):
      return f"({sql})"
    return sql

  def _render_condition(self, expr: Expr, b: Binder) -> str:
    """Operand of AND / OR: only a nested AND / OR needs parentheses."""
    sql = self.render_predicate(expr, b)
    if isinstance(expr, BoolOp):
      return f"({sql})"
    return sql

  def render_predicate(self, expr: Expr, b: Binder) -> str:
    """
    Render `expr` where a search condition is expected (WHERE, HAVING, ON,
    operands of NOT / AND / OR). Dialects without a boolean expression type
    override this for bare constants.
    """
    return self.render_expr(expr, b)

  def render_subquery(self, select, b: Binder) -> str:
    """Body of a nested query: a single SELECT or a UNION."""
    if isinstance(select, LogicalUnion):
      return self.render_union(select, b)
    if isinstance(select, LogicalSelect):
      return self.render_select(select, b)
    raise RenderError(f"Unsupported subquery type: {type(select).__name__}")

  def _negate(self, sql: str, negated: bool) -> str:
    return f"NOT ({sql})" if negated else sql

  # ---------------------------------------------------------------------------
  # JSON and full-text search (unsupported unless a dialect overrides)
  # ---------------------------------------------------------------------------
  def json_extract_expression(self, node: JsonExtract, b: Binder) -> str:
    raise UnsupportedClause(self.DIALECT_NAME, "JSON extraction")

  def json_array_contains_expression(self, node: JsonArrayContains, b: Binder) -> str:
    raise UnsupportedClause(self.DIALECT_NAME, "JSON array containment")

  def json_array_edge_expression(self, node: JsonArrayEdge, b: Binder) -> str:
    raise UnsupportedClause(self.DIALECT_NAME, f"JSON array {node.edge} element comparison")

  # Function returning the JSON type name, and the names it returns per JSON type.
  JSON_TYPE_FUNCTION: ClassVar[Optional[str]] = None
  JSON_TYPE_NAMES: ClassVar[Dict[str, Tuple[str, ...]]] = {}

  def json_type_equals_expression(self, node: JsonTypeEquals, b: Binder) -> str:
    if not self.JSON_TYPE_FUNCTION:
      raise UnsupportedClause(self.DIALECT_NAME, "JSON type comparison")
    func_sql = f"{self.JSON_TYPE_FUNCTION}({self.render_expr(node.expr, b)})"
    names = self.JSON_TYPE_NAMES[node.json_type]
    if len(names) == 1:
      return f"{func_sql} = {b.bind(names[0])}"
    return f"{func_sql} IN ({', '.join(b.bind(n) for n in names)})"

  def text_search_expression(self, node: TextSearch, b: Binder) -> str:
    raise UnsupportedClause(self.DIALECT_NAME, "full-text search")

  def matches_expression(self, node: Matches, b: Binder) -> str:
    raise UnsupportedClause(self.DIALECT_NAME, "full-text search")

  def row_to_json_expression(self, node: RowToJson, b: Binder) -> str:
    raise UnsupportedClause(self.DIALECT_NAME, "ROW_TO_JSON")

  # ---------------------------------------------------------------------------
  # Expression rendering
  # ---------------------------------------------------------------------------
  def render_expr(self, expr: Expr, b: Binder) -> str:
    if isinstance(expr, ColumnRef):
      if expr.table_alias:
        return f"{self.render_identifier(expr.table_alias)}.{self.render_identifier(expr.column_name)}"
      return self.render_identifier(expr.column_name)

    if isinstance(expr, Star):
      if expr.table_alias:
        return f"{self.render_identifier(expr.table_alias)}.*"
      return "*"

    if isinstance(expr, Literal):
      return b.bind(expr.value)

    if isinstance(expr, BoolConst):
      return self.TRUE_LITERAL if expr.value else self.FALSE_LITERAL

    if isinstance(expr, Not):
      return f"NOT {self._render_operand(expr.expr, b, predicate=True)}"

    if isinstance(expr, IsNull):
      inner = self._render_operand(expr.expr, b)
      return f"{inner} IS NOT NULL" if expr.negated else f"{inner} IS NULL"

    if isinstance(expr, BinaryOp):
      left = self._render_operand(expr.left, b)
      right = self._render_operand(expr.right, b)
      return f"{left} {expr.op} {right}"

    if isinstance(expr, BoolOp):
      return f" {expr.op} ".join(self._render_condition(o, b) for o in expr.operands)

    if isinstance(expr, InList):
      if not expr.items:
        return "1=1" if expr.negated else "1=0"
      if expr.is_row_value:
        return self.row_in_expression(expr, b)
      lhs = self._render_operand(expr.expr, b)
      items = ", ".join(self.render_expr(i, b) for i in expr.items)
      keyword = "NOT IN" if expr.negated else "IN"
      return f"{lhs} {keyword} ({items})"

    if isinstance(expr, InSubquery):
      lhs = self._render_operand(expr.expr, b)
      keyword = "NOT IN" if expr.negated else "IN"
      return f"{lhs} {keyword} ({self.render_subquery(expr.select, b)})"

    if isinstance(expr, Between):
      inner = self._render_operand(expr.expr, b)
      low = self._render_operand(expr.low, b)
      high = self._render_operand(expr.high, b)
      keyword = "NOT BETWEEN" if expr.negated else "BETWEEN"
      return f"{inner} {keyword} {low} AND {high}"

    if isinstance(expr, Exists):
      keyword = "NOT EXISTS" if expr.negated else "EXISTS"
      return f"{keyword} ({self.render_subquery(expr.select, b)})"

    if isinstance(expr, Subquery):
      return f"({self.render_subquery(expr.select, b)})"

    if isinstance(expr, Row):
      return "(" + ", ".join(self.render_expr(i, b) for i in expr.items) + ")"

    if isinstance(expr, FuncCall):
      args_sql = ", ".join(self.render_expr(a, b) for a in expr.args)
      if expr.distinct:
        args_sql = f"DISTINCT {args_sql}"
      return f"{expr.name.upper()}({args_sql})"

    if isinstance(expr, Cast):
      inner = self.render_expr(expr.expr, b)
      return self.cast_expression(inner, self.map_logical_type(expr.target_type))

    if isinstance(expr, Coalesce):
      args_sql = ", ".join(self.render_expr(p, b) for p in expr.parts)
      return f"COALESCE({args_sql})"

    if isinstance(expr, Concat):
      return self.concat_expression([self.render_expr(p, b) for p in expr.parts])

    if isinstance(expr, AggregateToString):
      return self.aggregate_to_string_expression(self.render_expr(expr.expr, b))

    if isinstance(expr, WindowFunction):
      args_sql = ", ".join(self.render_expr(a, b) for a in expr.args)
      func_sql = f"{expr.name.upper()}({args_sql})"

      win = expr.window or WindowSpec()
      parts: List[str] = []
      if win.partition_by:
        part_sql = ", ".join(self.render_expr(e, b) for e in win.partition_by)
        parts.append(f"PARTITION BY {part_sql}")
      if win.order_by:
        order_sql = ", ".join(self.render_expr(e, b) for e in win.order_by)
        parts.append(f"ORDER BY {order_sql}")

      return f"{func_sql} OVER ({' '.join(parts)})"

    if isinstance(expr, OrderByExpr):
      return f"{self.render_expr(expr.expr, b)} {expr.direction}"

    if isinstance(expr, JsonExtract):
      return self.json_extract_expression(expr, b)

    if isinstance(expr, JsonArrayContains):
      return self.json_array_contains_expression(expr, b)

    if isinstance(expr, JsonArrayEdge):
      return self.json_array_edge_expression(expr, b)

    if isinstance(expr, JsonTypeEquals):
      return self.json_type_equals_expression(expr, b)

    if isinstance(expr, TextSearch):
      return self.text_search_expression(expr, b)

    if isinstance(expr, Matches):
      return self.matches_expression(expr, b)

    if isinstance(expr, RowToJson):
      return self.row_to_json_expression(expr, b)

    if isinstance(expr, Excluded):
      raise RenderError(
        f"excluded({expr.column_name!r}) is only valid inside an upsert update"
      )

    if isinstance(expr, RawSql):
      sql = expr.sql

      # 1) replace {alias} if exists – works for template and plain sql
      if expr.default_table_alias:
        sql = sql.replace("{alias}", expr.default_table_alias)

      # 2) Template mode: {expr:<name>} via expr_bindings, rendered in textual order
      if expr.is_template:
        def repl_expr(match: re.Match) -> str:
          key = match.group(1)
          bound = expr.binding(key)
          if bound is None:
            raise RenderError(
              f"Missing expr_binding for {key} in RawSql template: {expr.sql}"
            )
          return self.render_expr(bound, b)

        sql = _TEMPLATE_EXPR_RE.sub(repl_expr, sql)

      return sql

    raise RenderError(
      f"Unsupported expression type for {self.__class__.__name__}: {type(expr).__name__}"
    )

  # ---------------------------------------------------------------------------
  # SELECT rendering
  # ---------------------------------------------------------------------------
  def _render_from_item(self, item: SourceTable | SubquerySource, b: Binder) -> str:
    """
    Render either a base table or a subquery in FROM/JOIN.
    """
    if isinstance(item, SourceTable):
      return self.render_table_alias(item.schema, item.name, item.alias)

    if isinstance(item, SubquerySource):
      inner_sql = self.render_subquery(item.select, b)
      return f"({inner_sql}) AS {self.render_identifier(item.alias)}"

    raise RenderError(f"Unsupported FROM item: {type(item).__name__}")

  def render_join_type(self, join: Join) -> str:
    return f"{join.join_type.upper()} JOIN"

  def _render_join(self, join: Join, b: Binder) -> str:
    keyword = self.render_join_type(join)
    right_sql = self._render_from_item(join.right, b)
    if join.on is None:
      return f"{keyword} {right_sql}"
    return f"{keyword} {right_sql} ON {self.render_predicate(join.on, b)}"

  def _render_select_list(self, items: Sequence[SelectItem], b: Binder) -> str:
    rendered_items = []
    for item in items:
      expr_sql = self.render_expr(item.expr, b)
      if item.alias:
        rendered_items.append(f"{expr_sql} AS {self.render_identifier(item.alias)}")
      else:
        rendered_items.append(expr_sql)
    return ", ".join(rendered_items) if rendered_items else "*"

  def render_order_by(self, select: LogicalSelect, b: Binder) -> Optional[str]:
    if not select.order_by:
      return None
    return "ORDER BY " + ", ".join(self.render_expr(o, b) for o in select.order_by)

  # Limit used when only an OFFSET is given; None renders OFFSET alone.
  OFFSET_ONLY_LIMIT: ClassVar[Optional[str]] = None

  def render_pagination(self, select: LogicalSelect) -> Optional[str]:
    """LIMIT / OFFSET, rendered inline as integers (never bound)."""
    if select.limit is None and select.offset is None:
      return None
    parts: List[str] = []
    if select.limit is not None:
      parts.append(f"LIMIT {int(select.limit)}")
    elif self.OFFSET_ONLY_LIMIT is not None:
      parts.append(f"LIMIT {self.OFFSET_ONLY_LIMIT}")
    if select.offset is not None:
      parts.append(f"OFFSET {int(select.offset)}")
    return " ".join(parts)

  def render_order_and_pagination(self, select: LogicalSelect, b: Binder) -> List[str]:
    parts = []
    order_sql = self.render_order_by(select, b)
    if order_sql:
      parts.append(order_sql)
    page_sql = self.render_pagination(select)
    if page_sql:
      parts.append(page_sql)
    return parts

  def render_select(self, select: LogicalSelect, b: Binder) -> str:
    """
    Render a LogicalSelect. Clause order (and therefore binding order):
    projection, source and joins, WHERE, GROUP BY, HAVING, ORDER BY, pagination.
    """
    parts: List[str] = []

    select_kw = "SELECT DISTINCT" if select.distinct else "SELECT"
    parts.append(select_kw)
    parts.append(self._render_select_list(select.select_list, b))

    if select.from_ is not None:
      parts.append("FROM")
      parts.append(self._render_from_item(select.from_, b))

    for j in select.joins:
      parts.append(self._render_join(j, b))

    if select.where is not None:
      parts.append("WHERE")
      parts.append(self.render_predicate(select.where, b))

    if select.group_by:
      parts.append("GROUP BY")
      parts.append(", ".join(self.render_expr(e, b) for e in select.group_by))

    if select.having is not None:
      parts.append("HAVING")
      parts.append(self.render_predicate(select.having, b))

    parts.extend(self.render_order_and_pagination(select, b))

    return " ".join(parts)

  def render_union(self, union: LogicalUnion, b: Binder) -> str:
    separator = " UNION ALL " if union.union_type == "ALL" else " UNION "
    return separator.join(self.render_select(s, b) for s in union.selects)

  # ---------------------------------------------------------------------------
  # DML rendering
  # ---------------------------------------------------------------------------
  def _render_target(self, target: SourceTable) -> str:
    # DML targets are rendered without alias; columns stay unqualified.
    return self.render_table_identifier(target.schema, target.name)

  def render_returning(self, items: Sequence[SelectItem], b: Binder) -> Optional[str]:
    if not items:
      return None
    if not self.supports_returning:
      raise UnsupportedClause(self.DIALECT_NAME, "RETURNING")
    return "RETURNING " + self._render_select_list(items, b)

  def _render_values_rows(self, insert: LogicalInsert, b: Binder) -> str:
    rows = []
    for row in insert.rows:
      rows.append("(" + ", ".join(self.render_expr(v, b) for v in row) + ")")
    return "VALUES " + ", ".join(rows)

  def render_insert_source(self, insert: LogicalInsert, b: Binder) -> str:
    if insert.source is not None:
      return self.render_select(insert.source, b)
    return self._render_values_rows(insert, b)

  def render_insert(self, insert: LogicalInsert, b: Binder) -> str:
    parts: List[str] = [
      f"INSERT INTO {self._render_target(insert.table)} ({self.render_column_list(insert.columns)})",
      self.render_insert_source(insert, b),
    ]
    if insert.on_conflict is not None:
      parts.append(self.render_on_conflict(insert, insert.on_conflict, b))
    returning_sql = self.render_returning(insert.returning, b)
    if returning_sql:
      parts.append(returning_sql)
    return " ".join(parts)

  def render_assignments(self, assignments, b: Binder, rewrite=None) -> str:
    rendered = []
    for a in assignments:
      value = transform(a.value, rewrite) if rewrite else a.value
      rendered.append(f"{self.render_identifier(a.column)} = {self.render_expr(value, b)}")
    return ", ".join(rendered)

  def render_update(self, update: LogicalUpdate, b: Binder) -> str:
    parts: List[str] = [
      f"UPDATE {self._render_target(update.table)}",
      "SET " + self.render_assignments(update.assignments, b),
    ]
    if update.where is not None:
      parts.append("WHERE " + self.render_predicate(update.where, b))
    returning_sql = self.render_returning(update.returning, b)
    if returning_sql:
      parts.append(returning_sql)
    return " ".join(parts)

  def render_delete(self, delete: LogicalDelete, b: Binder) -> str:
    parts: List[str] = [f"DELETE FROM {self._render_target(delete.table)}"]
    if delete.where is not None:
      parts.append("WHERE " + self.render_predicate(delete.where, b))
    returning_sql = self.render_returning(delete.returning, b)
    if returning_sql:
      parts.append(returning_sql)
    return " ".join(parts)

  # ---------------------------------------------------------------------------
  # Upsert
  # ---------------------------------------------------------------------------
  EXCLUDED_ALIAS: ClassVar[str] = "excluded"

  def _rewrite_excluded(self, node: Expr) -> Expr:
    if isinstance(node, Excluded):
      return ColumnRef(self.EXCLUDED_ALIAS, node.column_name)
    return node

  def render_on_conflict(self, insert: LogicalInsert, conflict: OnConflict, b: Binder) -> str:
    """
    INSERT ... ON CONFLICT (target) DO NOTHING | DO UPDATE SET ... [WHERE ...]
    """
    parts = ["ON CONFLICT"]
    if conflict.target_columns:
      parts.append(f"({self.render_column_list(conflict.target_columns)})")

    if conflict.action == "nothing":
      parts.append("DO NOTHING")
      return " ".join(parts)

    parts.append("DO UPDATE SET")
    parts.append(self.render_assignments(conflict.assignments, b, self._rewrite_excluded))
    if conflict.where is not None:
      where = transform(conflict.where, self._rewrite_excluded)
      parts.append("WHERE " + self.render_predicate(where, b))
    return " ".join(parts)

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

from typing import Any, Iterable, Optional

from ..errors import MalformedStatement
from ..values import Json, Value
from .expr import (
  Expr,
  AggregateToString,
  Between,
  BinaryOp,
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
  as_expr,
  row_number_over as _row_number_over,
)
from .logical_plan import LogicalSelect, LogicalUnion

"""
Expression DSL.

Small, pure functions that build Expr trees. Every function returns a new
node; inputs are never modified. Native Python operands (int, str, date, ...)
are folded into bound Literal nodes.
"""


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------

def col(name: str, table: Optional[str] = None) -> ColumnRef:
  """
  Convenience helper for a column reference, optionally qualified with a table alias.

  Example:
      col("customer_id")          -> ColumnRef(None, "customer_id")
      col("customer_id", "s")     -> ColumnRef("s", "customer_id")
  """
  return ColumnRef(table_alias=table, column_name=name)


def star(table: Optional[str] = None) -> Star:
  return Star(table_alias=table)


def lit(value: Any) -> Literal:
  """Create a bound literal expression."""
  return Literal(value)


def raw(sql: str, **bindings: Any) -> RawSql:
  """
  Convenience helper for a raw SQL fragment.

  Use sparingly: raw SQL bypasses dialect rendering and is never sanitized.
  Keyword arguments become {expr:name} bindings; native values passed this
  way are still bound as parameters:

      raw("price * {expr:factor}", factor=1.2)
  """
  return RawSql(sql=sql, is_template=bool(bindings), expr_bindings=tuple(bindings.items()))


def excluded(column: str) -> Excluded:
  """The incoming value of `column` inside an upsert update."""
  return Excluded(column_name=column)


# ---------------------------------------------------------------------------
# Boolean logic
# ---------------------------------------------------------------------------

def _flatten(op: str, operands: Iterable[Any]) -> tuple:
  flat = []
  for o in operands:
    e = as_expr(o)
    if isinstance(e, BoolOp) and e.op == op:
      flat.extend(e.operands)
    else:
      flat.append(e)
  return tuple(flat)


def and_(*operands: Any) -> Expr:
  """Conjunction; nested ANDs are flattened and a single operand is returned as is."""
  flat = _flatten("AND", operands)
  if not flat:
    raise MalformedStatement("and_() needs at least one operand")
  return flat[0] if len(flat) == 1 else BoolOp("AND", flat)


def or_(*operands: Any) -> Expr:
  """Disjunction; nested ORs are flattened and a single operand is returned as is."""
  flat = _flatten("OR", operands)
  if not flat:
    raise MalformedStatement("or_() needs at least one operand")
  return flat[0] if len(flat) == 1 else BoolOp("OR", flat)


def not_(expr: Expr) -> Not:
  return Not(as_expr(expr))


# ---------------------------------------------------------------------------
# Comparisons
# ---------------------------------------------------------------------------

def _cmp(op: str, left: Any, right: Any) -> BinaryOp:
  return BinaryOp(op, as_expr(left), as_expr(right))


def eq(left: Any, right: Any) -> BinaryOp:
  return _cmp("=", left, right)


def ne(left: Any, right: Any) -> BinaryOp:
  return _cmp("<>", left, right)


def lt(left: Any, right: Any) -> BinaryOp:
  return _cmp("<", left, right)


def le(left: Any, right: Any) -> BinaryOp:
  return _cmp("<=", left, right)


def gt(left: Any, right: Any) -> BinaryOp:
  return _cmp(">", left, right)


def ge(left: Any, right: Any) -> BinaryOp:
  return _cmp(">=", left, right)


def in_list(expr: Any, items: Iterable[Any]) -> InList:
  """expr IN (...). Tuples inside `items` become row values for a Row on the left."""
  return InList(as_expr(expr), tuple(_in_item(i) for i in items))


def not_in_list(expr: Any, items: Iterable[Any]) -> InList:
  return InList(as_expr(expr), tuple(_in_item(i) for i in items), negated=True)


def _in_item(item: Any) -> Expr:
  if isinstance(item, tuple):
    return row(*item)
  return as_expr(item)


def in_subquery(expr: Any, select: LogicalSelect | LogicalUnion, negated: bool = False) -> InSubquery:
  return InSubquery(as_expr(expr), select, negated=negated)


def between(expr: Any, low: Any, high: Any, negated: bool = False) -> Between:
  return Between(as_expr(expr), as_expr(low), as_expr(high), negated=negated)


def like(expr: Any, pattern: Any) -> BinaryOp:
  return _cmp("LIKE", expr, pattern)


def not_like(expr: Any, pattern: Any) -> BinaryOp:
  return _cmp("NOT LIKE", expr, pattern)


def starts_with(expr: Any, prefix: str) -> BinaryOp:
  """LIKE 'prefix%'; the pattern is bound as a parameter."""
  return like(expr, f"{prefix}%")


def ends_with(expr: Any, suffix: str) -> BinaryOp:
  return like(expr, f"%{suffix}")


def contains(expr: Any, fragment: str) -> BinaryOp:
  return like(expr, f"%{fragment}%")


def is_null(expr: Any) -> IsNull:
  return IsNull(as_expr(expr))


def is_not_null(expr: Any) -> IsNull:
  return IsNull(as_expr(expr), negated=True)


def exists(select: LogicalSelect | LogicalUnion) -> Exists:
  return Exists(select)


def not_exists(select: LogicalSelect | LogicalUnion) -> Exists:
  return Exists(select, negated=True)


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------

def call(name: str, *args: Any, distinct: bool = False) -> FuncCall:
  """Generic function call; the name is validated, the arguments are rendered per dialect."""
  return FuncCall(name=name, args=tuple(as_expr(a) for a in args), distinct=distinct)


def cast(expr: Any, target_type: str) -> Cast:
  """Vendor-neutral CAST; target_type is a logical type ("string", "int", ...)."""
  return Cast(expr=as_expr(expr), target_type=target_type)


def coalesce(*parts: Any) -> Coalesce:
  return Coalesce(parts=tuple(as_expr(p) for p in parts))


def concat(*parts: Any) -> Concat:
  """Vendor-neutral concatenation of multiple parts."""
  return Concat(parts=tuple(as_expr(p) for p in parts))


def count(expr: Any = None, distinct: bool = False) -> FuncCall:
  """COUNT(*) when called without an argument."""
  if expr is None:
    return FuncCall("COUNT", (Star(),))
  return call("COUNT", expr, distinct=distinct)


def sum_(expr: Any, distinct: bool = False) -> FuncCall:
  return call("SUM", expr, distinct=distinct)


def avg(expr: Any, distinct: bool = False) -> FuncCall:
  return call("AVG", expr, distinct=distinct)


def min_(expr: Any) -> FuncCall:
  return call("MIN", expr)


def max_(expr: Any) -> FuncCall:
  return call("MAX", expr)


def lower(expr: Any) -> FuncCall:
  return call("LOWER", expr)


def upper(expr: Any) -> FuncCall:
  return call("UPPER", expr)


def aggregate_to_string(expr: Any) -> AggregateToString:
  """Comma separated string aggregation (GROUP_CONCAT / STRING_AGG)."""
  return AggregateToString(as_expr(expr))


def row_number_over(
  partition_by: Optional[Iterable[Expr]] = None,
  order_by: Optional[Iterable[Expr]] = None,
) -> Expr:
  """Wrapper to create a ROW_NUMBER() OVER (...) expression."""
  return _row_number_over(
    partition_by=list(partition_by or []),
    order_by=[_order_item(o) for o in (order_by or [])],
  )


# ---------------------------------------------------------------------------
# Ordering, subqueries, rows
# ---------------------------------------------------------------------------

def _order_item(item: Any) -> OrderByExpr:
  if isinstance(item, OrderByExpr):
    return item
  return OrderByExpr(as_expr(item))


def asc(expr: Any) -> OrderByExpr:
  return OrderByExpr(as_expr(expr), "ASC")


def desc(expr: Any) -> OrderByExpr:
  return OrderByExpr(as_expr(expr), "DESC")


def subquery(select: LogicalSelect | LogicalUnion) -> Subquery:
  return Subquery(select)


def row(*items: Any) -> Row:
  return Row(tuple(as_expr(i) for i in items))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _json_operand(value: Any) -> Expr:
  # Plain Python operands are compared as JSON documents, not as text.
  if isinstance(value, Expr):
    return value
  if isinstance(value, Value):
    return Literal(value)
  return Literal(Json.from_data(value))


def json_extract(expr: Any, path: Any, as_text: bool = False) -> JsonExtract:
  """
  Extract part of a JSON document.

      json_extract(col("doc"), "$.a.b")          # path string
      json_extract(col("doc"), ["a", "b"])       # key sequence
  """
  if not isinstance(path, str):
    path = tuple(path)
  return JsonExtract(as_expr(expr), path, as_text=as_text)


def json_array_contains(expr: Any, value: Any) -> JsonArrayContains:
  return JsonArrayContains(as_expr(expr), _json_operand(value))


def json_array_not_contains(expr: Any, value: Any) -> JsonArrayContains:
  return JsonArrayContains(as_expr(expr), _json_operand(value), negated=True)


def json_array_begins_with(expr: Any, value: Any, negated: bool = False) -> JsonArrayEdge:
  return JsonArrayEdge(as_expr(expr), _json_operand(value), "first", negated=negated)


def json_array_ends_with(expr: Any, value: Any, negated: bool = False) -> JsonArrayEdge:
  return JsonArrayEdge(as_expr(expr), _json_operand(value), "last", negated=negated)


def json_type_equals(expr: Any, json_type: str) -> JsonTypeEquals:
  """json_type is one of array, boolean, number, object, string, null."""
  return JsonTypeEquals(as_expr(expr), json_type)


def row_to_json(table_alias: str, pretty: bool = False) -> RowToJson:
  return RowToJson(table_alias, pretty=pretty)


# ---------------------------------------------------------------------------
# Full-text search
# ---------------------------------------------------------------------------

def text_search(*columns: Any) -> TextSearch:
  """Columns to search; strings are column names."""
  return TextSearch(tuple(col(c) if isinstance(c, str) else as_expr(c) for c in columns))


def _search_operand(search: Any) -> Expr:
  if isinstance(search, str):
    return text_search(search)
  return as_expr(search)


def matches(search: Any, query: Any) -> Matches:
  """Full-text match; a plain string for `search` names a single column."""
  return Matches(_search_operand(search), as_expr(query))


def not_matches(search: Any, query: Any) -> Matches:
  return Matches(_search_operand(search), as_expr(query), negated=True)

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

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Union

from ..errors import MalformedStatement
from ..types_map import canonicalize
from ..values import Value, to_value


COMPARISON_OPS = frozenset({"=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE"})
ARITHMETIC_OPS = frozenset({"+", "-", "*", "/", "%"})
BOOL_OPS = frozenset({"AND", "OR"})

_FUNC_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


def _freeze(obj, *names: str) -> None:
  # Frozen nodes keep their child sequences as tuples.
  for name in names:
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


class Expr:
  """Marker base class for all logical SQL expression nodes."""
  pass


def as_expr(value: Any) -> Expr:
  """Return `value` if it already is an Expr, otherwise fold it into a bound Literal."""
  if isinstance(value, Expr):
    return value
  return Literal(value)


@dataclass(frozen=True)
class ColumnRef(Expr):
  """Reference to a column, optionally qualified by a table alias."""
  table_alias: Optional[str]
  column_name: str


@dataclass(frozen=True)
class Star(Expr):
  """`*` or `alias.*` in a projection."""
  table_alias: Optional[str] = None


@dataclass(frozen=True)
class Literal(Expr):
  """
  A value operand. Always rendered as a bind parameter, never inlined.
  Native Python values are converted with to_value() on construction.
  """
  value: Value

  def __post_init__(self):
    object.__setattr__(self, "value", to_value(self.value))


@dataclass(frozen=True)
class BoolConst(Expr):
  """TRUE / FALSE keyword (dialects without a boolean type render 1 / 0)."""
  value: bool


@dataclass(frozen=True)
class Not(Expr):
  expr: Expr


@dataclass(frozen=True)
class IsNull(Expr):
  expr: Expr
  negated: bool = False


@dataclass(frozen=True)
class BinaryOp(Expr):
  """Comparison or arithmetic between exactly two operands."""
  op: str
  left: Expr
  right: Expr

  def __post_init__(self):
    op = self.op.upper()
    if op not in COMPARISON_OPS and op not in ARITHMETIC_OPS:
      raise MalformedStatement(f"Unknown binary operator: {self.op!r}")
    object.__setattr__(self, "op", op)


@dataclass(frozen=True)
class BoolOp(Expr):
  """N-ary AND / OR. Operand order is preserved in the rendered SQL."""
  op: str
  operands: Tuple[Expr, ...]

  def __post_init__(self):
    op = self.op.upper()
    if op not in BOOL_OPS:
      raise MalformedStatement(f"Unknown boolean operator: {self.op!r}")
    object.__setattr__(self, "op", op)
    _freeze(self, "operands")
    if not self.operands:
      raise MalformedStatement(f"{op} needs at least one operand")


@dataclass(frozen=True)
class InList(Expr):
  """
  expr [NOT] IN (item, ...). An empty list renders as a constant predicate
  (1=0 for IN, 1=1 for NOT IN).
  """
  expr: Expr
  items: Tuple[Expr, ...]
  negated: bool = False

  def __post_init__(self):
    _freeze(self, "items")
    if isinstance(self.expr, Row):
      width = len(self.expr.items)
      for item in self.items:
        if not isinstance(item, Row) or len(item.items) != width:
          raise MalformedStatement(f"Row value IN expects rows of {width} items")
    elif any(isinstance(item, Row) for item in self.items):
      raise MalformedStatement("Row values in an IN list need a row on the left side")

  @property
  def is_row_value(self) -> bool:
    return isinstance(self.expr, Row)


@dataclass(frozen=True)
class InSubquery(Expr):
  expr: Expr
  select: "LogicalSelect | LogicalUnion"
  negated: bool = False


@dataclass(frozen=True)
class Between(Expr):
  expr: Expr
  low: Expr
  high: Expr
  negated: bool = False


@dataclass(frozen=True)
class Exists(Expr):
  select: "LogicalSelect | LogicalUnion"
  negated: bool = False


@dataclass(frozen=True)
class Subquery(Expr):
  """Scalar subquery used as an expression, rendered in parentheses."""
  select: "LogicalSelect | LogicalUnion"


@dataclass(frozen=True)
class Row(Expr):
  """Row value `(a, b, ...)`, e.g. the left side of a tuple IN comparison."""
  items: Tuple[Expr, ...]

  def __post_init__(self):
    _freeze(self, "items")
    if not self.items:
      raise MalformedStatement("A row value needs at least one item")


@dataclass(frozen=True)
class FuncCall(Expr):
  """Generic function call expression, e.g. UPPER(col), COUNT(DISTINCT x)."""
  name: str
  args: Tuple[Expr, ...] = ()
  distinct: bool = False

  def __post_init__(self):
    if not _FUNC_NAME_RE.match(self.name or ""):
      raise MalformedStatement(f"Invalid function name: {self.name!r}")
    _freeze(self, "args")


@dataclass(frozen=True)
class Cast(Expr):
  """Vendor-neutral CAST(expr AS target type)."""
  expr: Expr
  target_type: str

  def __post_init__(self):
    canonical = canonicalize(self.target_type)
    if canonical is None:
      raise MalformedStatement(f"Unsupported logical type for CAST: {self.target_type!r}")
    object.__setattr__(self, "target_type", canonical)


@dataclass(frozen=True)
class Coalesce(Expr):
  """Vendor-neutral representation for COALESCE(a, b, ...)."""
  parts: Tuple[Expr, ...]

  def __post_init__(self):
    _freeze(self, "parts")


@dataclass(frozen=True)
class Concat(Expr):
  """Vendor-neutral representation for string concatenation of multiple parts."""
  parts: Tuple[Expr, ...]

  def __post_init__(self):
    _freeze(self, "parts")


@dataclass(frozen=True)
class AggregateToString(Expr):
  """
  Aggregate the values of `expr` into one comma separated string.
  GROUP_CONCAT on SQLite / MySQL, STRING_AGG on PostgreSQL / MSSQL.
  """
  expr: Expr


@dataclass(frozen=True)
class OrderByExpr(Expr):
  """
  An ORDER BY item, used by statements and inside window specifications.
  """
  expr: Expr
  direction: str = "ASC"  # "ASC" | "DESC"

  def __post_init__(self):
    direction = (self.direction or "ASC").upper()
    if direction not in ("ASC", "DESC"):
      raise MalformedStatement(f"Invalid sort direction: {self.direction!r}")
    object.__setattr__(self, "direction", direction)


@dataclass(frozen=True)
class WindowSpec(Expr):
  """Logical window specification for window functions."""
  partition_by: Tuple[Expr, ...] = ()
  order_by: Tuple[Expr, ...] = ()

  def __post_init__(self):
    _freeze(self, "partition_by", "order_by")


@dataclass(frozen=True)
class WindowFunction(Expr):
  """
  Generic window function expression, e.g.:

    ROW_NUMBER() OVER (PARTITION BY ... ORDER BY ...)
    SUM(amount) OVER (...)
  """
  name: str
  args: Tuple[Expr, ...] = ()
  window: WindowSpec = field(default_factory=WindowSpec)

  def __post_init__(self):
    if not _FUNC_NAME_RE.match(self.name or ""):
      raise MalformedStatement(f"Invalid window function name: {self.name!r}")
    _freeze(self, "args")


JSON_TYPES = frozenset({"array", "boolean", "number", "object", "string", "null"})
ARRAY_EDGES = frozenset({"first", "last"})

_JSON_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_JSON_INDEX_RE = re.compile(r"^[0-9]+$")


def json_path_string(path: Union[str, Tuple[str, ...]]) -> str:
  """
  JSON path string for a path given as a key sequence:

    ("a", "0", "odd key") -> $.a[0]."odd key"

  Path strings are returned unchanged.
  """
  if isinstance(path, str):
    return path
  parts = ["$"]
  for key in path:
    if _JSON_INDEX_RE.match(key):
      parts.append(f"[{key}]")
    elif _JSON_KEY_RE.match(key):
      parts.append(f".{key}")
    else:
      escaped = key.replace("\\", "\\\\").replace('"', '\\"')
      parts.append(f'."{escaped}"')
  return "".join(parts)


@dataclass(frozen=True)
class JsonExtract(Expr):
  """
  Part of a JSON document addressed by `path`, either a JSON path string
  ("$.a.b") or a sequence of keys (("a", "b")). With as_text the result is
  unquoted text instead of JSON.
  """
  expr: Expr
  path: Union[str, Tuple[str, ...]]
  as_text: bool = False

  def __post_init__(self):
    if isinstance(self.path, str):
      if not self.path.startswith("$"):
        raise MalformedStatement(f"JSON path must start with '$': {self.path!r}")
      return
    path = tuple(self.path)
    if not path or not all(isinstance(k, str) for k in path):
      raise MalformedStatement("JSON key path needs at least one string key")
    object.__setattr__(self, "path", path)


@dataclass(frozen=True)
class JsonArrayContains(Expr):
  """The JSON array `expr` contains every element of the JSON `value`."""
  expr: Expr
  value: Expr
  negated: bool = False


@dataclass(frozen=True)
class JsonArrayEdge(Expr):
  """The first or last element of the JSON array `expr` equals `value`."""
  expr: Expr
  value: Expr
  edge: str = "first"
  negated: bool = False

  def __post_init__(self):
    if self.edge not in ARRAY_EDGES:
      raise MalformedStatement(f"Unknown array edge: {self.edge!r}")


@dataclass(frozen=True)
class JsonTypeEquals(Expr):
  """The JSON value `expr` is of the given JSON type."""
  expr: Expr
  json_type: str

  def __post_init__(self):
    json_type = (self.json_type or "").lower()
    if json_type not in JSON_TYPES:
      raise MalformedStatement(f"Unknown JSON type: {self.json_type!r}")
    object.__setattr__(self, "json_type", json_type)


@dataclass(frozen=True)
class TextSearch(Expr):
  """The columns a full-text search runs over."""
  columns: Tuple[Expr, ...]

  def __post_init__(self):
    _freeze(self, "columns")
    if not self.columns:
      raise MalformedStatement("Full-text search needs at least one column")


@dataclass(frozen=True)
class Matches(Expr):
  """Full-text match of `search` (usually a TextSearch) against `query`."""
  search: Expr
  query: Expr
  negated: bool = False


@dataclass(frozen=True)
class RowToJson(Expr):
  """The row of the table (or alias) `table_alias` as one JSON object."""
  table_alias: str
  pretty: bool = False


@dataclass(frozen=True)
class Excluded(Expr):
  """
  The incoming value of a column inside an upsert's update assignments
  (EXCLUDED.col, VALUES(col) or the MERGE source alias, depending on dialect).
  """
  column_name: str


@dataclass(frozen=True)
class RawSql(Expr):
  """
  Raw SQL fragment, injected verbatim. The caller is responsible for its
  safety; querykit never inspects or escapes it.

  Two modes:
  - is_template = True:
      `sql` may contain placeholders like {alias} or {expr:name}.
      {expr:name} is replaced by the rendered expression bound under `name`,
      so values inside bound expressions still become parameters.
  - is_template = False:
      `sql` is rendered verbatim (apart from optional {alias} replacement).
  """
  sql: str
  default_table_alias: Optional[str] = None
  is_template: bool = False
  expr_bindings: Tuple[Tuple[str, Expr], ...] = ()

  def __post_init__(self):
    bindings = self.expr_bindings
    if isinstance(bindings, dict):
      bindings = bindings.items()
    object.__setattr__(self, "expr_bindings", tuple((k, as_expr(v)) for k, v in bindings))

  def binding(self, name: str) -> Optional[Expr]:
    for key, bound in self.expr_bindings:
      if key == name:
        return bound
    return None


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def _map_child(child, fn):
  if isinstance(child, Expr):
    return transform(child, fn)
  if isinstance(child, tuple):
    return tuple(_map_child(c, fn) for c in child)
  return child


def transform(expr: Expr, fn: Callable[[Expr], Expr]) -> Expr:
  """
  Rebuild `expr` bottom-up, applying `fn` to every node.

  Pure: the input tree is never modified. Subqueries are a separate scope
  and are not descended into.
  """
  changes = {}
  for f in dataclasses.fields(expr):
    current = getattr(expr, f.name)
    mapped = _map_child(current, fn)
    if mapped is not current:
      changes[f.name] = mapped
  node = dataclasses.replace(expr, **changes) if changes else expr
  return fn(node)


# ---------------------------------------------------------------------------
# Convenience constructors
# ---------------------------------------------------------------------------

def row_number_over(
  partition_by: list[Expr] | None = None,
  order_by: list[Expr] | None = None,
) -> WindowFunction:
  """
  Convenience helper for ROW_NUMBER() window expressions.
  """
  return WindowFunction(
    name="ROW_NUMBER",
    args=(),
    window=WindowSpec(
      partition_by=tuple(partition_by or ()),
      order_by=tuple(order_by or ()),
    ),
  )

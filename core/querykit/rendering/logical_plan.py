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

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..errors import MalformedStatement
from .expr import Expr, OrderByExpr, Star, as_expr

"""
Vendor-neutral statement records.

All records are frozen and keep child sequences as tuples, so a statement can
be shared and rendered any number of times. Structural invariants are checked
in __post_init__ and raise MalformedStatement.
"""

JOIN_TYPES = ("inner", "left", "right", "full", "cross")
UNION_TYPES = ("ALL", "DISTINCT")
CONFLICT_ACTIONS = ("nothing", "update")


def _check_count(value, what: str) -> None:
  if value is None:
    return
  if isinstance(value, bool) or not isinstance(value, int):
    raise MalformedStatement(f"{what} must be an integer, got {value!r}")
  if value < 0:
    raise MalformedStatement(f"{what} must not be negative, got {value}")


def _check_unique(names, what: str) -> None:
  seen = set()
  for name in names:
    if name in seen:
      raise MalformedStatement(f"Duplicate column {name!r} in {what}")
    seen.add(name)


def _as_select_item(item) -> "SelectItem":
  if isinstance(item, SelectItem):
    return item
  return SelectItem(expr=as_expr(item))


def _as_order_item(item) -> OrderByExpr:
  if isinstance(item, OrderByExpr):
    return item
  if not isinstance(item, Expr):
    raise MalformedStatement(f"ORDER BY expects expressions, got {type(item).__name__}")
  return OrderByExpr(expr=item)


@dataclass(frozen=True)
class SourceTable:
  """
  Logical representation of a table in a FROM / JOIN clause or as DML target.

  primary_key is optional metadata; dialects that need an ordering for
  pagination (MSSQL) fall back to it when no ORDER BY is given.
  """
  name: str
  schema: Optional[str] = None
  alias: Optional[str] = None
  primary_key: Tuple[str, ...] = ()

  def __post_init__(self):
    if not self.name:
      raise MalformedStatement("A table needs a name")
    pk = self.primary_key
    object.__setattr__(self, "primary_key", (pk,) if isinstance(pk, str) else tuple(pk))


@dataclass(frozen=True)
class SubquerySource:
  """
  Logical representation of a subquery in a FROM or JOIN clause.

  Example:
    FROM (
      SELECT ...
    ) AS u
  """
  select: "LogicalSelect | LogicalUnion"
  alias: str

  def __post_init__(self):
    if not self.alias:
      raise MalformedStatement("A subquery in FROM / JOIN needs an alias")


@dataclass(frozen=True)
class SelectItem:
  expr: Expr
  alias: Optional[str] = None


@dataclass(frozen=True)
class Join:
  right: SourceTable | SubquerySource
  on: Optional[Expr] = None
  join_type: str = "inner"  # inner, left, right, full, cross

  def __post_init__(self):
    join_type = (self.join_type or "inner").lower()
    if join_type not in JOIN_TYPES:
      raise MalformedStatement(f"Unknown join type: {self.join_type!r}")
    object.__setattr__(self, "join_type", join_type)
    if join_type == "cross" and self.on is not None:
      raise MalformedStatement("CROSS JOIN does not take an ON predicate")
    if join_type != "cross" and self.on is None:
      raise MalformedStatement(f"{join_type.upper()} JOIN needs an ON predicate")


@dataclass(frozen=True)
class LogicalSelect:
  """
  Vendor-neutral logical SELECT statement.

  from_ may be None for constant selects (SELECT ?).
  """
  select_list: Tuple[SelectItem, ...] = ()
  from_: Optional[SourceTable | SubquerySource] = None
  joins: Tuple[Join, ...] = ()
  where: Optional[Expr] = None
  group_by: Tuple[Expr, ...] = ()
  having: Optional[Expr] = None
  order_by: Tuple[OrderByExpr, ...] = ()
  limit: Optional[int] = None
  offset: Optional[int] = None
  distinct: bool = False

  def __post_init__(self):
    object.__setattr__(self, "select_list", tuple(_as_select_item(i) for i in self.select_list))
    object.__setattr__(self, "joins", tuple(self.joins))
    object.__setattr__(self, "group_by", tuple(self.group_by))
    object.__setattr__(self, "order_by", tuple(_as_order_item(o) for o in self.order_by))

    _check_count(self.limit, "LIMIT")
    _check_count(self.offset, "OFFSET")

    if self.from_ is None:
      if not self.select_list:
        raise MalformedStatement("SELECT needs a projection or a source")
      if self.joins:
        raise MalformedStatement("JOIN needs a FROM source")
      if self.having is not None:
        raise MalformedStatement("HAVING needs a FROM source")
      if any(isinstance(i.expr, Star) for i in self.select_list):
        raise MalformedStatement("SELECT * needs a FROM source")


@dataclass(frozen=True)
class LogicalUnion:
  """Represents a logical UNION or UNION ALL between multiple SELECTs."""
  selects: Tuple[LogicalSelect, ...]
  union_type: str = "ALL"

  def __post_init__(self):
    union_type = (self.union_type or "ALL").upper()
    if union_type not in UNION_TYPES:
      raise MalformedStatement(f"Unknown union type: {self.union_type!r}")
    object.__setattr__(self, "union_type", union_type)
    object.__setattr__(self, "selects", tuple(self.selects))
    if len(self.selects) < 2:
      raise MalformedStatement("UNION needs at least two selects")
    for s in self.selects:
      if s.order_by or s.limit is not None or s.offset is not None:
        raise MalformedStatement("UNION members cannot carry ORDER BY, LIMIT or OFFSET")
    widths = {
      len(s.select_list) for s in self.selects
      if not any(isinstance(i.expr, Star) for i in s.select_list)
    }
    if len(widths) > 1:
      raise MalformedStatement("All selects of a UNION need the same number of columns")


@dataclass(frozen=True)
class Assignment:
  """`column = value` in UPDATE SET or an upsert's update branch."""
  column: str
  value: Expr

  def __post_init__(self):
    if not self.column:
      raise MalformedStatement("An assignment needs a column name")
    object.__setattr__(self, "value", as_expr(self.value))


def _as_assignments(assignments) -> Tuple[Assignment, ...]:
  if isinstance(assignments, dict):
    assignments = [Assignment(k, v) for k, v in assignments.items()]
  result = tuple(assignments)
  for a in result:
    if not isinstance(a, Assignment):
      raise MalformedStatement(f"Expected Assignment, got {type(a).__name__}")
  return result


@dataclass(frozen=True)
class OnConflict:
  """
  Upsert clause of an INSERT.

  action "nothing": keep the existing row.
  action "update": apply `assignments` to the existing row, optionally only
  where `where` holds. Excluded(col) refers to the incoming value.
  """
  target_columns: Tuple[str, ...] = ()
  action: str = "nothing"
  assignments: Tuple[Assignment, ...] = ()
  where: Optional[Expr] = None

  def __post_init__(self):
    action = (self.action or "").lower()
    if action not in CONFLICT_ACTIONS:
      raise MalformedStatement(f"Unknown conflict action: {self.action!r}")
    object.__setattr__(self, "action", action)
    object.__setattr__(self, "target_columns", tuple(self.target_columns))
    object.__setattr__(self, "assignments", _as_assignments(self.assignments))
    _check_unique(self.target_columns, "conflict target")
    _check_unique([a.column for a in self.assignments], "conflict update")

    if action == "update":
      if not self.target_columns:
        raise MalformedStatement("DO UPDATE needs conflict target columns")
      if not self.assignments:
        raise MalformedStatement("DO UPDATE needs at least one assignment")
    else:
      if self.assignments or self.where is not None:
        raise MalformedStatement("DO NOTHING takes no assignments or condition")


def _as_returning(items) -> Tuple[SelectItem, ...]:
  return tuple(_as_select_item(i) for i in items)


@dataclass(frozen=True)
class LogicalInsert:
  """
  INSERT INTO table (columns) VALUES (...), (...) or INSERT ... SELECT.
  Exactly one of rows / source is set.
  """
  table: SourceTable
  columns: Tuple[str, ...]
  rows: Tuple[Tuple[Expr, ...], ...] = ()
  source: Optional[LogicalSelect] = None
  on_conflict: Optional[OnConflict] = None
  returning: Tuple[SelectItem, ...] = ()

  def __post_init__(self):
    object.__setattr__(self, "columns", tuple(self.columns))
    object.__setattr__(self, "rows", tuple(tuple(as_expr(v) for v in row) for row in self.rows))
    object.__setattr__(self, "returning", _as_returning(self.returning))

    if not self.columns:
      raise MalformedStatement("INSERT needs at least one column")
    _check_unique(self.columns, "INSERT")

    if self.source is not None and self.rows:
      raise MalformedStatement("INSERT takes either VALUES rows or a source SELECT, not both")
    if self.source is None and not self.rows:
      raise MalformedStatement("INSERT needs at least one VALUES row or a source SELECT")

    for idx, row in enumerate(self.rows):
      if len(row) != len(self.columns):
        raise MalformedStatement(
          f"INSERT row {idx} has {len(row)} values for {len(self.columns)} columns"
        )

    if self.source is not None:
      items = self.source.select_list
      if items and not any(isinstance(i.expr, Star) for i in items):
        if len(items) != len(self.columns):
          raise MalformedStatement(
            f"INSERT source selects {len(items)} columns for {len(self.columns)} target columns"
          )


@dataclass(frozen=True)
class LogicalUpdate:
  table: SourceTable
  assignments: Tuple[Assignment, ...]
  where: Optional[Expr] = None
  returning: Tuple[SelectItem, ...] = ()

  def __post_init__(self):
    object.__setattr__(self, "assignments", _as_assignments(self.assignments))
    object.__setattr__(self, "returning", _as_returning(self.returning))
    if not self.assignments:
      raise MalformedStatement("UPDATE needs at least one assignment")
    _check_unique([a.column for a in self.assignments], "UPDATE")


@dataclass(frozen=True)
class LogicalDelete:
  table: SourceTable
  where: Optional[Expr] = None
  returning: Tuple[SelectItem, ...] = ()

  def __post_init__(self):
    object.__setattr__(self, "returning", _as_returning(self.returning))


Statement = Union[LogicalSelect, LogicalUnion, LogicalInsert, LogicalUpdate, LogicalDelete]

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
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple

from ..errors import MalformedStatement
from .dsl import and_, col
from .expr import Expr, OrderByExpr, Star, as_expr
from .logical_plan import (
  Assignment,
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

"""
Fluent statement builders.

Every setter returns a new builder; a builder can therefore be used as a
template and extended in several directions. Setters check what they can
check locally and raise MalformedStatement right away; build() returns the
immutable statement record, which validates the whole shape.
"""


def table(
  name: str,
  schema: Optional[str] = None,
  alias: Optional[str] = None,
  primary_key: Iterable[str] | str = (),
) -> SourceTable:
  """Describe a table for FROM / JOIN or as a DML target."""
  return SourceTable(name=name, schema=schema, alias=alias, primary_key=primary_key)


def _as_table(source) -> SourceTable:
  if isinstance(source, SourceTable):
    return source
  if isinstance(source, str):
    return SourceTable(name=source)
  raise MalformedStatement(f"Expected a table name or SourceTable, got {type(source).__name__}")


def _as_from_item(source, alias: Optional[str] = None):
  if isinstance(source, SelectBuilder):
    source = source.build()
  if isinstance(source, (LogicalSelect, LogicalUnion)):
    return SubquerySource(select=source, alias=alias or "")
  if isinstance(source, SubquerySource):
    return source
  t = _as_table(source)
  if alias is not None:
    t = dataclasses.replace(t, alias=alias)
  return t


def _projection_item(item) -> SelectItem:
  if isinstance(item, SelectItem):
    return item
  if item == "*":
    return SelectItem(Star())
  if isinstance(item, str):
    # Plain strings in a projection are column names, not values.
    return SelectItem(col(item))
  return SelectItem(as_expr(item))


def _check_count(value, what: str) -> None:
  if isinstance(value, bool) or not isinstance(value, int):
    raise MalformedStatement(f"{what} must be an integer, got {value!r}")
  if value < 0:
    raise MalformedStatement(f"{what} must not be negative, got {value}")


# ---------------------------------------------------------------------------
# SELECT
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectBuilder:
  select_list: Tuple[SelectItem, ...] = ()
  from_: Any = None
  joins: Tuple[Join, ...] = ()
  where_: Optional[Expr] = None
  group_by_: Tuple[Expr, ...] = ()
  having_: Optional[Expr] = None
  order_by_: Tuple[OrderByExpr, ...] = ()
  limit_: Optional[int] = None
  offset_: Optional[int] = None
  distinct_: bool = False

  def columns(self, *items: Any) -> "SelectBuilder":
    """Append projection items (column names, expressions or SelectItems)."""
    return dataclasses.replace(
      self, select_list=self.select_list + tuple(_projection_item(i) for i in items)
    )

  def column(self, expr: Any, alias: Optional[str] = None) -> "SelectBuilder":
    item = _projection_item(expr)
    if alias is not None:
      item = SelectItem(item.expr, alias)
    return dataclasses.replace(self, select_list=self.select_list + (item,))

  def from_table(self, source: Any, alias: Optional[str] = None) -> "SelectBuilder":
    return dataclasses.replace(self, from_=_as_from_item(source, alias))

  def join(self, source: Any, on: Optional[Expr] = None, join_type: str = "inner", alias: Optional[str] = None) -> "SelectBuilder":
    j = Join(right=_as_from_item(source, alias), on=on, join_type=join_type)
    return dataclasses.replace(self, joins=self.joins + (j,))

  def inner_join(self, source: Any, on: Expr, alias: Optional[str] = None) -> "SelectBuilder":
    return self.join(source, on, "inner", alias)

  def left_join(self, source: Any, on: Expr, alias: Optional[str] = None) -> "SelectBuilder":
    return self.join(source, on, "left", alias)

  def right_join(self, source: Any, on: Expr, alias: Optional[str] = None) -> "SelectBuilder":
    return self.join(source, on, "right", alias)

  def full_join(self, source: Any, on: Expr, alias: Optional[str] = None) -> "SelectBuilder":
    return self.join(source, on, "full", alias)

  def cross_join(self, source: Any, alias: Optional[str] = None) -> "SelectBuilder":
    return self.join(source, None, "cross", alias)

  def where(self, predicate: Expr) -> "SelectBuilder":
    """Add a predicate; repeated calls are combined with AND."""
    combined = predicate if self.where_ is None else and_(self.where_, predicate)
    return dataclasses.replace(self, where_=combined)

  def group_by(self, *exprs: Any) -> "SelectBuilder":
    return dataclasses.replace(self, group_by_=self.group_by_ + tuple(_projection_item(e).expr for e in exprs))

  def having(self, predicate: Expr) -> "SelectBuilder":
    combined = predicate if self.having_ is None else and_(self.having_, predicate)
    return dataclasses.replace(self, having_=combined)

  def order_by(self, *items: Any) -> "SelectBuilder":
    ordered = tuple(
      i if isinstance(i, OrderByExpr) else OrderByExpr(_projection_item(i).expr)
      for i in items
    )
    return dataclasses.replace(self, order_by_=self.order_by_ + ordered)

  def limit(self, n: int) -> "SelectBuilder":
    _check_count(n, "LIMIT")
    return dataclasses.replace(self, limit_=n)

  def offset(self, n: int) -> "SelectBuilder":
    _check_count(n, "OFFSET")
    return dataclasses.replace(self, offset_=n)

  def distinct(self, flag: bool = True) -> "SelectBuilder":
    return dataclasses.replace(self, distinct_=flag)

  def build(self) -> LogicalSelect:
    return LogicalSelect(
      select_list=self.select_list,
      from_=self.from_,
      joins=self.joins,
      where=self.where_,
      group_by=self.group_by_,
      having=self.having_,
      order_by=self.order_by_,
      limit=self.limit_,
      offset=self.offset_,
      distinct=self.distinct_,
    )


def select(*items: Any) -> SelectBuilder:
  """
  Start a SELECT.

      select("id", "name").from_table("users").where(eq(col("id"), 1)).build()
  """
  return SelectBuilder().columns(*items)


def union(*selects: LogicalSelect, distinct: bool = False) -> LogicalUnion:
  """UNION ALL by default, UNION when distinct=True."""
  return LogicalUnion(selects=selects, union_type="DISTINCT" if distinct else "ALL")


# ---------------------------------------------------------------------------
# INSERT
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InsertBuilder:
  table: SourceTable
  columns_: Tuple[str, ...] = ()
  rows: Tuple[Tuple[Expr, ...], ...] = ()
  source: Optional[LogicalSelect] = None
  on_conflict_: Optional[OnConflict] = None
  returning_: Tuple[SelectItem, ...] = ()

  def columns(self, *names: str) -> "InsertBuilder":
    if not names:
      raise MalformedStatement("INSERT needs at least one column")
    if self.rows:
      raise MalformedStatement("INSERT columns must be set before VALUES rows")
    return dataclasses.replace(self, columns_=tuple(names))

  def values(self, *values: Any) -> "InsertBuilder":
    """Append one VALUES row; its arity must match the column list."""
    if not self.columns_:
      raise MalformedStatement("INSERT columns must be set before VALUES rows")
    if len(values) != len(self.columns_):
      raise MalformedStatement(
        f"INSERT row has {len(values)} values for {len(self.columns_)} columns"
      )
    row = tuple(as_expr(v) for v in values)
    return dataclasses.replace(self, rows=self.rows + (row,))

  def values_many(self, rows: Iterable[Iterable[Any]]) -> "InsertBuilder":
    builder = self
    for r in rows:
      builder = builder.values(*r)
    return builder

  def from_select(self, select_stmt: LogicalSelect | SelectBuilder) -> "InsertBuilder":
    if isinstance(select_stmt, SelectBuilder):
      select_stmt = select_stmt.build()
    return dataclasses.replace(self, source=select_stmt)

  def on_conflict_do_nothing(self, *target_columns: str) -> "InsertBuilder":
    return dataclasses.replace(
      self, on_conflict_=OnConflict(target_columns=target_columns, action="nothing")
    )

  def on_conflict_do_update(
    self,
    target_columns: Iterable[str],
    assignments: Mapping[str, Any] | Iterable[Assignment],
    where: Optional[Expr] = None,
  ) -> "InsertBuilder":
    """
    Upsert: update the existing row on a conflict over `target_columns`.
    Use excluded("col") to refer to the incoming value.
    """
    return dataclasses.replace(
      self,
      on_conflict_=OnConflict(
        target_columns=tuple(target_columns),
        action="update",
        assignments=dict(assignments) if isinstance(assignments, Mapping) else tuple(assignments),
        where=where,
      ),
    )

  def returning(self, *items: Any) -> "InsertBuilder":
    return dataclasses.replace(
      self, returning_=self.returning_ + tuple(_projection_item(i) for i in items)
    )

  def build(self) -> LogicalInsert:
    return LogicalInsert(
      table=self.table,
      columns=self.columns_,
      rows=self.rows,
      source=self.source,
      on_conflict=self.on_conflict_,
      returning=self.returning_,
    )


def insert_into(target: Any) -> InsertBuilder:
  return InsertBuilder(table=_as_table(target))


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UpdateBuilder:
  table: SourceTable
  assignments: Tuple[Assignment, ...] = ()
  where_: Optional[Expr] = None
  returning_: Tuple[SelectItem, ...] = ()

  def set(self, column: str, value: Any) -> "UpdateBuilder":
    if any(a.column == column for a in self.assignments):
      raise MalformedStatement(f"Duplicate column {column!r} in UPDATE")
    return dataclasses.replace(self, assignments=self.assignments + (Assignment(column, value),))

  def set_many(self, mapping: Mapping[str, Any]) -> "UpdateBuilder":
    builder = self
    for column, value in mapping.items():
      builder = builder.set(column, value)
    return builder

  def where(self, predicate: Expr) -> "UpdateBuilder":
    combined = predicate if self.where_ is None else and_(self.where_, predicate)
    return dataclasses.replace(self, where_=combined)

  def returning(self, *items: Any) -> "UpdateBuilder":
    return dataclasses.replace(
      self, returning_=self.returning_ + tuple(_projection_item(i) for i in items)
    )

  def build(self) -> LogicalUpdate:
    return LogicalUpdate(
      table=self.table,
      assignments=self.assignments,
      where=self.where_,
      returning=self.returning_,
    )


def update(target: Any) -> UpdateBuilder:
  return UpdateBuilder(table=_as_table(target))


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeleteBuilder:
  table: SourceTable
  where_: Optional[Expr] = None
  returning_: Tuple[SelectItem, ...] = ()

  def where(self, predicate: Expr) -> "DeleteBuilder":
    combined = predicate if self.where_ is None else and_(self.where_, predicate)
    return dataclasses.replace(self, where_=combined)

  def returning(self, *items: Any) -> "DeleteBuilder":
    return dataclasses.replace(
      self, returning_=self.returning_ + tuple(_projection_item(i) for i in items)
    )

  def build(self) -> LogicalDelete:
    return LogicalDelete(table=self.table, where=self.where_, returning=self.returning_)


def delete_from(target: Any) -> DeleteBuilder:
  return DeleteBuilder(table=_as_table(target))


# ---------------------------------------------------------------------------
# Entity mapping entry points
# ---------------------------------------------------------------------------

def insert_mapping(
  target: Any,
  mapping: Mapping[str, Any],
  returning: Iterable[Any] = (),
) -> LogicalInsert:
  """
  Single-row INSERT from a {column: value} mapping, columns in mapping order.
  """
  if not mapping:
    raise MalformedStatement("INSERT needs at least one column")
  return (
    insert_into(target)
    .columns(*mapping.keys())
    .values(*mapping.values())
    .returning(*returning)
    .build()
  )


def update_mapping(
  target: Any,
  mapping: Mapping[str, Any],
  where: Optional[Expr] = None,
  returning: Iterable[Any] = (),
) -> LogicalUpdate:
  """UPDATE ... SET from a {column: value} mapping."""
  builder = update(target).set_many(mapping).returning(*returning)
  if where is not None:
    builder = builder.where(where)
  return builder.build()

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

"""
Statement builders: fluent setters return new builders and structural
problems are reported as MalformedStatement at build time.
"""

import pytest

from querykit import (
  col,
  delete_from,
  eq,
  excluded,
  insert_into,
  insert_mapping,
  select,
  table,
  union,
  update,
  update_mapping,
)
from querykit.errors import MalformedStatement
from querykit.rendering.expr import ColumnRef, Literal, Star
from querykit.rendering.logical_plan import (
  Assignment,
  Join,
  LogicalInsert,
  LogicalSelect,
  LogicalUpdate,
  OnConflict,
  SelectItem,
  SourceTable,
)


def test_select_builder_is_immutable():
  base = select("id").from_table("users")
  filtered = base.where(eq(col("id"), 1))

  assert base.build().where is None
  assert filtered.build().where == eq(col("id"), 1)


def test_repeated_where_calls_are_combined_with_and():
  stmt = (
    select("id")
    .from_table("users")
    .where(eq(col("a"), 1))
    .where(eq(col("b"), 2))
    .build()
  )
  assert stmt.where.op == "AND"
  assert len(stmt.where.operands) == 2


def test_projection_strings_are_column_names():
  stmt = select("id", "*").from_table("users").build()
  assert stmt.select_list == (
    SelectItem(ColumnRef(None, "id")),
    SelectItem(Star()),
  )


def test_from_table_accepts_alias_and_subquery():
  inner = select("id").from_table("users").build()
  stmt = select("id").from_table(inner, alias="u").build()
  assert stmt.from_.alias == "u"
  assert stmt.from_.select == inner

  aliased = select("id").from_table(table("users", schema="app"), alias="x").build()
  assert aliased.from_ == SourceTable(name="users", schema="app", alias="x")


@pytest.mark.parametrize("bad", [-1, True, 1.5, "3"])
def test_limit_and_offset_must_be_non_negative_integers(bad):
  with pytest.raises(MalformedStatement):
    select("id").from_table("users").limit(bad)
  with pytest.raises(MalformedStatement):
    select("id").from_table("users").offset(bad)


def test_logical_select_validates_pagination_directly():
  with pytest.raises(MalformedStatement):
    LogicalSelect(select_list=(SelectItem(ColumnRef(None, "id")),), from_=SourceTable("t"), limit=-5)


def test_select_without_projection_or_source_is_malformed():
  with pytest.raises(MalformedStatement):
    LogicalSelect()


def test_having_requires_a_source():
  with pytest.raises(MalformedStatement):
    select(col("a")).having(eq(col("a"), 1)).build()


def test_constant_select_without_source():
  stmt = select(Literal(1)).build()
  assert stmt.from_ is None


def test_join_validation():
  with pytest.raises(MalformedStatement):
    Join(right=SourceTable("t"), on=eq(col("a"), col("b")), join_type="cross")
  with pytest.raises(MalformedStatement):
    Join(right=SourceTable("t"), on=None, join_type="left")
  with pytest.raises(MalformedStatement):
    Join(right=SourceTable("t"), on=eq(col("a"), col("b")), join_type="sideways")


def test_union_needs_two_selects_of_equal_width():
  a = select("id").from_table("a").build()
  b = select("id").from_table("b").build()
  assert union(a, b).union_type == "ALL"
  assert union(a, b, distinct=True).union_type == "DISTINCT"

  with pytest.raises(MalformedStatement):
    union(a)
  with pytest.raises(MalformedStatement):
    union(a, select("id", "name").from_table("b").build())


def test_insert_requires_columns():
  with pytest.raises(MalformedStatement):
    insert_into("users").columns()


def test_insert_row_arity_must_match_columns():
  builder = insert_into("users").columns("name", "age")
  with pytest.raises(MalformedStatement):
    builder.values("only-one")


def test_insert_values_before_columns_is_malformed():
  with pytest.raises(MalformedStatement):
    insert_into("users").values(1)


def test_insert_without_rows_is_malformed():
  with pytest.raises(MalformedStatement):
    insert_into("users").columns("name").build()


def test_insert_duplicate_columns_are_malformed():
  with pytest.raises(MalformedStatement):
    insert_into("users").columns("name", "name").values(1, 2).build()


def test_insert_from_select_checks_width():
  src = select("a", "b").from_table("staging")
  stmt = insert_into("users").columns("a", "b").from_select(src).build()
  assert stmt.source == src.build()

  with pytest.raises(MalformedStatement):
    insert_into("users").columns("a").from_select(src).build()


def test_insert_builder_rows_accumulate():
  stmt = insert_into("users").columns("name").values("a").values_many([["b"], ["c"]]).build()
  assert [r[0] for r in stmt.rows] == [Literal("a"), Literal("b"), Literal("c")]


def test_conflict_update_needs_target_columns_and_assignments():
  builder = insert_into("users").columns("id", "name").values(1, "a")
  with pytest.raises(MalformedStatement):
    builder.on_conflict_do_update([], {"name": excluded("name")})
  with pytest.raises(MalformedStatement):
    builder.on_conflict_do_update(["id"], {})


def test_conflict_do_nothing_takes_no_assignments():
  with pytest.raises(MalformedStatement):
    OnConflict(target_columns=("id",), action="nothing", assignments={"a": 1})
  with pytest.raises(MalformedStatement):
    OnConflict(action="merge")


def test_update_rejects_duplicate_columns():
  with pytest.raises(MalformedStatement):
    update("users").set("name", "a").set("name", "b")
  with pytest.raises(MalformedStatement):
    LogicalUpdate(
      table=SourceTable("users"),
      assignments=(Assignment("a", 1), Assignment("a", 2)),
    )


def test_update_needs_assignments():
  with pytest.raises(MalformedStatement):
    update("users").build()


def test_delete_builder():
  stmt = delete_from("users").where(eq(col("id"), 1)).returning("id").build()
  assert stmt.table == SourceTable("users")
  assert stmt.returning == (SelectItem(ColumnRef(None, "id")),)


def test_insert_mapping_keeps_mapping_order():
  stmt = insert_mapping("users", {"name": "ada", "age": 36})
  assert isinstance(stmt, LogicalInsert)
  assert stmt.columns == ("name", "age")
  assert stmt.rows == ((Literal("ada"), Literal(36)),)


def test_insert_mapping_requires_columns():
  with pytest.raises(MalformedStatement):
    insert_mapping("users", {})


def test_update_mapping_with_where():
  stmt = update_mapping("users", {"name": "ada"}, where=eq(col("id"), 7))
  assert [a.column for a in stmt.assignments] == ["name"]
  assert stmt.where == eq(col("id"), 7)


def test_source_table_primary_key_accepts_single_name():
  assert table("users", primary_key="id").primary_key == ("id",)
  assert table("users", primary_key=["a", "b"]).primary_key == ("a", "b")

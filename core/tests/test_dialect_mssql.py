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

import pytest

from querykit import (
  aggregate_to_string,
  and_,
  cast,
  col,
  concat,
  count,
  delete_from,
  desc,
  eq,
  excluded,
  in_list,
  in_subquery,
  insert_into,
  is_null,
  json_array_begins_with,
  json_array_contains,
  json_extract,
  json_type_equals,
  matches,
  ne,
  not_,
  not_exists,
  not_in_list,
  not_matches,
  or_,
  render,
  row,
  row_to_json,
  select,
  table,
  text_search,
  union,
  update,
)
from querykit.errors import PaginationRequiresOrdering, RenderError, UnsupportedClause
from querykit.rendering.dialects.dialect_factory import get_active_dialect
from querykit.rendering.dialects.mssql import MssqlDialect
from querykit.rendering.expr import BoolConst
from querykit.values import Array, Int64, Text


def _upsert():
  return insert_into("users").columns("id", "name").values(1, "a")


def test_mssql_dialect_is_registered():
  dialect = get_active_dialect("mssql")
  assert isinstance(dialect, MssqlDialect)
  assert isinstance(get_active_dialect("sqlserver"), MssqlDialect)
  assert isinstance(get_active_dialect("tsql"), MssqlDialect)


def test_mssql_quote_ident_uses_brackets():
  d = MssqlDialect()
  assert d.quote_ident("foo") == "[foo]"
  assert d.quote_ident("a]b") == "[a]]b]"
  assert d.render_identifier("order") == "[order]"


def test_mssql_named_placeholders():
  stmt = select("id", "name").from_table("users").where(eq(col("id"), 42)).build()
  rendered = render(stmt, "mssql")
  assert rendered.sql == "SELECT id, name FROM users WHERE id = @p1"
  assert rendered.paramstyle == "named_at"


def test_mssql_boolean_constant():
  stmt = select("id").from_table("t").where(eq(col("flag"), BoolConst(False))).build()
  assert render(stmt, "mssql").sql == "SELECT id FROM t WHERE flag = 0"


def test_mssql_expression_helpers():
  stmt = select(
    concat(col("a"), col("b"), col("c")),
    cast(col("x"), "boolean"),
    aggregate_to_string(col("name")),
  ).from_table("t").build()
  assert render(stmt, "mssql").sql == (
    "SELECT (a + b + c), CAST(x AS BIT), STRING_AGG(name, ',') FROM t"
  )


def test_mssql_row_value_in_is_expanded():
  stmt = (
    select("id")
    .from_table("t")
    .where(in_list(row(col("a"), col("b")), [(1, 2), (3, 4)]))
    .build()
  )
  sql, bindings = render(stmt, "mssql")
  assert sql == (
    "SELECT id FROM t WHERE ((a = @p1 AND b = @p2) OR (a = @p3 AND b = @p4))"
  )
  assert bindings == (Int64(1), Int64(2), Int64(3), Int64(4))


def test_mssql_negated_row_value_in():
  stmt = (
    select("id")
    .from_table("t")
    .where(not_in_list(row(col("a"), col("b")), [(1, 2)]))
    .build()
  )
  assert render(stmt, "mssql").sql == "SELECT id FROM t WHERE NOT ((a = @p1 AND b = @p2))"


def test_mssql_pagination_synthesizes_order_from_primary_key():
  stmt = (
    select("id")
    .from_table(table("users", primary_key="id"))
    .limit(10)
    .offset(20)
    .build()
  )
  assert render(stmt, "mssql").sql == (
    "SELECT id FROM users ORDER BY users.id OFFSET 20 ROWS FETCH NEXT 10 ROWS ONLY"
  )


def test_mssql_synthesized_order_uses_table_alias():
  stmt = (
    select(col("id", "u"))
    .from_table(table("users", alias="u", primary_key=["tenant", "id"]))
    .limit(3)
    .build()
  )
  assert render(stmt, "mssql").sql == (
    "SELECT u.id FROM users AS u ORDER BY u.tenant, u.id OFFSET 0 ROWS FETCH NEXT 3 ROWS ONLY"
  )


def test_mssql_limit_with_explicit_order():
  stmt = select("id").from_table("users").order_by(desc(col("id"))).limit(5).build()
  assert render(stmt, "mssql").sql == (
    "SELECT id FROM users ORDER BY id DESC OFFSET 0 ROWS FETCH NEXT 5 ROWS ONLY"
  )


def test_mssql_offset_only_has_no_fetch():
  stmt = select("id").from_table("users").order_by(col("id")).offset(5).build()
  assert render(stmt, "mssql").sql == "SELECT id FROM users ORDER BY id ASC OFFSET 5 ROWS"


def test_mssql_pagination_without_ordering_key_raises():
  stmt = select("id").from_table("users").limit(10).build()
  with pytest.raises(PaginationRequiresOrdering) as exc:
    render(stmt, "mssql")
  assert isinstance(exc.value, RenderError)
  assert exc.value.dialect == "mssql"


def test_mssql_insert_output_clause():
  stmt = (
    insert_into("users")
    .columns("name", "age")
    .values("a", 1)
    .values("b", 2)
    .returning("id")
    .build()
  )
  assert render(stmt, "mssql").sql == (
    "INSERT INTO users (name, age) OUTPUT INSERTED.id VALUES (@p1, @p2), (@p3, @p4)"
  )


def test_mssql_update_output_clause_precedes_where():
  stmt = (
    update("users")
    .set("name", "x")
    .where(eq(col("id"), 1))
    .returning("id", "name")
    .build()
  )
  sql, bindings = render(stmt, "mssql")
  assert sql == "UPDATE users SET name = @p1 OUTPUT INSERTED.id, INSERTED.name WHERE id = @p2"
  assert bindings == (Text("x"), Int64(1))


def test_mssql_delete_output_uses_deleted_rows():
  stmt = delete_from("users").where(eq(col("id"), 1)).returning("*").build()
  assert render(stmt, "mssql").sql == "DELETE FROM users OUTPUT DELETED.* WHERE id = @p1"


def test_mssql_upsert_renders_merge():
  stmt = _upsert().on_conflict_do_update(["id"], {"name": excluded("name")}).build()
  assert render(stmt, "mssql").sql == (
    "MERGE INTO users AS users USING (VALUES (@p1, @p2)) AS dual (id, name) "
    "ON users.id = dual.id "
    "WHEN MATCHED THEN UPDATE SET name = dual.name "
    "WHEN NOT MATCHED THEN INSERT (id, name) VALUES (dual.id, dual.name);"
  )


def test_mssql_merge_do_nothing_has_no_matched_branch():
  stmt = _upsert().on_conflict_do_nothing("id").build()
  sql = render(stmt, "mssql").sql
  assert "WHEN MATCHED" not in sql
  assert sql.endswith("WHEN NOT MATCHED THEN INSERT (id, name) VALUES (dual.id, dual.name);")


def test_mssql_conditional_merge_qualifies_target_columns():
  stmt = _upsert().on_conflict_do_update(
    ["id"], {"name": excluded("name")}, where=ne(col("name"), "locked")
  ).build()
  sql, bindings = render(stmt, "mssql")
  assert "WHEN MATCHED AND users.name <> @p3 THEN UPDATE SET name = dual.name" in sql
  assert bindings == (Int64(1), Text("a"), Text("locked"))


def test_mssql_merge_with_output():
  stmt = (
    _upsert()
    .on_conflict_do_update(["id"], {"name": excluded("name")})
    .returning("id")
    .build()
  )
  assert render(stmt, "mssql").sql.endswith(
    "VALUES (dual.id, dual.name) OUTPUT INSERTED.id;"
  )


def test_mssql_merge_needs_conflict_target():
  stmt = _upsert().on_conflict_do_nothing().build()
  with pytest.raises(UnsupportedClause):
    render(stmt, "mssql")


def test_mssql_merge_target_must_be_inserted():
  stmt = _upsert().on_conflict_do_nothing("email").build()
  with pytest.raises(UnsupportedClause):
    render(stmt, "mssql")


def test_mssql_map_logical_type_boolean_to_bit():
  d = MssqlDialect()
  assert d.map_logical_type("BOOLEAN") == "BIT"
  with pytest.raises(RenderError):
    d.map_logical_type("THIS_TYPE_DOES_NOT_EXIST")


def _where_sql(predicate):
  stmt = select("id").from_table("t").where(predicate).build()
  return render(stmt, "mssql")


def test_mssql_boolean_constants_in_predicate_positions():
  assert _where_sql(BoolConst(True)).sql == "SELECT id FROM t WHERE 1=1"
  assert _where_sql(not_(BoolConst(False))).sql == "SELECT id FROM t WHERE NOT 1=0"
  assert _where_sql(and_(eq(col("a"), 1), BoolConst(True))).sql == (
    "SELECT id FROM t WHERE a = @p1 AND 1=1"
  )

  stmt = (
    select(col("a"), count())
    .from_table("t")
    .group_by("a")
    .having(BoolConst(False))
    .build()
  )
  assert render(stmt, "mssql").sql == "SELECT a, COUNT(*) FROM t GROUP BY a HAVING 1=0"


def test_mssql_boolean_constant_stays_bit_in_value_positions():
  stmt = select(BoolConst(True)).from_table("t").build()
  assert render(stmt, "mssql").sql == "SELECT 1 FROM t"


def test_mssql_in_subquery_accepts_union():
  members = union(
    select("id").from_table("a").build(),
    select("id").from_table("b").build(),
  )
  assert _where_sql(in_subquery(col("id"), members)).sql == (
    "SELECT id FROM t WHERE id IN (SELECT id FROM a UNION ALL SELECT id FROM b)"
  )
  assert _where_sql(not_exists(members)).sql == (
    "SELECT id FROM t WHERE NOT EXISTS (SELECT id FROM a UNION ALL SELECT id FROM b)"
  )


def test_mssql_conditional_merge_keeps_disjunction_together():
  stmt = _upsert().on_conflict_do_update(
    ["id"],
    {"name": excluded("name")},
    where=or_(ne(col("name"), "locked"), is_null(col("name"))),
  ).build()
  assert "WHEN MATCHED AND (users.name <> @p3 OR users.name IS NULL) THEN" in render(stmt, "mssql").sql


def test_mssql_distinct_pagination_needs_projected_key():
  unkeyed = (
    select("name")
    .distinct()
    .from_table(table("users", primary_key="id"))
    .limit(5)
    .build()
  )
  with pytest.raises(PaginationRequiresOrdering):
    render(unkeyed, "mssql")

  keyed = (
    select("id", "name")
    .distinct()
    .from_table(table("users", primary_key="id"))
    .limit(5)
    .build()
  )
  assert render(keyed, "mssql").sql == (
    "SELECT DISTINCT id, name FROM users ORDER BY users.id OFFSET 0 ROWS FETCH NEXT 5 ROWS ONLY"
  )


def test_mssql_json_extract():
  sql, bindings = _where_sql(eq(json_extract(col("doc"), ["a", "b"], as_text=True), "c"))
  assert sql == "SELECT id FROM t WHERE JSON_VALUE(doc, @p1) = @p2"
  assert bindings == (Text("$.a.b"), Text("c"))

  stmt = select(json_extract(col("doc"), "$.items")).from_table("t").build()
  assert render(stmt, "mssql").sql == "SELECT JSON_QUERY(doc, @p1) FROM t"


@pytest.mark.parametrize(
  "predicate",
  [
    json_array_contains(col("tags"), ["a"]),
    json_array_begins_with(col("tags"), "a"),
    json_type_equals(col("doc"), "object"),
  ],
)
def test_mssql_json_predicates_are_unsupported(predicate):
  with pytest.raises(UnsupportedClause):
    _where_sql(predicate)


def test_mssql_full_text_search_uses_contains():
  sql, bindings = _where_sql(matches(text_search("name", "body"), "chicken"))
  assert sql == "SELECT id FROM t WHERE CONTAINS((name, body), @p1)"
  assert bindings == (Text("chicken"),)
  assert _where_sql(not_matches("body", "chicken")).sql == (
    "SELECT id FROM t WHERE NOT (CONTAINS(body, @p1))"
  )


def test_mssql_rejects_arrays_and_row_to_json():
  with pytest.raises(UnsupportedClause):
    _where_sql(eq(col("id"), Array([1, 2])))
  with pytest.raises(UnsupportedClause):
    render(select(row_to_json("t")).from_table("t").build(), "mssql")

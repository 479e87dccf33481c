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
Expression DSL: builder functions produce the expected immutable trees and
reject malformed input at construction time.
"""

import dataclasses

import pytest

from querykit import (
  and_,
  call,
  cast,
  col,
  count,
  desc,
  eq,
  excluded,
  in_list,
  json_array_ends_with,
  json_extract,
  json_type_equals,
  lit,
  matches,
  not_,
  or_,
  raw,
  row,
  row_number_over,
  starts_with,
  text_search,
  contains,
  ends_with,
  transform,
)
from querykit.errors import MalformedStatement
from querykit.rendering.expr import (
  BinaryOp,
  BoolOp,
  ColumnRef,
  Excluded,
  FuncCall,
  InList,
  JsonArrayEdge,
  JsonExtract,
  JsonTypeEquals,
  Literal,
  Not,
  OrderByExpr,
  Row,
  Star,
  TextSearch,
  WindowFunction,
  json_path_string,
)
from querykit.values import Int64, Json, Text


def test_comparison_folds_native_operands_into_literals():
  expr = eq(col("id"), 5)
  assert expr == BinaryOp("=", ColumnRef(None, "id"), Literal(Int64(5)))


def test_column_with_table_alias():
  assert col("id", "u") == ColumnRef("u", "id")


def test_and_flattens_nested_conjunctions():
  a, b, c = eq(col("a"), 1), eq(col("b"), 2), eq(col("c"), 3)
  expr = and_(a, and_(b, c))
  assert isinstance(expr, BoolOp)
  assert expr.operands == (a, b, c)


def test_and_or_with_single_operand_return_it_unchanged():
  a = eq(col("a"), 1)
  assert and_(a) is a
  assert or_(a) is a


def test_and_without_operands_is_malformed():
  with pytest.raises(MalformedStatement):
    and_()


def test_or_keeps_nested_and_groups():
  a, b, c = eq(col("a"), 1), eq(col("b"), 2), eq(col("c"), 3)
  expr = or_(and_(a, b), c)
  assert expr.op == "OR"
  assert isinstance(expr.operands[0], BoolOp)
  assert expr.operands[0].op == "AND"


def test_not_wraps_expression():
  assert not_(col("flag")) == Not(ColumnRef(None, "flag"))


def test_unknown_operator_is_rejected():
  with pytest.raises(MalformedStatement):
    BinaryOp("^^", col("a"), lit(1))


def test_function_names_are_validated():
  assert call("upper", col("name")).name == "upper"
  assert call("pg_catalog.lower", col("name")).name == "pg_catalog.lower"
  with pytest.raises(MalformedStatement):
    call("drop table x; --", col("name"))


def test_count_without_argument_counts_rows():
  assert count() == FuncCall("COUNT", (Star(),))
  assert count(col("id"), distinct=True).distinct is True


def test_cast_normalizes_logical_type():
  assert cast(col("a"), "int").target_type == "INTEGER"
  assert cast(col("a"), "varchar").target_type == "STRING"
  with pytest.raises(MalformedStatement):
    cast(col("a"), "definitely_not_a_type")


def test_like_helpers_build_bound_patterns():
  assert starts_with(col("name"), "ab").right == Literal(Text("ab%"))
  assert ends_with(col("name"), "ab").right == Literal(Text("%ab"))
  assert contains(col("name"), "ab").right == Literal(Text("%ab%"))


def test_row_value_in_list():
  expr = in_list(row(col("a"), col("b")), [(1, 2), (3, 4)])
  assert isinstance(expr, InList)
  assert expr.is_row_value
  assert expr.items[0] == Row((Literal(1), Literal(2)))


def test_row_value_in_list_checks_arity():
  with pytest.raises(MalformedStatement):
    in_list(row(col("a"), col("b")), [(1, 2, 3)])


def test_row_items_need_row_on_left_side():
  with pytest.raises(MalformedStatement):
    in_list(col("a"), [(1, 2)])


def test_empty_row_is_malformed():
  with pytest.raises(MalformedStatement):
    row()


def test_sort_direction_is_validated():
  assert desc(col("a")) == OrderByExpr(ColumnRef(None, "a"), "DESC")
  with pytest.raises(MalformedStatement):
    OrderByExpr(col("a"), "sideways")


def test_row_number_over_builds_window():
  expr = row_number_over(partition_by=[col("g")], order_by=[col("ts")])
  assert isinstance(expr, WindowFunction)
  assert expr.window.partition_by == (ColumnRef(None, "g"),)
  # bare expressions are wrapped as ascending order items
  assert expr.window.order_by == (OrderByExpr(ColumnRef(None, "ts"), "ASC"),)


def test_raw_with_bindings_is_a_template():
  expr = raw("price > {expr:minimum}", minimum=10)
  assert expr.is_template
  assert expr.binding("minimum") == Literal(Int64(10))
  assert expr.binding("missing") is None

  plain = raw("NOW()")
  assert not plain.is_template


def test_excluded_reference():
  assert excluded("name") == Excluded("name")


def test_nodes_are_frozen():
  expr = eq(col("a"), 1)
  with pytest.raises(dataclasses.FrozenInstanceError):
    expr.op = "<>"


def test_transform_is_pure_bottom_up_rewrite():
  original = and_(eq(col("a"), 1), eq(col("b"), col("c")))

  def qualify(node):
    if isinstance(node, ColumnRef) and node.table_alias is None:
      return ColumnRef("t", node.column_name)
    return node

  rewritten = transform(original, qualify)

  assert rewritten.operands[0].left == ColumnRef("t", "a")
  assert rewritten.operands[1].right == ColumnRef("t", "c")
  # the literal is untouched and the input tree is unchanged
  assert rewritten.operands[0].right == Literal(Int64(1))
  assert original.operands[0].left == ColumnRef(None, "a")


def test_transform_identity_keeps_equality():
  original = or_(eq(col("a"), 1), not_(eq(col("b"), "x")))
  assert transform(original, lambda n: n) == original


def test_json_path_string_from_keys():
  assert json_path_string(("a", "0", "odd key")) == '$.a[0]."odd key"'
  assert json_path_string(("say \"hi\"",)) == '$."say \\"hi\\""'
  assert json_path_string("$.a") == "$.a"


def test_json_extract_paths_are_validated():
  node = json_extract(col("doc"), ["a", "b"], as_text=True)
  assert node.path == ("a", "b")
  assert node.as_text
  assert json_extract("doc", "$.a").path == "$.a"
  with pytest.raises(MalformedStatement):
    json_extract(col("doc"), "a.b")
  with pytest.raises(MalformedStatement):
    json_extract(col("doc"), [])
  with pytest.raises(MalformedStatement):
    JsonExtract(ColumnRef(None, "doc"), ("a", 1))


def test_json_operands_become_json_literals():
  node = json_array_ends_with(col("tags"), "x", negated=True)
  assert isinstance(node, JsonArrayEdge)
  assert node.edge == "last"
  assert node.negated
  assert node.value == Literal(Json.from_data("x"))
  with pytest.raises(MalformedStatement):
    JsonArrayEdge(ColumnRef(None, "tags"), Literal(Json.from_data(1)), edge="middle")


def test_json_type_names_are_normalized():
  assert json_type_equals(col("doc"), "Object").json_type == "object"
  with pytest.raises(MalformedStatement):
    JsonTypeEquals(ColumnRef(None, "doc"), "integer")


def test_text_search_needs_columns():
  node = matches("body", "cat & dog")
  assert node.search == TextSearch((ColumnRef(None, "body"),))
  assert node.query == Literal(Text("cat & dog"))
  assert text_search("a", col("b", "t")).columns[1] == ColumnRef("t", "b")
  with pytest.raises(MalformedStatement):
    text_search()

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

import re

import pytest

from querykit.rendering.dialects.dialect_factory import (
  get_active_dialect,
  get_all_registered_dialects,
  get_available_dialect_names,
)


def _is_quoted(ident: str, raw: str) -> bool:
  """
  Return True if `ident` appears quoted in `raw`.
  Accepts common quoting styles: [ident], "ident", `ident`.
  """
  patterns = [
    rf"^\[{re.escape(ident)}\]$",
    rf'^"{re.escape(ident)}"$',
    rf"^`{re.escape(ident)}`$",
  ]
  return any(re.match(p, raw) for p in patterns)


def test_reserved_keywords_are_quoted_per_dialect():
  """
  Ensure that each dialect quotes exactly its own reserved keywords.
  """
  for d in get_all_registered_dialects():
    reserved = getattr(d, "RESERVED_KEYWORDS", set())
    assert reserved, f"{d.__class__.__name__} has no RESERVED_KEYWORDS"

    for kw in sorted(reserved):
      ident = kw.lower()
      rendered = d.render_identifier(ident)

      assert rendered != ident
      assert _is_quoted(ident, rendered)
      assert bool(d.should_quote(ident)) is True


def test_non_reserved_identifier_is_not_quoted():
  """
  Ensure a regular identifier is not quoted.
  """
  for d in get_all_registered_dialects():
    ident = "customer_id"
    rendered = d.render_identifier(ident)

    assert rendered == ident
    assert bool(d.should_quote(ident)) is False


def test_keyword_matching_is_case_insensitive():
  for d in get_all_registered_dialects():
    assert d.should_quote("Order")
    assert d.should_quote("ORDER")


@pytest.mark.parametrize("dialect_name", get_available_dialect_names())
@pytest.mark.parametrize("ident", ["", "1st", "first name", "a-b", "naïve"])
def test_irregular_identifiers_are_quoted(dialect_name: str, ident: str):
  d = get_active_dialect(dialect_name)
  assert d.should_quote(ident)


def test_user_is_reserved_only_where_the_engine_reserves_it():
  quoted = {d.DIALECT_NAME: d.should_quote("user") for d in get_all_registered_dialects()}
  assert quoted == {"mssql": True, "mysql": False, "postgres": True, "sqlite": False}


def test_embedded_quote_characters_are_escaped():
  rendered = {d.DIALECT_NAME: d.render_identifier('we"ird]`') for d in get_all_registered_dialects()}
  assert rendered["sqlite"] == '"we""ird]`"'
  assert rendered["postgres"] == '"we""ird]`"'
  assert rendered["mysql"] == '`we"ird]```'
  assert rendered["mssql"] == '[we"ird]]`]'


@pytest.mark.parametrize("dialect_name", get_available_dialect_names())
def test_quote_all_identifiers_quotes_plain_names(dialect_name: str):
  d = get_active_dialect(dialect_name).__class__(quote_all_identifiers=True)
  assert d.render_identifier("customer_id") != "customer_id"
  assert _is_quoted("customer_id", d.render_identifier("customer_id"))


def test_quote_all_applies_to_rendered_statements():
  from querykit import render, select
  from querykit.rendering.dialects.sqlite import SqliteDialect

  stmt = select("id").from_table("users").build()
  assert render(stmt, SqliteDialect(quote_all_identifiers=True)).sql == 'SELECT "id" FROM "users"'


def test_schema_qualified_table_quotes_each_part():
  for d in get_all_registered_dialects():
    rendered = d.render_table_identifier("sales", "order")
    assert rendered.startswith("sales.")
    assert _is_quoted("order", rendered[len("sales."):])

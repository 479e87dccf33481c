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
querykit: build SQL statements as immutable trees and render them into
parameterized SQL for SQLite, MySQL, PostgreSQL and SQL Server.

    from querykit import select, col, eq, render

    stmt = select("id", "name").from_table("users").where(eq(col("id"), 42)).build()
    sql, bindings = render(stmt, "postgres")
    # SELECT id, name FROM users WHERE id = $1   (Int64(value=42),)
"""

from .errors import (
  EncodingError,
  MalformedStatement,
  PaginationRequiresOrdering,
  QueryKitError,
  RenderError,
  UnsupportedClause,
)
from .values import (
  NULL,
  Array,
  Bool,
  Bytes,
  Date,
  DateTime,
  Decimal,
  Enum,
  Float64,
  Int64,
  Json,
  Null,
  Text,
  Time,
  Uuid,
  Value,
  Xml,
  to_value,
)
from .rendering.binder import Binder, RenderedQuery
from .rendering.builder import (
  delete_from,
  insert_into,
  insert_mapping,
  select,
  table,
  union,
  update,
  update_mapping,
)
from .rendering.dsl import (
  aggregate_to_string,
  and_,
  asc,
  avg,
  between,
  call,
  cast,
  coalesce,
  col,
  concat,
  contains,
  count,
  desc,
  ends_with,
  eq,
  excluded,
  exists,
  ge,
  gt,
  in_list,
  in_subquery,
  is_not_null,
  is_null,
  json_array_begins_with,
  json_array_contains,
  json_array_ends_with,
  json_array_not_contains,
  json_extract,
  json_type_equals,
  le,
  like,
  lit,
  lower,
  lt,
  matches,
  max_,
  min_,
  ne,
  not_,
  not_exists,
  not_in_list,
  not_like,
  not_matches,
  or_,
  raw,
  row,
  row_number_over,
  row_to_json,
  star,
  starts_with,
  subquery,
  sum_,
  text_search,
  upper,
)
from .rendering.expr import transform
from .rendering.dialects import (
  Dialect,
  MssqlDialect,
  MySqlDialect,
  PostgresDialect,
  SqlDialect,
  SqliteDialect,
  get_active_dialect,
)
from .rendering.renderer import render

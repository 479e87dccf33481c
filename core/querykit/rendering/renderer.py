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

import logging

from ..errors import RenderError
from .binder import RenderedQuery
from .dialects.base import SqlDialect
from .dialects.dialect_factory import DialectSpec, get_active_dialect
from .logical_plan import (
  LogicalDelete,
  LogicalInsert,
  LogicalSelect,
  LogicalUnion,
  LogicalUpdate,
)

logger = logging.getLogger(__name__)

_STATEMENT_KINDS = {
  LogicalSelect: "SELECT",
  LogicalUnion: "UNION",
  LogicalInsert: "INSERT",
  LogicalUpdate: "UPDATE",
  LogicalDelete: "DELETE",
}


def render(statement, dialect: DialectSpec = None) -> RenderedQuery:
  """
  Render a statement (LogicalSelect, LogicalUnion, LogicalInsert,
  LogicalUpdate or LogicalDelete) for a dialect.

  `dialect` may be a name, a Dialect member or an SqlDialect instance; when
  omitted the active dialect is resolved from environment and profile.

  Raises:
      RenderError (or a subclass) if the statement cannot be rendered.
      ValueError if the dialect name is unknown.
  """
  kind = _STATEMENT_KINDS.get(type(statement))
  if kind is None:
    raise RenderError(
      f"Unsupported statement type: {type(statement).__name__}. "
      "Expected LogicalSelect, LogicalUnion, LogicalInsert, LogicalUpdate or LogicalDelete."
    )

  sql_dialect = dialect if isinstance(dialect, SqlDialect) else get_active_dialect(dialect)
  result = sql_dialect.render(statement)

  # Only shape information is logged, bound values may be sensitive.
  logger.debug(
    "Rendered %s for %s: %d chars, %d bindings",
    kind,
    sql_dialect.DIALECT_NAME,
    len(result.sql),
    len(result.bindings),
  )
  return result
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

"""
Error taxonomy for querykit.

Build-time problems (statement shape, native value conversion) derive from
ValueError as well, so callers that already guard against ValueError keep
working. Render-time problems derive from RenderError.
"""


class QueryKitError(Exception):
  """Base class for all errors raised by querykit."""


class MalformedStatement(QueryKitError, ValueError):
  """A clause violates a structural invariant while the statement is built."""


class EncodingError(QueryKitError, ValueError):
  """A native value cannot be represented losslessly as a querykit Value."""


class RenderError(QueryKitError):
  """Rendering a statement for a dialect failed."""


class UnsupportedClause(RenderError):
  """The dialect has no native or emulated form for a requested construct."""

  def __init__(self, dialect: str, clause: str, detail: str | None = None):
    self.dialect = dialect
    self.clause = clause
    self.detail = detail
    msg = f"{clause} is not supported by the {dialect} dialect"
    if detail:
      msg = f"{msg}: {detail}"
    super().__init__(msg)


class PaginationRequiresOrdering(RenderError):
  """Pagination was requested but no ordering key could be resolved."""

  def __init__(self, dialect: str, detail: str | None = None):
    self.dialect = dialect
    msg = (
      f"{dialect} pagination requires an ORDER BY clause; "
      "add an explicit ordering or declare a primary key on the source table"
    )
    if detail:
      msg = f"{msg} ({detail})"
    super().__init__(msg)

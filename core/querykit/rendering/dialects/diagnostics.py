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

from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from ..binder import Binder
from ..expr import BoolConst, ColumnRef
from ..logical_plan import LogicalSelect, SelectItem, SourceTable
from .base import SqlDialect
from .dialect_factory import get_available_dialect_names, get_active_dialect


@dataclass
class DialectDiagnostics:
  """Simple snapshot of a dialect's capabilities and behaviour."""

  name: str
  class_name: str
  paramstyle: str
  supports_returning: bool
  supports_upsert: bool
  supports_conflict_do_nothing: bool
  supports_arrays: bool

  # Rendering examples
  quoted_identifier: str
  sample_placeholders: List[str]
  literal_true: str
  literal_false: str
  sample_concat: str
  sample_pagination: str

  def to_dict(self) -> Dict[str, Any]:
    """Return a JSON-serializable representation."""
    return asdict(self)


def collect_dialect_diagnostics(dialect: SqlDialect) -> DialectDiagnostics:
  """Collect a minimal set of diagnostics for a single dialect instance."""
  b = Binder(dialect)
  literal_true = dialect.render_expr(BoolConst(True), b)
  literal_false = dialect.render_expr(BoolConst(False), b)

  # Placeholders for the first three positions
  placeholders = [dialect.placeholder(i) for i in (1, 2, 3)]

  concat_expr = dialect.concat_expression(["'a'", "'b'", "'c'"])

  # Pagination needs an ordering key on some dialects; the sample table declares one.
  sample = LogicalSelect(
    select_list=(SelectItem(ColumnRef(None, "id")),),
    from_=SourceTable(name="sample", primary_key=("id",)),
    limit=10,
    offset=20,
  )
  pagination_sql = dialect.render(sample).sql

  return DialectDiagnostics(
    name=dialect.DIALECT_NAME or dialect.__class__.__name__.lower(),
    class_name=dialect.__class__.__name__,
    paramstyle=dialect.PARAMSTYLE,
    supports_returning=dialect.supports_returning,
    supports_upsert=dialect.supports_upsert,
    supports_conflict_do_nothing=dialect.supports_conflict_do_nothing,
    supports_arrays=dialect.supports_arrays,
    quoted_identifier=dialect.render_identifier("order"),
    sample_placeholders=placeholders,
    literal_true=literal_true,
    literal_false=literal_false,
    sample_concat=concat_expr,
    sample_pagination=pagination_sql,
  )


def snapshot_all_dialects() -> Dict[str, DialectDiagnostics]:
  """
  Build diagnostics for all registered dialects.

  The keys of the result dict are dialect names as returned by
  get_available_dialect_names().
  """
  result: Dict[str, DialectDiagnostics] = {}

  for name in get_available_dialect_names():
    dialect = get_active_dialect(name)
    result[name] = collect_dialect_diagnostics(dialect)

  return result

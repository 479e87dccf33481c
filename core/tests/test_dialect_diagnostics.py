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
Dialect diagnostics smoke tests.

These tests validate that the diagnostics module can build a consistent
snapshot for all registered dialects.
"""

import json

from querykit.rendering.dialects.dialect_factory import (
  get_available_dialect_names,
  get_active_dialect,
)
from querykit.rendering.dialects.diagnostics import (
  collect_dialect_diagnostics,
  snapshot_all_dialects,
)


def test_collect_dialect_diagnostics_for_each_registered_dialect():
  for name in get_available_dialect_names():
    dialect = get_active_dialect(name)
    diag = collect_dialect_diagnostics(dialect)

    assert diag.name == name
    assert diag.class_name.endswith("Dialect")

    # Basic capabilities are booleans
    assert isinstance(diag.supports_returning, bool)
    assert isinstance(diag.supports_upsert, bool)
    assert isinstance(diag.supports_conflict_do_nothing, bool)
    assert isinstance(diag.supports_arrays, bool)

    assert diag.literal_true and diag.literal_false
    assert len(diag.sample_placeholders) == 3
    assert "order" in diag.quoted_identifier and diag.quoted_identifier != "order"

    # Pagination sample should look like SQL with inline integers
    assert diag.sample_pagination.startswith("SELECT id FROM sample")
    assert "10" in diag.sample_pagination and "20" in diag.sample_pagination


def test_diagnostics_reflect_dialect_differences():
  snapshot = snapshot_all_dialects()

  assert snapshot["postgres"].sample_placeholders == ["$1", "$2", "$3"]
  assert snapshot["mssql"].sample_placeholders == ["@p1", "@p2", "@p3"]
  assert snapshot["sqlite"].sample_placeholders == ["?", "?", "?"]

  assert snapshot["mysql"].literal_true == "1"
  assert snapshot["postgres"].literal_true == "TRUE"
  assert snapshot["mysql"].sample_concat == "CONCAT('a', 'b', 'c')"
  assert snapshot["mssql"].sample_concat == "('a' + 'b' + 'c')"

  assert snapshot["mysql"].supports_returning is False
  assert snapshot["postgres"].supports_arrays is True
  assert snapshot["sqlite"].supports_arrays is False
  assert snapshot["mssql"].sample_pagination == (
    "SELECT id FROM sample ORDER BY sample.id OFFSET 20 ROWS FETCH NEXT 10 ROWS ONLY"
  )


def test_snapshot_all_dialects_returns_all_registered_names():
  snapshot = snapshot_all_dialects()
  names = set(get_available_dialect_names())

  assert set(snapshot.keys()) == names

  for name, diag in snapshot.items():
    as_dict = diag.to_dict()
    for key in [
      "name",
      "class_name",
      "paramstyle",
      "supports_returning",
      "supports_upsert",
      "quoted_identifier",
      "literal_true",
      "literal_false",
      "sample_concat",
      "sample_pagination",
    ]:
      assert key in as_dict
    # to_dict output is JSON serializable
    json.dumps(as_dict)

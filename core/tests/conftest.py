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


@pytest.fixture(autouse=True)
def clean_querykit_env(monkeypatch):
  """Keep dialect / profile environment overrides out of every test by default."""
  for key in (
    "QUERYKIT_SQL_DIALECT",
    "QUERYKIT_DIALECT",
    "QUERYKIT_PROFILE",
    "QUERYKIT_PROFILES_PATH",
    "QUERYKIT_QUOTE_ALL_IDENTIFIERS",
  ):
    monkeypatch.delenv(key, raising=False)
  yield

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

from querykit.utils.env import env_bool, env_str


def test_env_str_default_for_unset_and_empty(monkeypatch):
  monkeypatch.delenv("QK_TEST_VALUE", raising=False)
  assert env_str("QK_TEST_VALUE", "fallback") == "fallback"
  monkeypatch.setenv("QK_TEST_VALUE", "")
  assert env_str("QK_TEST_VALUE", "fallback") == "fallback"
  monkeypatch.setenv("QK_TEST_VALUE", "mysql")
  assert env_str("QK_TEST_VALUE", "fallback") == "mysql"


@pytest.mark.parametrize(
  "raw, expected",
  [
    ("1", True),
    ("true", True),
    ("YES", True),
    (" on ", True),
    ("0", False),
    ("false", False),
    ("nope", False),
  ],
)
def test_env_bool_parsing(monkeypatch, raw, expected):
  monkeypatch.setenv("QK_TEST_FLAG", raw)
  assert env_bool("QK_TEST_FLAG") is expected


def test_env_bool_default_when_blank(monkeypatch):
  monkeypatch.setenv("QK_TEST_FLAG", "  ")
  assert env_bool("QK_TEST_FLAG", None) is None
  monkeypatch.delenv("QK_TEST_FLAG")
  assert env_bool("QK_TEST_FLAG") is False

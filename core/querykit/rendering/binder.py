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

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, List, Tuple

from ..values import Value, to_value

if TYPE_CHECKING:
  from .dialects.base import SqlDialect


class Binder:
  """
  Placeholder cursor for a single render.

  Every value reaching the SQL text goes through bind(), which records the
  value and returns the dialect's placeholder token for its position. A new
  Binder is created per render, so dialect instances stay stateless.
  """

  def __init__(self, dialect: "SqlDialect"):
    self._dialect = dialect
    self._values: List[Value] = []

  def bind(self, value: Any) -> str:
    self._values.append(to_value(value))
    return self._dialect.placeholder(len(self._values))

  @property
  def bindings(self) -> Tuple[Value, ...]:
    return tuple(self._values)

  def __len__(self) -> int:
    return len(self._values)


@dataclass(frozen=True)
class RenderedQuery:
  """
  Result of rendering a statement.

  bindings holds the Values in placeholder order; params holds the same
  values encoded for the target driver (see SqlDialect.encode_value).
  Unpacks as (sql, bindings).
  """
  sql: str
  bindings: Tuple[Value, ...]
  params: Tuple[Any, ...]
  dialect: str
  paramstyle: str

  def __iter__(self) -> Iterator[Any]:
    yield self.sql
    yield self.bindings

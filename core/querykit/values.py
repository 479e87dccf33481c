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

import datetime
import decimal
import enum
import json
import uuid
from dataclasses import dataclass
from typing import Any, ClassVar, Tuple

from .errors import EncodingError

"""
Value model.

Every operand that ends up as a bind parameter is one of the Value variants
below. Values are frozen; equality and ordering only hold between instances of
the same variant (Int64(1) != Float64(1.0), and ordering them raises TypeError).
"""

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class Value:
  """Marker base class for all value variants."""

  kind: ClassVar[str] = "value"

  def to_native(self) -> Any:
    """Return the plain Python object carried by this value."""
    raise NotImplementedError

  @property
  def is_null(self) -> bool:
    return False


@dataclass(frozen=True, order=True)
class Null(Value):
  kind: ClassVar[str] = "null"

  def to_native(self) -> Any:
    return None

  @property
  def is_null(self) -> bool:
    return True


@dataclass(frozen=True, order=True)
class Int64(Value):
  value: int
  kind: ClassVar[str] = "int64"

  def __post_init__(self):
    if isinstance(self.value, bool) or not isinstance(self.value, int):
      raise EncodingError(f"Int64 expects an int, got {type(self.value).__name__}")
    if not INT64_MIN <= self.value <= INT64_MAX:
      raise EncodingError(f"Integer {self.value} is outside the signed 64-bit range")

  def to_native(self) -> int:
    return self.value


@dataclass(frozen=True, order=True)
class Float64(Value):
  value: float
  kind: ClassVar[str] = "float64"

  def __post_init__(self):
    if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
      raise EncodingError(f"Float64 expects a float, got {type(self.value).__name__}")
    object.__setattr__(self, "value", float(self.value))

  def to_native(self) -> float:
    return self.value


@dataclass(frozen=True, order=True)
class Text(Value):
  value: str
  kind: ClassVar[str] = "text"

  def __post_init__(self):
    if not isinstance(self.value, str):
      raise EncodingError(f"Text expects a str, got {type(self.value).__name__}")

  def to_native(self) -> str:
    return self.value


@dataclass(frozen=True, order=True)
class Bytes(Value):
  value: bytes
  kind: ClassVar[str] = "bytes"

  def __post_init__(self):
    if isinstance(self.value, (bytearray, memoryview)):
      object.__setattr__(self, "value", bytes(self.value))
    elif not isinstance(self.value, bytes):
      raise EncodingError(f"Bytes expects bytes, got {type(self.value).__name__}")

  def to_native(self) -> bytes:
    return self.value


@dataclass(frozen=True, order=True)
class Bool(Value):
  value: bool
  kind: ClassVar[str] = "bool"

  def __post_init__(self):
    if not isinstance(self.value, bool):
      raise EncodingError(f"Bool expects a bool, got {type(self.value).__name__}")

  def to_native(self) -> bool:
    return self.value


@dataclass(frozen=True, order=True)
class DateTime(Value):
  value: datetime.datetime
  kind: ClassVar[str] = "datetime"

  def __post_init__(self):
    if not isinstance(self.value, datetime.datetime):
      raise EncodingError(f"DateTime expects a datetime, got {type(self.value).__name__}")

  def to_native(self) -> datetime.datetime:
    return self.value


@dataclass(frozen=True, order=True)
class Date(Value):
  value: datetime.date
  kind: ClassVar[str] = "date"

  def __post_init__(self):
    if isinstance(self.value, datetime.datetime) or not isinstance(self.value, datetime.date):
      raise EncodingError(f"Date expects a date, got {type(self.value).__name__}")

  def to_native(self) -> datetime.date:
    return self.value


@dataclass(frozen=True, order=True)
class Time(Value):
  value: datetime.time
  kind: ClassVar[str] = "time"

  def __post_init__(self):
    if not isinstance(self.value, datetime.time):
      raise EncodingError(f"Time expects a time, got {type(self.value).__name__}")

  def to_native(self) -> datetime.time:
    return self.value


@dataclass(frozen=True, order=True)
class Uuid(Value):
  value: uuid.UUID
  kind: ClassVar[str] = "uuid"

  def __post_init__(self):
    if isinstance(self.value, str):
      try:
        object.__setattr__(self, "value", uuid.UUID(self.value))
      except ValueError as exc:
        raise EncodingError(f"Invalid UUID string: {self.value!r}") from exc
    elif not isinstance(self.value, uuid.UUID):
      raise EncodingError(f"Uuid expects a UUID, got {type(self.value).__name__}")

  def to_native(self) -> uuid.UUID:
    return self.value


@dataclass(frozen=True)
class Json(Value):
  """
  JSON document, stored as canonical text (sorted keys, compact separators)
  so the value stays immutable and hashable. JSON values have no ordering.
  """
  text: str
  kind: ClassVar[str] = "json"

  @classmethod
  def from_data(cls, data: Any) -> "Json":
    try:
      text = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
      raise EncodingError(f"Value is not JSON serializable: {exc}") from exc
    return cls(text=text)

  def to_native(self) -> Any:
    return json.loads(self.text)


@dataclass(frozen=True, order=True)
class Decimal(Value):
  value: decimal.Decimal
  kind: ClassVar[str] = "decimal"

  def __post_init__(self):
    if not isinstance(self.value, decimal.Decimal):
      raise EncodingError(f"Decimal expects a decimal.Decimal, got {type(self.value).__name__}")
    if not self.value.is_finite():
      raise EncodingError(f"Non-finite decimal {self.value} cannot be bound")

  def to_native(self) -> decimal.Decimal:
    return self.value


@dataclass(frozen=True, order=True)
class Enum(Value):
  """Label of a database enum type, bound as text."""
  value: str
  kind: ClassVar[str] = "enum"

  def __post_init__(self):
    if not isinstance(self.value, str):
      raise EncodingError(f"Enum expects a str label, got {type(self.value).__name__}")

  def to_native(self) -> str:
    return self.value


@dataclass(frozen=True, order=True)
class Xml(Value):
  """XML document, bound as text."""
  value: str
  kind: ClassVar[str] = "xml"

  def __post_init__(self):
    if not isinstance(self.value, str):
      raise EncodingError(f"Xml expects a str, got {type(self.value).__name__}")

  def to_native(self) -> str:
    return self.value


@dataclass(frozen=True)
class Array(Value):
  """
  Ordered sequence of values. Non-null items must share one kind; nested
  arrays are allowed. Only PostgreSQL binds arrays natively.
  """
  items: Tuple[Value, ...]
  kind: ClassVar[str] = "array"

  def __post_init__(self):
    items = tuple(to_value(i) for i in self.items)
    kinds = {i.kind for i in items if not i.is_null}
    if len(kinds) > 1:
      raise EncodingError(f"Array items must share one kind, got {', '.join(sorted(kinds))}")
    object.__setattr__(self, "items", items)

  def to_native(self) -> list:
    return [i.to_native() for i in self.items]


NULL = Null()


def to_value(obj: Any) -> Value:
  """
  Convert a native Python object into a Value.

  bool is checked before int (bool is an int subclass) and datetime before
  date for the same reason. dict / list / tuple become Json; Array, Xml
  and Enum values are only produced explicitly (or from enum.Enum members).
  """
  if isinstance(obj, Value):
    return obj
  if obj is None:
    return NULL
  if isinstance(obj, enum.Enum):
    # Checked first: str and int mixin enums are instances of their mixin too.
    if isinstance(obj.value, str):
      return Enum(obj.value)
    return to_value(obj.value)
  if isinstance(obj, bool):
    return Bool(obj)
  if isinstance(obj, int):
    return Int64(obj)
  if isinstance(obj, float):
    return Float64(obj)
  if isinstance(obj, str):
    return Text(obj)
  if isinstance(obj, (bytes, bytearray, memoryview)):
    return Bytes(bytes(obj))
  if isinstance(obj, decimal.Decimal):
    return Decimal(obj)
  if isinstance(obj, uuid.UUID):
    return Uuid(obj)
  if isinstance(obj, datetime.datetime):
    return DateTime(obj)
  if isinstance(obj, datetime.date):
    return Date(obj)
  if isinstance(obj, datetime.time):
    return Time(obj)
  if isinstance(obj, (dict, list, tuple)):
    return Json.from_data(obj)

  raise EncodingError(f"Unsupported value type: {type(obj).__name__}")

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
from pathlib import Path
from typing import Optional

import yaml

from ..utils.env import env_str

"""
Profile loading for querykit.

Profiles define environment-specific rendering defaults:
- the default SQL dialect used when none is passed explicitly
- whether every identifier is quoted, not only the ones that require it

Example querykit_profiles.yaml:

  active_profile: dev
  profiles:
    dev:
      default_dialect: sqlite
    prod:
      default_dialect: postgres
      quote_all_identifiers: true
"""

PROFILES_FILENAME = "querykit_profiles.yaml"


@dataclass
class Profile:
  name: str

  # Dialect used for SQL rendering (unless env override)
  default_dialect: str = "sqlite"

  # Quote every identifier instead of only reserved / irregular ones
  quote_all_identifiers: bool = False


def _find_profiles_path(explicit_path: str | None = None) -> Path:
  """
  Locate querykit_profiles.yaml in several common locations:

  1. explicit_path argument (if provided and exists)
  2. QUERYKIT_PROFILES_PATH env var (if set and exists)
  3. ./config/ relative to the CWD, then /etc/querykit/

  Raises:
      FileNotFoundError: if no suitable file can be found.
  """
  candidates: list[Path] = []

  if explicit_path:
    candidates.append(Path(explicit_path))

  env_path = env_str("QUERYKIT_PROFILES_PATH")
  if env_path:
    candidates.append(Path(env_path))

  candidates += [
    Path.cwd() / "config" / PROFILES_FILENAME,
    Path("/etc/querykit") / PROFILES_FILENAME,
  ]

  for c in candidates:
    if c and c.is_file():
      return c

  raise FileNotFoundError(
    f"{PROFILES_FILENAME} not found in expected locations. "
    "Provide an explicit path or configure QUERYKIT_PROFILES_PATH."
  )


def _as_bool(value, key: str) -> bool:
  if isinstance(value, bool):
    return value
  if value is None:
    return False
  raise ValueError(f"Profile option {key!r} must be a boolean, got {value!r}.")


def load_profile(profiles_path: Optional[str] = None) -> Profile:
  """
  Load and return the current active profile.

  Resolution order:
    - QUERYKIT_PROFILE env var
    - `active_profile` key in querykit_profiles.yaml
    - default 'dev'
  """
  path = _find_profiles_path(profiles_path)

  with open(path, "r", encoding="utf-8") as f:
    data = yaml.safe_load(f) or {}

  if not isinstance(data, dict):
    raise ValueError(f"{path} must contain a mapping at the top level.")

  active = env_str("QUERYKIT_PROFILE") or data.get("active_profile") or "dev"
  profiles = data.get("profiles") or {}

  if active not in profiles:
    available = ", ".join(sorted(profiles)) if profiles else "(none)"
    raise KeyError(
      f"Active profile '{active}' not found in {PROFILES_FILENAME} "
      f"at {path}. Available profiles: {available}."
    )

  p = profiles[active] or {}

  return Profile(
    name=active,
    default_dialect=str(p.get("default_dialect") or "sqlite").lower(),
    quote_all_identifiers=_as_bool(p.get("quote_all_identifiers"), "quote_all_identifiers"),
  )

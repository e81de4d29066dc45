from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except Exception:
    import tomli as toml  # type: ignore

from tilefactors.utility import UserInputError

ENV_VAR = "TILEFACTORS_CONFIG"


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [PROFILE] section).
    .as_dict() feeds runtime.apply().

    Added fields:
      - name:        resolved profile name (FILE.stem if not provided in [PROFILE])
      - description: one-line description from [PROFILE] or "(no description)"
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def default_settings_path() -> Path | None:
    env = os.environ.get(ENV_VAR)
    if env:
        return Path(env).expanduser().resolve()
    return None


# --- I/O -------------------------------------------------------------------


def _load_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [PROFILE] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("PROFILE") or {}
    if "PROFILE" in raw:
        raw = {k: v for k, v in raw.items() if k != "PROFILE"}

    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))

    return raw, name, description


def _check_types(data: dict[str, Any], path: Path) -> None:
    search = data.get("SEARCH", {}) or {}
    lim = search.get("MAX_CANDIDATES")
    if lim is not None and (not isinstance(lim, int) or isinstance(lim, bool) or lim < 0):
        raise UserInputError(f"{path.name}: SEARCH.MAX_CANDIDATES must be a non-negative integer.")
    seed = (data.get("SAMPLING", {}) or {}).get("SEED")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise UserInputError(f"{path.name}: SAMPLING.SEED must be an integer.")
    color = (data.get("DISPLAY", {}) or {}).get("COLOR")
    if color is not None and not isinstance(color, bool):
        raise UserInputError(f"{path.name}: DISPLAY.COLOR must be true or false.")


# --- Public API ------------------------------------------------------------


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load a settings file (default: $TILEFACTORS_CONFIG), strip the [PROFILE]
    metadata and return Settings(data=..., name=..., description=..., _source=path).
    With no file at all, returns empty settings so built-in defaults apply.
    """
    if path is None:
        path = default_settings_path()
    if path is None:
        return Settings(data={}, name="default", description="built-in defaults")

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")

    raw = _load_toml(path)
    data, resolved_name, description = _split_profile_data(raw, path.stem)
    _check_types(data, path)

    return Settings(
        data=data,
        name=resolved_name,
        description=description,
        _source=path,
    )

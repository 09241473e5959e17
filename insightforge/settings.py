from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv


DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


@dataclass(frozen=True)
class ColumnDefaults:
    """Positional column indices used when the user has not picked a column.

    These depend on the uploaded schema and are fragile; they are kept
    positional so existing dashboards behave the same.
    """

    column: int = 6
    group_by: int = 1
    row_field: int = 1
    value_field: int = 6
    multi_column: Tuple[int, ...] = (5, 6)


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    columns: ColumnDefaults = field(default_factory=ColumnDefaults)
    default_sub_method: str = "pearson"
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    max_sessions: int = 256


def _as_int(value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except Exception:
        return default


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        out = float(value)
    except Exception:
        return default
    return out if out > 0 else default


def _as_int_tuple(value: Optional[str], default: Tuple[int, ...]) -> Tuple[int, ...]:
    if not value:
        return default
    out = []
    for token in value.split(","):
        try:
            out.append(int(token))
        except Exception:
            continue
    return tuple(out) or default


def _as_str_tuple(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    items = tuple(s.strip() for s in value.split(",") if s.strip())
    return items or default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from ``env``, or from the process environment and a local ``.env`` file."""
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
    base = ColumnDefaults()
    columns = ColumnDefaults(
        column=_as_int(env.get("INSIGHTFORGE_COLUMN_INDEX"), base.column),
        group_by=_as_int(env.get("INSIGHTFORGE_GROUP_BY_INDEX"), base.group_by),
        row_field=_as_int(env.get("INSIGHTFORGE_ROW_FIELD_INDEX"), base.row_field),
        value_field=_as_int(env.get("INSIGHTFORGE_VALUE_FIELD_INDEX"), base.value_field),
        multi_column=_as_int_tuple(env.get("INSIGHTFORGE_MULTI_COLUMN_INDICES"), base.multi_column),
    )
    return Settings(
        api_url=(env.get("INSIGHTFORGE_API_URL") or DEFAULT_API_URL).rstrip("/"),
        timeout=_as_float(env.get("INSIGHTFORGE_TIMEOUT"), 30.0),
        columns=columns,
        default_sub_method=(env.get("INSIGHTFORGE_DEFAULT_SUB_METHOD") or "pearson").strip().lower(),
        cors_origins=_as_str_tuple(env.get("INSIGHTFORGE_CORS_ORIGINS"), DEFAULT_CORS_ORIGINS),
        max_sessions=max(1, _as_int(env.get("INSIGHTFORGE_MAX_SESSIONS"), 256)),
    )

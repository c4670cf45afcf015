from __future__ import annotations

import json
import os
import tempfile
import warnings
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/paperfav/config.json").expanduser()
DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_DATA_BRANCH = "data"

CONFIG_ENV_OVERRIDES = {
    "repo_owner": "PAPERFAV_REPO_OWNER",
    "repo_name": "PAPERFAV_REPO_NAME",
    "data_branch": "PAPERFAV_DATA_BRANCH",
    "api_base_url": "PAPERFAV_API_BASE_URL",
    "db_path": "PAPERFAV_DB",
    "request_timeout_s": "PAPERFAV_REQUEST_TIMEOUT_S",
    "sync_max_attempts": "PAPERFAV_SYNC_MAX_ATTEMPTS",
}

_INT_KEYS = {"request_timeout_s", "sync_max_attempts"}


@dataclass
class PaperfavConfig:
    repo_owner: str = ""
    repo_name: str = ""
    data_branch: str = DEFAULT_DATA_BRANCH
    api_base_url: str = DEFAULT_API_BASE_URL
    # Empty means the database module's default location.
    db_path: str = ""
    request_timeout_s: int = 10
    # Total read/write cycles per sync; 2 means one retry after a conflict.
    sync_max_attempts: int = 2


CONFIG_KEYS = frozenset(item.name for item in fields(PaperfavConfig))


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("PAPERFAV_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    """Raw settings from the config file; a missing or blank file is empty.

    Raises ``ValueError`` naming the file when it is not a JSON object.
    """
    config_path = get_config_path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid config json in {config_path}: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"config must be an object: {config_path}")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    """Persist the known settings, replacing the file in one step."""
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    known = {key: value for key, value in data.items() if key in CONFIG_KEYS}
    fd, tmp_name = tempfile.mkstemp(prefix=".config-", dir=config_path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(known, handle, ensure_ascii=False, indent=2, sort_keys=True)
            handle.write("\n")
        os.replace(tmp_name, config_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed < 1:
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def config_from_dict(data: dict[str, Any]) -> PaperfavConfig:
    """Settings from ``data`` with ``PAPERFAV_*`` environment overrides on top."""
    cfg = _apply_dict(PaperfavConfig(), data)
    return _apply_dict(cfg, get_env_overrides())


def load_config(path: Path | None = None) -> PaperfavConfig:
    """Raises ``ValueError`` when the config file exists but is not a JSON object."""
    return config_from_dict(read_config_file(path))


def _apply_dict(cfg: PaperfavConfig, data: dict[str, Any]) -> PaperfavConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        if key in _INT_KEYS:
            setattr(cfg, key, _parse_int(value, getattr(cfg, key), key=key))
            continue
        if value is None:
            continue
        setattr(cfg, key, str(value).strip())
    if not cfg.data_branch:
        cfg.data_branch = DEFAULT_DATA_BRANCH
    if not cfg.api_base_url:
        cfg.api_base_url = DEFAULT_API_BASE_URL
    return cfg

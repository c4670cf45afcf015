from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich import print
from rich.markup import escape

from paperfav.config import PaperfavConfig, load_config, read_config_file, write_config_file
from paperfav.db import DEFAULT_DB_PATH, SqliteKeyValue
from paperfav.remote import RemoteContentClient, RepoConfig
from paperfav.store import FavoriteStore


def _invalid_config(exc: Exception) -> typer.Exit:
    print(f"[red]Invalid config file: {escape(str(exc))}[/red]")
    return typer.Exit(code=1)


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except (OSError, ValueError) as exc:
        raise _invalid_config(exc) from exc


def write_config_or_exit(data: dict[str, Any]) -> Path:
    try:
        return write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc


def load_config_or_exit() -> PaperfavConfig:
    try:
        return load_config()
    except (OSError, ValueError) as exc:
        raise _invalid_config(exc) from exc


def store_from_path(db_path: str | None) -> FavoriteStore:
    path = db_path or load_config_or_exit().db_path or DEFAULT_DB_PATH
    return FavoriteStore(SqliteKeyValue(Path(path).expanduser()))


def client_or_exit(*, require_repo: bool = True) -> RemoteContentClient:
    try:
        repo = RepoConfig.from_config(load_config_or_exit(), require_repo=require_repo)
    except ValueError as exc:
        print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    return RemoteContentClient(repo)

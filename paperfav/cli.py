from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich import print

from . import __version__
from .commands.common import (
    client_or_exit,
    load_config_or_exit,
    read_config_or_exit,
    store_from_path,
    write_config_or_exit,
)
from .commands.config_cmds import configure_cmd
from .commands.favorites_cmds import add_cmd, list_cmd, remove_cmd
from .commands.sync_cmds import login_cmd, logout_cmd, pull_cmd, status_cmd, sync_cmd
from .remote import RemoteContentClient
from .store import FavoriteStore

app = typer.Typer(help="paperfav: favorite papers synced to a GitHub data branch")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log sync activity"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def _store(db_path: str | None) -> FavoriteStore:
    return store_from_path(db_path)


def _client(*, require_repo: bool = True) -> RemoteContentClient:
    return client_or_exit(require_repo=require_repo)


@app.command("add")
def add(
    ids: list[str] = typer.Argument(..., help="Paper IDs to favorite"),
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """Add favorites to the local list."""

    add_cmd(store_from_path=_store, ids=ids, db_path=db_path)


@app.command("remove")
def remove(
    ids: list[str] = typer.Argument(..., help="Paper IDs to unfavorite"),
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """Remove favorites from the local list."""

    remove_cmd(store_from_path=_store, ids=ids, db_path=db_path)


@app.command("list")
def list_favorites(
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """List local favorites."""

    list_cmd(store_from_path=_store, db_path=db_path)


@app.command("configure")
def configure(
    repo_owner: str = typer.Option(None, help="Owner of the favorites repository"),
    repo_name: str = typer.Option(None, help="Name of the favorites repository"),
    data_branch: str = typer.Option(None, help="Branch holding favorites documents"),
    api_base_url: str = typer.Option(None, help="Contents API base URL"),
) -> None:
    """Set where favorites documents are stored."""

    configure_cmd(
        read_config=read_config_or_exit,
        write_config=write_config_or_exit,
        updates={
            "repo_owner": repo_owner,
            "repo_name": repo_name,
            "data_branch": data_branch,
            "api_base_url": api_base_url,
        },
    )


@app.command("login")
def login(
    token: str = typer.Argument(..., help="Access token with contents write access"),
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """Validate and store an access token."""

    login_cmd(store_from_path=_store, client_factory=_client, token=token, db_path=db_path)


@app.command("logout")
def logout(
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """Forget the stored token and login."""

    logout_cmd(store_from_path=_store, db_path=db_path)


@app.command("sync")
def sync(
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
    index: Path = typer.Option(None, help="JSON paper index used for titles and links"),
) -> None:
    """Push local favorites to the remote document."""

    sync_cmd(
        store_from_path=_store,
        client_factory=_client,
        load_config=load_config_or_exit,
        db_path=db_path,
        index=index,
    )


@app.command("pull")
def pull(
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """Merge remote favorites into the local list."""

    pull_cmd(store_from_path=_store, client_factory=_client, db_path=db_path)


@app.command("status")
def status(
    db_path: str = typer.Option(None, envvar="PAPERFAV_DB", help="Path to SQLite database"),
) -> None:
    """Show sync status."""

    status_cmd(store_from_path=_store, db_path=db_path)


@app.command("version")
def version() -> None:
    """Print version."""

    print(__version__)


def main() -> None:
    app()

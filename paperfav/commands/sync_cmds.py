from __future__ import annotations

from pathlib import Path

import typer
from rich import print
from rich.markup import escape

from paperfav.errors import InvalidCredentialsError, PaperfavError
from paperfav.favorites import load_metadata_index
from paperfav.sync import (
    Failed,
    NotConfigured,
    Succeeded,
    SyncResult,
    pull_remote_favorites,
    sync_favorites,
)

NOT_CONFIGURED_MESSAGE = (
    "[yellow]Favorites sync not configured (run `paperfav login TOKEN`)[/yellow]"
)


def login_cmd(*, store_from_path, client_factory, token: str, db_path: str | None) -> None:
    client = client_factory(require_repo=False)
    try:
        login = client.validate_credentials(token)
    except (InvalidCredentialsError, OSError) as exc:
        print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    store = store_from_path(db_path)
    try:
        store.set_token(token)
        store.set_login(login)
    finally:
        store.close()
    print(f"[green]Logged in as {escape(login)}[/green]")


def logout_cmd(*, store_from_path, db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        store.clear_token()
        store.clear_login()
    finally:
        store.close()
    print("[yellow]Favorites sync disabled[/yellow]")


def sync_cmd(
    *,
    store_from_path,
    client_factory,
    load_config,
    db_path: str | None,
    index: Path | None,
) -> None:
    metadata = None
    if index is not None:
        try:
            metadata = load_metadata_index(index)
        except (OSError, ValueError) as exc:
            print(f"[red]Invalid paper index: {escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
    store = store_from_path(db_path)
    try:
        if not store.is_sync_enabled():
            result: SyncResult = NotConfigured()
        else:
            config = load_config()
            result = sync_favorites(
                store,
                client_factory(),
                metadata=metadata,
                max_attempts=config.sync_max_attempts,
            )
    finally:
        store.close()
    if isinstance(result, NotConfigured):
        print(NOT_CONFIGURED_MESSAGE)
        return
    if isinstance(result, Failed):
        print(f"[red]{escape(result.message)}[/red]")
        raise typer.Exit(code=1)
    assert isinstance(result, Succeeded)
    print(f"[green]Favorites synced at {result.synced_at}[/green]")


def pull_cmd(*, store_from_path, client_factory, db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        if not store.is_sync_enabled():
            print(NOT_CONFIGURED_MESSAGE)
            return
        before = len(store.get_favorite_ids())
        merged = pull_remote_favorites(store, client_factory())
    except (PaperfavError, OSError) as exc:
        print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    finally:
        store.close()
    added = len(merged) - before
    print(f"[green]Merged remote favorites: {len(merged)} total, {added} new[/green]")


def status_cmd(*, store_from_path, db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        state = store.get_sync_state()
        login = store.get_login()
        count = len(store.get_favorite_ids())
    finally:
        store.close()
    print("[bold]Favorites sync[/bold]")
    print(f"- Enabled: {state.enabled}")
    print(f"- Login: {escape(login) if login else '(none)'}")
    print(f"- Favorites: {count}")
    print(f"- Last sync: {state.last_sync_at or 'never'}")
    if state.pending:
        print(f"- Pending: yes ({escape(state.last_error)})")
    else:
        print("- Pending: no")

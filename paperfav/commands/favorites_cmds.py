from __future__ import annotations

from rich import print
from rich.markup import escape


def add_cmd(*, store_from_path, ids: list[str], db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        added = store.add_favorites(ids)
    finally:
        store.close()
    if not added:
        print("[yellow]No new favorites added[/yellow]")
        return
    print(f"[green]Added {len(added)} favorite(s)[/green]")


def remove_cmd(*, store_from_path, ids: list[str], db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        removed = store.remove_favorites(ids)
    finally:
        store.close()
    if not removed:
        print("[yellow]Favorite not found[/yellow]")
        return
    print(f"[green]Removed {len(removed)} favorite(s)[/green]")


def list_cmd(*, store_from_path, db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        favorites = store.get_favorite_ids()
    finally:
        store.close()
    if not favorites:
        print("[yellow]No favorites yet[/yellow]")
        return
    for favorite_id in favorites:
        print(f"- {escape(favorite_id)}")

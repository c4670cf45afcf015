from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, TypedDict

DOCUMENT_VERSION = 1


class FavoriteItem(TypedDict):
    paper_id: str
    added_at: str
    title: str
    abs_url: str
    date: str


class FavoriteDocument(TypedDict):
    version: int
    owner: str
    updated_at: str
    items: list[FavoriteItem]


MetadataLookup = Mapping[str, Mapping[str, Any]]


def normalize_favorite_ids(ids: object) -> list[str]:
    if not isinstance(ids, (list, tuple)):
        return []
    seen: set[str] = set()
    out: list[str] = []
    for value in ids:
        favorite_id = str(value or "").strip()
        if not favorite_id or favorite_id in seen:
            continue
        seen.add(favorite_id)
        out.append(favorite_id)
    return out


def favorite_id_list(ids: str | Iterable[object]) -> list[object]:
    """A single ID string counts as one ID, not as its characters."""
    if isinstance(ids, str):
        return [ids]
    return list(ids)


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def normalize_remote_items(items: object) -> list[FavoriteItem]:
    if not isinstance(items, list):
        return []
    out: list[FavoriteItem] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        paper_id = _text(item.get("paper_id")).strip()
        if not paper_id:
            continue
        out.append(
            {
                "paper_id": paper_id,
                "added_at": _text(item.get("added_at")),
                "title": _text(item.get("title")),
                "abs_url": _text(item.get("abs_url")),
                "date": _text(item.get("date")),
            }
        )
    return out


def merge_favorite_ids(local_ids: object, remote_items: object) -> list[str]:
    """Union of remote and local IDs, remote first.

    Display-only reconciliation: remote-only IDs are kept. The write path
    uses :func:`reconcile`, where the local set is authoritative.
    """
    merged: dict[str, None] = {}
    for item in normalize_remote_items(remote_items):
        merged.setdefault(item["paper_id"], None)
    for favorite_id in normalize_favorite_ids(local_ids):
        merged.setdefault(favorite_id, None)
    return list(merged)


def reconcile(
    login: str,
    local_ids: object,
    remote_items: object,
    metadata: MetadataLookup | None,
    now: str,
) -> FavoriteDocument:
    remote_by_id = {item["paper_id"]: item for item in normalize_remote_items(remote_items)}
    lookup = metadata or {}
    items: list[FavoriteItem] = []
    for paper_id in normalize_favorite_ids(local_ids):
        snapshot = lookup.get(paper_id) or {}
        remote = remote_by_id.get(paper_id)
        items.append(
            {
                "paper_id": paper_id,
                "added_at": (remote["added_at"] if remote else "") or now,
                "title": _first(snapshot.get("title"), remote and remote["title"]) or paper_id,
                "abs_url": _first(
                    snapshot.get("abs_url"), snapshot.get("url"), remote and remote["abs_url"]
                ),
                "date": _first(snapshot.get("date"), remote and remote["date"]),
            }
        )
    return {
        "version": DOCUMENT_VERSION,
        "owner": login,
        "updated_at": now,
        "items": items,
    }


def _first(*candidates: object) -> str:
    for candidate in candidates:
        if candidate:
            return str(candidate)
    return ""


def build_metadata_index(entries: Iterable[Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    index: dict[str, dict[str, Any]] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        paper_id = _text(entry.get("paper_id") or entry.get("id")).strip()
        if paper_id and paper_id not in index:
            index[paper_id] = dict(entry)
    return index


def load_metadata_index(path: Path) -> dict[str, dict[str, Any]]:
    raw = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid paper index json") from exc
    if isinstance(data, dict):
        papers = data.get("papers")
        if isinstance(papers, list):
            return build_metadata_index(papers)
        return {
            str(key).strip(): dict(value)
            for key, value in data.items()
            if str(key).strip() and isinstance(value, dict)
        }
    if isinstance(data, list):
        return build_metadata_index(data)
    raise ValueError("paper index must be an object or a list")

from __future__ import annotations

import json
from collections.abc import Iterable, MutableMapping

from .favorites import favorite_id_list, normalize_favorite_ids
from .models import Credentials, SyncPendingState, SyncState
from .utils import parse_or_default

STORAGE_KEYS = {
    "favorite_paper_ids": "paperfav.favorite_paper_ids",
    "favorite_sync_pending": "paperfav.favorite_sync_pending",
    "favorite_token": "paperfav.favorite_token",
    "favorite_login": "paperfav.favorite_login",
    "favorite_last_sync_at": "paperfav.favorite_last_sync_at",
}


class FavoriteStore:
    """Favorite IDs, stored credentials and sync bookkeeping.

    Every read is total: missing or corrupt values degrade to an empty
    default instead of raising.
    """

    def __init__(self, backend: MutableMapping[str, str]) -> None:
        self.backend = backend

    def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if callable(close):
            close()

    def _get_text(self, name: str) -> str:
        return (self.backend.get(STORAGE_KEYS[name]) or "").strip()

    def _set_text(self, name: str, value: object) -> None:
        self.backend[STORAGE_KEYS[name]] = str(value or "").strip()

    def _remove(self, name: str) -> None:
        self.backend.pop(STORAGE_KEYS[name], None)

    def get_favorite_ids(self) -> list[str]:
        raw = self.backend.get(STORAGE_KEYS["favorite_paper_ids"])
        return normalize_favorite_ids(parse_or_default(raw, []))

    def set_favorite_ids(self, ids: str | Iterable[object]) -> list[str]:
        normalized = normalize_favorite_ids(favorite_id_list(ids))
        self.backend[STORAGE_KEYS["favorite_paper_ids"]] = json.dumps(normalized)
        return normalized

    def add_favorites(self, ids: str | Iterable[object]) -> list[str]:
        """Append new IDs after the existing ones; returns the IDs actually added."""
        current = self.get_favorite_ids()
        updated = self.set_favorite_ids([*current, *favorite_id_list(ids)])
        return updated[len(current) :]

    def remove_favorites(self, ids: str | Iterable[object]) -> list[str]:
        """Drop the given IDs; returns the ones that were present."""
        targets = set(normalize_favorite_ids(favorite_id_list(ids)))
        current = self.get_favorite_ids()
        self.set_favorite_ids([i for i in current if i not in targets])
        return [i for i in current if i in targets]

    def get_token(self) -> str:
        return self._get_text("favorite_token")

    def set_token(self, token: str) -> None:
        self._set_text("favorite_token", token)

    def clear_token(self) -> None:
        self._remove("favorite_token")

    def get_login(self) -> str:
        return self._get_text("favorite_login")

    def set_login(self, login: str) -> None:
        self._set_text("favorite_login", login)

    def clear_login(self) -> None:
        self._remove("favorite_login")

    def get_credentials(self) -> Credentials | None:
        token = self.get_token()
        login = self.get_login()
        if not token or not login:
            return None
        return Credentials(token=token, login=login)

    def is_sync_enabled(self) -> bool:
        return self.get_credentials() is not None

    def get_last_sync_at(self) -> str:
        return self._get_text("favorite_last_sync_at")

    def set_last_sync_at(self, iso_time: str | None) -> None:
        if not iso_time:
            return
        self.backend[STORAGE_KEYS["favorite_last_sync_at"]] = iso_time

    def get_pending_state(self) -> SyncPendingState:
        raw = self.backend.get(STORAGE_KEYS["favorite_sync_pending"])
        return SyncPendingState.from_dict(parse_or_default(raw, {}))

    def set_pending_state(self, state: SyncPendingState) -> None:
        self.backend[STORAGE_KEYS["favorite_sync_pending"]] = json.dumps(state.to_dict())

    def clear_pending_state(self) -> None:
        self._remove("favorite_sync_pending")

    def get_sync_state(self) -> SyncState:
        pending = self.get_pending_state()
        return SyncState(
            enabled=self.is_sync_enabled(),
            pending=pending.pending,
            last_error=pending.last_error,
            last_sync_at=self.get_last_sync_at(),
        )

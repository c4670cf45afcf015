from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..favorites import (
    FavoriteDocument,
    MetadataLookup,
    favorite_id_list,
    merge_favorite_ids,
    reconcile,
)
from ..models import Credentials, SyncPendingState
from ..remote import ContentHandle, RemoteContentClient, WriteAccepted, WriteConflict
from ..store import FavoriteStore
from ..utils import now_iso

logger = logging.getLogger(__name__)

# One write plus a single retry after a lost race.
DEFAULT_MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class NotConfigured:
    ok = False
    reason: str = "not_configured"


@dataclass(frozen=True)
class Succeeded:
    synced_at: str
    attempts: int = 1
    ok = True


@dataclass(frozen=True)
class Failed:
    message: str
    ok = False


SyncResult = NotConfigured | Succeeded | Failed


def _resolve_credentials(
    store: FavoriteStore, credentials: Credentials | None
) -> Credentials | None:
    token = (credentials.token if credentials else "").strip() or store.get_token()
    login = (credentials.login if credentials else "").strip() or store.get_login()
    if not token or not login:
        return None
    return Credentials(token=token, login=login)


def _error_detail(exc: BaseException) -> str:
    return str(exc).strip() or exc.__class__.__name__


def sync_favorites(
    store: FavoriteStore,
    client: RemoteContentClient,
    *,
    credentials: Credentials | None = None,
    favorite_ids: str | Iterable[str] | None = None,
    metadata: MetadataLookup | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clock: Callable[[], str] = now_iso,
) -> SyncResult:
    """Push the local favorites to the remote document.

    Each attempt reads the document, reconciles it with the local IDs and
    writes conditionally on the sha that was read. A conflict triggers a new
    attempt until ``max_attempts`` cycles have run. Failures are recorded in
    the store's pending state and returned, never raised.
    """
    resolved = _resolve_credentials(store, credentials)
    if resolved is None:
        return NotConfigured()
    login = resolved.login
    if favorite_ids is None:
        ids = store.get_favorite_ids()
    else:
        ids = favorite_id_list(favorite_ids)
    attempts = max(1, int(max_attempts))

    def _execute_once() -> tuple[object, FavoriteDocument]:
        remote: ContentHandle = client.read_document(login, resolved)
        document = reconcile(login, ids, remote.items, metadata, clock())
        result = client.write_document(login, resolved, document, remote.sha)
        return result, document

    try:
        for attempt in range(1, attempts + 1):
            result, document = _execute_once()
            if isinstance(result, WriteAccepted):
                store.set_last_sync_at(document["updated_at"])
                store.clear_pending_state()
                logger.info(
                    "synced %d favorites for %s (attempt %d)",
                    len(document["items"]),
                    login,
                    attempt,
                )
                return Succeeded(synced_at=document["updated_at"], attempts=attempt)
            if isinstance(result, WriteConflict):
                if attempt < attempts:
                    logger.info("favorites write conflict for %s; retrying", login)
                    continue
                raise RuntimeError(f"Sync favorites failed: {result.message}")
            raise RuntimeError(f"Sync favorites failed: {getattr(result, 'message', result)}")
        raise RuntimeError("Sync favorites failed: no attempts made")
    except Exception as exc:
        message = _error_detail(exc)
        logger.warning("favorites sync failed for %s: %s", login, message)
        store.set_pending_state(
            SyncPendingState(pending=True, last_error=message, updated_at=clock())
        )
        return Failed(message=message)


def fetch_remote_favorites_for_current_user(
    store: FavoriteStore, client: RemoteContentClient
) -> ContentHandle:
    credentials = store.get_credentials()
    if credentials is None:
        return ContentHandle(exists=False)
    return client.read_document(credentials.login, credentials)


def pull_remote_favorites(store: FavoriteStore, client: RemoteContentClient) -> list[str]:
    """Union remote IDs into the local list; remote-only favorites are kept."""
    remote = fetch_remote_favorites_for_current_user(store, client)
    merged = merge_favorite_ids(store.get_favorite_ids(), remote.items)
    return store.set_favorite_ids(merged)

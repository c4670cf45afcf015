from .sync_pass import (
    DEFAULT_MAX_ATTEMPTS,
    Failed,
    NotConfigured,
    Succeeded,
    SyncResult,
    fetch_remote_favorites_for_current_user,
    pull_remote_favorites,
    sync_favorites,
)

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "Failed",
    "NotConfigured",
    "Succeeded",
    "SyncResult",
    "fetch_remote_favorites_for_current_user",
    "pull_remote_favorites",
    "sync_favorites",
]

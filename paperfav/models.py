from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Credentials:
    token: str
    login: str


@dataclass(frozen=True)
class SyncPendingState:
    pending: bool = False
    last_error: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "pending": self.pending,
            "last_error": self.last_error,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncPendingState:
        return cls(
            pending=bool(data.get("pending")),
            last_error=str(data.get("last_error") or ""),
            updated_at=str(data.get("updated_at") or ""),
        )


@dataclass(frozen=True)
class SyncState:
    enabled: bool
    pending: bool
    last_error: str
    last_sync_at: str

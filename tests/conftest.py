from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PAPERFAV_CONFIG", str(tmp_path / "config.json"))
    for name in (
        "PAPERFAV_REPO_OWNER",
        "PAPERFAV_REPO_NAME",
        "PAPERFAV_DATA_BRANCH",
        "PAPERFAV_API_BASE_URL",
        "PAPERFAV_DB",
        "PAPERFAV_REQUEST_TIMEOUT_S",
        "PAPERFAV_SYNC_MAX_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)

import json
from http.client import IncompleteRead
from pathlib import Path

from typer.testing import CliRunner

from paperfav.cli import app
from paperfav.db import SqliteKeyValue
from paperfav.errors import InvalidCredentialsError
from paperfav.remote import ContentHandle, WriteAccepted, WriteRejected, http_client
from paperfav.store import FavoriteStore

runner = CliRunner()


def _env(tmp_path: Path) -> dict[str, str]:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"repo_owner": "acme", "repo_name": "papers"}) + "\n")
    return {"PAPERFAV_CONFIG": str(config_path), "PAPERFAV_DB": str(tmp_path / "fav.sqlite")}


def _open(tmp_path: Path) -> FavoriteStore:
    return FavoriteStore(SqliteKeyValue(tmp_path / "fav.sqlite"))


def test_add_list_remove(tmp_path: Path) -> None:
    env = _env(tmp_path)
    result = runner.invoke(app, ["add", "2401.00001", "2401.00002", "2401.00001"], env=env)
    assert result.exit_code == 0
    assert "Added 2 favorite(s)" in result.stdout

    result = runner.invoke(app, ["list"], env=env)
    assert result.exit_code == 0
    assert "- 2401.00001" in result.stdout
    assert "- 2401.00002" in result.stdout

    result = runner.invoke(app, ["remove", "2401.00001"], env=env)
    assert result.exit_code == 0
    assert "Removed 1 favorite(s)" in result.stdout

    result = runner.invoke(app, ["remove", "missing"], env=env)
    assert "Favorite not found" in result.stdout


def test_login_stores_token_and_login(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        "paperfav.remote.client.RemoteContentClient.validate_credentials",
        lambda self, token: "octocat",
    )
    env = _env(tmp_path)
    result = runner.invoke(app, ["login", "tok"], env=env)
    assert result.exit_code == 0
    assert "Logged in as octocat" in result.stdout
    store = _open(tmp_path)
    try:
        assert store.get_token() == "tok"
        assert store.get_login() == "octocat"
    finally:
        store.close()

    result = runner.invoke(app, ["logout"], env=env)
    assert result.exit_code == 0
    store = _open(tmp_path)
    try:
        assert store.is_sync_enabled() is False
    finally:
        store.close()


def test_login_rejected_token_exits_nonzero(monkeypatch, tmp_path: Path) -> None:
    def reject(self, token):
        raise InvalidCredentialsError("token validation failed: Bad credentials")

    monkeypatch.setattr("paperfav.remote.client.RemoteContentClient.validate_credentials", reject)
    result = runner.invoke(app, ["login", "bad"], env=_env(tmp_path))
    assert result.exit_code == 1
    assert "Bad credentials" in result.stdout


class _TruncatedConn:
    def __init__(self, *args, **kwargs) -> None:
        self.closed = False

    def request(self, method, path, body=None, headers=None) -> None:
        return None

    def getresponse(self):
        raise IncompleteRead(b"")

    def close(self) -> None:
        self.closed = True


def test_login_reports_truncated_response(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(http_client, "HTTPSConnection", _TruncatedConn)
    result = runner.invoke(app, ["login", "tok"], env=_env(tmp_path))
    assert result.exit_code == 1
    assert "IncompleteRead" in result.stdout
    assert isinstance(result.exception, SystemExit)
    store = _open(tmp_path)
    try:
        assert store.is_sync_enabled() is False
    finally:
        store.close()


def test_sync_not_configured(tmp_path: Path) -> None:
    result = runner.invoke(app, ["sync"], env=_env(tmp_path))
    assert result.exit_code == 0
    assert "not configured" in result.stdout


def _login(tmp_path: Path) -> None:
    store = _open(tmp_path)
    try:
        store.set_token("tok")
        store.set_login("octocat")
    finally:
        store.close()


def test_sync_not_configured_checked_before_repository(tmp_path: Path) -> None:
    env = _env(tmp_path)
    Path(env["PAPERFAV_CONFIG"]).write_text("{}\n")
    result = runner.invoke(app, ["sync"], env=env)
    assert result.exit_code == 0
    assert "not configured" in result.stdout
    assert "repository" not in result.stdout


def test_sync_requires_repository_config(tmp_path: Path) -> None:
    env = _env(tmp_path)
    Path(env["PAPERFAV_CONFIG"]).write_text("{}\n")
    _login(tmp_path)
    result = runner.invoke(app, ["sync"], env=env)
    assert result.exit_code == 1
    assert "repository is not configured" in result.stdout


def test_corrupt_config_exits_with_message(tmp_path: Path) -> None:
    env = _env(tmp_path)
    Path(env["PAPERFAV_CONFIG"]).write_text("{oops")
    _login(tmp_path)
    for command in (["sync"], ["pull"], ["configure", "--repo-name", "x"]):
        result = runner.invoke(app, command, env=env)
        assert result.exit_code == 1
        assert "Invalid config file" in result.stdout
        assert result.exception is None or isinstance(result.exception, SystemExit)
    assert Path(env["PAPERFAV_CONFIG"]).read_text() == "{oops"


def test_configure_updates_config_file(tmp_path: Path) -> None:
    env = _env(tmp_path)
    result = runner.invoke(app, ["configure", "--data-branch", "favs"], env=env)
    assert result.exit_code == 0
    assert "Config updated" in result.stdout
    assert "- repo_owner: acme" in result.stdout
    assert "- api_base_url: (default)" in result.stdout
    saved = json.loads(Path(env["PAPERFAV_CONFIG"]).read_text())
    assert saved == {"data_branch": "favs", "repo_name": "papers", "repo_owner": "acme"}

    result = runner.invoke(app, ["configure"], env=env)
    assert result.exit_code == 0
    assert "Nothing to change" in result.stdout


def test_sync_success_and_status(monkeypatch, tmp_path: Path) -> None:
    written: list[dict] = []
    monkeypatch.setattr(
        "paperfav.remote.client.RemoteContentClient.read_document",
        lambda self, login, credentials: ContentHandle(exists=False),
    )

    def fake_write(self, login, credentials, document, expected_sha=None):
        written.append(document)
        return WriteAccepted(sha="s", updated_at=document["updated_at"])

    monkeypatch.setattr("paperfav.remote.client.RemoteContentClient.write_document", fake_write)
    store = _open(tmp_path)
    try:
        store.set_token("tok")
        store.set_login("octocat")
        store.set_favorite_ids(["a"])
    finally:
        store.close()
    index_path = tmp_path / "index.json"
    index_path.write_text(json.dumps({"a": {"title": "Paper A"}}))

    env = _env(tmp_path)
    result = runner.invoke(app, ["sync", "--index", str(index_path)], env=env)
    assert result.exit_code == 0
    assert "Favorites synced at" in result.stdout
    assert written[0]["items"][0]["title"] == "Paper A"

    result = runner.invoke(app, ["status"], env=env)
    assert result.exit_code == 0
    assert "Enabled: True" in result.stdout
    assert "Login: octocat" in result.stdout
    assert "Pending: no" in result.stdout
    assert written[0]["updated_at"] in result.stdout


def test_sync_failure_records_pending(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        "paperfav.remote.client.RemoteContentClient.read_document",
        lambda self, login, credentials: ContentHandle(exists=False),
    )
    monkeypatch.setattr(
        "paperfav.remote.client.RemoteContentClient.write_document",
        lambda self, login, credentials, document, expected_sha=None: WriteRejected(
            status=403, message="Resource not accessible"
        ),
    )
    store = _open(tmp_path)
    try:
        store.set_token("tok")
        store.set_login("octocat")
    finally:
        store.close()
    env = _env(tmp_path)
    result = runner.invoke(app, ["sync"], env=env)
    assert result.exit_code == 1
    assert "Resource not accessible" in result.stdout

    result = runner.invoke(app, ["status"], env=env)
    assert "Pending: yes" in result.stdout


def test_pull_merges_remote_ids(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        "paperfav.remote.client.RemoteContentClient.read_document",
        lambda self, login, credentials: ContentHandle(
            exists=True,
            sha="s",
            document={},
            items=[{"paper_id": "r", "added_at": "", "title": "", "abs_url": "", "date": ""}],
        ),
    )
    store = _open(tmp_path)
    try:
        store.set_token("tok")
        store.set_login("octocat")
        store.set_favorite_ids(["l"])
    finally:
        store.close()
    result = runner.invoke(app, ["pull"], env=_env(tmp_path))
    assert result.exit_code == 0
    assert "2 total, 1 new" in result.stdout
    store = _open(tmp_path)
    try:
        assert store.get_favorite_ids() == ["r", "l"]
    finally:
        store.close()


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip()

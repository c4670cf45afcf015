from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from .. import __version__
from ..config import DEFAULT_API_BASE_URL, DEFAULT_DATA_BRANCH, PaperfavConfig
from ..errors import InvalidCredentialsError, RemoteReadError
from ..favorites import FavoriteDocument, FavoriteItem, normalize_remote_items
from ..models import Credentials
from ..utils import parse_or_default
from . import http_client

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"


@dataclass(frozen=True)
class RepoConfig:
    repo_owner: str
    repo_name: str
    data_branch: str = DEFAULT_DATA_BRANCH
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_s: float = 10.0

    @classmethod
    def from_config(cls, cfg: PaperfavConfig, *, require_repo: bool = True) -> RepoConfig:
        owner = cfg.repo_owner.strip()
        name = cfg.repo_name.strip()
        if require_repo and (not owner or not name):
            raise ValueError("favorites repository is not configured (repo_owner/repo_name)")
        return cls(
            repo_owner=owner,
            repo_name=name,
            data_branch=cfg.data_branch or DEFAULT_DATA_BRANCH,
            api_base_url=http_client.build_base_url(cfg.api_base_url) or DEFAULT_API_BASE_URL,
            timeout_s=float(cfg.request_timeout_s),
        )


@dataclass(frozen=True)
class ContentHandle:
    exists: bool
    sha: str | None = None
    document: dict[str, Any] | None = None
    items: list[FavoriteItem] = field(default_factory=list)


@dataclass(frozen=True)
class WriteAccepted:
    sha: str | None
    updated_at: str


@dataclass(frozen=True)
class WriteConflict:
    message: str = "remote favorites changed since last read"


@dataclass(frozen=True)
class WriteRejected:
    status: int
    message: str


WriteResult = WriteAccepted | WriteConflict | WriteRejected


def favorite_file_path(login: str) -> str:
    return f"favorites/{login}.json"


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_content(content: str | None) -> str:
    cleaned = "".join((content or "").split())
    try:
        return base64.b64decode(cleaned, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return ""


def serialize_document(document: FavoriteDocument) -> str:
    return json.dumps(document, ensure_ascii=False, indent=2)


def error_message(response: http_client.JsonResponse) -> str:
    payload = response.payload
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return response.describe()


class RemoteContentClient:
    """Per-user favorites document in a repository contents API."""

    def __init__(self, repo: RepoConfig) -> None:
        self.repo = repo

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": GITHUB_ACCEPT,
            "User-Agent": f"paperfav/{__version__}",
        }

    def _contents_url(self, login: str) -> str:
        path = quote(favorite_file_path(login))
        return (
            f"{self.repo.api_base_url}/repos/{quote(self.repo.repo_owner)}/"
            f"{quote(self.repo.repo_name)}/contents/{path}"
        )

    def _request(
        self, method: str, url: str, token: str, body: dict[str, Any] | None = None
    ) -> http_client.JsonResponse:
        return http_client.request_json(
            method,
            url,
            headers=self._headers(token),
            body=body,
            timeout_s=self.repo.timeout_s,
        )

    def read_document(self, login: str, credentials: Credentials) -> ContentHandle:
        url = f"{self._contents_url(login)}?ref={quote(self.repo.data_branch, safe='')}"
        response = self._request("GET", url, credentials.token)
        if response.status == 404:
            return ContentHandle(exists=False)
        if not response.ok:
            raise RemoteReadError(response.status, error_message(response))
        content = response.payload or {}
        document = parse_or_default(decode_content(content.get("content")), {})
        return ContentHandle(
            exists=True,
            sha=str(content.get("sha") or "") or None,
            document=document,
            items=normalize_remote_items(document.get("items")),
        )

    def write_document(
        self,
        login: str,
        credentials: Credentials,
        document: FavoriteDocument,
        expected_sha: str | None = None,
    ) -> WriteResult:
        body: dict[str, Any] = {
            "message": f"chore(favorites): update {login} favorites",
            "content": encode_content(serialize_document(document)),
            "branch": self.repo.data_branch,
        }
        if expected_sha:
            body["sha"] = expected_sha
        response = self._request("PUT", self._contents_url(login), credentials.token, body)
        if response.status == 409:
            return WriteConflict(error_message(response))
        if not response.ok:
            return WriteRejected(response.status, error_message(response))
        content = (response.payload or {}).get("content")
        sha = content.get("sha") if isinstance(content, dict) else None
        return WriteAccepted(sha=str(sha) if sha else None, updated_at=document["updated_at"])

    def validate_credentials(self, token: str) -> str:
        token = str(token or "").strip()
        if not token:
            raise InvalidCredentialsError("access token is required")
        response = self._request("GET", f"{self.repo.api_base_url}/user", token)
        if not response.ok:
            raise InvalidCredentialsError(f"token validation failed: {error_message(response)}")
        login = str((response.payload or {}).get("login") or "").strip()
        if not login:
            raise InvalidCredentialsError("token validation failed: missing login")
        logger.info("validated token for %s", login)
        return login

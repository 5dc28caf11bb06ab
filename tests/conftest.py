"""Shared test fixtures."""

import base64
import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlparse

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from ghlink.config import AppConfig, GitHubConfig, LoggingConfig, RegistryConfig
from ghlink.github import GitHubClient
from ghlink.logging import close_logging
from ghlink.registry import FolderRegistry, JsonRegistry

OWNER = "octo"
REPO = "links"
BASE_URL = f"https://{OWNER}.github.io/{REPO}"

ENV_VARS = (
    "GHLINK_CONFIG", "GITHUB_TOKEN", "GITHUB_USERNAME", "GITHUB_REPO",
    "GHLINK_CUSTOM_DOMAIN", "GHLINK_BRANCH", "GITHUB_API_URL", "GITHUB_TIMEOUT",
    "GITHUB_MAX_RETRIES", "GHLINK_BACKEND", "GHLINK_SLUG_LENGTH",
    "GHLINK_MAX_PDF_SIZE", "GHLINK_CONFLICT_RETRIES", "LOG_LEVEL", "LOG_FILE",
    "LOG_FORMAT",
)

REASONS = {
    200: "OK", 201: "Created", 401: "Unauthorized", 403: "Forbidden",
    404: "Not Found", 409: "Conflict", 422: "Unprocessable Entity",
    500: "Internal Server Error", 502: "Bad Gateway",
}


def make_response(
    status: int,
    body: Any = None,
    raw: Optional[bytes] = None,
    url: str = "https://api.github.com/",
    headers: Optional[Dict[str, str]] = None
) -> requests.Response:
    """Build a real ``requests.Response`` without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.reason = REASONS.get(status, "")
    response.url = url
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    if raw is not None:
        response._content = raw
        response.headers.setdefault("Content-Type", "application/octet-stream")
    else:
        response._content = json.dumps(body).encode("utf-8") if body is not None else b""
        response.headers.setdefault("Content-Type", "application/json")
    return response


def wrap_base64(data: bytes) -> str:
    """Base64 with a newline every 60 characters, as the contents API returns it."""
    encoded = base64.b64encode(data).decode("ascii")
    return "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"


class FakeGitHub:
    """
    In-memory stand-in for the repository and contents endpoints.

    Used as the ``session`` of a ``GitHubClient``. Files live in ``files``
    as ``path -> (content, sha)``; ``fail_next`` queues canned error
    responses for a method/path pair.
    """

    def __init__(self, owner: str = OWNER, repo: str = REPO):
        self.owner = owner
        self.repo = repo
        self.headers: Dict[str, str] = {}
        self.files: Dict[str, Tuple[bytes, str]] = {}
        self.requests: List[Dict[str, Any]] = []
        self.repo_exists = True
        self.token_valid = True
        self.permissions = {"admin": False, "push": True, "pull": True}
        self.inline_limit = 1024 * 1024
        self._failures: List[Tuple[str, str, int, Any]] = []
        self._sha_counter = 0

    # helpers used by tests

    def add_file(self, path: str, content: bytes) -> str:
        sha = self._next_sha(content)
        self.files[path] = (content, sha)
        return sha

    def read(self, path: str) -> bytes:
        return self.files[path][0]

    def read_json(self, path: str) -> Any:
        return json.loads(self.read(path).decode("utf-8"))

    def fail_next(self, method: str, path: str, status: int, body: Any = None) -> None:
        self._failures.append((method, path, status, body))

    def calls(self, method: Optional[str] = None) -> List[Dict[str, Any]]:
        return [r for r in self.requests if method is None or r["method"] == method]

    def close(self) -> None:
        pass

    # session interface

    def request(self, method, url, timeout=None, params=None, json=None, headers=None, **kwargs):
        path = urlparse(url).path
        self.requests.append({
            "method": method, "path": path, "params": params,
            "json": json, "headers": headers, "timeout": timeout
        })

        for index, (f_method, f_path, status, body) in enumerate(self._failures):
            if f_method == method and f_path in (path, self._contents_path(path)):
                del self._failures[index]
                return make_response(status, body, url=url)

        if not self.token_valid:
            return make_response(401, {"message": "Bad credentials"}, url=url)

        repo_prefix = f"/repos/{self.owner}/{self.repo}"
        if not self.repo_exists or not path.startswith(repo_prefix):
            return make_response(404, {"message": "Not Found"}, url=url)

        if path == repo_prefix and method == "GET":
            return make_response(200, {
                "name": self.repo,
                "full_name": f"{self.owner}/{self.repo}",
                "default_branch": "main",
                "permissions": self.permissions,
            }, url=url)

        file_path = self._contents_path(path)
        if file_path is None:
            return make_response(404, {"message": "Not Found"}, url=url)

        accept = (headers or {}).get("Accept", "")
        if method == "GET":
            return self._get(file_path, accept, url)
        if method == "PUT":
            return self._put(file_path, json or {}, url)
        if method == "DELETE":
            return self._delete(file_path, json or {}, url)
        return make_response(405, {"message": "Method Not Allowed"}, url=url)

    def _contents_path(self, path: str) -> Optional[str]:
        marker = f"/repos/{self.owner}/{self.repo}/contents"
        if not path.startswith(marker):
            return None
        return unquote(path[len(marker):]).strip("/")

    def _next_sha(self, content: bytes) -> str:
        self._sha_counter += 1
        return hashlib.sha1(content + str(self._sha_counter).encode()).hexdigest()

    def _get(self, file_path: str, accept: str, url: str) -> requests.Response:
        if file_path in self.files:
            content, sha = self.files[file_path]
            if "raw" in accept:
                return make_response(200, raw=content, url=url)
            inline = len(content) <= self.inline_limit
            return make_response(200, {
                "type": "file",
                "name": file_path.rsplit("/", 1)[-1],
                "path": file_path,
                "sha": sha,
                "size": len(content),
                "encoding": "base64" if inline else "none",
                "content": wrap_base64(content) if inline else "",
                "download_url": f"https://raw.githubusercontent.com/{self.owner}/{self.repo}/main/{file_path}",
            }, url=url)

        prefix = f"{file_path}/" if file_path else ""
        children: Dict[str, Dict[str, Any]] = {}
        for path, (content, sha) in self.files.items():
            if not path.startswith(prefix):
                continue
            name, _, rest = path[len(prefix):].partition("/")
            if rest:
                children.setdefault(name, {
                    "name": name, "path": prefix + name, "type": "dir", "sha": "tree", "size": 0
                })
            else:
                children[name] = {
                    "name": name, "path": path, "type": "file", "sha": sha, "size": len(content)
                }
        if children:
            return make_response(200, list(children.values()), url=url)
        return make_response(404, {"message": "Not Found"}, url=url)

    def _put(self, file_path: str, body: Dict[str, Any], url: str) -> requests.Response:
        existing = self.files.get(file_path)
        if existing is not None:
            if "sha" not in body:
                return make_response(422, {"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'}, url=url)
            if body["sha"] != existing[1]:
                return make_response(409, {"message": f"{file_path} does not match {body['sha']}"}, url=url)

        content = base64.b64decode(body["content"])
        sha = self.add_file(file_path, content)
        return make_response(200 if existing else 201, {
            "content": {"path": file_path, "sha": sha, "size": len(content)},
            "commit": {"sha": self._next_sha(b"commit"), "message": body.get("message")},
        }, url=url)

    def _delete(self, file_path: str, body: Dict[str, Any], url: str) -> requests.Response:
        existing = self.files.get(file_path)
        if existing is None:
            return make_response(404, {"message": "Not Found"}, url=url)
        if body.get("sha") != existing[1]:
            return make_response(409, {"message": f"{file_path} does not match {body.get('sha')}"}, url=url)
        del self.files[file_path]
        return make_response(200, {"content": None, "commit": {"sha": self._next_sha(b"commit")}}, url=url)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate tests from the developer's environment and settings file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GHLINK_CONFIG", str(tmp_path / "ghlink-config.yaml"))
    yield
    close_logging()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        github=GitHubConfig(token="ghp_test", username=OWNER, repo=REPO),
        registry=RegistryConfig(),
        logging=LoggingConfig()
    )


@pytest.fixture
def client(app_config: AppConfig, fake_github: FakeGitHub) -> GitHubClient:
    return GitHubClient(app_config.github, session=fake_github)


@pytest.fixture
def json_registry(client: GitHubClient, app_config: AppConfig) -> JsonRegistry:
    return JsonRegistry(client, app_config.registry, BASE_URL)


@pytest.fixture
def folder_registry(client: GitHubClient, app_config: AppConfig) -> FolderRegistry:
    app_config.registry.backend = "folder"
    return FolderRegistry(client, app_config.registry, BASE_URL)


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n")
    return path

"""
GitHub API client for the repository contents endpoints.
"""

import requests
import time
import logging
from typing import Dict, Any, Optional, List
from urllib.parse import quote
from datetime import datetime

from ..config import GitHubConfig, get_config
from ..error_handling import (
    GitHubAPIError, AuthenticationError, NotFoundError, PermissionDeniedError,
    ConflictError, RateLimitError, backoff_delay
)
from ..models import (
    ContentFile, DirectoryItem, RateLimitInfo, ConnectionState, ConnectionStatus
)
from .contents import encode_content, decode_content

logger = logging.getLogger(__name__)

RAW_BASE_URL = "https://raw.githubusercontent.com"
JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw"


def classify_error(response: requests.Response) -> GitHubAPIError:
    """
    Build the exception matching a failed response.

    Args:
        response: Non-2xx response

    Returns:
        Exception instance (not raised)
    """
    error_data = None
    try:
        error_data = response.json()
    except ValueError:
        pass

    status = response.status_code
    api_message = ""
    if isinstance(error_data, dict):
        api_message = str(error_data.get("message", ""))
    detail = api_message or response.reason or ""

    if status == 401:
        return AuthenticationError(
            "Authentication failed: the token is invalid",
            status_code=status, response_data=error_data
        )
    if status in (403, 429) and "rate limit" in (api_message or response.text or "").lower():
        return RateLimitError(
            f"GitHub API rate limit exceeded: {detail}",
            status_code=status, response_data=error_data
        )
    if status == 403:
        return PermissionDeniedError(
            f"Permission denied: {detail}",
            status_code=status, response_data=error_data
        )
    if status == 404:
        return NotFoundError("Not Found", status_code=status, response_data=error_data)
    if status == 409 or (status == 422 and "sha" in api_message.lower()):
        return ConflictError(
            f"File changed on GitHub since it was read: {detail}",
            status_code=status, response_data=error_data
        )

    return GitHubAPIError(
        f"GitHub API Error: {status} {detail}".rstrip(),
        status_code=status, response_data=error_data
    )


class GitHubClient:
    """
    GitHub API client bound to one repository.

    Every call is a single synchronous request. Server errors and transport
    failures are retried ``max_retries`` times with exponential backoff;
    client errors (including sha conflicts) are raised immediately.
    """

    def __init__(
        self,
        config: Optional[GitHubConfig] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize GitHub API client.

        Args:
            config: GitHub section of the app config (global config if omitted)
            session: Session to send requests with (a new one if omitted)
        """
        config = config or get_config().github

        self.access_token = config.token
        self.owner = config.username
        self.repo = config.repo
        self.branch = config.branch
        self.base_url = config.api_base_url
        self.timeout = config.timeout
        self.max_retries = max(0, config.max_retries)
        self.user_agent = config.user_agent

        self.session = session or requests.Session()
        self._setup_session()

        self._rate_limit_info: Optional[RateLimitInfo] = None

    def _setup_session(self) -> None:
        """Set up the session headers and authentication."""
        headers = {
            "Accept": JSON_MEDIA_TYPE,
            "User-Agent": self.user_agent
        }

        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        self.session.headers.update(headers)

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.owner and self.repo)

    @property
    def repo_endpoint(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def contents_endpoint(self, path: str) -> str:
        return f"{self.repo_endpoint}/contents/{quote(path.strip('/'), safe='/')}"

    def raw_url(self, path: str) -> str:
        """Public raw.githubusercontent.com URL of a file on the configured branch."""
        branch = self.branch or "main"
        return f"{RAW_BASE_URL}/{self.owner}/{self.repo}/{branch}/{quote(path.strip('/'), safe='/')}"

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make a request to the GitHub API with retry logic.

        Args:
            method: HTTP method (GET, PUT, DELETE)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            GitHubAPIError: If the request fails after retries
        """
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

        for attempt in range(self.max_retries + 1):
            try:
                logger.debug(f"{method} {url}")
                response = self.session.request(
                    method=method,
                    url=url,
                    timeout=self.timeout,
                    **kwargs
                )
            except requests.exceptions.RequestException as e:
                if attempt < self.max_retries:
                    wait_time = backoff_delay(attempt, 1.0, 30.0)
                    logger.warning(f"Request failed: {e}. Retrying in {wait_time} seconds")
                    time.sleep(wait_time)
                    continue
                raise GitHubAPIError(f"Request to GitHub failed: {e}", cause=e) from e

            self._update_rate_limit_info(response)

            if response.ok:
                return response

            error = classify_error(response)

            if isinstance(error, RateLimitError) and attempt < self.max_retries:
                wait_time = self._calculate_rate_limit_wait()
                logger.warning(f"Rate limited. Waiting {wait_time} seconds before retry {attempt + 1}")
                time.sleep(wait_time)
                continue

            if response.status_code >= 500 and attempt < self.max_retries:
                wait_time = backoff_delay(attempt, 1.0, 30.0)
                logger.warning(f"Server error {response.status_code}. Retrying in {wait_time} seconds")
                time.sleep(wait_time)
                continue

            raise error

        raise GitHubAPIError("Unexpected error in request retry logic")

    def _update_rate_limit_info(self, response: requests.Response) -> None:
        """Record rate limit headers from a response."""
        headers = response.headers

        if "X-RateLimit-Limit" in headers:
            self._rate_limit_info = RateLimitInfo(
                limit=int(headers["X-RateLimit-Limit"]),
                remaining=int(headers.get("X-RateLimit-Remaining", 0)),
                reset_time=datetime.fromtimestamp(int(headers.get("X-RateLimit-Reset", 0))),
                used=int(headers.get("X-RateLimit-Used", 0))
            )
            if self._rate_limit_info.remaining < 10:
                logger.warning(
                    f"GitHub rate limit nearly exhausted: {self._rate_limit_info.remaining} "
                    f"requests left until {self._rate_limit_info.reset_time:%H:%M:%S}"
                )

    def _calculate_rate_limit_wait(self) -> int:
        """Seconds until the rate limit resets (60 if unknown)."""
        if self._rate_limit_info and self._rate_limit_info.reset_time:
            now = datetime.now()
            if now < self._rate_limit_info.reset_time:
                return int((self._rate_limit_info.reset_time - now).total_seconds()) + 1

        return 60

    def get_rate_limit_info(self) -> Optional[RateLimitInfo]:
        return self._rate_limit_info

    def get_repository(self) -> Dict[str, Any]:
        """
        Get the configured repository's metadata.

        Raises:
            GitHubAPIError: If the repository cannot be retrieved
        """
        response = self._make_request("GET", self.repo_endpoint)
        return response.json()

    def check_connection(self) -> ConnectionStatus:
        """
        Check that the repository is reachable and writable with the token.

        Never raises for API failures; the outcome is described by the
        returned status instead.
        """
        if not self.is_configured:
            return ConnectionStatus(ConnectionState.NOT_CONFIGURED)

        try:
            repo_data = self.get_repository()
        except AuthenticationError as e:
            return ConnectionStatus(ConnectionState.AUTH_FAILED, status_code=e.status_code)
        except NotFoundError as e:
            return ConnectionStatus(ConnectionState.REPO_NOT_FOUND, status_code=e.status_code)
        except PermissionDeniedError as e:
            return ConnectionStatus(ConnectionState.NO_PERMISSION, status_code=e.status_code)
        except GitHubAPIError as e:
            if e.status_code is None:
                logger.error(f"Connection check failed: {e}")
                return ConnectionStatus(ConnectionState.NETWORK_ERROR, message=str(e.cause or e))
            return ConnectionStatus(ConnectionState.ERROR, status_code=e.status_code, message=e.api_message)

        permissions = repo_data.get("permissions") or {}
        if permissions.get("push") or permissions.get("admin"):
            logger.info(f"Connected to {self.owner}/{self.repo} with write access")
            return ConnectionStatus(ConnectionState.CONNECTED, status_code=200, permissions=permissions)

        return ConnectionStatus(ConnectionState.NO_PERMISSION, status_code=200, permissions=permissions)

    def _ref_params(self) -> Dict[str, str]:
        return {"ref": self.branch} if self.branch else {}

    def get_contents(self, path: str) -> Optional[ContentFile]:
        """
        Get a file and its sha.

        Args:
            path: Path of the file within the repository

        Returns:
            Decoded file, or None if it does not exist

        Raises:
            GitHubAPIError: If the path is a directory or the request fails
        """
        endpoint = self.contents_endpoint(path)
        try:
            response = self._make_request("GET", endpoint, params=self._ref_params())
        except NotFoundError:
            logger.debug(f"File not found in repository: {self.owner}/{self.repo}:{path}")
            return None

        data = response.json()
        if isinstance(data, list) or data.get("type") not in (None, "file"):
            raise GitHubAPIError(f"Not a file: {path}", status_code=response.status_code)

        if data.get("encoding") == "none" or (not data.get("content") and data.get("size", 0) > 0):
            # Bodies above 1 MB are not inlined; fetch the raw bytes instead.
            raw = self._make_request(
                "GET", endpoint, params=self._ref_params(), headers={"Accept": RAW_MEDIA_TYPE}
            )
            content = raw.content
        else:
            content = decode_content(data.get("content", ""))

        return ContentFile(
            path=data.get("path", path),
            sha=data["sha"],
            content=content,
            size=data.get("size", len(content)),
            download_url=data.get("download_url")
        )

    def get_file_sha(self, path: str) -> Optional[str]:
        """Sha of an existing file, or None if it does not exist."""
        try:
            response = self._make_request("GET", self.contents_endpoint(path), params=self._ref_params())
        except NotFoundError:
            return None

        data = response.json()
        if isinstance(data, list):
            return None
        return data.get("sha")

    def list_directory(self, path: str = "") -> List[DirectoryItem]:
        """
        List a directory of the repository.

        Returns:
            Items in the directory (empty if the directory does not exist)
        """
        try:
            response = self._make_request("GET", self.contents_endpoint(path), params=self._ref_params())
        except NotFoundError:
            return []

        data = response.json()
        if not isinstance(data, list):
            return []
        return [DirectoryItem.from_dict(item) for item in data]

    def put_contents(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create or update a file.

        Args:
            path: Path of the file within the repository
            content: New file body
            message: Commit message
            sha: Sha of the version being replaced (None to create)

        Returns:
            Parsed API response (``content`` and ``commit``)

        Raises:
            ConflictError: If ``sha`` is stale or missing for an existing file
        """
        body: Dict[str, Any] = {
            "message": message,
            "content": encode_content(content)
        }
        if sha:
            body["sha"] = sha
        if self.branch:
            body["branch"] = self.branch

        response = self._make_request("PUT", self.contents_endpoint(path), json=body)
        logger.info(
            f"Wrote {path} ({len(content)} bytes) to {self.owner}/{self.repo}",
            extra={"path": path, "repository": f"{self.owner}/{self.repo}"}
        )
        return response.json()

    def delete_contents(self, path: str, message: str, sha: str) -> None:
        """
        Delete a file.

        Args:
            path: Path of the file within the repository
            message: Commit message
            sha: Sha of the version being deleted
        """
        body: Dict[str, Any] = {"message": message, "sha": sha}
        if self.branch:
            body["branch"] = self.branch

        self._make_request("DELETE", self.contents_endpoint(path), json=body)
        logger.info(
            f"Deleted {path} from {self.owner}/{self.repo}",
            extra={"path": path, "repository": f"{self.owner}/{self.repo}"}
        )

    def close(self) -> None:
        self.session.close()

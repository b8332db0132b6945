"""Production forge implementation talking to the Gitea REST API over httpx."""

import logging
from typing import Any

import httpx

from stew.core.errors import ForgeApiError, ForgeAuthError, ForgeUnavailableError
from stew.core.forge.abc import Forge
from stew.core.forge.types import ForgeRepository, PullRequest

DEFAULT_TIMEOUT = 30.0


class RealForge(Forge):
    """Gitea API client using HTTP basic auth with the admin credentials."""

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        *,
        logger: logging.Logger,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create a client for the forge at ``url``.

        Args:
            url: Forge root URL (e.g. "http://localhost:3000")
            username: Admin username
            password: Admin password
            logger: Logger for request tracing
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self._url = url.rstrip("/")
        self._logger = logger
        self._client = httpx.Client(
            base_url=self._url,
            auth=(username, password),
            timeout=timeout,
            transport=transport,
        )

    def probe(self) -> None:
        self._request("GET", "/", operation="connect")

    def submit_setup_form(self, form: dict[str, str]) -> None:
        response = self._request(
            "POST", "/", operation="initial setup", data=form, follow_redirects=True
        )
        if response.status_code != httpx.codes.OK:
            raise ForgeApiError("initial setup", response.status_code, _detail(response))

    def authenticate(self) -> str:
        version = self._request("GET", "/api/v1/version", operation="version check")
        if version.status_code != httpx.codes.OK:
            raise ForgeApiError("version check", version.status_code, _detail(version))

        user = self._request("GET", "/api/v1/user", operation="authenticate")
        if user.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            msg = f"Forge rejected admin credentials ({user.status_code}): {_detail(user)}"
            raise ForgeAuthError(msg)
        if user.status_code != httpx.codes.OK:
            raise ForgeApiError("authenticate", user.status_code, _detail(user))
        return str(version.json().get("version", "unknown"))

    def create_repository(self, name: str, *, default_branch: str) -> ForgeRepository:
        response = self._request(
            "POST",
            "/api/v1/user/repos",
            operation=f"create repository {name}",
            json={"name": name, "default_branch": default_branch},
        )
        if response.status_code != httpx.codes.CREATED:
            raise ForgeApiError(
                f"create repository {name}", response.status_code, _detail(response)
            )
        data = response.json()
        return ForgeRepository(
            name=data["name"],
            owner=data["owner"]["login"],
            clone_url=data.get("clone_url", ""),
            default_branch=data.get("default_branch", default_branch),
        )

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> PullRequest:
        operation = f"create pull request {head} -> {base} in {owner}/{repo}"
        response = self._request(
            "POST",
            f"/api/v1/repos/{owner}/{repo}/pulls",
            operation=operation,
            json={"head": head, "base": base, "title": title, "body": body},
        )
        if response.status_code != httpx.codes.CREATED:
            raise ForgeApiError(operation, response.status_code, _detail(response))
        data = response.json()
        return PullRequest(
            number=data["number"],
            head=head,
            base=base,
            title=data.get("title", title),
            body=data.get("body", body),
            url=data.get("html_url", ""),
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, *, operation: str, **kwargs: Any) -> httpx.Response:
        self._logger.debug("%s %s%s", method, self._url, path)
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            msg = f"{operation}: cannot connect to gitea at {self._url}: {e}"
            raise ForgeUnavailableError(msg) from e


def _detail(response: httpx.Response) -> str:
    """Best-effort error message from a Gitea error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return response.text.strip()

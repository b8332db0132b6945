"""Fake forge operations for testing.

FakeForge is an in-memory implementation that accepts pre-configured
behavior in its constructor and records every call for assertions.
"""

from stew.core.errors import ForgeApiError, ForgeAuthError, ForgeUnavailableError
from stew.core.forge.abc import Forge
from stew.core.forge.types import ForgeRepository, PullRequest


class FakeForge(Forge):
    """In-memory fake implementation of forge operations.

    This class has NO public setup methods. All state is provided via
    constructor using keyword arguments with sensible defaults.
    """

    def __init__(
        self,
        *,
        owner: str = "stew",
        unreachable_probes: int | None = 0,
        setup_status: int = 200,
        auth_failures: int = 0,
        api_error_statuses: tuple[int, ...] = (),
        reject_credentials: bool = False,
        existing_repositories: set[str] | None = None,
        pull_request_status: int = 201,
    ) -> None:
        """Create FakeForge with pre-configured behavior.

        Args:
            owner: Login reported as owner of created repositories
            unreachable_probes: Number of probe() calls that fail before the
                forge becomes reachable; None means it never does
            setup_status: Status answered to the setup form
            auth_failures: Number of authenticate() calls that fail with a
                connection error before succeeding
            api_error_statuses: Statuses answered by the version check on the
                authenticate() calls after the connection failures
            reject_credentials: If True, authenticate() rejects the credentials
            existing_repositories: Names for which create_repository answers 409
            pull_request_status: Status answered to create_pull_request
        """
        self._owner = owner
        self._unreachable_probes = unreachable_probes
        self._setup_status = setup_status
        self._auth_failures = auth_failures
        self._api_error_statuses = api_error_statuses
        self._reject_credentials = reject_credentials
        self._existing_repositories = set(existing_repositories or set())
        self._pull_request_status = pull_request_status

        self._probe_calls = 0
        self._auth_calls = 0
        self._setup_forms: list[dict[str, str]] = []
        self._created_repositories: list[ForgeRepository] = []
        self._pull_requests: list[tuple[str, str, PullRequest]] = []
        self._closed = False

    @property
    def probe_calls(self) -> int:
        return self._probe_calls

    @property
    def auth_calls(self) -> int:
        return self._auth_calls

    @property
    def setup_forms(self) -> list[dict[str, str]]:
        """Read-only access to submitted setup forms for test assertions."""
        return self._setup_forms

    @property
    def created_repositories(self) -> list[ForgeRepository]:
        """Read-only access to created repositories for test assertions."""
        return self._created_repositories

    @property
    def pull_requests(self) -> list[tuple[str, str, PullRequest]]:
        """Read-only access to opened pull requests.

        Returns list of (owner, repo, PullRequest) tuples.
        """
        return self._pull_requests

    @property
    def closed(self) -> bool:
        return self._closed

    def probe(self) -> None:
        self._probe_calls += 1
        if self._unreachable_probes is None or self._probe_calls <= self._unreachable_probes:
            msg = "connect: connection refused"
            raise ForgeUnavailableError(msg)

    def submit_setup_form(self, form: dict[str, str]) -> None:
        self._setup_forms.append(dict(form))
        if self._setup_status != 200:
            raise ForgeApiError("initial setup", self._setup_status, "setup rejected")

    def authenticate(self) -> str:
        self._auth_calls += 1
        if self._reject_credentials:
            msg = "Forge rejected admin credentials (401): user does not exist"
            raise ForgeAuthError(msg)
        if self._auth_calls <= self._auth_failures:
            msg = "authenticate: connection refused"
            raise ForgeUnavailableError(msg)
        api_call = self._auth_calls - self._auth_failures - 1
        if api_call < len(self._api_error_statuses):
            raise ForgeApiError(
                "version check", self._api_error_statuses[api_call], "server error"
            )
        return "1.21.0"

    def create_repository(self, name: str, *, default_branch: str) -> ForgeRepository:
        if name in self._existing_repositories:
            detail = "The repository with the same name already exists."
            raise ForgeApiError(f"create repository {name}", 409, detail)
        self._existing_repositories.add(name)
        repository = ForgeRepository(
            name=name,
            owner=self._owner,
            clone_url=f"http://forge.test/{self._owner}/{name}.git",
            default_branch=default_branch,
        )
        self._created_repositories.append(repository)
        return repository

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
        if repo not in self._existing_repositories:
            raise ForgeApiError(operation, 404, "repository does not exist")
        if self._pull_request_status != 201:
            raise ForgeApiError(operation, self._pull_request_status, "pull request rejected")
        number = len(self._pull_requests) + 1
        pr = PullRequest(
            number=number,
            head=head,
            base=base,
            title=title,
            body=body,
            url=f"http://forge.test/{owner}/{repo}/pulls/{number}",
        )
        self._pull_requests.append((owner, repo, pr))
        return pr

    def close(self) -> None:
        self._closed = True

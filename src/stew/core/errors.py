"""Error types raised while provisioning a forge.

Every failure in stew is fatal. Components raise one of these exceptions and
the CLI error boundary turns it into a logged message and exit code 1.
"""


class StewError(Exception):
    """Base class for all expected provisioning failures."""


class ManifestError(StewError):
    """The manifest is missing, malformed or violates a required invariant."""


class ForgeUnavailableError(StewError):
    """The forge could not be reached within the retry budget."""


class ForgeAuthError(StewError):
    """The forge rejected the admin credentials."""


class ForgeApiError(StewError):
    """A forge REST call returned an unexpected status."""

    def __init__(self, operation: str, status_code: int, detail: str) -> None:
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{operation} failed with status {status_code}: {detail}")


class GitBuildError(StewError):
    """Building, committing or pushing a branch failed."""

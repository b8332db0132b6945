"""Production git transport using dulwich's smart-HTTP client."""

import logging
from io import BytesIO

from dulwich import porcelain

from stew.core.errors import GitBuildError
from stew.core.git.abc import Credentials, GitTransport
from stew.core.git.memory import MemoryRepository


class RealGitTransport(GitTransport):
    """Pushes with ``dulwich.porcelain.push`` over HTTP basic auth."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def push(
        self,
        repo: MemoryRepository,
        remote: str,
        refspecs: list[str],
        credentials: Credentials,
    ) -> None:
        url = repo.remote_url(remote)
        if url is None:
            msg = f"Remote {remote!r} is not configured"
            raise GitBuildError(msg)

        out = BytesIO()
        err = BytesIO()
        try:
            porcelain.push(
                repo.repo,
                remote,
                [spec.encode() for spec in refspecs],
                outstream=out,
                errstream=err,
                username=credentials.username,
                password=credentials.password,
            )
        except Exception as e:
            raise GitBuildError(f"Push of {', '.join(refspecs)} to {url} failed: {e}") from e
        finally:
            progress = (out.getvalue() + err.getvalue()).decode("utf-8", errors="replace")
            if progress.strip():
                self._logger.debug("git push output: %s", progress.strip())

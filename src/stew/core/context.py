"""Application context with dependency injection."""

import logging
from dataclasses import dataclass
from pathlib import Path

from stew.core.forge.abc import Forge
from stew.core.forge.real import DEFAULT_TIMEOUT, RealForge
from stew.core.git.abc import GitTransport
from stew.core.git.real import RealGitTransport
from stew.core.manifest import Manifest
from stew.core.time.abc import Time
from stew.core.time.real import RealTime


@dataclass(frozen=True)
class StewContext:
    """Immutable context holding all dependencies for a provisioning run.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    forge: Forge
    git_transport: GitTransport
    time: Time
    logger: logging.Logger
    cwd: Path  # Relative manifest source paths resolve against this

    @staticmethod
    def for_test(
        forge: Forge | None = None,
        git_transport: GitTransport | None = None,
        time: Time | None = None,
        logger: logging.Logger | None = None,
        cwd: Path | None = None,
    ) -> "StewContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            forge: Optional Forge implementation. If None, creates empty FakeForge.
            git_transport: Optional GitTransport. If None, creates FakeGitTransport.
            time: Optional Time implementation. If None, creates FakeTime.
            logger: Optional logger. If None, uses the "stew.test" logger.
            cwd: Optional base directory. If None, uses Path("/test/default/cwd").

        Returns:
            StewContext configured with provided values and test defaults
        """
        from tests.fakes.time import FakeTime

        from stew.core.forge.fake import FakeForge
        from stew.core.git.fake import FakeGitTransport

        return StewContext(
            forge=forge if forge is not None else FakeForge(),
            git_transport=git_transport if git_transport is not None else FakeGitTransport(),
            time=time if time is not None else FakeTime(),
            logger=logger if logger is not None else logging.getLogger("stew.test"),
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
        )


def create_context(
    manifest: Manifest,
    *,
    logger: logging.Logger,
    cwd: Path,
    timeout: float = DEFAULT_TIMEOUT,
) -> StewContext:
    """Create production context with real implementations.

    Called once at CLI entry point after the manifest has been validated.
    """
    forge = RealForge(
        manifest.url,
        manifest.admin.username,
        manifest.admin.password,
        logger=logger,
        timeout=timeout,
    )
    return StewContext(
        forge=forge,
        git_transport=RealGitTransport(logger),
        time=RealTime(),
        logger=logger,
        cwd=cwd,
    )

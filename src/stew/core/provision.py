"""Provisioning driver.

Sequences the whole run: prepare the forge once, then for each manifest
repository create it remotely, build its main line from the content
batches, and fork one branch plus pull request per PR batch.

Per-repository work reports a RepositoryOutcome instead of raising, so the
halting policy lives only in provision_all.
"""

from dataclasses import dataclass, field
from pathlib import Path

from stew.core.context import StewContext
from stew.core.errors import StewError
from stew.core.forge.types import PullRequest
from stew.core.git.abc import Credentials
from stew.core.git.memory import EMPTY_CURSOR, Signature
from stew.core.history import CommitHistoryBuilder, init_repository
from stew.core.manifest import MAIN_BRANCH, Manifest, Repository, content_branch, pr_branch
from stew.core.readiness import prepare_forge


@dataclass(frozen=True)
class RepositoryOutcome:
    """Result of provisioning one manifest repository."""

    name: str
    cursor: str
    pushed_branches: list[str] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    error: StewError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProvisionReport:
    """Outcomes of every repository processed in a run."""

    outcomes: list[RepositoryOutcome]

    @property
    def success(self) -> bool:
        return all(o.success for o in self.outcomes)

    def raise_for_failure(self) -> None:
        """Re-raise the first repository error, if any."""
        for outcome in self.outcomes:
            if outcome.error is not None:
                raise outcome.error


def provision_repository(
    ctx: StewContext, manifest: Manifest, repository: Repository
) -> RepositoryOutcome:
    """Create one repository and push its history and pull requests.

    PR batches all fork from the cursor left by the last content batch; they
    never chain off each other.
    """
    logger = ctx.logger
    cursor = EMPTY_CURSOR
    pushed: list[str] = []
    pull_requests: list[PullRequest] = []

    def outcome(error: StewError | None = None) -> RepositoryOutcome:
        return RepositoryOutcome(
            name=repository.name,
            cursor=cursor,
            pushed_branches=list(pushed),
            pull_requests=list(pull_requests),
            error=error,
        )

    try:
        logger.info("Creating repository name=%s", repository.name)
        ctx.forge.create_repository(repository.name, default_branch=MAIN_BRANCH)

        repo = init_repository(manifest.remote_url(repository), main_branch=MAIN_BRANCH)
        builder = CommitHistoryBuilder(
            repo,
            ctx.git_transport,
            signature=Signature(name=manifest.admin.username, email=manifest.admin.email),
            credentials=Credentials(
                username=manifest.admin.username, password=manifest.admin.password
            ),
            logger=logger,
        )

        for batch in repository.contents:
            branch = content_branch(batch)
            cursor = builder.apply_batch(cursor, branch, _source(ctx, batch.path), batch.message)
            pushed.append(branch)

        fork_point = cursor
        for batch in repository.prs:
            branch = pr_branch(batch)
            builder.apply_batch(fork_point, branch, _source(ctx, batch.path), batch.message)
            pushed.append(branch)
            pr = ctx.forge.create_pull_request(
                manifest.admin.username,
                repository.name,
                head=branch,
                base=MAIN_BRANCH,
                title=batch.message,
                body=batch.message,
            )
            logger.info(
                "Opened pull request repo=%s number=%d head=%s", repository.name, pr.number, branch
            )
            pull_requests.append(pr)
    except StewError as e:
        logger.debug("Repository %s failed: %s", repository.name, e)
        return outcome(e)

    return outcome()


def provision_all(ctx: StewContext, manifest: Manifest) -> ProvisionReport:
    """Provision repositories in manifest order, halting at the first failure."""
    outcomes: list[RepositoryOutcome] = []
    for repository in manifest.repositories:
        result = provision_repository(ctx, manifest, repository)
        outcomes.append(result)
        if not result.success:
            break
    return ProvisionReport(outcomes=outcomes)


def run(ctx: StewContext, manifest: Manifest) -> ProvisionReport:
    """Prepare the forge and provision every repository.

    Raises:
        StewError: If the forge cannot be prepared
    """
    ctx.logger.info("Configuring gitea address=%s", manifest.url)
    prepare_forge(ctx.forge, manifest.admin, ctx.time, ctx.logger)
    return provision_all(ctx, manifest)


def _source(ctx: StewContext, path: str) -> Path:
    return ctx.cwd / path

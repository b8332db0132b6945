"""Manifest models and loading.

A manifest describes the forge to provision and what to put in it:

    url: http://localhost:3000
    admin:
      username: stew
      email: stew@example.com
      password: hunter22
    repositories:
      - name: demo
        contents:
          - path: ./seed
            message: init
        prs:
          - path: ./feature/foo
            message: add foo

Content batches extend the main line in order. PR batches each fork a side
branch from the main line and become pull requests against ``main``.
"""

import posixpath
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stew.core.errors import ManifestError

MAIN_BRANCH = "main"


class Admin(BaseModel):
    """Admin account created during forge setup and used for every call."""

    model_config = ConfigDict(frozen=True)

    username: str
    email: str
    password: str


class ContentBatch(BaseModel):
    """One directory of files committed as a single commit."""

    model_config = ConfigDict(frozen=True)

    path: str
    message: str
    branch: str | None = None

    @field_validator("path", "message")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "must not be empty"
            raise ValueError(msg)
        return v


class Repository(BaseModel):
    """A repository to create, with its main-line batches and PR batches."""

    model_config = ConfigDict(frozen=True)

    name: str
    contents: list[ContentBatch] = Field(default_factory=list)
    prs: list[ContentBatch] = Field(default_factory=list)


class Manifest(BaseModel):
    """Complete provisioning plan for one forge."""

    model_config = ConfigDict(frozen=True)

    url: str
    admin: Admin
    repositories: list[Repository] = Field(default_factory=list)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.strip():
            msg = "Must supply Gitea URL"
            raise ValueError(msg)
        return v.strip().rstrip("/")

    def remote_url(self, repository: Repository) -> str:
        """Git smart-HTTP URL of a repository owned by the admin account."""
        return f"{self.url}/{self.admin.username}/{repository.name}.git"


def default_pr_branch(path: str) -> str:
    """Derive the branch name for a PR batch that does not name one.

    The branch is the last component of the normalized path, i.e. the
    directory holding the PR's files, not its parent directory. A manifest can
    lay PRs out as ``prs/<branch>/`` without repeating the name.

    Examples:
        >>> default_pr_branch("./feature/foo")
        'foo'
        >>> default_pr_branch("feature/foo/")
        'foo'

    Raises:
        ManifestError: If the path has no usable directory name (e.g. ``.``)
    """
    name = posixpath.basename(posixpath.normpath(path.replace("\\", "/")))
    if name in ("", ".", "..", "/"):
        msg = f"Cannot derive a branch name from PR path {path!r}; set 'branch' explicitly"
        raise ManifestError(msg)
    return name


def content_branch(batch: ContentBatch) -> str:
    """Branch a main-line content batch commits to."""
    return batch.branch or MAIN_BRANCH


def pr_branch(batch: ContentBatch) -> str:
    """Branch a PR batch commits to and opens its pull request from."""
    return batch.branch or default_pr_branch(batch.path)


def parse_manifest(data: object) -> Manifest:
    """Validate already-decoded manifest data.

    Raises:
        ManifestError: If the data does not describe a valid manifest
    """
    if not isinstance(data, dict):
        msg = "Manifest must be a mapping at the top level"
        raise ManifestError(msg)
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest: {e}") from e


def load_manifest(path: Path) -> Manifest:
    """Read and validate a YAML (or JSON) manifest file.

    Raises:
        ManifestError: If the file is missing, unparseable or invalid
    """
    if not path.exists():
        msg = f"Manifest not found: {path}"
        raise ManifestError(msg)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ManifestError(f"Failed to parse manifest {path}: {e}") from e
    return parse_manifest(data)

"""Type definitions for forge operations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ForgeRepository:
    """A repository created on the forge."""

    name: str
    owner: str
    clone_url: str
    default_branch: str


@dataclass(frozen=True)
class PullRequest:
    """A pull request opened on the forge."""

    number: int
    head: str
    base: str
    title: str
    body: str
    url: str

"""Forge (Gitea) REST client abstraction."""

from stew.core.forge.abc import Forge
from stew.core.forge.real import RealForge
from stew.core.forge.types import ForgeRepository, PullRequest

__all__ = ["Forge", "ForgeRepository", "PullRequest", "RealForge"]

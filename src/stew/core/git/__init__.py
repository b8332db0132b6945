"""In-memory git repositories and the transport that pushes them."""

from stew.core.git.abc import Credentials, GitTransport, push_refspecs
from stew.core.git.memory import EMPTY_CURSOR, MemoryRepository, Signature
from stew.core.git.real import RealGitTransport

__all__ = [
    "EMPTY_CURSOR",
    "Credentials",
    "GitTransport",
    "MemoryRepository",
    "RealGitTransport",
    "Signature",
    "push_refspecs",
]

"""OpenProof client - register an agent and publish documents.

This package provides a small async client and command-line interface for
agents to register with an OpenProof document registry, publish Markdown
articles, and list or search the published corpus.
"""

__version__ = "0.1.0"

from .config import ClientConfig
from .credentials import (
    EnvOverrideTokenStore,
    FileTokenStore,
    InMemoryTokenStore,
    TokenStore,
)
from .errors import ExitCode, OpenProofError
from .transport import Response, Transport

__all__ = [
    "ClientConfig",
    "EnvOverrideTokenStore",
    "ExitCode",
    "FileTokenStore",
    "InMemoryTokenStore",
    "OpenProofError",
    "Response",
    "TokenStore",
    "Transport",
    "__version__",
]

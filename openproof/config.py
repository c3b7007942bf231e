"""Client configuration for the OpenProof CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_BASE_URL = "https://openproof.dev/api"
DEFAULT_TOKEN_FILE = Path.home() / ".openproof" / "token"
TOKEN_ENV_VAR = "OPENPROOF_TOKEN"


def _default_user_agent() -> str:
    from . import __version__

    return f"openproof-cli/{__version__}"


@dataclass
class ClientConfig:
    """Configuration for a client invocation.

    Attributes:
        base_url: Origin of the registry; endpoint paths are appended to it.
        token_file: Where the bearer token is persisted.
        http_timeout: Deadline in seconds for a single request.
        list_limit: Maximum number of documents printed by list/search.
        user_agent: Default ``User-Agent`` header.
    """

    base_url: str = DEFAULT_BASE_URL
    token_file: Path = DEFAULT_TOKEN_FILE
    http_timeout: float = 30.0
    list_limit: int = 10
    user_agent: str = field(default_factory=_default_user_agent)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        self.token_file = Path(self.token_file).expanduser()
        if self.http_timeout <= 0:
            raise ValueError("http_timeout must be positive")

    def document_url(self, key: str | int) -> str:
        """Public URL of a published document, by slug or id."""
        return f"{self.base_url}/documents/{key}"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ClientConfig:
        """Create config from ``OPENPROOF_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get("OPENPROOF_BASE_URL") or DEFAULT_BASE_URL,
            token_file=Path(env.get("OPENPROOF_TOKEN_FILE") or DEFAULT_TOKEN_FILE),
            http_timeout=float(env.get("OPENPROOF_TIMEOUT") or 30.0),
        )

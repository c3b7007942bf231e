"""Token storage for the OpenProof client.

Provides file-based, in-memory and environment-override token stores.  A
single bearer token is active per local environment; commands receive a
:class:`TokenStore` rather than reaching for the token file directly.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from .config import DEFAULT_TOKEN_FILE, TOKEN_ENV_VAR
from .errors import CredentialStoreError

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """Abstract base class for token stores."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the token lives."""
        ...

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or ``None`` if there is none."""
        ...

    @abstractmethod
    def save(self, token: str) -> None:
        """Persist *token*, replacing any previous one."""
        ...

    @abstractmethod
    def delete(self) -> bool:
        """Forget the stored token.

        Returns:
            ``True`` if a token was removed.
        """
        ...


class InMemoryTokenStore(TokenStore):
    """In-memory token store.  Data is lost when the process exits."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    @property
    def location(self) -> str:
        return "memory"

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def delete(self) -> bool:
        removed = self._token is not None
        self._token = None
        return removed


class FileTokenStore(TokenStore):
    """File-based token store.

    Persists the token as plain text to ``~/.openproof/token`` by default.
    The file holds the token and nothing else, and is restricted to
    owner-only permissions (600).
    """

    DEFAULT_PATH = DEFAULT_TOKEN_FILE

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path else self.DEFAULT_PATH

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def load(self) -> str | None:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CredentialStoreError(f"Cannot read token file {self._path}: {exc}") from exc
        return token or None

    def save(self, token: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(token, encoding="utf-8")
        except OSError as exc:
            raise CredentialStoreError(f"Cannot write token file {self._path}: {exc}") from exc

        # Restrict permissions to owner-only read/write
        try:
            os.chmod(self._path, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self._path)
        logger.debug("Token written to %s", self._path)

    def delete(self) -> bool:
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CredentialStoreError(f"Cannot remove token file {self._path}: {exc}") from exc
        return True


class EnvOverrideTokenStore(TokenStore):
    """Prefer a token from the environment over a backing store.

    ``load`` returns ``$OPENPROOF_TOKEN`` when it is set and non-empty,
    otherwise whatever the backing store holds.  Writes always go to the
    backing store; the environment is never modified.
    """

    def __init__(
        self,
        backing: TokenStore,
        env_var: str = TOKEN_ENV_VAR,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._backing = backing
        self._env_var = env_var
        self._environ = os.environ if environ is None else environ

    @property
    def backing(self) -> TokenStore:
        return self._backing

    @property
    def location(self) -> str:
        return self._backing.location

    def load(self) -> str | None:
        token = self._environ.get(self._env_var, "").strip()
        if token:
            logger.debug("Using token from $%s", self._env_var)
            return token
        return self._backing.load()

    def save(self, token: str) -> None:
        self._backing.save(token)

    def delete(self) -> bool:
        return self._backing.delete()

"""Shared fixtures for the OpenProof client tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from openproof.config import ClientConfig

BASE_URL = "https://registry.test"


@pytest.fixture
def token_path(tmp_path: Path) -> Path:
    return tmp_path / "openproof" / "token"


@pytest.fixture
def config(token_path: Path) -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, token_file=token_path, http_timeout=5.0)

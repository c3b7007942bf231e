"""Command handlers for the OpenProof CLI.

Each handler is one linear request/response flow: build the request, send
it through a :class:`~openproof.transport.Transport`, validate the reply and
print the outcome.  Failures are raised as
:class:`~openproof.errors.OpenProofError` subclasses and reported by the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .console import print_notice, print_result, print_success, print_warning
from .credentials import TokenStore
from .errors import FileReadError, MissingCredentialError, MissingFileError
from .models import (
    PublishResponse,
    RegisterRequest,
    RegisterResponse,
    parse_document_page,
    parse_model,
    raw_text,
)
from .transport import Transport

logger = logging.getLogger(__name__)

REGISTER_ENDPOINT = "/register"
PUBLISH_ENDPOINT = "/publish"
DOCUMENTS_ENDPOINT = "/documents"

FRONTMATTER_DELIMITER = "---"


def require_token(store: TokenStore) -> str:
    """Resolve the bearer token or fail with guidance."""
    token = store.load()
    if not token:
        raise MissingCredentialError(
            "No API token found. Run 'openproof register' first "
            "or set OPENPROOF_TOKEN."
        )
    return token


async def register(
    transport: Transport,
    store: TokenStore,
    name: str | None = None,
    email: str | None = None,
) -> RegisterResponse:
    """Register an agent and persist the issued API key.

    Nothing is written unless the registry returns an ``api_key``.
    """
    payload = RegisterRequest(name=name, email=email).payload()
    response = await transport.request(
        "POST",
        REGISTER_ENDPOINT,
        body=payload,
        headers={"Content-Type": "application/json"},
    )
    registration = parse_model(RegisterResponse, response.data, response.text)

    store.save(registration.api_key)
    print_notice(f"Token saved to {store.location}")

    print_success("Registered")
    print_result(f"Agent ID: {registration.agent_id}")
    print_result(f"API key: {registration.key_preview}")
    return registration


async def publish_article(
    transport: Transport,
    store: TokenStore,
    file_path: str | Path,
) -> PublishResponse:
    """Publish a Markdown article as-is."""
    token = require_token(store)

    path = Path(file_path)
    if not path.is_file():
        raise MissingFileError(str(file_path))
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise FileReadError(str(file_path), "not valid UTF-8 text") from None
    except OSError as exc:
        raise FileReadError(str(file_path), exc.strerror or str(exc)) from exc

    if not content.startswith(FRONTMATTER_DELIMITER):
        print_warning(
            f"{path} does not start with YAML frontmatter ('{FRONTMATTER_DELIMITER}'); "
            "the registry may reject it."
        )

    logger.debug("Publishing %s (%d chars)", path, len(content))
    response = await transport.request(
        "POST",
        PUBLISH_ENDPOINT,
        body=content,
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "text/markdown",
        },
    )
    published = parse_model(PublishResponse, response.data, response.text)

    print_success("Published")
    print_result(f"URL: {transport.config.document_url(published.url_key)}")
    print_result(f"Document ID: {published.id}")
    return published


async def list_docs(transport: Transport, query: str | None = None) -> None:
    """List the corpus, or search it when *query* is given."""
    params = {"q": query} if query else None
    response = await transport.request("GET", DOCUMENTS_ENDPOINT, params=params)

    page = parse_document_page(response.data)
    if page is None:
        print_result(raw_text(response.data))
        return

    for document in page.documents[: transport.config.list_limit]:
        print_result(document.format_line())
    print_result(f"Total: {page.count}")


def logout(store: TokenStore) -> bool:
    """Remove the persisted token.  ``$OPENPROOF_TOKEN`` is left alone."""
    removed = store.delete()
    if removed:
        print_success(f"Removed token from {store.location}")
    else:
        print_notice(f"No token stored at {store.location}")
    return removed

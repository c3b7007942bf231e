"""Pydantic models for the OpenProof registry endpoints.

Defines the request and response schemas for registration, publishing and
document listing. Responses are validated as soon as they come off the
wire, so a 2xx payload missing a field the command depends on surfaces as a
:class:`~openproof.errors.MalformedResponseError` instead of a ``KeyError``
deep inside a handler.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedResponseError

Identifier = Union[str, int]

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """POST /register request body.  Unset fields are left out entirely."""

    name: str | None = None
    email: str | None = None

    def payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RegisterResponse(BaseModel):
    """POST /register response body."""

    model_config = ConfigDict(extra="allow")

    api_key: str = Field(min_length=1)
    agent_id: Identifier | None = None

    @property
    def key_preview(self) -> str:
        return f"{self.api_key[:8]}..."


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishResponse(BaseModel):
    """POST /publish response body."""

    model_config = ConfigDict(extra="allow")

    id: Identifier
    slug: str | None = None

    @property
    def url_key(self) -> Identifier:
        return self.slug or self.id


# ---------------------------------------------------------------------------
# Listing / search
# ---------------------------------------------------------------------------


class DocumentSummary(BaseModel):
    """One entry of a GET /documents response.

    Display fields accept any JSON value; ``format_line`` substitutes a
    placeholder for missing or empty ones.
    """

    model_config = ConfigDict(extra="allow")

    id: Any = None
    type: Any = None
    title: Any = None
    slug: Any = None

    @classmethod
    def from_entry(cls, entry: Any) -> DocumentSummary:
        if isinstance(entry, dict):
            return cls.model_validate(entry)
        return cls(title=entry)

    def format_line(self) -> str:
        doc_type = _display(self.type, "document")
        title = _display(self.title, "(untitled)")
        return f"[{doc_type}] {title} (ID: {_display(self.id, 'unknown')})"


def _display(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


class DocumentPage(BaseModel):
    """GET /documents response body, normalised from either wire shape."""

    documents: list[DocumentSummary] = Field(default_factory=list)
    total: int | None = None

    @property
    def count(self) -> int:
        return self.total if self.total is not None else len(self.documents)


def _coerce_total(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def parse_document_page(data: Any) -> DocumentPage | None:
    """Normalise a /documents payload.

    The registry answers either ``{"total": N, "documents": [...]}`` or a
    bare list of documents.  Entries are read one by one, so an odd value
    in one entry never hides the others; an unusable ``total`` falls back
    to the number of entries.  Returns ``None`` only when the payload has
    neither shape, so the caller can print it as-is.
    """
    if isinstance(data, list):
        entries, total = data, None
    elif isinstance(data, dict) and isinstance(data.get("documents"), list):
        entries, total = data["documents"], _coerce_total(data.get("total"))
    else:
        return None
    return DocumentPage(
        documents=[DocumentSummary.from_entry(entry) for entry in entries],
        total=total,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def raw_text(data: Any) -> str:
    """Render a parsed payload back into text for diagnostics."""
    if isinstance(data, str):
        return data
    return json.dumps(data)


def parse_model(model: type[ModelT], data: Any, raw: str | None = None) -> ModelT:
    """Validate a 2xx payload against *model*.

    Args:
        model: The expected response model.
        data: The parsed response body (dict, list or raw text).
        raw: The raw body, used in the error message.  Defaults to a
            re-serialisation of *data*.

    Raises:
        MalformedResponseError: If *data* is not an object or misses
            required fields.
    """
    raw = raw if raw is not None else raw_text(data)
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Unexpected {model.__name__}: expected a JSON object", raw
        )
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        missing = ", ".join(
            ".".join(str(p) for p in err["loc"]) for err in exc.errors()
        )
        raise MalformedResponseError(
            f"Unexpected {model.__name__}: invalid or missing {missing}", raw
        ) from exc

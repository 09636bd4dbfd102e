"""Request body preparation for verbs that carry a payload.

Maps each :class:`~tfetch.models.ContentType` to its ``Content-Type``
header and serialiser.  Both tables are keyed by the enum, so a new
content type that is missing from either one fails with
:class:`~tfetch.exceptions.ConfigurationError` instead of falling through
to a default.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import urlencode

from pydantic import ValidationError

from tfetch.exceptions import ConfigurationError
from tfetch.models import ContentType, ContentWrapper

ContentInput = Union[ContentWrapper, Mapping[str, Any]]


def _serialize_json(data: Any) -> str:
    return json.dumps(data)


def _serialize_form(data: Any) -> str:
    if not isinstance(data, Mapping) and not isinstance(data, (list, tuple)):
        raise ConfigurationError(
            f"Form content must be a mapping or a sequence of pairs, got {type(data).__name__}"
        )
    return urlencode(data, doseq=True)


def _serialize_text(data: Any) -> str:
    return str(data)


def _serialize_blob(data: Any) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise ConfigurationError(
        f"Blob content must be bytes-like, got {type(data).__name__}"
    )


CONTENT_TYPE_HEADERS: dict[ContentType, str] = {
    ContentType.JSON: "application/json",
    ContentType.FORM: "application/x-www-form-urlencoded",
    ContentType.TEXT: "text/plain",
    ContentType.BLOB: "application/octet-stream",
}

_SERIALIZERS: dict[ContentType, Callable[[Any], Union[str, bytes]]] = {
    ContentType.JSON: _serialize_json,
    ContentType.FORM: _serialize_form,
    ContentType.TEXT: _serialize_text,
    ContentType.BLOB: _serialize_blob,
}


def coerce_content(content: ContentInput) -> ContentWrapper:
    """Accept a :class:`ContentWrapper` or a ``{"type", "data"}`` mapping.

    Raises:
        ConfigurationError: The content type is not one of ``json``,
            ``form``, ``text`` or ``blob``.
    """
    if isinstance(content, ContentWrapper):
        return content
    try:
        return ContentWrapper.model_validate(content)
    except ValidationError as exc:
        kind = content.get("type") if isinstance(content, Mapping) else content
        raise ConfigurationError(f"Unsupported content type: {kind!r}") from exc


def prepare_body(
    content: ContentInput,
    headers: Optional[Mapping[str, str]] = None,
) -> tuple[dict[str, str], Union[str, bytes]]:
    """Build request headers and serialised body for *content*.

    Caller-supplied *headers* are kept, except that ``Content-Type`` is
    always derived from the content type.

    Returns:
        ``(headers, body)`` ready to hand to the executor.

    Raises:
        ConfigurationError: Unsupported content type, or data the chosen
            encoding cannot represent.
    """
    wrapper = coerce_content(content)
    try:
        mime = CONTENT_TYPE_HEADERS[wrapper.type]
        serialize = _SERIALIZERS[wrapper.type]
    except KeyError:
        raise ConfigurationError(f"Unsupported content type: {wrapper.type!r}") from None

    try:
        body = serialize(wrapper.data)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Cannot encode {wrapper.type.value} content: {exc}"
        ) from exc

    merged = {k: v for k, v in (headers or {}).items() if k.lower() != "content-type"}
    merged["Content-Type"] = mime
    return merged, body

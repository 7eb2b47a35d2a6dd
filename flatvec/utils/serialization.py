"""Metadata payload serialization."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from typing import Any, cast

from flatvec.errors import CorruptionError, InvalidArgumentError


def _normalize_metadata(metadata: Any) -> dict[str, Any]:
    """Convert supported metadata types into a plain dict."""
    if hasattr(metadata, "model_dump"):
        payload = cast(Any, metadata).model_dump(mode="json")
        if not isinstance(payload, dict):
            raise InvalidArgumentError("Pydantic model_dump did not return a mapping.")
        return dict(payload)
    if is_dataclass(metadata) and not isinstance(metadata, type):
        return dict(asdict(metadata))
    if isinstance(metadata, Mapping):
        return dict(metadata)
    raise InvalidArgumentError(
        "Unsupported metadata type: "
        f"{type(metadata)!r}. Provide a mapping, dataclass, or Pydantic model."
    )


def encode_metadata(metadata: Any) -> bytes:
    """Serialize ``metadata`` to compact UTF-8 JSON.

    Raises:
        InvalidArgumentError: If the payload is not a string-keyed map or holds
            values JSON cannot represent.
    """
    payload = _normalize_metadata(metadata)
    for key in payload:
        if not isinstance(key, str):
            raise InvalidArgumentError(f"Metadata keys must be strings; got {key!r}")

    try:
        serialized = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Metadata is not JSON serializable: {exc}") from exc
    return serialized.encode("utf-8")


def decode_metadata(raw: bytes, *, offset: int | None = None) -> dict[str, Any]:
    """Parse a stored metadata payload back into a dict."""
    where = f" at offset {offset}" if offset is not None else ""
    try:
        decoded = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptionError(f"Undecodable metadata payload{where}: {exc}") from exc

    if not isinstance(decoded, dict):
        raise CorruptionError(
            f"Metadata payload{where} is a {type(decoded).__name__}, expected an object"
        )
    return decoded

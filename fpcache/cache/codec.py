"""
Fingerprint Cache — Entry Codec

Serializes cached values to compact JSON and back.

Supported values are None, bool, int, finite float, str, list/tuple and dict
with str keys, nested arbitrarily. Tuples come back as lists. Enum members are
rejected even when they subclass str or int, since they would decode as the
bare value. Keys are sorted
so equal mappings always produce the same payload and the same fingerprint.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from ..errors import UnsupportedValueError

_SCALARS = (str, int, bool, type(None))


def _check_supported(value: Any, path: set[int]) -> None:
    if isinstance(value, Enum):
        raise UnsupportedValueError(type(value).__name__, "enum members do not round-trip")

    if isinstance(value, _SCALARS):
        return

    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedValueError("float", f"non-finite number {value!r}")
        return

    if isinstance(value, (list, tuple, dict)):
        if id(value) in path:
            raise UnsupportedValueError(type(value).__name__, "circular reference")
        path.add(id(value))
        if isinstance(value, dict):
            for key, item in value.items():
                if not isinstance(key, str) or isinstance(key, Enum):
                    raise UnsupportedValueError("dict", f"non-string key {key!r}")
                _check_supported(item, path)
        else:
            for item in value:
                _check_supported(item, path)
        path.discard(id(value))
        return

    raise UnsupportedValueError(type(value).__name__, "not a primitive, sequence or mapping")


def encode(value: Any) -> str:
    """
    Serialize a value to its storable string form.

    Args:
        value: Structured data built from primitives, sequences and mappings

    Returns:
        Compact, key-sorted JSON string

    Raises:
        UnsupportedValueError: If the value falls outside the supported model
    """
    _check_supported(value, set())
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), sort_keys=True, allow_nan=False)


def decode(payload: str | bytes) -> Any:
    """Deserialize a payload produced by :func:`encode`."""
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    return json.loads(payload)

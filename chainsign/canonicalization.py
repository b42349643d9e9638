"""
chainsign Canonical JSON Encoding

Every payload and signature record is serialized through this module before
it enters the hash chain. Two structurally equal records must produce the
same bytes no matter how their fields were ordered when built.

Rules:
- Object keys sorted by Unicode code point, at every nesting level
- No whitespace between tokens
- Non-ASCII characters emitted as UTF-8, not as escapes
- Arrays keep their order
- Only JSON values are accepted (mappings and tuples count as objects and
  arrays); NaN and infinities are rejected
"""

import json
import math
from collections.abc import Mapping
from typing import Any

_SCALARS = (str, int, float, bool, type(None))


def canonicalize(obj: Any) -> bytes:
    """Canonical JSON for `obj` as UTF-8 bytes."""
    return canonicalize_str(obj).encode('utf-8')


def canonicalize_str(obj: Any) -> str:
    """Canonical JSON for `obj` as a string."""
    return json.dumps(_normalize(obj), separators=(',', ':'), ensure_ascii=False, allow_nan=False)


def _normalize(value: Any) -> Any:
    if isinstance(value, _SCALARS):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Cannot canonicalize non-finite number: {value}")
        return value

    if isinstance(value, Mapping):
        bad_keys = [k for k in value if not isinstance(k, str)]
        if bad_keys:
            raise ValueError(f"Object keys must be strings, got {type(bad_keys[0])}")
        return {key: _normalize(value[key]) for key in sorted(value)}

    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]

    raise ValueError(f"Cannot canonicalize type: {type(value)}")

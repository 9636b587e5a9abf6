"""Key/value parameter serialization for query strings and form bodies."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

# Characters encodeURIComponent leaves untouched besides alphanumerics.
URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: Any) -> str:
    """Percent-encode a value as a URI component (UTF-8)."""
    return quote(str(value), safe=URI_COMPONENT_SAFE)


def serialize_key_value_pairs(pairs: Mapping[str, Any] | None) -> str:
    """Turn {key: value} pairs into a ``foo=bar&baz=qux`` string.

    Args:
        pairs: Mapping of keys to scalar values. Non-string values are
            coerced with ``str()``.

    Returns:
        The serialized pairs, or an empty string for an empty mapping.
    """
    if not pairs:
        return ""
    return "&".join(
        f"{encode_uri_component(key)}={encode_uri_component(value)}"
        for key, value in pairs.items()
    )

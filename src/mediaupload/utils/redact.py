"""Credential / payload redaction for safe logging.

Before any request or response is written to logs or debug dumps the
:func:`redact` function must be applied.  It enforces the following rules:

* **Credential fields** (keys containing ``token``, ``nonce``,
  ``authorization``, ...) are masked, keeping only the last four
  characters of a known secret.
* **Raw bytes** (multipart file content) are replaced with
  ``<binary:N_bytes>``; binary-looking strings get the same treatment.
* Every known secret is scrubbed from every string value in the tree.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable
from typing import Any

# Substrings: if any of these appear in a key name (case-insensitive), the
# value is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "token",
    "nonce",
    "secret",
    "password",
    "credential",
    "authorization",
    "cookie",
    "api_key",
    "api-key",
})

_BINARY_LENGTH_THRESHOLD = 256


def _mask_secrets(value: str, secrets: tuple[str, ...]) -> str:
    """Replace known secrets and bearer values with a placeholder."""
    for secret in secrets:
        if secret and secret in value:
            suffix = secret[-4:] if len(secret) >= 4 else "****"
            placeholder = f"<redacted:...{suffix}>"
            if secret in placeholder:
                placeholder = "<redacted>"
            value = value.replace(secret, placeholder)
    value = re.sub(
        r"(Bearer\s+)\S+",
        lambda m: f"{m.group(1)}<redacted>",
        value,
    )
    return value


def _looks_binary(value: str) -> bool:
    """Heuristic: return True if *value* appears to be raw binary data."""
    if len(value) < _BINARY_LENGTH_THRESHOLD:
        return False
    non_printable = sum(
        1
        for ch in value[:512]
        if not ch.isprintable() and ch not in ("\n", "\r", "\t")
    )
    return non_printable > len(value[:512]) * 0.1


def _redact_value(value: Any, secrets: tuple[str, ...]) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, secrets)
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, secrets) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    if isinstance(value, str):
        if _looks_binary(value):
            return f"<binary:{len(value.encode('utf-8'))}_bytes>"
        return _mask_secrets(value, secrets)
    return value


def _redact_dict(d: dict, secrets: tuple[str, ...]) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            if isinstance(value, str):
                masked = _mask_secrets(value, secrets)
                result[key] = masked if masked != value else "<redacted>"
            else:
                result[key] = "<redacted>"
        else:
            result[key] = _redact_value(value, secrets)
    return result


def redact(payload: dict, secrets: Iterable[str] = ()) -> dict:
    """Return a deep copy of *payload* with sensitive data redacted.

    Parameters
    ----------
    payload:
        The dictionary to sanitise (headers, form fields, response body).
    secrets:
        Credential strings (token, nonce) to scrub wherever they appear.

    Returns
    -------
    dict
        A new dictionary; the original *payload* is never mutated.

    Examples
    --------
    >>> redact({"Authorization": "Bearer abc123"})
    {'Authorization': 'Bearer <redacted>'}

    >>> redact({"file": ("a.jpg", b"\\xff\\xd8", "image/jpeg")})
    {'file': ['a.jpg', '<binary:2_bytes>', 'image/jpeg']}
    """
    safe = copy.deepcopy(payload)
    return _redact_dict(safe, tuple(s for s in secrets if s))

"""
Fingerprint Cache — Fingerprint Function

Fixed-length content fingerprints used as store keys and value-equality proxies.
MD5 is collision resistant enough for deduplication; it is not used for security.
"""

from __future__ import annotations

import hashlib

FINGERPRINT_LENGTH = 32


def fingerprint(data: bytes | str) -> str:
    """Return the 32-char lowercase hex MD5 digest of ``data``.

    Strings are encoded as UTF-8 first, so ``fingerprint("k") == fingerprint(b"k")``.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()  # noqa: S324

"""Identity confidence scoring (core domain)."""

from __future__ import annotations

import re
from typing import List

_SEPARATORS = re.compile(r"[-_]")


def tokenize_identity(identity: str) -> List[str]:
    """Split an identity into lower-cased tokens.

    Tokens break on hyphens/underscores, camel-case transitions and
    letter/digit boundaries, e.g. "MyCoolName-88" -> ["my", "cool", "name", "88"].
    """

    clean = _SEPARATORS.sub(" ", identity)
    clean = re.sub(r"([a-z])([A-Z])", r"\1 \2", clean)
    clean = re.sub(r"([a-zA-Z])([0-9])", r"\1 \2", clean)
    clean = re.sub(r"([0-9])([a-zA-Z])", r"\1 \2", clean)
    return [token.lower() for token in clean.split() if token]


def score_identity(identity: str, text: str) -> int:
    """Return 0-100 confidence that ``identity`` appears in ``text``.

    - 100: verbatim (case-insensitive)
    - 90: verbatim once hyphens/underscores are removed
    - 80: more than two thirds of the identity tokens found
    - 50: at least one token found
    - 0: nothing found
    """

    if not identity or not text:
        return 0

    identity_lower = identity.lower()
    text_lower = text.lower()
    if identity_lower in text_lower:
        return 100

    identity_clean = _SEPARATORS.sub("", identity_lower)
    if identity_clean and identity_clean in _SEPARATORS.sub("", text_lower):
        return 90

    tokens = tokenize_identity(identity)
    if not tokens:
        return 0

    found = sum(1 for token in tokens if token in text_lower)
    if found / len(tokens) > 2 / 3:
        return 80
    if found:
        return 50
    return 0

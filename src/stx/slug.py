"""Deterministic folder IDs derived from a folder label."""

from __future__ import annotations

import hashlib
import re

_SEPARATORS = re.compile(r"[\s_]+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-+")


def to_kebab_case(text: str) -> str:
    """Lowercase ``text``, turn whitespace/underscores into hyphens, drop the rest.

    ``"Node.js Backend_API"`` becomes ``"nodejs-backend-api"``.
    """
    slug = _SEPARATORS.sub("-", text.lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")


def short_hash(text: str) -> str:
    """First 2 bytes of the SHA-256 of ``text`` as 4 lowercase hex chars."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:4]


def generate_folder_id(label: str) -> str:
    """Stable folder ID for ``label``.

    The hash is taken over the original label, so labels that slug the
    same (``"My Project"`` / ``"my_project"``) still get distinct IDs,
    and re-running an interrupted pairing reuses the same ID.
    """
    return f"{to_kebab_case(label)}-{short_hash(label)}"

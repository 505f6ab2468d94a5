"""Ignore-pattern templates applied to both sides of a paired folder."""

from __future__ import annotations

from .exceptions import ValidationError

_COMMON = [
    "(?d).DS_Store",
    "(?d)Thumbs.db",
    "(?d)desktop.ini",
    ".Spotlight-V100",
    ".Trashes",
    "*.swp",
    "*~",
]

_NODE = [
    "node_modules",
    ".npm",
    ".pnpm-store",
    ".yarn/cache",
    ".next",
    ".turbo",
    "dist",
    "build",
    "coverage",
]

_PYTHON = [
    "__pycache__",
    "*.pyc",
    "*.pyo",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "*.egg-info",
]

TEMPLATES: dict[str, list[str]] = {
    "nodepython": _COMMON + _NODE + _PYTHON,
    "node": _COMMON + _NODE,
    "python": _COMMON + _PYTHON,
}


def default_ignore(template: str, ignore_git: bool = False) -> list[str]:
    """Return the ordered ignore lines for ``template``.

    Args:
        template: One of ``TEMPLATES``.
        ignore_git: Also keep ``.git`` metadata out of the share.

    Raises:
        ValidationError: If the template name is unknown.
    """
    try:
        lines = list(TEMPLATES[template])
    except KeyError:
        known = ", ".join(sorted(TEMPLATES))
        raise ValidationError(
            f"Unknown ignore template '{template}' (expected one of: {known})"
        ) from None

    if ignore_git:
        lines.append(".git")
    return lines

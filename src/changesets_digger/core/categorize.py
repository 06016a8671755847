"""Keyword-based change categorization.

A changeset only declares its severity; the changelog category is guessed
from the summary text. Rules are checked in table order and the first match
wins, so the order of ``CATEGORY_RULES`` is observable behavior: "Fix removed
button" is ``fixed``, not ``removed``.
"""

from __future__ import annotations

from enum import StrEnum


class ChangeCategory(StrEnum):
    """Changelog section a change is listed under."""

    ADDED = "added"
    CHANGED = "changed"
    DEPRECATED = "deprecated"
    REMOVED = "removed"
    FIXED = "fixed"
    SECURITY = "security"


# (substrings of the lowercased summary, category), first match wins.
CATEGORY_RULES: tuple[tuple[tuple[str, ...], ChangeCategory], ...] = (
    (("add", "new", "feature"), ChangeCategory.ADDED),
    (("fix", "bug", "resolve"), ChangeCategory.FIXED),
    (("remove", "delete"), ChangeCategory.REMOVED),
    (("deprecat",), ChangeCategory.DEPRECATED),
    (("security", "vulnerabilit"), ChangeCategory.SECURITY),
)

DEFAULT_CATEGORY = ChangeCategory.CHANGED

DEFAULT_CATEGORY_TITLES: dict[ChangeCategory, str] = {
    ChangeCategory.ADDED: "### 🎉 Added",
    ChangeCategory.CHANGED: "### ✨ Changed",
    ChangeCategory.DEPRECATED: "### ⚠️ Deprecated",
    ChangeCategory.REMOVED: "### 🗑️ Removed",
    ChangeCategory.FIXED: "### 🐛 Fixed",
    ChangeCategory.SECURITY: "### 🔒 Security",
}

CATEGORY_EMOJIS: dict[ChangeCategory, str] = {
    ChangeCategory.ADDED: "🎉",
    ChangeCategory.CHANGED: "✨",
    ChangeCategory.DEPRECATED: "⚠️",
    ChangeCategory.REMOVED: "🗑️",
    ChangeCategory.FIXED: "🐛",
    ChangeCategory.SECURITY: "🔒",
}


def categorize_change(summary: str) -> ChangeCategory:
    """Classify a change summary.

    Args:
        summary: Free-text change summary

    Returns:
        The category of the first matching rule, or ``changed``
    """
    lower = summary.lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in lower for keyword in keywords):
            return category
    return DEFAULT_CATEGORY

# -*- coding: utf-8 -*-
"""discord format functions"""

from collections.abc import Iterable


def box(text, lang="", limit=4096):
    """discord format for box with optional language highlighting, cut to fit *limit*"""
    # a stray fence inside the text would close the box early
    text = str(text).replace("```", "`\u200b``")
    text = truncate(text, limit - len(lang) - len("```\n\n```"))
    return f"```{lang}\n{text}\n```"


def inline(text):
    """discord format for inline box"""
    return f"`{text}`"


def bold(text):
    """discord format for bold text"""
    return f"**{text}**"


def humanize_permission(name: str) -> str:
    """turns a permission flag name like ``manage_guild`` into ``Manage Server``"""
    return name.replace("_", " ").replace("guild", "server").title()


def humanize_permissions(names: Iterable[str]) -> str:
    return ", ".join(humanize_permission(name) for name in sorted(names))


def truncate(text, limit=4096, suffix="…"):
    """cuts text down to discords length limits"""
    if len(text) <= limit:
        return text
    return text[: limit - len(suffix)] + suffix

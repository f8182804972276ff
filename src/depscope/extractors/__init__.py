"""Language families known to depscope."""

from __future__ import annotations

from depscope.extractors.base import LanguagePlugin


def builtin_plugins() -> list[LanguagePlugin]:
    """Return the built-in plugins in registration order (JS/TS, then Java)."""
    from depscope.extractors.java import JavaPlugin
    from depscope.extractors.javascript import JavaScriptPlugin

    return [JavaScriptPlugin(), JavaPlugin()]

"""Utilities for declaratively registering application modules.

Each blueprint-backed module is described by a ``ModuleDefinition`` so that
registration stays a data change rather than a code change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from flask import Blueprint, Flask
from werkzeug.utils import import_string

from ..extensions import csrf_protect


@dataclass(frozen=True)
class ModuleDefinition:
    """Describe how a blueprint-backed module is registered with the app."""

    import_path: str
    attribute: str
    url_prefix: Optional[str] = None
    version: str = "1.0"
    json_api: bool = True

    def load_blueprint(self) -> Blueprint:
        """Import and return the blueprint described by this definition."""

        module = import_string(self.import_path)
        blueprint = getattr(module, self.attribute, None)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(
                "Expected attribute '%s' in '%s' to be a Flask Blueprint, got %r instead"
                % (self.attribute, self.import_path, type(blueprint))
            )
        return blueprint


def register_modules(app: Flask, modules: Sequence[ModuleDefinition]) -> None:
    """Register all modules in the provided iterable with the Flask app."""

    for module in modules:
        blueprint = module.load_blueprint()
        if module.json_api:
            # JSON endpoints authenticate through the login session, not forms
            csrf_protect.exempt(blueprint)
        app.register_blueprint(blueprint, url_prefix=module.url_prefix)
        app.logger.debug(
            "Registered module %s (version %s) at prefix %s",
            module.import_path,
            module.version,
            module.url_prefix or "<root>",
        )


def register_default_modules(app: Flask) -> None:
    """Convenience helper that registers the built-in Flashy modules."""

    register_modules(app, DEFAULT_MODULES)


DEFAULT_MODULES: Iterable[ModuleDefinition] = (
    ModuleDefinition("flashy_app.modules.auth", "blueprint", url_prefix="/api/auth", version="1.0"),
    ModuleDefinition("flashy_app.modules.decks", "blueprint", url_prefix="/api/decks", version="1.0"),
    ModuleDefinition("flashy_app.modules.community", "blueprint", url_prefix="/api/community", version="1.0"),
    ModuleDefinition("flashy_app.modules.study", "blueprint", url_prefix="/api/study", version="1.0"),
    ModuleDefinition("flashy_app.modules.achievements", "blueprint", url_prefix="/api/achievements", version="1.0"),
    ModuleDefinition("flashy_app.modules.subscriptions", "blueprint", url_prefix="/api/subscription", version="1.0"),
)

"""Model registry: every named model discovered during a run, keyed by name."""

from typing import Iterable, Iterator

from swaggerlite.parser.base import Model, TypeRef, iter_model_refs


class ModelRegistry:
    """Ordered name -> Model mapping.

    Entries are reserved before their fields are walked, so a type that refers
    to itself (directly or through other types) finds its own entry and
    resolution terminates.
    """

    def __init__(self):
        self._models: dict[str, Model] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def get(self, name: str) -> Model | None:
        return self._models.get(name)

    def reserve(self, name: str) -> Model:
        """Create the (still empty) entry for ``name``; returns the existing one if present."""
        if name not in self._models:
            self._models[name] = Model(name=name)
        return self._models[name]

    @property
    def models(self) -> dict[str, Model]:
        return dict(self._models)

    def closure(self, type_refs: Iterable[TypeRef]) -> tuple[dict[str, Model], list[str]]:
        """Models reachable from ``type_refs``, plus names with no registry entry.

        Order is depth-first in reference order, so the result is stable for
        stable input.
        """
        found: dict[str, Model] = {}
        missing: list[str] = []

        def visit(name: str) -> None:
            if name in found or name in missing:
                return
            model = self._models.get(name)
            if model is None:
                missing.append(name)
                return
            found[name] = model
            for prop in model.properties:
                for ref in iter_model_refs(prop.type):
                    visit(ref)

        for type_ref in type_refs:
            for name in iter_model_refs(type_ref):
                visit(name)
        return found, missing

    def missing(self, type_refs: Iterable[TypeRef]) -> list[str]:
        """Names referenced (directly or through registered models) but never registered."""
        return self.closure(type_refs)[1]

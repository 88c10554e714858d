"""Gateway definitions loaded from YAML documents."""

from __future__ import annotations

from typing import Any

import yaml

from apigw_kit.errors import BkApiError, NotFoundError


class Definition:
    """A nested mapping that describes a gateway, read by dotted namespaces."""

    def __init__(self, definition: dict[str, Any] | None = None) -> None:
        self.definition = definition

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.definition!r})"

    def get(self, namespace: str) -> dict[str, Any] | None:
        """Return the mapping found under a dotted ``namespace``.

        An empty namespace returns the whole definition. The mapping returned
        is the one held by the definition, not a copy.
        """
        if not namespace:
            return self.definition

        current = self.definition
        for field in namespace.split("."):
            if current is None or field not in current:
                raise NotFoundError(f"namespace: {namespace}")
            value = current[field]
            if not isinstance(value, dict):
                raise NotFoundError(f"namespace: {namespace}")
            current = value

        return current

    @classmethod
    def from_yaml(cls, content: str | bytes) -> Definition:
        """Build a definition from a YAML document whose top level is a mapping."""
        try:
            loaded = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise BkApiError("failed to unmarshal yaml") from exc

        if loaded is not None and not isinstance(loaded, dict):
            raise BkApiError(
                f"failed to unmarshal yaml: expected a mapping, got {type(loaded).__name__}"
            )

        return cls(loaded)
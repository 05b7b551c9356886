"""Fact kinds and the per-session fact store."""

from enum import Enum
from typing import Any


class FactKind(Enum):
    """Which external source and store slot an operation concerns."""

    DOG_IMAGE = "dog_image"
    CAT_FACT = "cat_fact"

    @property
    def label(self) -> str:
        """Human-readable name used in outcome messages."""
        return self.value.replace("_", " ")


# Lines rendered for a kind: (with value, without value)
_RENDER_LINES = {
    FactKind.DOG_IMAGE: ("- Latest Dog Image URL: {value}", "- No dog image fetched yet."),
    FactKind.CAT_FACT: ("- Latest Cat Fact: {value}", "- No cat fact fetched yet."),
}


class FactStore:
    """Most recent successfully fetched value for each fact kind."""

    def __init__(self) -> None:
        self._values: dict[FactKind, str | None] = {kind: None for kind in FactKind}

    def get(self, kind: FactKind) -> str | None:
        """Get the last fetched value for kind, or None if never fetched."""
        return self._values[kind]

    def set(self, kind: FactKind, value: str) -> None:
        """Overwrite the stored value for kind."""
        self._values[kind] = value

    def render(self) -> str:
        """Summarize the store for the prompt, one line per kind."""
        lines = ["Current knowledge:"]
        for kind in FactKind:
            present, absent = _RENDER_LINES[kind]
            value = self._values[kind]
            lines.append(present.format(value=value) if value else absent)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for serialization."""
        return {kind.value: value for kind, value in self._values.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FactStore":
        """Create from dictionary, ignoring unknown keys."""
        store = cls()
        for kind in FactKind:
            value = data.get(kind.value)
            if isinstance(value, str) and value:
                store.set(kind, value)
        return store

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FactStore):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"FactStore({self.to_dict()!r})"

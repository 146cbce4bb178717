from collections.abc import Iterator, Mapping
from dataclasses import dataclass

NormalizedRow = dict[str, object]


class MetadataRecord(Mapping[str, str]):
    """Header ``key: value`` pairs with case-insensitive keys.

    The first value seen for a key is kept; keys are never removed.
    """

    def __init__(self) -> None:
        self._items: dict[str, tuple[str, str]] = {}

    def add(self, key: str, value: str) -> bool:
        """Store ``value`` unless ``key`` is already present. Returns True if stored."""
        folded = key.casefold()
        if folded in self._items:
            return False
        self._items[folded] = (key, value)
        return True

    def replace(self, key: str, value: str) -> None:
        """Overwrite the value of an existing key."""
        folded = key.casefold()
        if folded not in self._items:
            raise KeyError(key)
        original_key, _ = self._items[folded]
        self._items[folded] = (original_key, value)

    def __getitem__(self, key: str) -> str:
        return self._items[key.casefold()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._items

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"MetadataRecord({dict(self.items())!r})"


@dataclass(frozen=True)
class ParseResult:
    """Rows produced from one file plus the number of data lines that were dropped."""

    rows: list[NormalizedRow]
    skipped_lines: int = 0

"""Option value stores for the two variant dimensions.

Each store is an ordered, case-sensitively deduplicated list of trimmed,
non-empty strings. Order only affects display and the order of composed
drafts; it carries no other meaning.
"""

from collections.abc import Callable, Iterable

OptionListener = Callable[["OptionValueStore"], None]


class OptionValueStore:
    """Ordered set of option values for one variant dimension.

    Every effective mutation bumps ``version`` and notifies subscribers,
    which is how the variant editor knows to regenerate drafts.

    Example usage:
        colors = OptionValueStore("Color", ["Red"])
        colors.add("  Blue ")   # stored as "Blue"
        colors.add("Red")       # duplicate, ignored
        colors.values           # ("Red", "Blue")
    """

    def __init__(self, label: str = "", values: Iterable[str] = ()) -> None:
        """Initialize store.

        Args:
            label: Dimension label shown to the seller (e.g. "Color").
            values: Initial values, normalized like ``add``.
        """
        self.label = label
        self._values: list[str] = []
        self._listeners: list[OptionListener] = []
        self.version = 0
        for value in values:
            self._append(value)

    @property
    def values(self) -> tuple[str, ...]:
        """Current values in insertion order."""
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and value.strip() in self._values

    def __iter__(self):
        return iter(self.values)

    def subscribe(self, listener: OptionListener) -> None:
        """Register a callback invoked after each effective mutation."""
        self._listeners.append(listener)

    def add(self, value: str) -> bool:
        """Add a value.

        Args:
            value: Raw input; surrounding whitespace is trimmed.

        Returns:
            True if the store changed, False for blanks and duplicates.
        """
        if not self._append(value):
            return False
        self._changed()
        return True

    def remove(self, value: str) -> bool:
        """Remove a value.

        Args:
            value: Value to remove (trimmed before matching).

        Returns:
            True if the value was present.
        """
        cleaned = (value or "").strip()
        if cleaned not in self._values:
            return False
        self._values.remove(cleaned)
        self._changed()
        return True

    def clear(self) -> None:
        """Remove all values."""
        if not self._values:
            return
        self._values.clear()
        self._changed()

    def _append(self, value: str) -> bool:
        cleaned = (value or "").strip()
        if not cleaned or cleaned in self._values:
            return False
        self._values.append(cleaned)
        return True

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            listener(self)

"""String macro table used during a single parse."""
from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

MONTH_MACROS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")


class MacroTable:
    """Ordered, case-insensitive ``@string`` definitions.

    Lookups see the table as it stands when the reference is read, so a
    later definition never changes a value that was already expanded.
    The month names ``jan`` to ``dec`` are always defined and resolve to
    themselves unless the source redefines them.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, Tuple[str, str]] = {}
        for name, value in (initial or {}).items():
            self.define(name, value)

    def define(self, name: str, value: str) -> None:
        self._values[name.strip().lower()] = (name.strip(), value)

    def lookup(self, name: str) -> Optional[str]:
        key = name.strip().lower()
        if key in self._values:
            return self._values[key][1]
        if key in MONTH_MACROS:
            return key
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._values.values())

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> Dict[str, str]:
        """Defined macros in definition order, without the month built-ins."""
        return {original: value for original, value in self._values.values()}


__all__ = ["MONTH_MACROS", "MacroTable"]

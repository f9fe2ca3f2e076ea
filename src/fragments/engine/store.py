"""Sparse maps whose absent keys read as zero."""

from typing import Dict, Hashable, Iterator, MutableMapping


class ZeroDefaultMap(MutableMapping):
    """Mapping of non-negative integers where a missing key reads as ``0``.

    Writing ``0`` removes the key, so iteration only visits non-zero entries
    and ``len()`` counts them.
    """

    def __init__(self, initial: Dict[Hashable, int] = None):
        self._data: Dict[Hashable, int] = {}
        for key, value in (initial or {}).items():
            self[key] = value

    def __getitem__(self, key: Hashable) -> int:
        return self._data.get(key, 0)

    def __setitem__(self, key: Hashable, value: int) -> None:
        if value < 0:
            raise ValueError(f"negative value for {key!r}: {value}")
        if value == 0:
            self._data.pop(key, None)
        else:
            self._data[key] = value

    def __delitem__(self, key: Hashable) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def total(self) -> int:
        """Sum of all stored values."""
        return sum(self._data.values())

    def __repr__(self) -> str:
        return f"ZeroDefaultMap({self._data!r})"

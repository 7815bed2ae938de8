"""Abstract base class for provider response normalizers."""

import re
from abc import ABC, abstractmethod
from typing import Any


class Normalizer(ABC):
    """Base class for provider response normalizers.

    Normalizers convert a provider's raw JSON into one of the canonical
    response dataclasses. Each provider payload shape has its own normalizer;
    nothing provider-specific escapes past `normalize`.
    """

    @abstractmethod
    def normalize(self, api_response: Any, **context: Any) -> Any | None:
        """Convert a raw provider response to a canonical response.

        Args:
            api_response: Raw provider response (parsed JSON)
            **context: Values learned earlier in the lookup chain, such as a
                format or platform inferred from a barcode title

        Returns:
            Canonical response dataclass, or None if the payload holds no
            usable record
        """
        pass

    def _safe_get(self, data: Any, *keys: str, default: Any = None) -> Any:
        """Safely navigate nested dictionary keys.

        Args:
            data: Dictionary to navigate
            *keys: Sequence of keys to traverse
            default: Default value if key path doesn't exist

        Returns:
            Value at the key path, or default if not found

        Example:
            >>> self._safe_get({'a': {'b': {'c': 1}}}, 'a', 'b', 'c')
            1
            >>> self._safe_get({'a': {}}, 'a', 'b', 'c', default='missing')
            'missing'
        """
        current = data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return default if current is None else current

    def _names(self, items: Any, key: str = "name") -> list[str]:
        """Collect non-empty `key` values from a list of dicts.

        Example:
            >>> self._names([{'name': 'Drama'}, {}, {'name': 'Crime'}])
            ['Drama', 'Crime']
        """
        if not isinstance(items, list):
            return []
        names = []
        for item in items:
            value = item.get(key) if isinstance(item, dict) else None
            if value:
                names.append(str(value))
        return names

    def _to_int(self, value: Any) -> int | None:
        """Parse an int from a number or a numeric prefix string ('352 p.')."""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            match = re.match(r"\s*(\d+)", value)
            if match:
                return int(match.group(1))
        return None

"""Active filter state for a listing screen.

The state maps facet keys to the user's current selection. Vacuous values
(None, blank text, empty collections, False) are never
stored, so the number of entries is always the number of active filters.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from edufilter.filters.facets import DateRangeFacet, Facet, FacetKind
from edufilter.filters.values import COLLECTION_TYPES, is_vacuous, parse_bound, to_json_value


@dataclass
class FilterState:
    """Current filter selections for one screen."""

    values: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        raw = self.values
        self.values = {}
        for key, value in raw.items():
            self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def items(self) -> Iterable[Tuple[str, Any]]:
        return self.values.items()

    def set(self, key: str, value: Any) -> None:
        """Store a value, or drop the key if the value is vacuous."""
        if isinstance(value, COLLECTION_TYPES):
            value = frozenset(v for v in value if not is_vacuous(v))
        if is_vacuous(value):
            self.values.pop(key, None)
        else:
            self.values[key] = value

    def remove(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""
        return self.values.pop(key, None) is not None

    def clear(self) -> None:
        self.values.clear()

    @property
    def is_empty(self) -> bool:
        """Check if no filters are active (showing all data)."""
        return not self.values

    @property
    def active_filter_count(self) -> int:
        """Count of active filters."""
        return len(self.values)

    def copy(self) -> "FilterState":
        """Create a copy of this filter state."""
        return FilterState(dict(self.values))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary for storage."""
        return {key: to_json_value(value) for key, value in self.values.items()}

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        facets: Optional[List[Facet]] = None,
    ) -> "FilterState":
        """
        Create from dictionary.

        Args:
            data: Output of to_dict().
            facets: Facet definitions used to restore date bounds from ISO
                    strings. Without them, dates stay as strings.

        Returns:
            FilterState with lists restored as frozensets.
        """
        date_keys = set()
        for facet in facets or []:
            if isinstance(facet, DateRangeFacet):
                date_keys.update(facet.state_keys)

        state = cls()
        for key, value in (data or {}).items():
            if key in date_keys and isinstance(value, str):
                try:
                    value = parse_bound(value)
                except ValueError:
                    continue
            state.set(key, value)
        return state

    def get_summary(self, facets: Optional[List[Facet]] = None) -> str:
        """Get a human-readable summary of active filters."""
        titles = {}
        for facet in facets or []:
            for key in facet.state_keys:
                titles[key] = facet.title
            if facet.kind == FacetKind.DATE_RANGE:
                titles[facet.from_key] = f"{facet.title} from"
                titles[facet.to_key] = f"{facet.title} to"

        parts = []
        for key, value in self.values.items():
            title = titles.get(key, key)
            if isinstance(value, frozenset):
                if len(value) <= 3:
                    parts.append(f"{title}: {', '.join(sorted(map(str, value)))}")
                else:
                    parts.append(f"{title}: {len(value)} selected")
            elif value is True:
                parts.append(title)
            else:
                parts.append(f"{title}: {to_json_value(value)}")

        return " | ".join(parts) if parts else "All data (no filters)"

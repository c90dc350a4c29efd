"""In-memory, read-only term dictionary.

Loaded once per session from storage (see ``type2live.services.terms``) and
then only queried by the turn generator and the answer validator.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Set

from .domain import DictionaryEntry


class DictionaryProvider(Protocol):
    def get_entries(self, min_tier: Optional[int] = None,
                    max_tier: Optional[int] = None) -> List[DictionaryEntry]:
        ...

    def find(self, display_text: str) -> Optional[DictionaryEntry]:
        ...

    def letters_in_use(self) -> Set[str]:
        ...


class TermDictionary:

    def __init__(self, entries: Iterable[DictionaryEntry]):
        self._entries = tuple(entries)
        # Duplicate display texts are not expected; the first one loaded wins.
        self._by_text: Dict[str, DictionaryEntry] = {}
        for entry in self._entries:
            self._by_text.setdefault(entry.display_text, entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DictionaryEntry]:
        return iter(self._entries)

    def get_entries(self, min_tier: Optional[int] = None,
                    max_tier: Optional[int] = None) -> List[DictionaryEntry]:
        return [
            e for e in self._entries
            if (min_tier is None or e.difficulty_tier >= min_tier)
            and (max_tier is None or e.difficulty_tier <= max_tier)
        ]

    def find(self, display_text: str) -> Optional[DictionaryEntry]:
        """Exact, case-sensitive lookup by display text."""
        return self._by_text.get(display_text)

    def letters_in_use(self) -> Set[str]:
        """Lowercased characters that occur in at least one entry."""
        letters: Set[str] = set()
        for entry in self._entries:
            letters.update(entry.display_text.lower())
        return letters

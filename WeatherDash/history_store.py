"""Search history - the bounded recent-cities list and where it is persisted."""
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import List, Sequence

from weather_data import SearchHistoryEntry

MAX_HISTORY = 8
HISTORY_KEY = "weatherSearchHistory"


def add_to_history(entries: Sequence[SearchHistoryEntry], entry: SearchHistoryEntry) -> List[SearchHistoryEntry]:
    """
    Return a new history list with ``entry`` first.

    Any older entry for the same (name, country) is dropped and the list is
    capped at the MAX_HISTORY most recent entries.
    """
    rest = [e for e in entries if e.key != entry.key]
    return [entry, *rest][:MAX_HISTORY]


class HistoryStoreBase(ABC):
    """Abstract key-value persistence for the search history list."""

    @abstractmethod
    def load(self) -> List[SearchHistoryEntry]:
        pass

    @abstractmethod
    def save(self, entries: Sequence[SearchHistoryEntry]) -> None:
        """Replace the stored list with ``entries``."""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryHistoryStore(HistoryStoreBase):
    """History kept in memory only."""

    def __init__(self, entries: Sequence[SearchHistoryEntry] = ()):
        self._entries = list(entries)

    def load(self) -> List[SearchHistoryEntry]:
        return list(self._entries)

    def save(self, entries: Sequence[SearchHistoryEntry]) -> None:
        self._entries = list(entries)[:MAX_HISTORY]

    def clear(self) -> None:
        self._entries = []


class JsonHistoryStore(HistoryStoreBase):
    """
    History persisted as a JSON document on disk.

    The file holds ``{"weatherSearchHistory": [...]}``; each save rewrites
    the whole list.
    """

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[SearchHistoryEntry]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [SearchHistoryEntry.from_dict(item) for item in data.get(HISTORY_KEY, [])][:MAX_HISTORY]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logging.warning(f"Ignoring unreadable search history at {self.path}: {e}")
            return []

    def save(self, entries: Sequence[SearchHistoryEntry]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({HISTORY_KEY: [e.to_dict() for e in list(entries)[:MAX_HISTORY]]}, f, indent=2)
        os.replace(tmp_path, self.path)
        logging.debug(f"Saved {min(len(entries), MAX_HISTORY)} history entries to {self.path}")

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        logging.info("Search history cleared")

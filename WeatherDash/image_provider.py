"""Background photo lookup - Pexels search with per-condition fallback images."""
import logging
from abc import ABC, abstractmethod
from itertools import islice
from typing import Iterator, Optional

import requests

_PEXELS_PHOTO = "https://images.pexels.com/photos/{id}/pexels-photo-{id}.jpeg?auto=compress&cs=tinysrgb&w=1260&h=750&dpr=2"

FALLBACK_IMAGES = {
    "Clear": _PEXELS_PHOTO.format(id=1174732),
    "Clouds": _PEXELS_PHOTO.format(id=1118873),
    "Rain": _PEXELS_PHOTO.format(id=125510),
    "Snow": _PEXELS_PHOTO.format(id=688660),
    "Thunderstorm": _PEXELS_PHOTO.format(id=1162251),
    "Drizzle": _PEXELS_PHOTO.format(id=39811),
    "Mist": _PEXELS_PHOTO.format(id=2448749),
    "Fog": _PEXELS_PHOTO.format(id=2448749),
    "Haze": _PEXELS_PHOTO.format(id=355241),
}
DEFAULT_IMAGE = _PEXELS_PHOTO.format(id=572897)


def fallback_image(condition: str = "") -> str:
    """Static image for a weather condition, or the generic default."""
    return FALLBACK_IMAGES.get(condition, DEFAULT_IMAGE)


def candidate_queries(city: str, country: str, condition: str = "") -> Iterator[str]:
    """Search queries in priority order, most specific first."""
    if condition:
        yield f"{city} {condition}"
    yield f"{city} {country} city"
    yield f"{city} skyline"
    yield f"{city} cityscape"


class ImageProviderBase(ABC):
    """Abstract base class for background image providers."""

    @abstractmethod
    def search(self, city: str, country: str, condition: str = "") -> str:
        """
        Find an image URL for a city.

        Never raises: on any failure an implementation returns the
        fallback image for the condition.
        """
        pass


class PexelsImageProvider(ImageProviderBase):
    """
    Image provider using the Pexels search API.

    https://www.pexels.com/api/documentation/#photos-search
    """

    SEARCH_URL = "https://api.pexels.com/v1/search"

    def __init__(self, api_key: Optional[str], timeout: int = 8, max_attempts: int = 4, per_page: int = 5):
        """
        Initialize Pexels provider.

        Args:
            api_key: Pexels API key (None disables searching)
            timeout: HTTP request timeout in seconds
            max_attempts: Maximum number of queries to try per search
            per_page: Number of photos requested per query
        """
        self.api_key = api_key
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.per_page = per_page

    def search(self, city: str, country: str, condition: str = "") -> str:
        if not self.api_key:
            logging.debug("No Pexels API key configured, using fallback image")
            return fallback_image(condition)

        for query in islice(candidate_queries(city, country, condition), self.max_attempts):
            try:
                url = self._search_one(query)
            except (requests.exceptions.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
                logging.warning(f"Image search failed for '{query}': {e}")
                continue
            if url:
                logging.info(f"Found image for: {query}")
                return url

        logging.info(f"Using fallback image for: {condition or 'default'}")
        return fallback_image(condition)

    def _search_one(self, query: str) -> Optional[str]:
        response = requests.get(
            self.SEARCH_URL,
            params={"query": query, "per_page": self.per_page, "orientation": "landscape"},
            headers={"Authorization": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()
        photos = response.json().get("photos") or []
        for photo in photos:
            src = photo.get("src") or {}
            if photo.get("width", 0) > photo.get("height", 0) and src.get("original"):
                return src.get("large2x") or src["original"]
        return None

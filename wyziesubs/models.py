"""
Data models for wyziesubs.

Defines the search criteria sent to the Wyzie Subs service and the
subtitle descriptors it returns.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, Union

from .exceptions import DeserializationError

DEFAULT_SEARCH_URL = "https://sub.wyzie.ru/search"

CatalogId = Union[int, str]


@dataclass
class SearchCriteria:
    """Criteria for a subtitle search. One of tmdb_id / imdb_id is required."""
    tmdb_id: Optional[CatalogId] = None
    imdb_id: Optional[CatalogId] = None  # e.g. "tt0111161"
    season: Optional[int] = None
    episode: Optional[int] = None
    language: Optional[str] = None
    format: Optional[str] = None
    hi: Optional[bool] = None

    @property
    def catalog_id(self) -> Optional[CatalogId]:
        """TMDB id when set, otherwise the IMDb id."""
        return self.tmdb_id or self.imdb_id


# Wire key -> attribute name
_DESCRIPTOR_FIELDS = {
    "id": "id",
    "url": "url",
    "format": "format",
    "isHearingImpaired": "is_hearing_impaired",
    "flagUrl": "flag_url",
    "media": "media",
    "display": "display",
    "language": "language",
}


@dataclass(frozen=True)
class SubtitleDescriptor:
    """A single subtitle entry as returned by the search service."""
    id: str
    url: str
    format: str
    is_hearing_impaired: bool
    flag_url: str
    media: str
    display: str
    language: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubtitleDescriptor":
        """
        Build a descriptor from one item of the service's JSON array.

        Args:
            data: Decoded JSON object using the service's camelCase keys

        Returns:
            SubtitleDescriptor with values copied verbatim

        Raises:
            DeserializationError: If data is not an object or lacks a field
        """
        if not isinstance(data, dict):
            raise DeserializationError(
                f"Expected subtitle object, got {type(data).__name__}"
            )
        missing = [key for key in _DESCRIPTOR_FIELDS if key not in data]
        if missing:
            raise DeserializationError(
                f"Subtitle object missing field(s): {', '.join(missing)}"
            )
        return cls(**{attr: data[key] for key, attr in _DESCRIPTOR_FIELDS.items()})

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        return {key: values[attr] for key, attr in _DESCRIPTOR_FIELDS.items()}


@dataclass(frozen=True)
class SearchResult:
    """Search results together with the first subtitle converted to WebVTT."""
    subtitles: List[SubtitleDescriptor] = field(default_factory=list)
    vtt_content: str = ""


@dataclass
class ClientConfig:
    """Configuration for WyzieClient requests."""
    base_url: str = DEFAULT_SEARCH_URL
    timeout: float = 30
    verify_ssl: bool = True
    user_agent: Optional[str] = None  # defaults to wyziesubs/<version>

"""
wyziesubs - Wyzie Subs search client and WebVTT normalizer

Searches the Wyzie Subs service for movie and TV subtitles and converts
subtitle files (SubRip or WebVTT-like) into clean WebVTT.

Features:
- Search by TMDB or IMDb id with season, episode, language, format and
  hearing-impaired filters
- Convert SRT/VTT text to canonical WebVTT (sequence numbers removed,
  comma milliseconds fixed, unparsable blocks skipped)
- Fetch and convert a subtitle file in one call

Example usage:
    >>> from wyziesubs import search_subtitles, normalize_to_vtt
    >>>
    >>> # Search and convert the first result
    >>> result = search_subtitles(tmdb_id=1399, season=1, episode=1, parse_vtt=True)
    >>> print(result.subtitles[0].display)
    >>> print(result.vtt_content)
    >>>
    >>> # Convert local SRT text
    >>> vtt = normalize_to_vtt(open("episode.srt").read())
"""

import logging

__version__ = "0.1.0"
__author__ = "wyziesubs Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Normalizer
from .normalizer import (
    normalize_to_vtt,
    normalize_to_vtt_with_stats,
    normalize_timestamp_line,
    is_timestamp_line,
    fetch_subtitle_text,
    fetch_and_normalize,
    normalize_vtt_file,
)

# Search client
from .client import (
    WyzieClient,
    search_subtitles,
    build_query_params,
    build_search_url,
)

# Data models
from .models import SearchCriteria, SubtitleDescriptor, SearchResult, ClientConfig

# Errors
from .exceptions import (
    WyzieSubsError,
    InvalidCriteriaError,
    NetworkError,
    FetchError,
    DeserializationError,
    NoSubtitlesError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Normalizer
    "normalize_to_vtt",
    "normalize_to_vtt_with_stats",
    "normalize_timestamp_line",
    "is_timestamp_line",
    "fetch_subtitle_text",
    "fetch_and_normalize",
    "normalize_vtt_file",

    # Search client
    "WyzieClient",
    "search_subtitles",
    "build_query_params",
    "build_search_url",

    # Models
    "SearchCriteria",
    "SubtitleDescriptor",
    "SearchResult",
    "ClientConfig",

    # Errors
    "WyzieSubsError",
    "InvalidCriteriaError",
    "NetworkError",
    "FetchError",
    "DeserializationError",
    "NoSubtitlesError",
]

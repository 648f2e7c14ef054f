"""
Wyzie Subs search client for wyziesubs.

Builds search requests from SearchCriteria, deserializes the returned
subtitle descriptors and optionally converts the first result to WebVTT.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import requests

from . import __version__
from .exceptions import (
    DeserializationError,
    InvalidCriteriaError,
    NetworkError,
    NoSubtitlesError,
)
from .models import (
    DEFAULT_SEARCH_URL,
    ClientConfig,
    SearchCriteria,
    SearchResult,
    SubtitleDescriptor,
)
from .normalizer import fetch_and_normalize

logger = logging.getLogger(__name__)

SEARCH_OPERATION = "fetching subtitles"
CONTENT_OPERATION = "fetching subtitle content"


def _query_value(value: Any) -> str:
    # The service expects lowercase booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(criteria: SearchCriteria) -> Dict[str, str]:
    """
    Build the query parameters for a search request.

    Optional criteria are only included when set.

    Args:
        criteria: Search criteria with at least a tmdb_id or imdb_id

    Returns:
        Ordered dictionary of query parameter strings

    Raises:
        InvalidCriteriaError: If neither tmdb_id nor imdb_id is set

    Example:
        >>> build_query_params(SearchCriteria(tmdb_id=1399, season=1, episode=1, hi=False))
        {'id': '1399', 'season': '1', 'episode': '1', 'hi': 'false'}
    """
    catalog_id = criteria.catalog_id
    if not catalog_id:
        raise InvalidCriteriaError("Search requires a tmdb_id or imdb_id")

    params = {"id": _query_value(catalog_id)}
    optional = {
        "season": criteria.season,
        "episode": criteria.episode,
        "language": criteria.language,
        "format": criteria.format,
        "hi": criteria.hi,
    }
    for key, value in optional.items():
        if value is not None:
            params[key] = _query_value(value)

    return params


def build_search_url(criteria: SearchCriteria, base_url: str = DEFAULT_SEARCH_URL) -> str:
    """
    Build the full search URL for the given criteria.

    Example:
        >>> build_search_url(SearchCriteria(imdb_id="tt0111161", language="en"))
        'https://sub.wyzie.ru/search?id=tt0111161&language=en'
    """
    params = build_query_params(criteria)
    return requests.Request("GET", base_url, params=params).prepare().url


def parse_search_response(payload: Any) -> List[SubtitleDescriptor]:
    """
    Convert the decoded JSON body of a search response into descriptors.

    Raises:
        DeserializationError: If payload is not a list of subtitle objects
    """
    if not isinstance(payload, list):
        raise DeserializationError(
            f"Expected a JSON array of subtitles, got {type(payload).__name__}"
        )
    return [SubtitleDescriptor.from_dict(item) for item in payload]


class WyzieClient:
    """
    Client for the Wyzie Subs search service.

    Handles:
    - Search requests by TMDB or IMDb id, with season/episode filters
    - Deserializing subtitle descriptors in service order
    - Fetching a subtitle file and converting it to WebVTT

    Can be used as a context manager to close the underlying session.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            config: Request configuration (default: ClientConfig())
            session: Optional requests session; one is created if omitted
        """
        self.config = config or ClientConfig()
        self._owns_session = session is None
        self.session = session or requests.Session()
        if self._owns_session:
            self.session.headers["User-Agent"] = (
                self.config.user_agent or f"wyziesubs/{__version__}"
            )

    def __enter__(self) -> "WyzieClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the session if it was created by this client."""
        if self._owns_session:
            self.session.close()

    def search(self, criteria: SearchCriteria) -> List[SubtitleDescriptor]:
        """
        Search for subtitles.

        Args:
            criteria: Search criteria with at least a tmdb_id or imdb_id

        Returns:
            Subtitle descriptors in the order the service returned them

        Raises:
            InvalidCriteriaError: If no catalog id is set (no request is made)
            NetworkError: On non-2xx status or transport failure
            DeserializationError: If the body is not the expected JSON
        """
        params = build_query_params(criteria)
        logger.info(f"Searching subtitles: {params}")

        try:
            response = self.session.get(
                self.config.base_url,
                params=params,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as e:
            logger.error(f"Subtitle search request failed: {str(e)}")
            raise NetworkError(SEARCH_OPERATION, str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Subtitle search failed with status {response.status_code}")
            raise NetworkError(
                SEARCH_OPERATION,
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DeserializationError(f"Search response is not valid JSON: {str(e)}") from e

        subtitles = parse_search_response(payload)
        logger.info(f"Found {len(subtitles)} subtitles")
        return subtitles

    def fetch_and_normalize(self, url: str) -> str:
        """
        Download a subtitle file with this client's session and convert it to WebVTT.

        Raises:
            FetchError: If the server answers with a non-2xx status
        """
        return fetch_and_normalize(
            url,
            timeout=self.config.timeout,
            verify_ssl=self.config.verify_ssl,
            session=self.session,
        )

    def search_subtitles(
        self,
        criteria: SearchCriteria,
        parse_vtt: bool = False
    ) -> Union[List[SubtitleDescriptor], SearchResult]:
        """
        Search for subtitles and optionally convert the first one to WebVTT.

        Args:
            criteria: Search criteria with at least a tmdb_id or imdb_id
            parse_vtt: If True, fetch the first result and return its WebVTT
                content along with the descriptors

        Returns:
            List of descriptors, or a SearchResult when parse_vtt is True

        Raises:
            InvalidCriteriaError: If no catalog id is set
            NetworkError: If either request fails; operation tells which one
            DeserializationError: If the search body is not the expected JSON
            NoSubtitlesError: If parse_vtt is True and nothing was found
        """
        subtitles = self.search(criteria)

        if not parse_vtt:
            return subtitles

        if not subtitles:
            raise NoSubtitlesError("No subtitles found to convert to WebVTT")

        try:
            vtt_content = self.fetch_and_normalize(subtitles[0].url)
        except NetworkError:
            raise
        except requests.RequestException as e:
            logger.error(f"Subtitle content request failed: {str(e)}")
            raise NetworkError(CONTENT_OPERATION, str(e)) from e

        return SearchResult(subtitles=subtitles, vtt_content=vtt_content)


def search_subtitles(
    criteria: Optional[SearchCriteria] = None,
    parse_vtt: bool = False,
    config: Optional[ClientConfig] = None,
    **kwargs
) -> Union[List[SubtitleDescriptor], SearchResult]:
    """
    Search the Wyzie Subs service in a single call.

    Criteria can be given as a SearchCriteria or as keyword fields.

    Example:
        >>> subtitles = search_subtitles(tmdb_id=286217, language="en")
        >>> result = search_subtitles(tmdb_id=1399, season=1, episode=1, parse_vtt=True)
        >>> print(result.vtt_content[:6])
        WEBVTT
    """
    if criteria is None:
        criteria = SearchCriteria(**kwargs)
    elif kwargs:
        raise TypeError("Pass either criteria or keyword fields, not both")

    with WyzieClient(config=config) as client:
        return client.search_subtitles(criteria, parse_vtt=parse_vtt)

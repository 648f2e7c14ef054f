import json

import pytest
import requests

from wyziesubs.client import (
    WyzieClient,
    build_query_params,
    build_search_url,
    parse_search_response,
    search_subtitles,
)
from wyziesubs.exceptions import (
    DeserializationError,
    FetchError,
    InvalidCriteriaError,
    NetworkError,
    NoSubtitlesError,
)
from wyziesubs.models import ClientConfig, SearchCriteria, SearchResult, SubtitleDescriptor


SEARCH_URL = "https://sub.wyzie.ru/search"
SUBTITLE_URL = "https://sub.wyzie.ru/c/abc123/id/1?format=srt"

DESCRIPTOR_JSON = {
    "id": "abc123",
    "url": SUBTITLE_URL,
    "format": "srt",
    "isHearingImpaired": False,
    "flagUrl": "https://flagsapi.com/US/flat/24.png",
    "media": "Game of Thrones S01E01",
    "display": "English",
    "language": "en",
}

SRT_BODY = "1\r\n00:00:01,000 --> 00:00:02,500\r\nWinter is coming.\r\n"


class FakeResponse:
    def __init__(self, status_code=200, body=""):
        self.status_code = status_code
        self.content = body.encode("utf-8") if isinstance(body, str) else body

    def json(self):
        return json.loads(self.content)


class FakeSession:
    """Records requests and answers from a URL -> response (or exception) map."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, **kwargs):
        self.calls.append({"url": url, "params": params, **kwargs})
        answer = self.routes[url]
        if isinstance(answer, Exception):
            raise answer
        return answer


def make_client(routes, **config):
    session = FakeSession(routes)
    return WyzieClient(config=ClientConfig(**config), session=session), session


def test_build_query_params_only_includes_set_fields():
    criteria = SearchCriteria(tmdb_id=1399, season=1, episode=2, language="en", format="srt", hi=True)
    assert build_query_params(criteria) == {
        "id": "1399",
        "season": "1",
        "episode": "2",
        "language": "en",
        "format": "srt",
        "hi": "true",
    }
    assert build_query_params(SearchCriteria(imdb_id="tt0111161")) == {"id": "tt0111161"}


def test_build_query_params_renders_false_flag():
    assert build_query_params(SearchCriteria(tmdb_id=603, hi=False)) == {"id": "603", "hi": "false"}


def test_tmdb_id_takes_precedence_over_imdb_id():
    criteria = SearchCriteria(tmdb_id=603, imdb_id="tt0133093")
    assert build_query_params(criteria)["id"] == "603"


def test_build_search_url():
    url = build_search_url(SearchCriteria(tmdb_id=1399, season=1, episode=1))
    assert url == "https://sub.wyzie.ru/search?id=1399&season=1&episode=1"


def test_missing_catalog_id_fails_before_request():
    client, session = make_client({})
    with pytest.raises(InvalidCriteriaError):
        client.search(SearchCriteria(season=1, episode=1))
    assert session.calls == []


def test_search_returns_descriptors_in_service_order():
    second = dict(DESCRIPTOR_JSON, id="zzz", language="fr", display="French")
    client, session = make_client(
        {SEARCH_URL: FakeResponse(body=json.dumps([second, DESCRIPTOR_JSON]))},
        timeout=5,
    )

    subtitles = client.search(SearchCriteria(tmdb_id=1399, language="en"))

    assert [s.id for s in subtitles] == ["zzz", "abc123"]
    assert subtitles[1] == SubtitleDescriptor.from_dict(DESCRIPTOR_JSON)
    assert subtitles[1].is_hearing_impaired is False
    assert session.calls[0]["params"] == {"id": "1399", "language": "en"}
    assert session.calls[0]["timeout"] == 5


def test_search_non_2xx_raises_network_error():
    client, _ = make_client({SEARCH_URL: FakeResponse(status_code=404, body="not found")})
    with pytest.raises(NetworkError) as exc_info:
        client.search(SearchCriteria(tmdb_id=1))
    assert exc_info.value.status_code == 404
    assert exc_info.value.operation == "fetching subtitles"
    assert str(exc_info.value) == "Error fetching subtitles: HTTP error! status: 404"


def test_search_transport_error_is_wrapped():
    client, _ = make_client({SEARCH_URL: requests.ConnectionError("dns failure")})
    with pytest.raises(NetworkError) as exc_info:
        client.search(SearchCriteria(tmdb_id=1))
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


@pytest.mark.parametrize("body", ["<html>oops</html>", '{"error": "bad"}', '[{"id": "x"}]', "[1, 2]"])
def test_search_bad_body_raises_deserialization_error(body):
    client, _ = make_client({SEARCH_URL: FakeResponse(body=body)})
    with pytest.raises(DeserializationError):
        client.search(SearchCriteria(tmdb_id=1))


def test_parse_search_response_empty_list():
    assert parse_search_response([]) == []


def test_descriptor_round_trips_wire_keys():
    assert SubtitleDescriptor.from_dict(DESCRIPTOR_JSON).to_dict() == DESCRIPTOR_JSON


def test_search_subtitles_without_vtt_returns_list():
    client, session = make_client({SEARCH_URL: FakeResponse(body=json.dumps([DESCRIPTOR_JSON]))})
    result = client.search_subtitles(SearchCriteria(tmdb_id=1399), parse_vtt=False)
    assert isinstance(result, list)
    assert len(session.calls) == 1


def test_search_subtitles_with_vtt_fetches_first_result():
    client, session = make_client({
        SEARCH_URL: FakeResponse(body=json.dumps([DESCRIPTOR_JSON])),
        SUBTITLE_URL: FakeResponse(body=SRT_BODY),
    })

    result = client.search_subtitles(SearchCriteria(tmdb_id=1399), parse_vtt=True)

    assert isinstance(result, SearchResult)
    assert result.subtitles[0].id == "abc123"
    assert result.vtt_content == "WEBVTT\n\n00:00:01.000 --> 00:00:02.500\nWinter is coming.\n\n"
    assert session.calls[1]["url"] == SUBTITLE_URL


def test_search_subtitles_with_vtt_and_no_results():
    client, _ = make_client({SEARCH_URL: FakeResponse(body="[]")})
    with pytest.raises(NoSubtitlesError):
        client.search_subtitles(SearchCriteria(tmdb_id=1399), parse_vtt=True)


def test_search_subtitles_content_fetch_failure():
    client, _ = make_client({
        SEARCH_URL: FakeResponse(body=json.dumps([DESCRIPTOR_JSON])),
        SUBTITLE_URL: FakeResponse(status_code=500),
    })
    with pytest.raises(FetchError) as exc_info:
        client.search_subtitles(SearchCriteria(tmdb_id=1399), parse_vtt=True)
    assert exc_info.value.operation == "fetching subtitle content"
    assert exc_info.value.status_code == 500


def test_search_subtitles_content_transport_failure_is_wrapped():
    client, _ = make_client({
        SEARCH_URL: FakeResponse(body=json.dumps([DESCRIPTOR_JSON])),
        SUBTITLE_URL: requests.Timeout("timed out"),
    })
    with pytest.raises(NetworkError) as exc_info:
        client.search_subtitles(SearchCriteria(tmdb_id=1399), parse_vtt=True)
    assert exc_info.value.operation == "fetching subtitle content"
    assert not isinstance(exc_info.value, FetchError)


def test_fetch_and_normalize_propagates_transport_errors():
    client, _ = make_client({SUBTITLE_URL: requests.ConnectionError("refused")})
    with pytest.raises(requests.ConnectionError):
        client.fetch_and_normalize(SUBTITLE_URL)


def test_module_search_subtitles_requires_catalog_id():
    with pytest.raises(InvalidCriteriaError):
        search_subtitles(season=1, episode=1)


def test_module_search_subtitles_rejects_mixed_arguments():
    with pytest.raises(TypeError):
        search_subtitles(SearchCriteria(tmdb_id=1), tmdb_id=2)


def test_client_closes_only_owned_session():
    session = FakeSession({})
    with WyzieClient(session=session) as client:
        assert client.session is session

    owned = WyzieClient(config=ClientConfig(user_agent="test-agent"))
    assert owned.session.headers["User-Agent"] == "test-agent"
    owned.close()

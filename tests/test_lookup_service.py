from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests

from lyrics_lab.app.services.lookup_service import (
    DATAMUSE_API_URL,
    DICTIONARY_API_URL,
    DataMuseClient,
    DictionaryApiClient,
    LookupServiceError,
    RelatedWord,
    WordLookupService,
    parse_definitions,
    prefixed_antonyms,
)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Routes DataMuse calls by relation and dictionary calls by URL."""

    def __init__(self, routes: Dict[str, Any]) -> None:
        self.routes = routes
        self.calls: List[Tuple[str, Dict[str, Any], Optional[float]]] = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {}), timeout))
        key = url
        if params:
            key = next(name for name in params if name != "max")
        route = self.routes.get(key)
        if route is None:
            raise requests.ConnectionError("network unreachable")
        return route


HAPPY_ENTRY = [
    {
        "word": "happy",
        "phonetic": "/ˈhæpi/",
        "meanings": [
            {
                "partOfSpeech": "adjective",
                "definitions": [
                    {"definition": "Feeling joy.", "example": "a happy child"},
                    {"definition": ""},
                ],
            },
            {"partOfSpeech": "verb", "definitions": [{"definition": "To make glad."}]},
        ],
    }
]


def _service(session: FakeSession, phonetic_map=None, timeout: float = 3.0) -> WordLookupService:
    return WordLookupService(
        dictionary_client=DictionaryApiClient(session=session, timeout=timeout),
        datamuse_client=DataMuseClient(session=session, timeout=timeout),
        phonetic_map=phonetic_map,
        timeout=timeout,
    )


def test_parse_definitions_skips_empty_entries():
    definitions = parse_definitions(HAPPY_ENTRY)

    assert [item.definition for item in definitions] == ["Feeling joy.", "To make glad."]
    assert definitions[0].part_of_speech == "adjective"
    assert definitions[0].phonetic == "/ˈhæpi/"
    assert definitions[0].example == "a happy child"


def test_define_uses_cache():
    session = FakeSession({f"{DICTIONARY_API_URL}/happy": FakeResponse(payload=HAPPY_ENTRY)})
    service = _service(session)

    first = service.define("  Happy ")
    second = service.define("happy")

    assert first == second
    assert len(first) == 2
    assert len(session.calls) == 1
    assert session.calls[0][2] == 3.0


def test_define_unknown_word_returns_empty_list():
    session = FakeSession({f"{DICTIONARY_API_URL}/blorf": FakeResponse(status_code=404)})

    assert _service(session).define("blorf") == []


def test_define_failures_are_not_cached():
    session = FakeSession({f"{DICTIONARY_API_URL}/happy": FakeResponse(status_code=500)})
    service = _service(session)

    assert service.define("happy") == []
    assert service.define("happy") == []
    assert len(session.calls) == 2


def test_define_network_error_returns_empty_list():
    assert _service(FakeSession({})).define("happy") == []
    assert _service(FakeSession({})).define("   ") == []


def test_datamuse_client_sends_relation_and_limit():
    session = FakeSession({"rel_syn": FakeResponse(payload=[{"word": "glad", "score": 10, "numSyllables": 1}, {}])})

    words = DataMuseClient(session=session).words("rel_syn", "Happy", 20)

    assert words == [RelatedWord(word="glad", score=10, num_syllables=1)]
    assert session.calls[0][0] == DATAMUSE_API_URL
    assert session.calls[0][1] == {"rel_syn": "happy", "max": 20}


def test_datamuse_client_raises_on_bad_responses():
    with pytest.raises(LookupServiceError):
        DataMuseClient(session=FakeSession({"ml": FakeResponse(status_code=503)})).words("ml", "x", 5)
    with pytest.raises(LookupServiceError):
        DataMuseClient(session=FakeSession({"ml": FakeResponse(payload=ValueError("bad"))})).words("ml", "x", 5)
    with pytest.raises(LookupServiceError):
        DataMuseClient(session=FakeSession({})).words("ml", "x", 5)


def test_prefixed_antonyms():
    related = [RelatedWord("unhappy"), RelatedWord("sad"), RelatedWord("dishonest")]

    assert [item.word for item in prefixed_antonyms("happy", related)] == ["unhappy"]
    assert [item.word for item in prefixed_antonyms("dishonest", [RelatedWord("honest")])] == ["honest"]


def test_synonyms_add_prefixed_antonyms():
    session = FakeSession(
        {
            "rel_syn": FakeResponse(payload=[{"word": "glad"}, {"word": "joyful"}]),
            "rel_ant": FakeResponse(payload=[{"word": "sad"}]),
            "ml": FakeResponse(payload=[{"word": "unhappy"}, {"word": "sad"}, {"word": "cheerful"}]),
        }
    )
    service = _service(session)

    result = service.synonyms("happy")

    assert [item.word for item in result.synonyms] == ["glad", "joyful"]
    assert [item.word for item in result.antonyms] == ["sad", "unhappy"]

    service.synonyms("happy")
    assert len(session.calls) == 3


def test_synonyms_partial_failure_is_not_cached():
    session = FakeSession({"rel_syn": FakeResponse(payload=[{"word": "glad"}])})
    service = _service(session)

    result = service.synonyms("happy")

    assert [item.word for item in result.synonyms] == ["glad"]
    assert result.antonyms == []
    service.synonyms("happy")
    assert len(session.calls) == 6


def test_rhymes_from_datamuse_are_cached(phonetic_map):
    session = FakeSession(
        {
            "rel_rhy": FakeResponse(payload=[{"word": "rhyme"}, {"word": "climb"}]),
            "rel_nry": FakeResponse(payload=[{"word": "mind"}]),
            "sl": FakeResponse(payload=[{"word": "thyme"}]),
        }
    )
    service = _service(session, phonetic_map)

    result = service.rhymes("time")

    assert result.offline is False
    assert [item.word for item in result.perfect] == ["rhyme", "climb"]
    assert [item.word for item in result.near] == ["mind"]
    assert [item.word for item in result.sounds_like] == ["thyme"]
    assert ("rhymes", "time") in service._cache
    assert session.calls[0][1] == {"rel_rhy": "time", "max": 30}

    service.clear_cache()
    assert ("rhymes", "time") not in service._cache


def test_rhymes_fall_back_to_local_dictionary(phonetic_map):
    session = FakeSession({"rel_rhy": FakeResponse(status_code=503)})
    service = _service(session, phonetic_map)

    result = service.rhymes("time")

    assert result.offline is True
    assert [item.word for item in result.perfect] == ["climb", "rhyme"]
    assert result.near == []
    assert ("rhymes", "time") not in service._cache


def test_rhymes_without_phonetic_map_stay_online():
    result = _service(FakeSession({})).rhymes("time")

    assert result.offline is False
    assert result.perfect == []


def test_blank_lookups_return_empty_results():
    service = _service(FakeSession({}))

    assert service.synonyms("  ").word == ""
    assert service.rhymes("").word == ""

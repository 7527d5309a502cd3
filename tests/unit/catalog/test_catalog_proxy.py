import pytest
import requests
from hypothesis import given, settings
from hypothesis import strategies as st

from tests.support.factories import AudioFeaturesFactory, TrackItemFactory, search_payload, token_payload
from tests.support.stubs import RecordingSession, StubResponse
from trackradar.domain.catalog.catalog_proxy import CatalogProxy
from trackradar.domain.catalog.token_provider import CachingTokenProvider, TokenProvider
from trackradar.errors import InvalidRequest, UpstreamFailure
from trackradar.models.dto import AudioFeatures, Credentials, Track
from trackradar.utils.cache import TokenCache

API = "https://api.example/v1"
TOKEN_URL = "https://accounts.example/api/token"


def _proxy(session):
    provider = TokenProvider(
        Credentials(client_id="id", client_secret="secret"),
        token_url=TOKEN_URL,
        session=session,
    )
    return CatalogProxy(provider, api_base_url=API, session=session, timeout=5)


def _session(routes=None, token_reply=None):
    return RecordingSession(
        token_replies=[token_reply or StubResponse(200, token_payload("bearer-1"))],
        routes=routes or {},
    )


@pytest.mark.unit
def test_search_issues_one_token_and_one_search_call():
    items = TrackItemFactory.create_batch(3)
    session = _session({"/search": StubResponse(200, search_payload(items))})

    tracks = _proxy(session).search("daft punk")

    assert [t.id for t in tracks] == [i["id"] for i in items]
    assert all(isinstance(t, Track) for t in tracks)
    assert len(session.posts) == 1
    assert len(session.gets) == 1
    url, call = session.gets[0]
    assert url == f"{API}/search"
    assert call["params"] == {"q": "daft punk", "type": "track", "limit": 10}
    assert call["headers"] == {"Authorization": "Bearer bearer-1"}
    assert call["timeout"] == 5


@pytest.mark.unit
def test_search_never_returns_more_than_limit():
    items = TrackItemFactory.create_batch(14)
    session = _session({"/search": StubResponse(200, search_payload(items))})
    assert len(_proxy(session).search("anything")) == 10


@pytest.mark.unit
def test_search_keeps_unknown_upstream_fields():
    item = TrackItemFactory(popularity=77)
    session = _session({"/search": StubResponse(200, search_payload([item]))})
    track = _proxy(session).search("x")[0]
    assert track.model_dump()["popularity"] == 77
    assert track.album.images[-1].url == item["album"]["images"][-1]["url"]


@pytest.mark.unit
@pytest.mark.parametrize("query", ["", "   ", None, 42])
def test_search_rejects_empty_query_without_network(query):
    session = _session()
    with pytest.raises(InvalidRequest):
        _proxy(session).search(query)
    assert session.call_count == 0


@pytest.mark.unit
def test_audio_features_appends_id_to_path():
    session = _session({"/audio-features/": StubResponse(200, AudioFeaturesFactory(id="4uLU6hMCjMI75M1A2tKUQC"))})

    features = _proxy(session).get_audio_features("4uLU6hMCjMI75M1A2tKUQC")

    assert isinstance(features, AudioFeatures)
    url, call = session.gets[0]
    assert url == f"{API}/audio-features/4uLU6hMCjMI75M1A2tKUQC"
    assert call["params"] is None
    assert call["headers"] == {"Authorization": "Bearer bearer-1"}


@pytest.mark.unit
@pytest.mark.parametrize("track_id", ["", "  ", None, "../me", "abc/def", "id?x=1"])
def test_audio_features_rejects_invalid_id_without_network(track_id):
    session = _session()
    with pytest.raises(InvalidRequest):
        _proxy(session).get_audio_features(track_id)
    assert session.call_count == 0


@pytest.mark.unit
@given(
    values=st.fixed_dictionaries({
        name: st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
        for name in ("acousticness", "danceability", "energy", "instrumentalness", "liveness", "speechiness", "valence")
    })
)
@settings(max_examples=50, deadline=None)
def test_audio_feature_ratios_pass_through_unchanged(values):
    payload = AudioFeaturesFactory(**values)
    session = _session({"/audio-features/": StubResponse(200, payload)})

    features = _proxy(session).get_audio_features("t1")

    for name, value in values.items():
        assert getattr(features, name) == value


@pytest.mark.unit
def test_out_of_range_ratio_is_not_clamped():
    session = _session({"/audio-features/": StubResponse(200, AudioFeaturesFactory(energy=1.2))})
    assert _proxy(session).get_audio_features("t1").energy == 1.2


@pytest.mark.unit
def test_handle_without_query_or_track_id_makes_no_calls():
    session = _session()
    proxy = _proxy(session)
    for payload in ({}, {"query": ""}, {"trackId": ""}, {"query": None, "trackId": None}, None, ["query"]):
        with pytest.raises(InvalidRequest):
            proxy.handle(payload)
    assert session.call_count == 0


@pytest.mark.unit
def test_handle_dispatches_by_mode():
    session = _session({
        "/search": StubResponse(200, search_payload([TrackItemFactory(id="t1")])),
        "/audio-features/": StubResponse(200, AudioFeaturesFactory()),
    })
    proxy = _proxy(session)

    assert [t.id for t in proxy.handle({"query": "song"})] == ["t1"]
    assert proxy.handle({"trackId": "t1"}).key_name == "C Major"
    # query wins when both are supplied
    both = proxy.handle({"query": "song", "trackId": "t1"})
    assert isinstance(both, list)


@pytest.mark.unit
def test_token_endpoint_failure_becomes_upstream_failure():
    session = _session(token_reply=StubResponse(500, {"error": "server_error"}))
    with pytest.raises(UpstreamFailure):
        _proxy(session).search("song")
    assert session.gets == []


@pytest.mark.unit
@pytest.mark.parametrize(
    "reply",
    [
        StubResponse(500, {"error": {"status": 500}}),
        StubResponse(404, {"error": {"status": 404}}),
        StubResponse(200),
        StubResponse(200, {"unexpected": True}),
        StubResponse(200, {"tracks": {"items": "nope"}}),
        StubResponse(200, {"tracks": {"items": [{"name": "no id"}]}}),
        requests.exceptions.ConnectionError("reset"),
    ],
)
def test_search_upstream_problems_become_upstream_failure(reply):
    session = _session({"/search": reply})
    with pytest.raises(UpstreamFailure):
        _proxy(session).search("song")


@pytest.mark.unit
def test_malformed_audio_features_become_upstream_failure():
    session = _session({"/audio-features/": StubResponse(200, {"danceability": 0.5})})
    with pytest.raises(UpstreamFailure):
        _proxy(session).get_audio_features("t1")


@pytest.mark.unit
def test_mistyped_token_body_becomes_upstream_failure():
    session = _session(
        {"/search": StubResponse(200, search_payload([]))},
        token_reply=StubResponse(200, {"access_token": "x", "token_type": 5}),
    )
    with pytest.raises(UpstreamFailure):
        _proxy(session).search("song")
    assert session.gets == []


@pytest.mark.unit
def test_rejected_bearer_token_is_dropped_from_cache():
    session = RecordingSession(
        token_replies=[
            StubResponse(200, token_payload("revoked")),
            StubResponse(200, token_payload("fresh")),
        ],
        routes={"/search": StubResponse(401, {"error": {"status": 401}})},
    )
    provider = CachingTokenProvider(
        TokenProvider(Credentials(client_id="id", client_secret="secret"), token_url=TOKEN_URL,
                      session=session, clock=lambda: 0.0),
        TokenCache(clock=lambda: 0.0),
    )
    proxy = CatalogProxy(provider, api_base_url=API, session=session, timeout=5)

    with pytest.raises(UpstreamFailure):
        proxy.search("song")

    session.routes["/search"] = StubResponse(200, search_payload([TrackItemFactory(id="t1")]))
    assert [t.id for t in proxy.search("song")] == ["t1"]
    assert len(session.posts) == 2
    assert session.gets[-1][1]["headers"]["Authorization"] == "Bearer fresh"


@pytest.mark.unit
def test_other_upstream_errors_keep_the_cached_token():
    session = RecordingSession(
        token_replies=[StubResponse(200, token_payload("kept"))],
        routes={"/search": StubResponse(500, {"error": {"status": 500}})},
    )
    provider = CachingTokenProvider(
        TokenProvider(Credentials(client_id="id", client_secret="secret"), token_url=TOKEN_URL,
                      session=session, clock=lambda: 0.0),
        TokenCache(clock=lambda: 0.0),
    )
    proxy = CatalogProxy(provider, api_base_url=API, session=session, timeout=5)

    for _ in range(2):
        with pytest.raises(UpstreamFailure):
            proxy.search("song")
    assert len(session.posts) == 1

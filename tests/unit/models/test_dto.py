import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from tests.support.factories import AudioFeaturesFactory, TrackItemFactory
from trackradar.models import PITCH_CLASS, UNKNOWN_KEY, describe_key
from trackradar.models.dto import AudioFeatures, Credentials, Token, Track


@pytest.mark.unit
@pytest.mark.parametrize(
    "pitch_class, mode, expected",
    [
        (0, 1, "C Major"),
        (9, 0, "A Minor"),
        (11, 1, "B Major"),
        (1, 0, "C♯/D♭ Minor"),
        (6, 1, "F♯/G♭ Major"),
    ],
)
def test_describe_key(pitch_class, mode, expected):
    assert describe_key(pitch_class, mode) == expected


@pytest.mark.unit
@pytest.mark.parametrize("pitch_class", [-1, 12, 99, None])
def test_describe_key_out_of_range_is_unknown(pitch_class):
    assert describe_key(pitch_class, 1) == UNKNOWN_KEY


@pytest.mark.unit
@given(pitch_class=st.integers(min_value=0, max_value=11), mode=st.integers(min_value=-1, max_value=3))
def test_describe_key_only_mode_one_is_major(pitch_class, mode):
    name = describe_key(pitch_class, mode)
    assert name.startswith(PITCH_CLASS[pitch_class] + " ")
    assert name.endswith("Major" if mode == 1 else "Minor")


@pytest.mark.unit
def test_audio_features_derive_bpm_and_key_name():
    features = AudioFeatures.model_validate(AudioFeaturesFactory(tempo=118.211, key=9, mode=0))
    assert features.bpm == 118.211
    assert features.key_name == "A Minor"

    dumped = features.model_dump(mode="json")
    assert dumped["bpm"] == 118.211
    assert dumped["key_name"] == "A Minor"
    # raw upstream fields survive the round trip
    assert dumped["key"] == 9
    assert dumped["id"] == "t1"


@pytest.mark.unit
def test_audio_features_with_no_detected_key():
    features = AudioFeatures.model_validate(AudioFeaturesFactory(key=-1, mode=0))
    assert features.key_name == "Unknown"


@pytest.mark.unit
def test_audio_features_valence_is_optional():
    payload = AudioFeaturesFactory()
    payload.pop("valence")
    assert AudioFeatures.model_validate(payload).valence is None


@pytest.mark.unit
def test_track_requires_id():
    payload = TrackItemFactory()
    payload.pop("id")
    with pytest.raises(ValidationError):
        Track.model_validate(payload)


@pytest.mark.unit
def test_track_helpers():
    track = Track.model_validate(TrackItemFactory(name="Song", artists=[{"name": "Artist"}, {"name": "Guest"}]))
    assert track.primary_artist == "Artist"
    # smallest image is listed last
    assert track.thumbnail_url == track.album.images[2].url

    bare = Track.model_validate({"id": "x", "name": "Bare"})
    assert bare.primary_artist == "Unknown Artist"
    assert bare.thumbnail_url is None


@pytest.mark.unit
def test_credentials_reject_blank_values():
    with pytest.raises(ValidationError):
        Credentials(client_id="", client_secret="secret")


@pytest.mark.unit
def test_token_expiry_with_margin():
    token = Token(access_token="abc", expires_at=100.0)
    assert not token.is_expired(now=50.0)
    assert token.is_expired(now=95.0, margin=10)
    assert token.is_expired(now=100.0)

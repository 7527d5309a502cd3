import os
import sys

import pytest

# Ensure project root is on sys.path so 'app', 'config' and 'trackradar' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories
from tests.support.stubs import RecordingSession, StubResponse
from tests.support.app_config import TEST_CONFIG


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep real credentials and OTLP endpoints out of the test run."""
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "test-client-secret")
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    yield


@pytest.fixture
def factories():
    return test_factories


@pytest.fixture
def http_session():
    return RecordingSession(token_replies=[StubResponse(200, test_factories.token_payload())])


@pytest.fixture
def app(http_session):
    import app as app_module

    application = app_module.create_app(config_overrides=dict(TEST_CONFIG), http_session=http_session)
    yield application


@pytest.fixture
def client(app):
    return app.test_client()

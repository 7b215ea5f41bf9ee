import httpx
import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from pydantic import Field

from config import Settings, get_settings
from main import app, get_http_client, get_llm

TOKYO_GEOCODE = [
    {"lat": "35.6768601", "lon": "139.7638947", "display_name": "Tokyo, Japan"},
]
TOKYO_WEATHER = {
    "latitude": 35.7,
    "longitude": 139.75,
    "current_weather": {"temperature": 18.4, "windspeed": 7.2, "weathercode": 3},
}

NOMINATIM_HOST = "nominatim.openstreetmap.org"
OPEN_METEO_HOST = "api.open-meteo.com"


class FakeUpstream:
    """Serves canned geocoding and weather responses and records every request.

    Set ``geocode`` or ``weather`` to an exception instance to simulate a
    transport failure, or to an ``httpx.Response`` for a custom status.
    """

    def __init__(self, geocode=None, weather=None):
        self.geocode = TOKYO_GEOCODE if geocode is None else geocode
        self.weather = TOKYO_WEATHER if weather is None else weather
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == NOMINATIM_HOST:
            return self._reply(self.geocode)
        if request.url.host == OPEN_METEO_HOST:
            return self._reply(self.weather)
        return httpx.Response(404)

    @staticmethod
    def _reply(canned) -> httpx.Response:
        if isinstance(canned, Exception):
            raise canned
        if isinstance(canned, httpx.Response):
            return canned
        return httpx.Response(200, json=canned)

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


class RecordingChatModel(FakeListChatModel):
    """FakeListChatModel that also keeps the prompts it was given."""

    prompts: list[str] = Field(default_factory=list)

    def _call(self, messages, stop=None, run_manager=None, **kwargs):
        self.prompts.append(messages[-1].content)
        return super()._call(messages, stop=stop, run_manager=run_manager, **kwargs)


class FailingChatModel(FakeListChatModel):
    """Chat model whose every call fails, like an unreachable provider."""

    def _call(self, messages, stop=None, run_manager=None, **kwargs):
        raise RuntimeError("model unavailable")


def make_llm(*responses: str) -> RecordingChatModel:
    return RecordingChatModel(responses=list(responses), disable_streaming=True)


SETTINGS_ENV_VARS = [
    "LLM_PROVIDER",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "LLM_TEMPERATURE",
    "LLM_MAX_RETRIES",
    "GEOCODING_URL",
    "WEATHER_URL",
    "GEOCODER_USER_AGENT",
    "HTTP_TIMEOUT",
    "CORS_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Settings built in tests see neither the developer's env nor their .env."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    return monkeypatch


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def test_settings() -> Settings:
    return Settings(gemini_api_key="test-key")


@pytest.fixture
def api(http_client, test_settings):
    """TestClient wired to the fake upstream and test settings."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_client] = lambda: http_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_llm(api):
    """Installs a chat model for the endpoint under test."""

    def install(llm):
        app.dependency_overrides[get_llm] = lambda: llm
        return llm

    return install

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from lecturer.config import settings
from lecturer.services import ai_service, knowledge_service

KNOWLEDGE_TEXT = """# Course notes
Introductory material for the management course.

## Artificial intelligence
Artificial intelligence lets computer systems perform tasks that need human intelligence.
Examples: language understanding, image recognition, decision making.

## Machine learning
Machine learning is a branch of artificial intelligence that learns from data.
Types: supervised, unsupervised, reinforcement.

## الحوكمة
الشفافية وحماية البيانات والمساءلة.
"""


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    monkeypatch.setattr(settings, "ELEVENLABS_API_KEY", "")
    monkeypatch.setattr(settings, "DEFAULT_MODE", "hybrid")
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
    yield
    knowledge_service.reset_knowledge()


@pytest.fixture
def sections():
    return knowledge_service.split_sections(KNOWLEDGE_TEXT)


@pytest.fixture
def knowledge_file(tmp_path):
    path = tmp_path / "knowledge.txt"
    path.write_text(KNOWLEDGE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def make_client(monkeypatch, knowledge_file):
    def _make(**overrides):
        from lecturer.main import create_app

        monkeypatch.setattr(settings, "KNOWLEDGE_PATH", str(knowledge_file))
        for key, value in overrides.items():
            monkeypatch.setattr(settings, key, value)
        return TestClient(create_app())

    return _make


@pytest.fixture
def client(make_client):
    with make_client() as c:
        yield c


def completion_body(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-5",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


@pytest.fixture
def endpoint(monkeypatch):
    """Route the openai client through a mock transport."""
    requests = []
    responder = {"fn": lambda request: httpx.Response(200, json=completion_body("ok"))}

    def handler(request):
        requests.append(request)
        return responder["fn"](request)

    def make_client():
        return openai.AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url="https://llm.test/v1",
            max_retries=0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test-key")
    monkeypatch.setattr(ai_service, "_get_client", make_client)
    return requests, responder

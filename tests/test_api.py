import base64

from lecturer.routes import ask as ask_route
from lecturer.routes import speech as speech_route
from lecturer.services import answer_service
from lecturer.services.answer_service import COMPLETION_ERROR_NOTICE, OUT_OF_SCOPE, AnswerMode
from lecturer.services.ai_service import CompletionError
from lecturer.services.knowledge_service import FAILED_STATUS
from lecturer.services.speech_errors import SpeechError


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_knowledge_loaded_at_startup(client):
    body = client.get("/api/knowledge/status").json()
    assert body["loaded"] is True
    assert body["sections"] == 4
    assert body["message"] == "تم التحميل: 4 قسم معرفي"


def test_missing_knowledge_is_not_fatal(make_client, tmp_path):
    with make_client(KNOWLEDGE_PATH=str(tmp_path / "missing.txt")) as client:
        status = client.get("/api/knowledge/status").json()
        assert status["loaded"] is False
        assert status["message"] == FAILED_STATUS

        answer = client.post("/api/ask", json={"question": "machine learning"}).json()
        assert answer["kind"] == "scoped_out"
        assert answer["answer"] == OUT_OF_SCOPE


def test_reload_picks_up_changes(client, knowledge_file):
    knowledge_file.write_text("## Only\none section", encoding="utf-8")

    body = client.post("/api/knowledge/reload").json()

    assert body["sections"] == 1


def test_reload_failure_reported_in_status(client, knowledge_file):
    knowledge_file.unlink()

    response = client.post("/api/knowledge/reload")

    assert response.status_code == 200
    assert response.json()["message"] == FAILED_STATUS


def test_search(client):
    body = client.post("/api/knowledge/search", json={"query": "artificial intelligence", "top_k": 5}).json()
    assert [r["index"] for r in body["results"]] == [1, 2]
    assert body["results"][0]["score"] == 2


def test_ask_knowledge_base_mode(client):
    response = client.post("/api/ask", json={"question": "machine learning", "mode": "kb"})

    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "kb"
    assert body["kind"] == "extractive"
    assert body["answer"].startswith("## Machine learning")
    assert body["messages"] == [body["answer"]]
    assert body["audio_base64"] is None


def test_ask_defaults_to_configured_mode(client):
    body = client.post("/api/ask", json={"question": "machine learning"}).json()
    assert body["mode"] == "hybrid"
    # no API key configured, so the knowledge base answers
    assert body["kind"] == "extractive"


def test_ask_blank_question_rejected(client):
    response = client.post("/api/ask", json={"question": "   "})
    assert response.status_code == 422


def test_ask_unknown_mode_rejected(client):
    response = client.post("/api/ask", json={"question": "ai", "mode": "gpt"})
    assert response.status_code == 422


def test_ask_hybrid_generated(client, monkeypatch):
    async def fake(question, context_block):
        return "Generated answer"

    monkeypatch.setattr(answer_service.settings, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(answer_service, "chat_completion", fake)

    body = client.post("/api/ask", json={"question": "machine learning", "mode": "hybrid"}).json()

    assert body["kind"] == "generated"
    assert body["answer"] == "Generated answer"
    assert body["notice"] is None


def test_ask_hybrid_fallback(client, monkeypatch):
    async def fake(question, context_block):
        raise CompletionError("down")

    monkeypatch.setattr(answer_service.settings, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(answer_service, "chat_completion", fake)

    body = client.post("/api/ask", json={"question": "machine learning"}).json()

    assert body["notice"] == COMPLETION_ERROR_NOTICE
    assert body["messages"][0] == COMPLETION_ERROR_NOTICE
    assert body["kind"] == "extractive"


def test_ask_with_speech(client, monkeypatch):
    async def fake_tts(text, voice_id=None):
        return base64.b64encode(b"mp3").decode("utf-8")

    monkeypatch.setattr(ask_route, "synthesize_speech_base64", fake_tts)

    body = client.post("/api/ask", json={"question": "machine learning", "speak": True}).json()

    assert body["audio_base64"] == base64.b64encode(b"mp3").decode("utf-8")


def test_ask_speech_requested_without_tts_key(client):
    body = client.post("/api/ask", json={"question": "machine learning", "speak": True}).json()
    assert body["audio_base64"] is None


def test_default_mode_falls_back_to_hybrid(monkeypatch):
    monkeypatch.setattr(ask_route.settings, "DEFAULT_MODE", "bogus")
    assert ask_route.default_mode() == AnswerMode.HYBRID
    monkeypatch.setattr(ask_route.settings, "DEFAULT_MODE", "kb")
    assert ask_route.default_mode() == AnswerMode.KB


def test_synthesize_unsupported(client):
    response = client.post("/api/speech/synthesize", json={"text": "مرحبا"})
    assert response.status_code == 503
    assert response.json()["detail"] == "القراءة الصوتية غير مدعومة"


def test_synthesize(client, monkeypatch):
    async def fake(text, voice_id=None):
        return b"ID3audio"

    monkeypatch.setattr(speech_route, "synthesize_speech", fake)

    response = client.post("/api/speech/synthesize", json={"text": "مرحبا"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3audio"


def test_spoken_question_unsupported_without_key(client):
    response = client.post(
        "/api/speech/ask", files={"audio": ("q.webm", b"\x00\x01", "audio/webm")}
    )
    assert response.status_code == 503
    assert response.json()["detail"] == "الميكروفون غير مدعوم"


def test_spoken_question_answered(client, monkeypatch):
    async def fake(data, filename="audio.webm", language=None):
        assert data == b"\x00\x01"
        return "machine learning"

    monkeypatch.setattr(speech_route, "transcribe_audio", fake)

    response = client.post(
        "/api/speech/ask",
        files={"audio": ("q.webm", b"\x00\x01", "audio/webm")},
        data={"mode": "kb"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["transcript"] == "machine learning"
    assert body["question"] == "machine learning"
    assert body["kind"] == "extractive"


def test_spoken_question_transcription_failure(client, monkeypatch):
    async def fake(data, filename="audio.webm", language=None):
        raise SpeechError("حاول مرة أخرى")

    monkeypatch.setattr(speech_route, "transcribe_audio", fake)

    response = client.post("/api/speech/ask", files={"audio": ("q.webm", b"x", "audio/webm")})

    assert response.status_code == 502
    assert response.json()["detail"] == "حاول مرة أخرى"


def test_rate_limit(make_client):
    with make_client(RATE_LIMIT_ENABLED=True, RATE_LIMIT_PER_MINUTE=2) as client:
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/health").status_code == 429


def test_unhandled_errors_become_json(make_client):
    client = make_client()

    @client.app.get("/api/boom")
    async def boom():
        raise RuntimeError("kaboom")

    with client:
        response = client.get("/api/boom")

    assert response.status_code == 500
    assert response.json()["type"] == "RuntimeError"
    assert response.json()["request_id"] == response.headers["X-Request-ID"]


def test_request_id_generated(client):
    response = client.get("/api/health")
    assert len(response.headers["X-Request-ID"]) == 12


def test_request_id_echoed(client):
    response = client.get("/api/health", headers={"X-Request-ID": "lecture-42"})
    assert response.headers["X-Request-ID"] == "lecture-42"

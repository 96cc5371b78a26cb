"""
Tests for web/app.py — JSON API over the dispatch flow.

Run with: pytest tests/test_web.py
"""

from unittest.mock import MagicMock

import pytest

from config.settings import Settings
from structkb.errors import GENERIC_FAILURE_MESSAGE, MissingCredentialError, ProviderError
from structkb.models import SourceRef
from structkb.providers import Provider, ProviderAnswer
from web.app import create_app


class CannedProvider(Provider):
    supports_search = True

    def __init__(self, error=None):
        self.error = error
        self.prompts = []

    def answer(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return ProviderAnswer(
            text="## 概念\n\n> 强制性条文",
            sources=[SourceRef(title="X", uri="https://x")],
        )


@pytest.fixture
def provider():
    return CannedProvider()


@pytest.fixture
def client(tmp_path, monkeypatch, provider):
    monkeypatch.setenv("CONFIG_DB_PATH", str(tmp_path / "web.db"))
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    factory = MagicMock(return_value=provider)
    app = create_app(Settings(), provider_factory=factory)
    app.config["TESTING"] = True
    return app.test_client()


class TestPages:
    def test_index_lists_catalog(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        body = resp.get_data(as_text=True)
        assert "建筑结构智库" in body
        assert "钢筋混凝土梁" in body

    def test_topics_endpoint(self, client):
        data = client.get("/api/topics").get_json()
        assert data["defaultExpanded"] == "mandatory"
        assert data["categories"][0]["id"] == "mandatory"


class TestConfigApi:
    def test_default_config(self, client):
        assert client.get("/api/config").get_json() == {
            "modelType": "GEMINI",
            "deepseekApiKey": "",
        }

    def test_put_persists(self, client, tmp_path):
        resp = client.put(
            "/api/config", json={"modelType": "DEEPSEEK", "deepseekApiKey": "sk-1"}
        )
        assert resp.status_code == 200
        assert client.get("/api/config").get_json()["modelType"] == "DEEPSEEK"

        from structkb import config_store
        stored = config_store.load(tmp_path / "web.db")
        assert stored.deepseek_api_key == "sk-1"

    def test_put_rejects_unknown_model(self, client):
        resp = client.put("/api/config", json={"modelType": "OTHER"})
        assert resp.status_code == 400
        assert resp.get_json()["error"]["kind"] == "invalid_config"


class TestQueryApi:
    def test_blank_query_rejected(self, client):
        resp = client.post("/api/query", json={"query": "  "})
        assert resp.status_code == 400

    def test_query_returns_rendered_result(self, client):
        resp = client.post("/api/query", json={"query": "钢筋混凝土梁"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["text"].startswith("## 概念")
        assert "<h2" in data["html"]
        assert "<blockquote" in data["html"]
        assert data["sources"] == [{"title": "X", "uri": "https://x"}]
        assert data["image"] is None
        assert data["state"] == "success"

    def test_topic_uses_question_template(self, client, provider):
        client.post("/api/query", json={"topic": "强柱弱梁"})
        assert "“强柱弱梁”" in provider.prompts[0]
        state = client.get("/api/state").get_json()
        assert state == {"state": "success", "loading": False, "activeTopic": "强柱弱梁"}

    def test_missing_credential_maps_to_400(self, client, provider):
        provider.error = MissingCredentialError("请先在设置中配置 DeepSeek API Key")
        resp = client.post("/api/query", json={"query": "q"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == {
            "kind": "missing_credential",
            "message": "请先在设置中配置 DeepSeek API Key",
        }

    def test_provider_error_maps_to_502(self, client, provider):
        provider.error = ProviderError("quota exceeded")
        resp = client.post("/api/query", json={"query": "q"})
        assert resp.status_code == 502
        assert resp.get_json()["error"]["message"] == "quota exceeded"
        assert client.get("/api/state").get_json()["state"] == "failed"

    def test_unexpected_exception_returns_json_and_fails_state(self, client, provider):
        provider.error = ValueError("unknown api response")
        resp = client.post("/api/query", json={"query": "梁"})

        assert resp.status_code == 502
        assert resp.is_json
        assert resp.get_json()["error"]["kind"] == "provider_error"
        assert resp.get_json()["error"]["message"] == GENERIC_FAILURE_MESSAGE
        state = client.get("/api/state").get_json()
        assert state["state"] == "failed"
        assert state["loading"] is False

    def test_current_query_is_not_stale(self, client):
        data = client.post("/api/query", json={"query": "q"}).get_json()
        assert data["stale"] is False
        assert data["generation"] == 1

    def test_superseded_query_is_flagged_stale(self, client, provider):
        assistant = client.application.extensions["structkb"]

        class Superseded(CannedProvider):
            def answer(self, prompt):
                # A newer query finishes while this one is still in flight.
                assistant._provider_factory.return_value = provider
                assistant.submit_query("newer")
                return ProviderAnswer(text="older")

        assistant._provider_factory.return_value = Superseded()
        data = client.post("/api/query", json={"query": "older"}).get_json()

        assert data["stale"] is True
        assert data["text"] == "older"
        assert assistant.result.text.startswith("## 概念")


class TestTopicsApi:
    def test_single_category(self, client):
        resp = client.get("/api/topics?category=seismic")
        assert resp.status_code == 200
        assert "强柱弱梁" in resp.get_json()["items"]

    def test_unknown_category_is_404(self, client):
        resp = client.get("/api/topics?category=nope")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["kind"] == "not_found"

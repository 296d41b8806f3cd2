"""Tests for the /api/generate-pros-cons endpoint."""

import json

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from decision_tracker.main import create_app
from tests.conftest import completion, make_settings

DOG_REPLY = {
    "pros": ["Companionship", "Exercise motivation", "Teaches responsibility"],
    "cons": ["Cost", "Time commitment", "Travel limitations"],
}


def status_error(code):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.APIStatusError(
        "upstream failed", response=httpx.Response(code, request=request), body=None
    )


class TestGenerateProsCons:
    def test_returns_model_reply_unchanged(self, client, mock_openai):
        mock_openai.chat.completions.create.return_value = completion(
            json.dumps(DOG_REPLY)
        )

        response = client.post(
            "/api/generate-pros-cons", json={"title": "Should I adopt a dog?"}
        )

        assert response.status_code == 200
        assert response.json() == DOG_REPLY

    def test_sends_fixed_instructions_and_sampling(self, client, mock_openai):
        mock_openai.chat.completions.create.return_value = completion(
            json.dumps(DOG_REPLY)
        )

        client.post(
            "/api/generate-pros-cons",
            json={"title": "Move to Berlin?", "description": "I work remotely"},
        )

        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 1000
        system, user = kwargs["messages"]
        assert system["role"] == "system"
        assert "valid JSON only" in system["content"]
        assert '"Move to Berlin?"' in user["content"]
        assert "Additional context: I work remotely" in user["content"]

    def test_prompt_omits_context_without_description(self, client, mock_openai):
        mock_openai.chat.completions.create.return_value = completion(
            json.dumps(DOG_REPLY)
        )

        client.post("/api/generate-pros-cons", json={"title": "Buy a car?"})

        user = mock_openai.chat.completions.create.call_args.kwargs["messages"][1]
        assert "Additional context" not in user["content"]

    def test_non_json_reply_returns_error_envelope(self, client, mock_openai):
        mock_openai.chat.completions.create.return_value = completion("not json")

        response = client.post(
            "/api/generate-pros-cons", json={"title": "X", "description": "Y"}
        )

        assert response.status_code == 500
        assert set(response.json()) == {"error"}

    def test_wrong_shape_reply_returns_error_envelope(self, client, mock_openai):
        mock_openai.chat.completions.create.return_value = completion(
            json.dumps({"pros": "Cheap", "cons": []})
        )

        response = client.post("/api/generate-pros-cons", json={"title": "X"})

        assert response.status_code == 500
        assert "pros/cons" in response.json()["error"]

    def test_upstream_status_error_returns_status_text(self, client, mock_openai):
        mock_openai.chat.completions.create.side_effect = status_error(429)

        response = client.post("/api/generate-pros-cons", json={"title": "X"})

        assert response.status_code == 500
        assert response.json() == {"error": "OpenAI API error: Too Many Requests"}

    def test_transport_error_returns_error_envelope(self, client, mock_openai):
        mock_openai.chat.completions.create.side_effect = RuntimeError("boom")

        response = client.post("/api/generate-pros-cons", json={"title": "X"})

        assert response.status_code == 500
        assert response.json() == {"error": "boom"}

    def test_invalid_body_returns_error_envelope(self, client, mock_openai):
        response = client.post(
            "/api/generate-pros-cons",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert "error" in response.json()
        mock_openai.chat.completions.create.assert_not_called()


class TestMissingCredential:
    @pytest.fixture
    def client(self, tmp_path):
        settings = make_settings(database_url=f"sqlite:///{tmp_path}/test.db")
        return TestClient(create_app(settings))

    @pytest.mark.parametrize(
        "body", [{"title": "Should I adopt a dog?"}, {"title": "X", "description": "Y"}, {}]
    )
    def test_reports_configuration_error(self, client, body):
        response = client.post("/api/generate-pros-cons", json=body)

        assert response.status_code == 500
        assert response.json() == {"error": "OpenAI API key not configured"}


class TestCors:
    @pytest.mark.parametrize(
        "path", ["/api/generate-pros-cons", "/api/web-search", "/api/decisions", "/"]
    )
    def test_options_returns_empty_ok(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "content-type" in response.headers["access-control-allow-headers"]

    def test_headers_attached_to_errors(self, client, mock_openai):
        mock_openai.chat.completions.create.return_value = completion("not json")

        response = client.post("/api/generate-pros-cons", json={"title": "X"})

        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )

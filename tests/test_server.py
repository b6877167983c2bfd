"""
Unit tests for the remote skills server.
"""

import asyncio
import os
import sys
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from reviewflow.config import SkillTransportConfig
from reviewflow.exceptions import SkillExecutionError
from reviewflow.server import SkillServerConfig, create_app
from reviewflow.server.cli import main as server_main
from reviewflow.server.executor import execute_skill, get_mock_response, is_summary_input
from reviewflow.skills import RemoteSkillTransport

KYC = (
    "Client name is John Smith, passport number X123, nationality British.\n\n"
    "Source of wealth is salary income from employment at a bank."
)


@pytest.fixture
def client():
    with TestClient(create_app(SkillServerConfig())) as client:
        yield client


def skill_request(**overrides) -> dict:
    body = {
        "skill_name": "kyc.topic_assemble",
        "input_summary": {"documents": [{"name": "kyc.txt", "length": 120}]},
        "context_hint": "KYC review",
        "correlation_id": "run-1",
        "test_mode": "summary",
    }
    body.update(overrides)
    return body


class TestSkillServerConfig:
    """Tests for SkillServerConfig."""

    def test_defaults(self):
        config = SkillServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 4010
        assert config.log_level == "info"

    def test_from_env(self):
        env = {"REVIEWFLOW_SKILLS_HOST": "0.0.0.0", "REVIEWFLOW_SKILLS_PORT": "5001"}
        with patch.dict(os.environ, env):
            config = SkillServerConfig.from_env()
        assert config.host == "0.0.0.0"
        assert config.port == 5001


class TestExecutor:
    """Tests for summary detection and skill execution on the server."""

    def test_is_summary_input(self):
        assert is_summary_input({"documents": [{"name": "a", "length": 500}]})
        assert not is_summary_input({"documents": [{"name": "a", "content": "x" * 51}]})
        assert is_summary_input({"topicSections": [{"topicId": "a", "content": "short"}]})
        assert not is_summary_input({"topicSections": [{"topicId": "a", "content": "y" * 21}]})
        assert is_summary_input({"other": 1})

    def test_summary_mode_returns_mock(self):
        output = execute_skill("risk.triage", {"topicSections": []}, "summary", "run-1")
        assert output["triageReasons"] == ["Mock response for summary mode (PII-safe)"]

    def test_full_content_without_content_returns_mock(self):
        output = execute_skill("kyc.topic_assemble", {"documents": []}, "full_content", "run-1")
        assert output == get_mock_response("kyc.topic_assemble")

    def test_full_content_runs_skill(self):
        output = execute_skill(
            "kyc.topic_assemble", {"documents": [{"name": "kyc", "content": KYC}]}, "full_content", "run-1"
        )
        assert len(output["topicSections"]) == 7

    def test_unknown_mock(self):
        with pytest.raises(SkillExecutionError, match="Mock not defined for skill: nope"):
            get_mock_response("nope")

    def test_mock_is_a_copy(self):
        get_mock_response("risk.triage")["triageReasons"].append("x")
        assert len(get_mock_response("risk.triage")["triageReasons"]) == 1


class TestSkillEndpoints:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "1.0.0"
        assert data["uptime"] >= 0

    def test_summary_request(self, client):
        response = client.post("/skills/execute", json=skill_request())
        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["skill_name"] == "kyc.topic_assemble"
        assert data["output_summary"]["topicSections"][0]["content"] == "[REDACTED - Summary Mode]"
        assert data["duration_ms"] >= 1
        assert data["metadata"]["server_version"] == "1.0.0"
        assert "error" not in data

    def test_full_content_request(self, client):
        body = skill_request(
            input_summary={"documents": [{"name": "kyc.txt", "content": KYC}]},
            test_mode="full_content",
        )
        data = client.post("/skills/execute", json=body).json()
        topics = {t["topicId"]: t for t in data["output_summary"]["topicSections"]}
        assert topics["client_identity"]["coverage"] == "partial"
        assert topics["sanctions_pep"]["coverage"] == "missing"

    def test_unknown_skill_reports_failure(self, client):
        data = client.post("/skills/execute", json=skill_request(skill_name="nope")).json()
        assert data["ok"] is False
        assert data["error"] == "Mock not defined for skill: nope"
        assert data["output_summary"] == {}

    def test_schema_error(self, client):
        response = client.post("/skills/execute", json=skill_request(correlation_id=""))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request schema"
        assert isinstance(response.json()["details"], list)

    def test_invalid_test_mode(self, client):
        response = client.post("/skills/execute", json=skill_request(test_mode="raw"))
        assert response.status_code == 400

    def test_invalid_json(self, client):
        response = client.post(
            "/skills/execute", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request schema"

    def test_remote_transport_round_trip(self, client):
        def forward(method, url, json):
            return client.post("/skills/execute", json=json)

        transport = RemoteSkillTransport(SkillTransportConfig(enable_remote_skills=True))
        with patch("httpx.AsyncClient.request", new=AsyncMock(side_effect=forward)):
            result = asyncio.run(
                transport.execute("kyc.topic_assemble", {"documents": [{"name": "kyc", "content": KYC}]}, "run-7")
            )

        assert result.ok is True
        assert len(result.output["topicSections"]) == 2
        assert "John Smith" not in result.input_summary


class TestServerCli:
    """Tests for the skills server command line."""

    def test_main_starts_server(self, capsys):
        argv = ["reviewflow-skills-server", "--port", "5005", "--log-level", "debug"]
        with patch.object(sys, "argv", argv), patch("reviewflow.server.app.SkillServer") as server_cls:
            server_main()

        server_cls.assert_called_once_with(host="127.0.0.1", port=5005, log_level="debug")
        server_cls.return_value.run.assert_called_once()
        assert "POST http://127.0.0.1:5005/skills/execute" in capsys.readouterr().out

    def test_keyboard_interrupt_exits_cleanly(self):
        with patch.object(sys, "argv", ["reviewflow-skills-server"]), patch(
            "reviewflow.server.app.SkillServer"
        ) as server_cls:
            server_cls.return_value.run.side_effect = KeyboardInterrupt
            with pytest.raises(SystemExit) as exc_info:
                server_main()
        assert exc_info.value.code == 0

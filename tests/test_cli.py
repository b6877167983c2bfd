"""
Unit tests for the ReviewFlow command line.
"""

import json

import pytest

from reviewflow.cli import main

CLEAN = "Our quarterly newsletter summarises market commentary for the client."
TOBACCO = "We recommend increasing exposure to the tobacco industry."


@pytest.fixture(autouse=True)
def local_skills(monkeypatch):
    monkeypatch.delenv("ENABLE_REMOTE_SKILLS", raising=False)


def write(tmp_path, name: str, content: str) -> str:
    path = tmp_path / name
    path.write_text(content)
    return str(path)


def plan_input(*dirty: tuple) -> dict:
    return {
        "dirtyQueue": {
            "entries": [
                {"sectionId": sid, "editedAt": "2024-01-01T00:00:00+00:00", "editMagnitude": magnitude}
                for sid, magnitude in dirty
            ]
        },
        "sections": [
            {"id": "section-1", "title": "Introduction", "content": "Hello."},
            {"id": "section-2", "title": "Risk Factors", "content": "Markets move."},
            {"id": "section-3", "title": "Contact", "content": "Call us."},
        ],
    }


class TestListCommands:
    """Tests for the flows and agents commands."""

    def test_flows(self, capsys):
        main(["flows"])
        out = capsys.readouterr().out
        assert "compliance-review-v1" in out
        assert "kyc-triage-v1" in out
        assert "- main: assemble-topics -> kyc.topic_assemble [critical]" in out

    def test_agents(self, capsys):
        main(["agents"])
        out = capsys.readouterr().out
        assert "extract-facts-agent" in out
        assert "Capabilities:" in out

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "usage: reviewflow" in capsys.readouterr().out


class TestOrchestrateCommand:
    """Tests for the orchestrate command."""

    def test_clean_section(self, tmp_path, capsys):
        main(["orchestrate", write(tmp_path, "section.txt", CLEAN), "--client-name", "Ms. Rivera"])
        captured = capsys.readouterr()
        result = json.loads(captured.out)

        assert result["ok"] is True
        assert result["decision"]["next_action"] == "ready_to_send"
        assert result["metadata"]["document_id"] == "DOC-CLI"
        assert "Ms. Rivera" in result["artifacts"]["client_communication"]["body"]
        assert "Decision: ready_to_send (confidence 0.95)" in captured.err

    def test_trace_and_output_file(self, tmp_path, capsys):
        output = tmp_path / "result.json"
        main(
            [
                "orchestrate",
                write(tmp_path, "section.txt", TOBACCO),
                "--trace",
                "--skip-step",
                "draft-comms",
                "-o",
                str(output),
            ]
        )
        result = json.loads(output.read_text())

        assert result["decision"]["next_action"] == "rejected"
        assert result["events"][0]["event"] == "orchestration_started"
        assert any(e["event"] == "step_skipped" for e in result["events"])
        assert "Result saved to" in capsys.readouterr().err

    def test_kyc_flow(self, tmp_path, capsys):
        content = (
            "Client name is John Smith, passport number X123, nationality British.\n\n"
            "Source of wealth is salary income from employment at a bank."
        )
        main(["orchestrate", write(tmp_path, "kyc.txt", content), "--flow", "kyc-triage-v1", "--remote-skills"])
        result = json.loads(capsys.readouterr().out)
        assert result["artifacts"]["risk_triage"]["routePath"] == "crosscheck"
        assert result["skill_invocations"][0]["transport"] == "local"

    def test_unknown_flow_exits_nonzero(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["orchestrate", write(tmp_path, "section.txt", CLEAN), "--flow", "nope"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert json.loads(captured.out)["ok"] is False
        assert 'Error: Flow "nope" not found' in captured.err

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["orchestrate", str(tmp_path / "missing.txt")])
        assert exc_info.value.code == 1
        assert "Cannot read section" in capsys.readouterr().err


class TestPlanCommand:
    """Tests for the plan command."""

    def test_plan(self, tmp_path, capsys):
        main(["plan", write(tmp_path, "review.json", json.dumps(plan_input((3, "light"))))])
        result = json.loads(capsys.readouterr().out)

        assert result["scopePlan"]["reviewMode"] == "section-only"
        assert result["scopePlan"]["sectionsToReview"] == ["section-3"]
        assert result["summary"] == "Section-Only Review (1 section, 1 agent)"
        assert result["fallbacks"] == []

    def test_high_risk_section(self, tmp_path, capsys):
        main(["plan", write(tmp_path, "review.json", json.dumps(plan_input((2, "light"))))])
        result = json.loads(capsys.readouterr().out)
        assert result["scopePlan"]["reviewMode"] == "full-document"
        assert result["scopePlan"]["sectionsToReview"] == ["section-1", "section-2", "section-3"]

    def test_config_file(self, tmp_path, capsys):
        config = write(tmp_path, "planner.yaml", "planner:\n  high_risk_keywords: [contact]\n")
        main(["plan", write(tmp_path, "review.json", json.dumps(plan_input((3, "light")))), "-c", config])
        result = json.loads(capsys.readouterr().out)
        assert result["scopePlan"]["reviewMode"] == "full-document"

    def test_unknown_sections_only(self, tmp_path, capsys):
        main(["plan", write(tmp_path, "review.json", json.dumps(plan_input((9, "heavy"))))])
        result = json.loads(capsys.readouterr().out)
        assert result["summary"] == "Nothing to review"
        assert result["fallbacks"] == ["Sanitized dirtyQueue: Section ID 9 not found in document"]

    def test_invalid_json(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["plan", write(tmp_path, "review.json", "{not json")])
        assert exc_info.value.code == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_not_an_object(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["plan", write(tmp_path, "review.json", "[]")])
        assert "must be a JSON object" in capsys.readouterr().err

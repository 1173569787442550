"""Tests for the CLI commands."""

import json
from pathlib import Path

from typer.testing import CliRunner

from safemongo.cli import app

runner = CliRunner()
ENV = {"COLUMNS": "200"}


def invoke(args):
    return runner.invoke(app, args, env=ENV)


class TestVersion:
    def test_version_flag(self):
        result = invoke(["--version"])
        assert result.exit_code == 0
        assert "safemongo" in result.output


class TestInit:
    def test_creates_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = invoke(["init"])
        assert result.exit_code == 0
        assert (tmp_path / ".safemongo.toml").exists()

    def test_refuses_overwrite(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".safemongo.toml").write_text("existing")
        result = invoke(["init"])
        assert result.exit_code == 1
        assert (tmp_path / ".safemongo.toml").read_text() == "existing"

    def test_generated_config_loads(self, tmp_path: Path, monkeypatch):
        from safemongo.config.loader import load_config

        monkeypatch.chdir(tmp_path)
        invoke(["init"])
        cfg = load_config(tmp_path)
        assert cfg.scan.fail_on == "high"


class TestScan:
    def test_clean_exits_zero(self, clean_project: Path, monkeypatch):
        monkeypatch.chdir(clean_project)
        result = invoke(["scan"])
        assert result.exit_code == 0

    def test_unsafe_exits_one(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        result = invoke(["scan", "src"])
        assert result.exit_code == 1

    def test_json_output(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        result = invoke(["scan", "--format", "json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["scanned_files"] == 2
        assert {f["file"] for f in data["findings"]} == {"src/routes.js"}

    def test_sarif_to_file(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        result = invoke(["scan", "--format", "sarif", "--output", "report.sarif"])
        assert result.exit_code == 1
        data = json.loads((project / "report.sarif").read_text())
        assert data["version"] == "2.1.0"

    def test_terminal_output_file_is_json(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        invoke(["scan", "--output", "out.json"])
        data = json.loads((project / "out.json").read_text())
        assert data["blocked"] is True

    def test_fail_on_low(self, tmp_path: Path, monkeypatch):
        (tmp_path / "a.js").write_text("const users = User.find({ active: true });\n")
        monkeypatch.chdir(tmp_path)
        assert invoke(["scan"]).exit_code == 0
        assert invoke(["scan", "--fail-on", "low"]).exit_code == 1

    def test_disabled_rules_not_reported(self, tmp_path: Path, monkeypatch):
        (tmp_path / "a.js").write_text("const users = User.find({ active: true });\n")
        (tmp_path / ".safemongo.toml").write_text(
            '[rules]\ndisable = ["MONGOOSE_QUERY_EXEC_MISSING"]\n'
        )
        monkeypatch.chdir(tmp_path)
        result = invoke(["scan", "--format", "json", "--fail-on", "low"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["findings"] == []

    def test_invalid_format(self, clean_project: Path, monkeypatch):
        monkeypatch.chdir(clean_project)
        assert invoke(["scan", "--format", "xml"]).exit_code == 2

    def test_invalid_fail_on(self, clean_project: Path, monkeypatch):
        monkeypatch.chdir(clean_project)
        assert invoke(["scan", "--fail-on", "urgent"]).exit_code == 2

    def test_broken_config(self, clean_project: Path, monkeypatch):
        (clean_project / ".safemongo.toml").write_text("[scan\n")
        monkeypatch.chdir(clean_project)
        assert invoke(["scan"]).exit_code == 2

    def test_broken_custom_rules(self, clean_project: Path, monkeypatch):
        rules_dir = clean_project / ".safemongo-rules"
        rules_dir.mkdir()
        (rules_dir / "bad.yaml").write_text("id: BAD\npattern: '(oops'\n")
        monkeypatch.chdir(clean_project)
        assert invoke(["scan"]).exit_code == 2


class TestRules:
    def test_lists_rules(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = invoke(["rules"])
        assert result.exit_code == 0
        assert "NOSQL_INJECTION_OBJECT" in result.stdout
        assert "UNVALIDATED_UPDATE_OPERATORS" in result.stdout

    def test_severity_filter(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = invoke(["rules", "--severity", "low"])
        assert result.exit_code == 0
        assert "MONGOOSE_QUERY_EXEC_MISSING" in result.stdout
        assert "EVAL_USAGE" not in result.stdout

    def test_invalid_severity(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert invoke(["rules", "--severity", "urgent"]).exit_code == 2


class TestExplain:
    def test_known_rule(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = invoke(["explain", "eval_usage"])
        assert result.exit_code == 0
        assert "Eval Usage" in result.stdout
        assert "Safe Example" in result.stdout

    def test_unknown_rule(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert invoke(["explain", "NOPE"]).exit_code == 2


class TestDetails:
    def test_line_with_findings(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        result = invoke(["details", "src/routes.js", "6"])
        assert result.exit_code == 0
        assert "Unconstrained Query" in result.stdout
        assert "src/routes.js:6" in result.stdout

    def test_html_export(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        result = invoke(["details", "src/routes.js", "6", "--html", "report.html"])
        assert result.exit_code == 0
        assert "<!DOCTYPE html>" in (project / "report.html").read_text()

    def test_clean_line(self, project: Path, monkeypatch):
        monkeypatch.chdir(project)
        assert invoke(["details", "src/routes.js", "1"]).exit_code == 0

    def test_missing_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert invoke(["details", "missing.js", "1"]).exit_code == 2


class TestMarkupSafety:
    def test_explain_custom_rule_keeps_case(self, tmp_path: Path, monkeypatch):
        rules_dir = tmp_path / ".safemongo-rules"
        rules_dir.mkdir()
        (rules_dir / "team.yaml").write_text(
            "id: no_map_reduce\n"
            "name: No mapReduce\n"
            "pattern: '\\.mapReduce\\s*\\('\n"
            "unsafe_example: db.orders.mapReduce(map, reduce);\n"
        )
        monkeypatch.chdir(tmp_path)
        result = invoke(["explain", "no_map_reduce"])
        assert result.exit_code == 0
        assert "No mapReduce" in result.stdout

    def test_unknown_rule_with_brackets(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = invoke(["explain", "[/x]"])
        assert result.exit_code == 2
        assert "[/x]" in result.output

    def test_details_path_with_brackets(self, tmp_path: Path, monkeypatch):
        route = tmp_path / "src" / "[id]"
        route.mkdir(parents=True)
        (route / "route.js").write_text("const a = 1;\n")
        monkeypatch.chdir(tmp_path)
        result = invoke(["details", "src/[id]/route.js", "1"])
        assert result.exit_code == 0
        assert "src/[id]/route.js" in result.output

    def test_details_missing_file_with_brackets(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = invoke(["details", "[/x]/route.js", "1"])
        assert result.exit_code == 2
        assert "[/x]/route.js" in result.output

    def test_scan_line_with_array_filter(self, tmp_path: Path, monkeypatch):
        (tmp_path / "grades.js").write_text(
            'db.s.updateMany({}, { $set: { "grades.$[elem]": 100 } });\n'
            "const pats = [/x/]; db.users.find({ name: { $regex: pats } });\n"
        )
        monkeypatch.chdir(tmp_path)
        result = invoke(["scan"])
        assert result.exit_code == 1
        assert "$[elem]" in result.output
        assert "[/x/]" in result.output

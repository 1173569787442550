"""Tests for output formatters."""

import io
import json

from rich.console import Console

from safemongo.findings.models import Finding, ScanResult
from safemongo.output import details, json_report, sarif, terminal
from safemongo.rules import unsafe_queries


def _result(fail_on: str = "high") -> ScanResult:
    result = ScanResult(fail_on=fail_on, scanned_files=2)
    result.add("src/app.js", [
        Finding(rule=unsafe_queries.NOSQL_INJECTION_OBJECT, line_no=5,
                matched_text='db.users.find({ $where: "1" });'),
        Finding(rule=unsafe_queries.UNCONSTRAINED_QUERY, line_no=9,
                matched_text="db.users.find({});"),
    ])
    result.add("src/clean.js", [])
    return result


def _capture() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestJsonReport:
    def test_structure(self):
        data = json.loads(json_report.render(_result()))
        assert data["scanned_files"] == 2
        assert data["total_findings"] == 2
        assert data["blocked"] is True
        first = data["findings"][0]
        assert first["rule"] == "NOSQL_INJECTION_OBJECT"
        assert first["file"] == "src/app.js"
        assert first["line"] == 5
        assert first["severity"] == "high"
        assert first["is_blocking"] is True
        assert data["findings"][1]["is_blocking"] is False

    def test_empty(self):
        data = json_report.to_dict(ScanResult())
        assert data["findings"] == []
        assert data["blocked"] is False


class TestSarif:
    def test_structure(self):
        data = json.loads(sarif.render(_result()))
        assert data["version"] == "2.1.0"
        run = data["runs"][0]
        assert run["tool"]["driver"]["name"] == "safemongo"
        assert [r["id"] for r in run["tool"]["driver"]["rules"]] == [
            "NOSQL_INJECTION_OBJECT",
            "UNCONSTRAINED_QUERY",
        ]
        assert [r["level"] for r in run["results"]] == ["error", "warning"]
        region = run["results"][1]["locations"][0]["physicalLocation"]["region"]
        assert region["startLine"] == 9
        assert region["snippet"]["text"] == "db.users.find({});"

    def test_rule_listed_once(self):
        result = ScanResult()
        rule = unsafe_queries.EVAL_USAGE
        result.add("a.js", [
            Finding(rule=rule, line_no=1, matched_text="db.eval(a)"),
            Finding(rule=rule, line_no=2, matched_text="db.eval(b)"),
        ])
        run = sarif.to_dict(result)["runs"][0]
        assert len(run["tool"]["driver"]["rules"]) == 1
        assert len(run["results"]) == 2


class TestTerminal:
    def test_findings_table(self):
        console = _capture()
        terminal.render(_result(), console=console)
        out = console.file.getvalue()
        assert "NOSQL_INJECTION_OBJECT" in out
        assert "src/app.js" in out
        assert "FAILED" in out

    def test_below_threshold(self):
        result = ScanResult(fail_on="high")
        result.add("a.js", [
            Finding(rule=unsafe_queries.UNCONSTRAINED_QUERY, line_no=1, matched_text="x"),
        ])
        console = _capture()
        terminal.render(result, console=console)
        assert "below fail threshold" in console.file.getvalue()

    def test_no_findings(self):
        console = _capture()
        terminal.render(ScanResult(scanned_files=3), console=console)
        out = console.file.getvalue()
        assert "No unsafe MongoDB query patterns detected" in out
        assert "Files scanned:" in out

    def test_show_examples(self):
        console = _capture()
        terminal.render(_result(), show_examples=True, show_summary=False, console=console)
        out = console.file.getvalue()
        assert "Fix:" in out
        assert "Files scanned:" not in out

    def test_brackets_in_source_render_verbatim(self):
        result = ScanResult()
        result.add("src/[id]/route.js", [
            Finding(rule=unsafe_queries.ARRAY_FILTER_INJECTION, line_no=3,
                    matched_text='db.s.updateMany({}, { $set: { "grades.$[elem]": 100 } });'),
            Finding(rule=unsafe_queries.UNESCAPED_REGEX_INPUT, line_no=4,
                    matched_text="const pats = [/x/]; db.users.find({ name: { $regex: pats } });"),
        ])
        console = _capture()
        terminal.render(result, console=console)
        out = console.file.getvalue()
        assert '"grades.$[elem]"' in out
        assert "const pats = [/x/];" in out
        assert "src/[id]/route.js" in out

    def test_severity_pill(self):
        assert terminal.severity_pill("high").plain == " 🛑 HIGH "


class TestDetails:
    def _finding(self) -> Finding:
        return Finding(
            rule=unsafe_queries.UNCONSTRAINED_QUERY,
            line_no=12,
            matched_text="db.users.find({});",
        )

    def test_text_report(self):
        text = details.render_text(self._finding(), source_id="src/app.js", width=160)
        rule = unsafe_queries.UNCONSTRAINED_QUERY
        assert rule.name in text
        assert "MEDIUM" in text
        assert "src/app.js:12" in text
        assert "Suggestion" in text
        assert "Vulnerable Example" in text
        assert "Safe Example" in text
        assert rule.reference_url in text

    def test_location_without_source(self):
        assert "line 12" in details.render_text(self._finding())

    def test_html_report(self):
        html = details.render_html(self._finding())
        assert html.lstrip().startswith("<!DOCTYPE html>")
        assert "#faad14" in html.lower()

    def test_print_details(self):
        console = _capture()
        details.print_details(self._finding(), console=console)
        assert "Unconstrained Query" in console.file.getvalue()

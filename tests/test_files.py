"""Tests for file collection and multi-file scans."""

from pathlib import Path

from safemongo.config.schema import DEFAULT_EXTENSIONS, SafeMongoConfig
from safemongo.scanner.files import iter_source_files, read_source, scan_paths


class TestIterSourceFiles:
    def test_filters_by_extension_and_excludes_deps(self, project: Path):
        files = [p.relative_to(project).as_posix() for p in iter_source_files([project], DEFAULT_EXTENSIONS)]
        assert files == ["src/math.ts", "src/routes.js"]

    def test_explicit_file_always_yielded(self, project: Path):
        readme = project / "src" / "README.md"
        assert list(iter_source_files([readme], DEFAULT_EXTENSIONS)) == [readme]

    def test_missing_path_is_skipped(self, tmp_path: Path, caplog):
        missing = tmp_path / "nope"
        with caplog.at_level("WARNING", logger="safemongo"):
            assert list(iter_source_files([missing], DEFAULT_EXTENSIONS)) == []
        assert "does not exist" in caplog.text


class TestReadSource:
    def test_reads_text(self, tmp_path: Path):
        path = tmp_path / "a.js"
        path.write_text("db.users.find({});\n", encoding="utf-8")
        assert read_source(path, 1024) == ("db.users.find({});\n", None)

    def test_too_large(self, tmp_path: Path):
        path = tmp_path / "big.js"
        path.write_text("x" * 4096)
        text, reason = read_source(path, 2048)
        assert text is None
        assert reason == "larger than 2 KB"

    def test_binary(self, tmp_path: Path):
        path = tmp_path / "blob.js"
        path.write_bytes(b"\x00\x01\x02db.users.find({});")
        assert read_source(path, 1024) == (None, "binary")

    def test_invalid_utf8_replaced(self, tmp_path: Path):
        path = tmp_path / "latin.js"
        path.write_bytes(b"// caf\xe9\ndb.users.find({});\n")
        text, reason = read_source(path, 1024)
        assert reason is None
        assert "�" in text

    def test_unreadable(self, tmp_path: Path):
        text, reason = read_source(tmp_path / "missing.js", 1024)
        assert text is None
        assert reason.startswith("unreadable")


class TestScanPaths:
    def test_project_scan(self, project: Path, rules):
        result = scan_paths([project], rules, SafeMongoConfig(), project)
        assert result.scanned_files == 2
        assert list(result.findings_by_file) == ["src/routes.js"]
        assert result.blocked is True
        assert result.scan_duration_ms >= 0

    def test_clean_project(self, clean_project: Path, rules):
        result = scan_paths([clean_project], rules, SafeMongoConfig(), clean_project)
        assert result.scanned_files == 1
        assert result.total_findings == 0
        assert result.blocked is False

    def test_ignore_paths(self, project: Path, rules):
        cfg = SafeMongoConfig()
        cfg.ignore.paths = ["src/routes.js"]
        result = scan_paths([project], rules, cfg, project)
        assert result.total_findings == 0
        assert result.skipped_files == ["src/routes.js (ignored)"]

    def test_crlf_sources(self, tmp_path: Path, rules):
        (tmp_path / "win.js").write_bytes(b"const a = 1;\r\ndb.users.find({});\r\n")
        result = scan_paths([tmp_path], rules, SafeMongoConfig(), tmp_path)
        findings = result.findings_by_file["win.js"]
        assert {f.line_no for f in findings} == {2}
        assert all(not f.matched_text.endswith("\r") for f in findings)

    def test_oversized_file_skipped(self, tmp_path: Path, rules):
        (tmp_path / "big.js").write_text("db.users.find({});\n" * 200)
        cfg = SafeMongoConfig()
        cfg.scan.max_file_size_kb = 1
        result = scan_paths([tmp_path], rules, cfg, tmp_path)
        assert result.scanned_files == 0
        assert result.skipped_files == ["big.js (larger than 1 KB)"]

    def test_catalog_file_never_flagged(self, rules):
        from safemongo.rules import unsafe_queries

        catalog = Path(unsafe_queries.__file__)
        cfg = SafeMongoConfig()
        cfg.scan.max_file_size_kb = 4096
        result = scan_paths([catalog], rules, cfg, catalog.parent)
        assert result.scanned_files == 1
        assert result.total_findings == 0

    def test_fail_on_threshold(self, tmp_path: Path, rules):
        (tmp_path / "a.js").write_text("const users = User.find({ active: true });\n")
        cfg = SafeMongoConfig()
        result = scan_paths([tmp_path], rules, cfg, tmp_path)
        assert [f.rule_id for _, f in result.iter_findings()] == ["MONGOOSE_QUERY_EXEC_MISSING"]
        assert result.blocked is False

        cfg.scan.fail_on = "low"
        result = scan_paths([tmp_path], rules, cfg, tmp_path)
        assert result.blocked is True
        assert len(result.blocking_findings) == 1

#!/usr/bin/env python3

import subprocess
from unittest import mock

import pytest

from type_model_to_swift.pipeline.config import FormatterConfig
from type_model_to_swift.pipeline.formatters import SwiftFormatFormatter, format_with_swift_format
from type_model_to_swift.pipeline.sinks import FileSink, StringSink
from type_model_to_swift.utils import deprecation_attribute, doc_comment_lines, escape_string, indent, swift_string

SOURCE = "public struct Point: Codable, Hashable {\n}\n"


class TestSinks:
    def test_string_sink_joins_fragments(self):
        sink = StringSink()
        sink.write("Prelude", "import Foundation")
        sink.write("Point", "struct Point {}")
        assert sink.getvalue() == "import Foundation\n\nstruct Point {}\n"

    def test_file_sink_replaces_existing_file(self, tmp_path):
        target = tmp_path / "Models.swift"
        target.write_text("stale")

        sink = FileSink(target)
        sink.write("Point", "struct Point {}")
        # Nothing reaches the target before close
        assert target.read_text() == "stale"

        sink.close()
        assert target.read_text() == "struct Point {}\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["Models.swift"]

    def test_file_sink_cleans_up_on_failure(self, tmp_path):
        target = tmp_path / "Models.swift"
        sink = FileSink(target)
        sink.write("Point", "struct Point {}")

        with mock.patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                sink.close()
        assert list(tmp_path.iterdir()) == []


class TestSwiftFormatFormatter:
    def test_missing_executable_returns_input(self):
        config = FormatterConfig(enabled=True, executable="no-such-swift-format")
        formatter = SwiftFormatFormatter()
        assert not formatter.is_available(config)
        assert formatter.format(SOURCE, config) == SOURCE

    def test_convenience_function(self):
        assert format_with_swift_format(SOURCE, executable="no-such-swift-format") == SOURCE

    def test_formatted_output(self):
        config = FormatterConfig(enabled=True)
        formatter = SwiftFormatFormatter()
        version = subprocess.CompletedProcess(["swift-format", "--version"], 0, stdout="600.0.0", stderr="")
        formatted = subprocess.CompletedProcess(["swift-format", "format"], 0, stdout="formatted\n", stderr="")
        with mock.patch("subprocess.run", side_effect=[version, formatted]) as run:
            assert formatter.format(SOURCE, config) == "formatted\n"
        assert run.call_args.args[0] == ["swift-format", "format"]
        assert run.call_args.kwargs["input"] == SOURCE

    def test_formatter_failure_returns_input(self):
        config = FormatterConfig(enabled=True)
        formatter = SwiftFormatFormatter()
        version = subprocess.CompletedProcess(["swift-format", "--version"], 0, stdout="600.0.0", stderr="")
        failed = subprocess.CompletedProcess(["swift-format", "format"], 1, stdout="", stderr="syntax error")
        with mock.patch("subprocess.run", side_effect=[version, failed]):
            assert formatter.format(SOURCE, config) == SOURCE

    def test_timeout_returns_input(self):
        config = FormatterConfig(enabled=True, timeout=1)
        formatter = SwiftFormatFormatter()
        version = subprocess.CompletedProcess(["swift-format", "--version"], 0, stdout="600.0.0", stderr="")
        with mock.patch("subprocess.run", side_effect=[version, subprocess.TimeoutExpired("swift-format", 1)]):
            assert formatter.format(SOURCE, config) == SOURCE


class TestSwiftText:
    def test_escape_string(self):
        assert escape_string('say "hi"') == 'say \\"hi\\"'
        assert escape_string("a\\b\n") == "a\\\\b\\n"
        assert swift_string("tag") == '"tag"'

    def test_doc_comment_lines(self):
        assert doc_comment_lines("") == []
        assert doc_comment_lines("First.\n\nSecond.\n\n") == ["/// First.", "///", "/// Second."]

    def test_deprecation_attribute(self):
        assert deprecation_attribute(None) is None
        assert deprecation_attribute("") == "@available(*, deprecated)"
        assert deprecation_attribute('use "b"') == '@available(*, deprecated, message: "use \\"b\\"")'

    def test_indent(self):
        assert indent(["a", "", "b"], 2) == ["        a", "", "        b"]


if __name__ == "__main__":
    pytest.main([__file__])

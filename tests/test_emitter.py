"""
Unit tests for minipack/emitter.py - bundle serialization.
"""
import os

import pytest

from minipack.emitter import BundleEmitter, ModuleTableEntry, emit, escape_source
from minipack.records import ModuleRecord, validate_graph


def record(id, path, code="", mapping=None):
    mapping = mapping or {}
    return ModuleRecord(id=id, path=path, raw_dependencies=list(mapping), code=code, mapping=mapping)


@pytest.fixture
def graph(tmp_path):
    """Entry main.py requiring lib/util.py, which exports a constant."""
    root = str(tmp_path)
    return [
        record(0, os.path.join(root, "main.py"),
               "util = require('./lib/util.py')\nprint('answer', util.ANSWER)",
               {"./lib/util.py": 1}),
        record(1, os.path.join(root, "lib", "util.py"),
               "ANSWER = 42; exports.ANSWER = ANSWER"),
    ]


class TestEscapeSource:
    """The escaped literal evaluates back to the module source."""

    @pytest.mark.parametrize("source", [
        "",
        "print('hello')",
        'print("double")\n',
        'doc = """triple"""\nraw = r"\\d+"',
        "path = 'C:\\\\temp'\n\tindented",
        "ends with backslash \\",
        "emoji = '\U0001F4E6' and accents: café",
        "carriage\rreturn and \x00 null",
    ])
    def test_evaluates_back(self, source):
        assert eval(escape_source(source)) == source

    def test_output_is_ascii(self):
        assert escape_source("naïve ✓").isascii()

    def test_one_physical_line_per_source_line(self):
        literal = escape_source("a\nb\nc")
        assert literal == '"""\\\na\nb\nc"""'


class TestBundleEmitter:
    """Tests for the generated bundle text."""

    def test_banner(self, graph):
        output = emit(graph)
        assert output.startswith("#!/usr/bin/env python3\n")
        assert "# by minipack from main.py." in output

    def test_no_banner(self, graph):
        output = emit(graph, banner=False)
        assert not output.startswith("#!")
        assert "DO NOT EDIT" not in output

    def test_filenames_relative_to_entry(self, graph):
        entries = BundleEmitter().table_entries(graph)
        assert entries == [
            ModuleTableEntry(0, "main.py", graph[0].code, {"./lib/util.py": 1}),
            ModuleTableEntry(1, "lib/util.py", graph[1].code, {}),
        ]

    def test_module_table_layout(self, graph):
        output = emit(graph, banner=False)
        assert "__modules__ = {\n" in output
        assert "0: (\n    define('main.py', \"\"\"\\\n" in output
        assert "    {\n        './lib/util.py': 1,\n    },\n" in output
        assert "    {},\n" in output
        assert output.endswith("bootstrap(__modules__, __name__)\n")

    def test_runtime_is_embedded(self, graph):
        output = emit(graph)
        assert "def bootstrap(modules" in output
        assert "def define(filename, source)" in output
        assert "minipack" not in output.replace("by minipack from", "")

    def test_deterministic(self, graph):
        assert emit(graph) == emit(list(graph))

    def test_bundle_runs(self, graph, run_bundle, capsys):
        run_bundle(emit(graph))
        assert capsys.readouterr().out == "answer 42\n"

    def test_bundle_compiles_as_python(self, graph):
        compile(emit(graph), "bundle.py", "exec")

    def test_empty_graph_is_rejected(self):
        with pytest.raises(ValueError):
            emit([])


class TestValidateGraph:
    """Tests for the structural checks run before emission."""

    def test_valid(self, graph):
        validate_graph(graph)

    def test_ids_out_of_order(self, graph):
        with pytest.raises(ValueError, match="dense"):
            validate_graph(list(reversed(graph)))

    def test_dangling_target(self, tmp_path):
        records = [record(0, str(tmp_path / "main.py"), mapping={"./x.py": 5})]
        with pytest.raises(ValueError, match="unknown module"):
            validate_graph(records)


class TestModuleRecord:
    """Tests for the record model itself."""

    def test_mapping_must_match_dependencies(self):
        with pytest.raises(ValueError):
            ModuleRecord(id=0, path="/a.py", raw_dependencies=["./b.py"], code="", mapping={})

    def test_unexpected_mapping_key(self):
        with pytest.raises(ValueError):
            ModuleRecord(id=0, path="/a.py", raw_dependencies=[], code="", mapping={"./b.py": 1})

    def test_duplicate_dependencies_share_one_key(self):
        module = ModuleRecord(
            id=0, path="/a.py", raw_dependencies=["./b.py", "./b.py"], code="", mapping={"./b.py": 1},
        )
        assert module.raw_dependencies == ["./b.py", "./b.py"]

    def test_negative_id(self):
        with pytest.raises(ValueError):
            ModuleRecord(id=-1, path="/a.py", code="")

    def test_frozen(self):
        module = ModuleRecord(id=0, path="/pkg/a.py", code="")
        assert module.directory == "/pkg"
        with pytest.raises(ValueError):
            module.code = "changed"

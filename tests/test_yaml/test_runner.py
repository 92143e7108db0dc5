"""Integration tests for YAML declarations and the CLI."""

import json

import pytest

pytest.importorskip("yaml")

from genrule.yaml import run_yaml, main


PROJECT = """
config:
  build_dir: out

subdirs:
  - tools

modules:
  - type: gensrcs
    name: protos
    tools: [protoc]
    srcs: ["api/*.proto"]
    output_extension: .pb.go
    cmd: "$(location) --out=$(genDir) $(in)"

  - type: genrule
    name: bundle
    tool_files: ["bundle.sh"]
    srcs: [":protos"]
    out: ["bundle.tar"]
    cmd: "$(location bundle.sh) $(out) $(in)"
"""

TOOLS = """
modules:
  - type: host_tool
    name: protoc
    src: protoc.py
"""


@pytest.fixture
def project(tmp_path):
    (tmp_path / "api").mkdir()
    (tmp_path / "api" / "b.proto").write_text("")
    (tmp_path / "api" / "a.proto").write_text("")
    (tmp_path / "tools").mkdir()
    (tmp_path / "tools" / "genrule.yaml").write_text(TOOLS)
    (tmp_path / "genrule.yaml").write_text(PROJECT)
    return tmp_path


class TestRunYAML:
    """End-to-end tests for run_yaml."""

    def test_generates_actions(self, project):
        result = run_yaml(project / "genrule.yaml")

        assert result.ok
        assert result.generated == ['protoc', 'protos', 'bundle']

        protos = result.store.actions_for('protos')
        gen = 'out/.intermediates/protos/gen'
        assert [a.inputs for a in protos] == [('api/a.proto',), ('api/b.proto',)]
        assert [a.outputs for a in protos] == [(f'{gen}/api/a.pb.go',), (f'{gen}/api/b.pb.go',)]
        assert str(protos[0].command) == f'tools/protoc.py --out={gen} ${{in}}'
        assert protos[0].implicits == ('tools/protoc.py',)

        [bundle] = result.store.actions_for('bundle')
        assert bundle.inputs == (f'{gen}/api/a.pb.go', f'{gen}/api/b.pb.go')
        assert bundle.outputs == ('out/.intermediates/bundle/gen/bundle.tar',)

    def test_build_dir_override(self, project):
        result = run_yaml(project / "genrule.yaml", build_dir='build')
        [bundle] = result.store.actions_for('bundle')
        assert bundle.outputs == ('build/.intermediates/bundle/gen/bundle.tar',)

    def test_module_error_reported(self, tmp_path):
        (tmp_path / "genrule.yaml").write_text("""
modules:
  - type: genrule
    name: broken
    out: ["x"]
    cmd: "touch $(out)"
""")
        result = run_yaml(tmp_path / "genrule.yaml")
        assert not result.ok
        assert str(result.errors[0]) == (
            'module "broken": at least one `tools` or `tool_files` is required'
        )

    def test_verbose(self, project, capsys):
        run_yaml(project / "genrule.yaml", verbose=True)
        out = capsys.readouterr().out
        assert "Loaded 3 module(s) from 2 file(s)" in out
        assert "  - protos (gensrcs)" in out


class TestMain:
    """Tests for the CLI entry point."""

    def test_ninja_output(self, project):
        out_file = project / "build.ninja"
        code = main([str(project / "genrule.yaml"), "-o", str(out_file)])

        assert code == 0
        text = out_file.read_text()
        assert "rule genrule_protos" in text
        assert "command = tools/protoc.py --out=out/.intermediates/protos/gen $in" in text
        assert "build out/.intermediates/bundle/gen/bundle.tar: genrule_bundle" in text

    def test_json_output(self, project, capsys):
        code = main([str(project / "genrule.yaml"), "--format", "json"])

        assert code == 0
        actions = json.loads(capsys.readouterr().out)
        assert [a['module'] for a in actions] == ['protos', 'protos', 'bundle']
        assert actions[2]['command'] == (
            'bundle.sh ${out} ${in}'
        )

    def test_dry_run(self, project, capsys):
        code = main([str(project / "genrule.yaml"), "--dry-run"])

        assert code == 0
        out = capsys.readouterr().out
        assert "  - protos: 2 action(s)" in out
        assert "Total: 3 action(s)" in out
        assert not (project / "build.ninja").exists()

    def test_missing_file(self, tmp_path, capsys):
        code = main([str(tmp_path / "missing.yaml")])
        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_module_errors_exit_code(self, tmp_path, capsys):
        (tmp_path / "genrule.yaml").write_text("""
modules:
  - type: genrule
    name: bad
    tool_files: [t]
    out: [x]
    cmd: "$(location nope)"
  - type: genrule
    name: user
    tool_files: [t]
    srcs: [":bad"]
    out: [y]
    cmd: "$(location)"
""")
        code = main([str(tmp_path / "genrule.yaml")])
        err = capsys.readouterr().err

        assert code == 1
        assert 'Error: module "bad": cmd: unknown location label "nope"' in err
        assert "Skipped: user" in err

    def test_invalid_declaration(self, tmp_path, capsys):
        (tmp_path / "genrule.yaml").write_text("modules:\n  - {type: nope, name: x}\n")
        assert main([str(tmp_path / "genrule.yaml")]) == 1
        assert "unrecognized module type 'nope'" in capsys.readouterr().err

    def test_block_scalar_command(self, tmp_path, capsys):
        (tmp_path / "genrule.yaml").write_text("""
modules:
  - type: genrule
    name: single
    tool_files: [t.sh]
    out: [x]
    cmd: |
      $(location) > $(out)
  - type: genrule
    name: multi
    tool_files: [t.sh]
    out: [y]
    cmd: |
      $(location)
      > $(out)
""")
        result = run_yaml(tmp_path / "genrule.yaml")
        assert result.generated == ['single']
        [action] = result.store.actions_for('single')
        assert str(action.command) == 't.sh > ${out}'

        code = main([str(tmp_path / "genrule.yaml"), "-o", str(tmp_path / "build.ninja")])
        assert code == 1
        assert 'module "multi": cmd: unexpected line break in command' in capsys.readouterr().err
        assert not (tmp_path / "build.ninja").exists()

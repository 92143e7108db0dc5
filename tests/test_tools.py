"""Tests for genrule.tools module."""

import pytest

from genrule.exceptions import (
    ConfigurationError,
    DependencyCapabilityError,
    DuplicateToolError,
)
from genrule.paths import ModulePaths
from genrule.tools import (
    CapabilityUnset,
    HasToolPath,
    NoCapability,
    ToolResolver,
    ToolTable,
)


class FakeContext:
    """Minimal module context with a fixed capability per dependency."""

    def __init__(self, capabilities=None, source_dir="pkg"):
        self.name = "mod"
        self.paths = ModulePaths("mod", source_dir=source_dir)
        self.capabilities = capabilities or {}

    def host_tool(self, name):
        return self.capabilities[name]


class TestToolTable:
    """Tests for ToolTable."""

    def test_lookup(self):
        table = ToolTable({"a": "bin/a"}, "a")
        assert table["a"] == "bin/a"
        assert "a" in table
        assert len(table) == 1

    def test_default_path(self):
        table = ToolTable({"a": "bin/a", "b": "bin/b"}, "b")
        assert table.default_path == "bin/b"

    def test_default_path_without_tools(self):
        with pytest.raises(ConfigurationError):
            ToolTable({}).default_path

    def test_immutable(self):
        table = ToolTable({"a": "bin/a"}, "a")
        with pytest.raises(TypeError):
            table["b"] = "bin/b"

    def test_copy_of_input(self):
        paths = {"a": "bin/a"}
        table = ToolTable(paths, "a")
        paths["b"] = "bin/b"
        assert "b" not in table


class TestToolResolverModuleTools:
    """Tests for resolving module tools."""

    def test_resolves_path(self):
        ctx = FakeContext({"protoc": HasToolPath("host/bin/protoc")})
        resolved = ToolResolver(ctx).resolve(["protoc"], [])
        assert resolved.table["protoc"] == "host/bin/protoc"
        assert resolved.table.default_label == "protoc"
        assert resolved.deps == ["host/bin/protoc"]

    def test_capability_unset(self):
        ctx = FakeContext({"protoc": CapabilityUnset()})
        with pytest.raises(DependencyCapabilityError) as exc:
            ToolResolver(ctx).resolve(["protoc"], [])
        assert 'host tool "protoc" missing output file' in str(exc.value)
        assert exc.value.property == "tools"

    def test_no_capability(self):
        ctx = FakeContext({"lib": NoCapability()})
        with pytest.raises(DependencyCapabilityError) as exc:
            ToolResolver(ctx).resolve(["lib"], [])
        assert 'unknown dependency "lib"' in str(exc.value)

    def test_unexpected_capability_type(self):
        ctx = FakeContext({"x": "not a capability"})
        with pytest.raises(TypeError):
            ToolResolver(ctx).resolve(["x"], [])

    def test_stops_at_first_error(self):
        ctx = FakeContext({"bad": NoCapability()})
        # "missing" is never looked up
        with pytest.raises(DependencyCapabilityError):
            ToolResolver(ctx).resolve(["bad", "missing"], [])


class TestToolResolverFileTools:
    """Tests for resolving tool files."""

    def test_relative_to_source_dir(self):
        ctx = FakeContext(source_dir="scripts")
        resolved = ToolResolver(ctx).resolve([], ["gen.sh"])
        assert resolved.table["gen.sh"] == "scripts/gen.sh"
        assert resolved.table.default_path == "scripts/gen.sh"

    def test_module_tools_come_first(self):
        ctx = FakeContext({"protoc": HasToolPath("bin/protoc")})
        resolved = ToolResolver(ctx).resolve(["protoc"], ["gen.sh"])
        assert resolved.table.default_label == "protoc"
        assert resolved.deps == ["bin/protoc", "pkg/gen.sh"]

    def test_no_tools(self):
        with pytest.raises(ConfigurationError) as exc:
            ToolResolver(FakeContext()).resolve([], [])
        assert "at least one `tools` or `tool_files` is required" in str(exc.value)


class TestToolResolverDuplicates:
    """Tests for duplicate labels."""

    def test_module_tool_and_file_tool_conflict(self):
        ctx = FakeContext({"gen.sh": HasToolPath("bin/gen.sh")})
        with pytest.raises(DuplicateToolError) as exc:
            ToolResolver(ctx).resolve(["gen.sh"], ["gen.sh"])
        err = exc.value
        assert err.label == "gen.sh"
        assert err.paths == ("bin/gen.sh", "pkg/gen.sh")
        assert err.property == "tool_files"
        assert str(err) == 'tool_files: multiple tools for "gen.sh", "bin/gen.sh" and "pkg/gen.sh"'

    def test_conflict_names_both_paths_regardless_of_order(self):
        ctx = FakeContext({"t": HasToolPath("bin/t")}, source_dir="")
        with pytest.raises(DuplicateToolError) as exc:
            ToolResolver(ctx).resolve(["t"], ["t"])
        assert set(exc.value.paths) == {"bin/t", "t"}

    def test_same_path_is_accepted(self):
        """Test that a label registered twice with one path is not an error."""
        ctx = FakeContext(source_dir="")
        resolved = ToolResolver(ctx).resolve([], ["gen.sh", "gen.sh"])
        assert resolved.table["gen.sh"] == "gen.sh"
        assert resolved.deps == ["gen.sh"]

    def test_same_module_tool_twice(self):
        ctx = FakeContext({"protoc": HasToolPath("bin/protoc")})
        resolved = ToolResolver(ctx).resolve(["protoc", "protoc"], [])
        assert resolved.deps == ["bin/protoc"]


class TestToolResolverReuse:
    """Tests for calling resolve more than once."""

    def test_calls_do_not_share_state(self):
        ctx = FakeContext({"protoc": HasToolPath("bin/protoc")})
        resolver = ToolResolver(ctx)
        first = resolver.resolve(["protoc"], [])
        second = resolver.resolve([], ["gen.sh"])

        assert list(first.table) == ["protoc"]
        assert list(second.table) == ["gen.sh"]
        assert second.deps == ["pkg/gen.sh"]
        assert second.table.default_path == "pkg/gen.sh"

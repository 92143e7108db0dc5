"""Tool resolution: symbolic tool labels to concrete paths.

A generator module names its tools two ways:

- ``tools``: names of other modules that build a host executable. The
  dependency answers with a capability variant (HasToolPath, NoCapability
  or CapabilityUnset) and the resolver matches on it.
- ``tool_files``: paths relative to the module's source directory.

Both land in one ToolTable keyed by label. Every resolved path is also
recorded as an implicit dependency of the module's build actions, because
tool paths only appear inside the command text.

Example:
    resolver = ToolResolver(ctx)
    resolved = resolver.resolve(tools=["protoc"], tool_files=["gen.sh"])
    resolved.table["protoc"]     # "out/host/bin/protoc"
    resolved.table.default_path  # same, module-tools come first
    resolved.deps                # ["out/host/bin/protoc", "api/gen.sh"]
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Sequence, Union, TYPE_CHECKING

from .exceptions import (
    ConfigurationError,
    DependencyCapabilityError,
    DuplicateToolError,
)

if TYPE_CHECKING:
    from .graph import ModuleContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HasToolPath:
    """Dependency provides a host tool at path."""
    path: str


@dataclass(frozen=True)
class NoCapability:
    """Dependency is not a host tool provider."""
    pass


@dataclass(frozen=True)
class CapabilityUnset:
    """Dependency is a host tool provider but has no path."""
    pass


ToolCapability = Union[HasToolPath, NoCapability, CapabilityUnset]


class ToolTable(Mapping):
    """Immutable label -> path mapping with a default label.

    The default label is the first declared tool (module-tools before
    file-tools) and is what ``$(location)`` without a label refers to.
    """

    def __init__(self, paths: Dict[str, str], default_label: Optional[str] = None):
        self._paths = MappingProxyType(dict(paths))
        self.default_label = default_label

    def __getitem__(self, label: str) -> str:
        return self._paths[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    @property
    def default_path(self) -> str:
        """Path of the first declared tool.

        Raises:
            ConfigurationError: If no tools were declared
        """
        if self.default_label is None:
            raise ConfigurationError("at least one `tools` or `tool_files` is required")
        return self._paths[self.default_label]

    def __repr__(self) -> str:
        return f"ToolTable({dict(self._paths)!r}, default_label={self.default_label!r})"


@dataclass
class ResolvedTools:
    """Result of tool resolution for one module."""
    table: ToolTable
    deps: List[str] = field(default_factory=list)


class ToolResolver:
    """Resolve a module's tools and tool_files into a ToolTable.

    Resolution runs in declaration order and stops at the first error.
    The same label registered twice with the same path is accepted (first
    registration wins); a different path is a DuplicateToolError.
    """

    def __init__(self, ctx: 'ModuleContext'):
        self.ctx = ctx

    def _register(self, paths: Dict[str, str], deps: List[str],
                  label: str, path: str, property: str) -> None:
        existing = paths.get(label)
        if existing is None:
            paths[label] = path
            deps.append(path)
            logger.debug("%s: tool %r -> %s", self.ctx.name, label, path)
        elif existing != path:
            raise DuplicateToolError(label, existing, path, property=property)

    def _resolve_module_tool(self, name: str) -> str:
        capability = self.ctx.host_tool(name)
        if isinstance(capability, HasToolPath):
            return capability.path
        elif isinstance(capability, CapabilityUnset):
            raise DependencyCapabilityError(
                f'host tool "{name}" missing output file', property='tools'
            )
        elif isinstance(capability, NoCapability):
            raise DependencyCapabilityError(
                f'unknown dependency "{name}"', property='tools'
            )
        raise TypeError(f"unexpected tool capability {capability!r}")

    def resolve(self, tools: Sequence[str], tool_files: Sequence[str]) -> ResolvedTools:
        """Build the tool table and implicit dependency list.

        Args:
            tools: Module names providing host tools
            tool_files: Paths relative to the module source directory

        Returns:
            ResolvedTools with the table and deps in resolution order

        Raises:
            ConfigurationError: If both lists are empty
            DependencyCapabilityError: If a module-tool can't provide a path
            DuplicateToolError: If a label resolves to two paths
        """
        if not tools and not tool_files:
            raise ConfigurationError("at least one `tools` or `tool_files` is required")

        paths: Dict[str, str] = {}
        deps: List[str] = []
        for name in tools:
            self._register(paths, deps, name, self._resolve_module_tool(name), 'tools')

        for tool in tool_files:
            self._register(paths, deps, tool, self.ctx.paths.path_for_source(tool),
                           'tool_files')

        default_label = tools[0] if tools else tool_files[0]
        return ResolvedTools(table=ToolTable(paths, default_label), deps=deps)

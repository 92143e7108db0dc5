"""Module graph: ordering and evaluation of declared modules.

Each module is evaluated with its own ModuleContext, after every module it
depends on. A module that fails is recorded in the result and its
dependents are skipped; unrelated modules are still evaluated.

Example:
    graph = ModuleGraph()
    graph.add(registry.create("host_tool", "protoc", {"src": "bin/protoc"}))
    graph.add(registry.create("gensrcs", "protos", {...}))
    result = graph.generate(build_dir="out")
    if not result.ok:
        for err in result.errors:
            print(err)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .actions import BuildActionStore
from .exceptions import (
    ConfigurationError,
    DependencyCapabilityError,
    DependencyCycleError,
    GenruleError,
)
from .module import Module, SourceFileGenerator
from .paths import ModulePaths
from .tools import ToolCapability

logger = logging.getLogger(__name__)


class ModuleContext:
    """What a module may see of the world while it generates actions.

    @ivar module: the module being evaluated
    @ivar paths: (ModulePaths) source and generation paths of the module
    @ivar source_root: (Path) directory globs are evaluated from
    """

    def __init__(self, module: Module, graph: 'ModuleGraph', paths: ModulePaths,
                 source_root: Union[str, Path] = '.'):
        self.module = module
        self.graph = graph
        self.paths = paths
        self.source_root = Path(source_root)

    @property
    def name(self) -> str:
        return self.module.name

    def _dependency(self, name: str, property: str) -> Module:
        dep = self.graph.get(name)
        if dep is None:
            raise DependencyCapabilityError(
                f'depends on undefined module "{name}"', property=property
            )
        return dep

    def host_tool(self, name: str) -> ToolCapability:
        """Host tool capability of the module called name."""
        return self._dependency(name, 'tools').host_tool()

    def _generator(self, name: str) -> SourceFileGenerator:
        dep = self._dependency(name, 'srcs')
        if not isinstance(dep, SourceFileGenerator):
            raise DependencyCapabilityError(
                f'module "{name}" does not generate source files', property='srcs'
            )
        return dep

    def generated_sources(self, name: str) -> Tuple[str, ...]:
        """Generated files of the module called name."""
        return tuple(self._generator(name).generated_source_files())

    def generated_dir(self, name: str) -> Optional[str]:
        """Generation directory of the module called name."""
        return self._generator(name).generated_header_dir()


@dataclass
class GenerationResult:
    """Outcome of evaluating a module graph."""

    store: BuildActionStore = field(default_factory=BuildActionStore)
    """Actions of every module that succeeded."""

    generated: List[str] = field(default_factory=list)
    """Names of modules evaluated successfully, in evaluation order."""

    errors: List[GenruleError] = field(default_factory=list)
    """One error per failed module."""

    skipped: List[str] = field(default_factory=list)
    """Modules not evaluated because a dependency failed."""

    @property
    def ok(self) -> bool:
        return not self.errors and not self.skipped


class ModuleGraph:
    """Declared modules keyed by name, in declaration order."""

    def __init__(self, modules: Optional[Iterable[Module]] = None):
        self._modules: Dict[str, Module] = {}
        for module in modules or ():
            self.add(module)

    def add(self, module: Module) -> None:
        """Add a module.

        Raises:
            ConfigurationError: If a module with the same name exists
        """
        if module.name in self._modules:
            raise ConfigurationError("module already defined", module=module.name)
        self._modules[module.name] = module

    def get(self, name: str) -> Optional[Module]:
        return self._modules.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)

    def order(self) -> List[Module]:
        """Modules with dependencies first, otherwise in declaration order.

        Dependencies on undeclared modules are ignored here; they are
        reported when the depending module is evaluated.

        Raises:
            DependencyCycleError: If modules depend on each other in a cycle
        """
        done: Dict[str, None] = {}
        stack: List[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in stack:
                cycle = stack[stack.index(name):] + [name]
                raise DependencyCycleError(cycle, module=name)
            stack.append(name)
            for dep in self._modules[name].dependencies():
                if dep in self._modules:
                    visit(dep)
            stack.pop()
            done[name] = None

        for name in self._modules:
            visit(name)
        return [self._modules[name] for name in done]

    def context_for(self, module: Module, build_dir: str = 'out',
                    source_root: Union[str, Path] = '.') -> ModuleContext:
        paths = ModulePaths(module.name, module.source_dir, build_dir)
        return ModuleContext(module, self, paths, source_root)

    def generate(self, store: Optional[BuildActionStore] = None,
                 build_dir: str = 'out',
                 source_root: Union[str, Path] = '.') -> GenerationResult:
        """Evaluate every module and hand its actions to store.

        Args:
            store: Action sink (a new BuildActionStore by default)
            build_dir: Root of generated files, relative to source_root
            source_root: Directory paths are relative to

        Returns:
            GenerationResult with the store, errors and skipped modules

        Raises:
            DependencyCycleError: Before any module is evaluated
        """
        result = GenerationResult(store=store if store is not None else BuildActionStore())
        failed = set()

        for module in self.order():
            blocked = [d for d in module.dependencies() if d in failed]
            if blocked:
                logger.warning("skipping %s: dependency %s failed",
                               module.name, ', '.join(blocked))
                result.skipped.append(module.name)
                failed.add(module.name)
                continue

            ctx = self.context_for(module, build_dir, source_root)
            try:
                actions = module.generate_build_actions(ctx)
                result.store.add_all(actions)
                module.publish_outputs()
            except GenruleError as e:
                e.in_module(module.name)
                logger.debug("%s failed: %s", module.name, e)
                result.errors.append(e)
                failed.add(module.name)
                continue

            result.generated.append(module.name)
        return result

"""Module types: declarative units that produce build actions.

- GeneratorModule runs a command template over its sources, using a task
  policy to decide how many actions to emit (``genrule``, ``gensrcs``).
- HostToolModule exposes a prebuilt host executable or script so generator
  modules can name it in ``tools`` (``host_tool``).

Factories with the signature ``factory(name, source_dir, properties)`` are
registered in a ModuleTypeRegistry (see genrule.registry).
"""

import logging
from abc import ABC, abstractmethod
from typing import (
    Any, Dict, List, Optional, Protocol, Sequence, Tuple, TYPE_CHECKING,
    runtime_checkable,
)

from .actions import ActionEmitter, BuildAction, GeneratedOutputs
from .exceptions import ExpansionError, GenruleError, PropertyError
from .expand import expand_command
from .paths import ModulePaths
from .taskgen.planner import AggregatePolicy, PerInputPolicy, TaskPolicy
from .tools import CapabilityUnset, HasToolPath, NoCapability, ToolCapability, ToolResolver

if TYPE_CHECKING:
    from .graph import ModuleContext

logger = logging.getLogger(__name__)


@runtime_checkable
class SourceFileGenerator(Protocol):
    """Modules whose outputs can be used as ``:name`` sources."""

    def generated_source_files(self) -> Tuple[str, ...]:
        ...

    def generated_header_dir(self) -> Optional[str]:
        ...


def check_properties(module_type: str, name: str, properties: Dict[str, Any],
                     valid_props: Dict[str, Tuple[type, bool]]) -> Dict[str, Any]:
    """Validate properties against ``{prop: (type, required)}``.

    Lists must contain only strings. Missing optional properties get an
    empty value of their type.

    Raises:
        PropertyError: For unknown, missing or mistyped properties
    """
    for prop in properties:
        if prop not in valid_props:
            raise PropertyError(
                f"unrecognized property for module type '{module_type}'",
                module=name, property=prop,
            )

    result: Dict[str, Any] = {}
    for prop, (kind, required) in valid_props.items():
        if prop not in properties:
            if required:
                raise PropertyError("missing required property",
                                    module=name, property=prop)
            result[prop] = kind()
            continue
        value = properties[prop]
        if not isinstance(value, kind):
            raise PropertyError(f"expected {kind.__name__}, got {type(value).__name__}",
                                module=name, property=prop)
        if kind is list:
            for item in value:
                if not isinstance(item, str):
                    raise PropertyError(f"list items must be strings, got {item!r}",
                                        module=name, property=prop)
            value = list(value)
        result[prop] = value
    return result


class Module(ABC):
    """Base class of all module types.

    @ivar name: (str) unique module name
    @ivar source_dir: (str) directory of the declaration, relative to source root
    """

    module_type = ''

    def __init__(self, name: str, source_dir: str = ''):
        self.name = name
        self.source_dir = source_dir

    def dependencies(self) -> List[str]:
        """Names of modules this module needs evaluated first."""
        return []

    def host_tool(self) -> ToolCapability:
        """Host tool capability exposed to depending modules."""
        return NoCapability()

    def publish_outputs(self) -> None:
        """Make outputs of the last generate_build_actions visible.

        Called once the action sink has accepted the module's actions.
        """
        pass

    @abstractmethod
    def generate_build_actions(self, ctx: 'ModuleContext') -> List[BuildAction]:
        """Produce this module's build actions."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r}>"


class HostToolModule(Module):
    """A prebuilt host tool at ``src`` relative to the module directory."""

    module_type = 'host_tool'
    valid_props = {'src': (str, False)}

    def __init__(self, name: str, src: Optional[str] = None, source_dir: str = ''):
        super().__init__(name, source_dir)
        self.src = src or None

    def host_tool(self) -> ToolCapability:
        if self.src is None:
            return CapabilityUnset()
        return HasToolPath(ModulePaths(self.name, self.source_dir).path_for_source(self.src))

    def generate_build_actions(self, ctx: 'ModuleContext') -> List[BuildAction]:
        return []


class GeneratorModule(Module):
    """Run a command template over sources to generate files.

    Available variables in ``cmd``:
        $(location): path of the first entry in tools or tool_files
        $(location <label>): path of the tool or tool_file named <label>
        $(in): one or more input files
        $(out): output files of the action
        $(genDir): the generation directory of this module
        $$: a literal $
    """

    def __init__(self, name: str, policy: TaskPolicy, cmd: str,
                 tools: Sequence[str] = (), tool_files: Sequence[str] = (),
                 source_dir: str = '', module_type: str = 'genrule'):
        super().__init__(name, source_dir)
        self.module_type = module_type
        self.policy = policy
        self.cmd = cmd
        self.tools = list(tools)
        self.tool_files = list(tool_files)
        self._outputs: Optional[GeneratedOutputs] = None
        self._pending: Optional[GeneratedOutputs] = None

    def dependencies(self) -> List[str]:
        deps = list(self.tools)
        for ref in self.policy.module_references():
            if ref not in deps:
                deps.append(ref)
        return deps

    def generated_source_files(self) -> Tuple[str, ...]:
        if self._outputs is None:
            return ()
        return self._outputs.files

    def generated_header_dir(self) -> Optional[str]:
        if self._outputs is None:
            return None
        return self._outputs.gen_dir

    def generate_build_actions(self, ctx: 'ModuleContext') -> List[BuildAction]:
        """Resolve tools, expand cmd, plan tasks and emit one action per task.

        Outputs stay pending until publish_outputs() is called, so a
        failed step or a rejected batch leaves the module without outputs.

        Raises:
            GenruleError: With module (and property) context attached
        """
        self._pending = None
        try:
            resolved = ToolResolver(ctx).resolve(self.tools, self.tool_files)
            gen_dir = ctx.paths.gen_dir
            try:
                command = expand_command(self.cmd, resolved.table, gen_dir)
            except ExpansionError as e:
                raise e.in_module(self.name, 'cmd')
            tasks = self.policy.plan(ctx)
        except GenruleError as e:
            raise e.in_module(self.name)

        emitter = ActionEmitter(self.name, command, resolved.deps, gen_dir=gen_dir)
        actions = emitter.emit_all(tasks)
        emitter.outputs.freeze()
        self._pending = emitter.outputs
        logger.debug("%s: %d action(s), %d output(s)",
                     self.name, len(actions), len(emitter.outputs.files))
        return actions

    def publish_outputs(self) -> None:
        if self._pending is not None:
            self._outputs, self._pending = self._pending, None


GENERATOR_PROPS = {
    'cmd': (str, True),
    'tools': (list, False),
    'tool_files': (list, False),
    'srcs': (list, False),
    'exclude_srcs': (list, False),
}


def genrule_factory(name: str, source_dir: str, properties: Dict[str, Any]) -> GeneratorModule:
    """``genrule``: all sources produce the outputs listed in ``out``."""
    props = check_properties('genrule', name, properties,
                             dict(GENERATOR_PROPS, out=(list, True)))
    policy = AggregatePolicy(srcs=props['srcs'], exclude_srcs=props['exclude_srcs'],
                             out=props['out'])
    return GeneratorModule(name, policy, props['cmd'], props['tools'],
                           props['tool_files'], source_dir, module_type='genrule')


def gensrcs_factory(name: str, source_dir: str, properties: Dict[str, Any]) -> GeneratorModule:
    """``gensrcs``: each source becomes one output with ``output_extension``."""
    props = check_properties('gensrcs', name, properties,
                             dict(GENERATOR_PROPS, output_extension=(str, True)))
    policy = PerInputPolicy(srcs=props['srcs'], exclude_srcs=props['exclude_srcs'],
                            output_extension=props['output_extension'])
    return GeneratorModule(name, policy, props['cmd'], props['tools'],
                           props['tool_files'], source_dir, module_type='gensrcs')


def host_tool_factory(name: str, source_dir: str, properties: Dict[str, Any]) -> HostToolModule:
    """``host_tool``: a prebuilt executable or script."""
    props = check_properties('host_tool', name, properties, HostToolModule.valid_props)
    return HostToolModule(name, props['src'], source_dir)

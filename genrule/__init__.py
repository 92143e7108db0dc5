"""genrule - command-template build rules.

Turns declarative generator modules (a command template, sources and tools)
into resolved build actions for a downstream executor such as ninja.

Example:
    from genrule import ModuleGraph, default_registry

    registry = default_registry()
    graph = ModuleGraph([
        registry.create("genrule", "version", {
            "tool_files": ["gen.sh"],
            "srcs": ["VERSION"],
            "out": ["version.h"],
            "cmd": "$(location) $(in) > $(out)",
        }),
    ])
    result = graph.generate(build_dir="out")
    for action in result.store:
        print(action.command)   # "gen.sh ${in} > ${out}"
"""

from .actions import BuildAction, BuildActionStore, GeneratedOutputs, ActionEmitter
from .command import Hole, ResolvedCommand
from .expand import expand_command, tokenize
from .graph import GenerationResult, ModuleContext, ModuleGraph
from .module import GeneratorModule, HostToolModule, Module, SourceFileGenerator
from .paths import ModulePaths
from .registry import ModuleTypeRegistry, default_registry
from .tools import (
    CapabilityUnset, HasToolPath, NoCapability, ToolResolver, ToolTable,
)

__all__ = [
    # Actions
    'BuildAction', 'BuildActionStore', 'GeneratedOutputs', 'ActionEmitter',
    # Commands
    'Hole', 'ResolvedCommand', 'expand_command', 'tokenize',
    # Modules
    'Module', 'GeneratorModule', 'HostToolModule', 'SourceFileGenerator',
    'ModuleTypeRegistry', 'default_registry',
    # Graph
    'ModuleGraph', 'ModuleContext', 'GenerationResult', 'ModulePaths',
    # Tools
    'ToolResolver', 'ToolTable', 'HasToolPath', 'NoCapability', 'CapabilityUnset',
]

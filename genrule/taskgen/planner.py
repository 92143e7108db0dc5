"""Task planning policies for generator modules.

A policy turns the module's sources into tasks. Each task becomes one
build action sharing the module's resolved command.

Policies:
- PerInputPolicy: one task per source, output named after the source
  with a new extension (``gensrcs``)
- AggregatePolicy: one task with every source as input and a fixed list
  of declared outputs (``genrule``)

Example:
    policy = PerInputPolicy(srcs=["x.proto", "y.proto"], output_extension=".pb.go")
    [t.outputs for t in policy.plan(ctx)]
    # [["<gen>/x.pb.go"], ["<gen>/y.pb.go"]]
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

from .sources import SourceExpander, is_module_reference

if TYPE_CHECKING:
    from genrule.graph import ModuleContext


@dataclass
class GenerateTask:
    """Inputs and outputs of a single build action."""
    inputs: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)


@dataclass
class TaskPolicy(ABC):
    """Base class for task planning policies.

    Attributes:
        srcs: Source specifications (paths, globs, ``:module`` references)
        exclude_srcs: Specifications removed from the expanded sources
    """
    srcs: List[str] = field(default_factory=list)
    exclude_srcs: List[str] = field(default_factory=list)

    def module_references(self) -> List[str]:
        """Names of modules referenced from srcs or exclude_srcs."""
        return [
            s[1:] for s in list(self.srcs) + list(self.exclude_srcs)
            if is_module_reference(s)
        ]

    def expand_sources(self, ctx: 'ModuleContext') -> List[str]:
        return SourceExpander(ctx).expand(self.srcs, self.exclude_srcs)

    @abstractmethod
    def plan(self, ctx: 'ModuleContext') -> List[GenerateTask]:
        """Return the module's tasks in emission order."""
        pass


@dataclass
class PerInputPolicy(TaskPolicy):
    """Each source becomes one output with output_extension."""
    output_extension: str = ''

    def plan(self, ctx: 'ModuleContext') -> List[GenerateTask]:
        expander = SourceExpander(ctx)
        return [
            GenerateTask(
                inputs=[src],
                outputs=[ctx.paths.gen_path_with_ext(
                    src, self.output_extension, expander.relative_name(src))],
            )
            for src in expander.expand(self.srcs, self.exclude_srcs)
        ]


@dataclass
class AggregatePolicy(TaskPolicy):
    """All sources produce the declared outputs in a single task.

    The command must create every path in ``out`` even when there are no
    sources.
    """
    out: List[str] = field(default_factory=list)

    def plan(self, ctx: 'ModuleContext') -> List[GenerateTask]:
        return [
            GenerateTask(
                inputs=self.expand_sources(ctx),
                outputs=[ctx.paths.path_for_gen(name) for name in self.out],
            )
        ]

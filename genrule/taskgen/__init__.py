"""Task planning for generator modules.

This package turns a module's declared sources into tasks, one build action
each, using one of two policies.

Example:
    from genrule.taskgen import AggregatePolicy

    policy = AggregatePolicy(srcs=["*.txt"], out=["bundle.tar"])
    tasks = policy.plan(ctx)   # exactly one task

Classes:
    GenerateTask: Inputs and outputs of one build action
    TaskPolicy: ABC for planning policies
    PerInputPolicy: One task per source (gensrcs)
    AggregatePolicy: One task for all sources (genrule)
    SourceExpander: Expands paths, globs and :module references
"""

from .planner import GenerateTask, TaskPolicy, PerInputPolicy, AggregatePolicy
from .sources import SourceExpander, is_glob, is_module_reference

__all__ = [
    # Planning
    'GenerateTask', 'TaskPolicy', 'PerInputPolicy', 'AggregatePolicy',
    # Sources
    'SourceExpander', 'is_glob', 'is_module_reference',
]

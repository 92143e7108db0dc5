"""Build actions, their emission and the action store.

ActionEmitter turns each planned task plus the module's resolved command
into a BuildAction and records the outputs in the module's
GeneratedOutputs. BuildActionStore is the sink the actions are handed to;
it owns them from then on and rejects an output produced twice.

Example:
    emitter = ActionEmitter("protos", command, implicits=["tools/gen.sh"])
    actions = [emitter.emit(task) for task in tasks]
    emitter.outputs.freeze()
    store.add_all(actions)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .command import ResolvedCommand
from .exceptions import DuplicateOutputError
from .taskgen.planner import GenerateTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildAction:
    """A single action handed to the build executor.

    Attributes:
        module: Name of the module that emitted the action
        command: Resolved command shared by all actions of the module
        outputs: Paths the command creates
        inputs: Paths the command reads, substituted for the ``in`` hole
        implicits: Extra paths that make the action stale when they change
    """
    module: str
    command: ResolvedCommand
    outputs: Tuple[str, ...]
    inputs: Tuple[str, ...] = ()
    implicits: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        """JSON-serializable view of the action."""
        return {
            'module': self.module,
            'command': str(self.command),
            'inputs': list(self.inputs),
            'outputs': list(self.outputs),
            'implicits': list(self.implicits),
        }


@dataclass
class GeneratedOutputs:
    """Ordered outputs of a module plus its generation directory.

    Appended to while the module emits actions, frozen afterwards.
    """
    gen_dir: str
    _files: List[str] = field(default_factory=list, repr=False)
    _frozen: bool = field(default=False, repr=False)

    def add(self, path: str) -> None:
        if self._frozen:
            raise RuntimeError(f"outputs of {self.gen_dir} are frozen")
        self._files.append(path)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def files(self) -> Tuple[str, ...]:
        return tuple(self._files)


class ActionEmitter:
    """Emit one BuildAction per task for a module."""

    def __init__(self, module: str, command: ResolvedCommand,
                 implicits: Sequence[str] = (),
                 outputs: Optional[GeneratedOutputs] = None,
                 gen_dir: str = ''):
        self.module = module
        self.command = command
        self.implicits = tuple(implicits)
        self.outputs = outputs if outputs is not None else GeneratedOutputs(gen_dir)

    def emit(self, task: GenerateTask) -> BuildAction:
        action = BuildAction(
            module=self.module,
            command=self.command,
            outputs=tuple(task.outputs),
            inputs=tuple(task.inputs),
            implicits=self.implicits,
        )
        for path in task.outputs:
            self.outputs.add(path)
        logger.debug("%s: emitted action for %s", self.module, ', '.join(task.outputs))
        return action

    def emit_all(self, tasks: Sequence[GenerateTask]) -> List[BuildAction]:
        return [self.emit(task) for task in tasks]


class OutputIndex:
    """O(1) exact lookup from output path to the module producing it."""

    def __init__(self):
        self._by_key: Dict[str, str] = {}  # output -> module

    def register(self, key: str, module: str) -> None:
        """Register an output with its producing module.

        Raises:
            DuplicateOutputError: If key is already registered.
        """
        if key in self._by_key:
            raise DuplicateOutputError(key, self._by_key[key], module, module=module)
        self._by_key[key] = module

    def find(self, key: str) -> Optional[str]:
        """Return the module producing key, or None."""
        return self._by_key.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)


class BuildActionStore:
    """Sink for emitted build actions, in insertion order."""

    def __init__(self):
        self._actions: List[BuildAction] = []
        self._outputs = OutputIndex()

    def add_all(self, actions: Sequence[BuildAction]) -> None:
        """Add a module's actions atomically.

        All outputs are checked before anything is committed, so a
        rejected batch leaves the store unchanged.

        Raises:
            DuplicateOutputError: If an output is already produced, either
                by a stored action or by another action in the batch
        """
        seen: Dict[str, str] = {}
        for action in actions:
            for out in action.outputs:
                owner = self._outputs.find(out) or seen.get(out)
                if owner is not None:
                    raise DuplicateOutputError(out, owner, action.module,
                                               module=action.module)
                seen[out] = action.module

        for out, module in seen.items():
            self._outputs.register(out, module)
        self._actions.extend(actions)

    def producer_of(self, output: str) -> Optional[str]:
        return self._outputs.find(output)

    def actions_for(self, module: str) -> List[BuildAction]:
        return [a for a in self._actions if a.module == module]

    @property
    def modules(self) -> List[str]:
        """Modules with at least one action, in first-emission order."""
        seen: Dict[str, None] = {}
        for action in self._actions:
            seen.setdefault(action.module, None)
        return list(seen)

    def __iter__(self) -> Iterator[BuildAction]:
        return iter(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

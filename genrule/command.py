"""Resolved command: expanded text with two deferred holes.

Template expansion happens once per module, but every task of the module
has its own inputs and outputs. The resolved command therefore keeps the
``in`` and ``out`` placeholders as typed holes, filled in later by whoever
executes the action (see ``render`` and the Ninja writer).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence, Tuple, Union


class Hole(Enum):
    """Deferred per-task substitution points."""
    IN = "in"
    OUT = "out"


Segment = Union[str, Hole]


@dataclass(frozen=True)
class ResolvedCommand:
    """Command text as literal segments and holes.

    ``str()`` gives the ``${in}`` / ``${out}`` form:

        cmd = ResolvedCommand(("tools/gen.sh ", Hole.IN, " > ", Hole.OUT))
        str(cmd)                                  # "tools/gen.sh ${in} > ${out}"
        cmd.render(["a.txt"], ["out/r.txt"])      # "tools/gen.sh a.txt > out/r.txt"
    """
    segments: Tuple[Segment, ...] = ()

    @classmethod
    def from_segments(cls, segments: Sequence[Segment]) -> 'ResolvedCommand':
        """Build a command, merging adjacent literal segments."""
        merged = []
        for seg in segments:
            if isinstance(seg, str):
                if not seg:
                    continue
                if merged and isinstance(merged[-1], str):
                    merged[-1] += seg
                    continue
            merged.append(seg)
        return cls(tuple(merged))

    @property
    def holes(self) -> Tuple[Hole, ...]:
        """Holes in order of appearance."""
        return tuple(s for s in self.segments if isinstance(s, Hole))

    def format(self, literal: Callable[[str], str], hole: Callable[[Hole], str]) -> str:
        """Render segments with one function for literals and one for holes."""
        return ''.join(
            hole(seg) if isinstance(seg, Hole) else literal(seg)
            for seg in self.segments
        )

    def render(self, inputs: Sequence[str], outputs: Sequence[str]) -> str:
        """Substitute concrete paths, space separated, into the holes."""
        values = {Hole.IN: ' '.join(inputs), Hole.OUT: ' '.join(outputs)}
        return self.format(lambda text: text, lambda h: values[h])

    def __str__(self) -> str:
        return self.format(lambda text: text, lambda h: '${%s}' % h.value)

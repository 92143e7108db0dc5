"""Ninja serialization of a BuildActionStore.

Every generator module becomes one ``rule`` whose command uses ninja's
``$in`` / ``$out`` for the deferred holes, and every action one ``build``
statement with the module's tool paths as implicit inputs.
"""

import io
from typing import Dict, Iterable, TextIO

from .actions import BuildAction, BuildActionStore


def escape(text: str) -> str:
    """Escape ``$`` for use in a ninja variable value."""
    return text.replace('$', '$$')


def escape_path(path: str) -> str:
    """Escape a path for a ninja build line."""
    return path.replace('$', '$$').replace(' ', '$ ').replace(':', '$:')


def rule_name(module: str) -> str:
    """Ninja rule name for a module (ninja identifiers: [A-Za-z0-9_.-])."""
    safe = ''.join(c if c.isalnum() or c in '_.-' else '_' for c in module)
    return f'genrule_{safe}'


def ninja_command(action: BuildAction) -> str:
    """Command of action in ninja syntax.

    Raises:
        ValueError: If the command spans several lines
    """
    command = action.command.format(escape, lambda hole: '$' + hole.value)
    if '\n' in command or '\r' in command:
        raise ValueError(f"command of module {action.module!r} contains a line break")
    return command


class NinjaWriter:
    """Write build actions as a ninja file.

    Example:
        with open("build.ninja", "w") as f:
            NinjaWriter(f).write(store)
    """

    def __init__(self, output: TextIO):
        self.output = output
        self._rules: Dict[str, str] = {}  # module -> rule name

    def rule_for(self, module: str) -> str:
        """Rule name for module, suffixed when another module already has it."""
        name = self._rules.get(module)
        if name is None:
            taken = set(self._rules.values())
            name = base = rule_name(module)
            n = 2
            while name in taken:
                name = f'{base}_{n}'
                n += 1
            self._rules[module] = name
        return name

    def _line(self, text: str = '', indent: int = 0) -> None:
        self.output.write('  ' * indent + text + '\n')

    def _paths(self, paths: Iterable[str]) -> str:
        return ' '.join(escape_path(p) for p in paths)

    def comment(self, text: str) -> None:
        for line in text.splitlines():
            self._line(f'# {line}')

    def rule(self, name: str, command: str, description: str) -> None:
        self._line(f'rule {name}')
        self._line(f'command = {command}', indent=1)
        self._line(f'description = {description}', indent=1)
        self._line()

    def build(self, action: BuildAction, rule: str) -> None:
        line = f'build {self._paths(action.outputs)}: {rule}'
        if action.inputs:
            line += f' {self._paths(action.inputs)}'
        if action.implicits:
            line += f' | {self._paths(action.implicits)}'
        self._line(line)

    def write(self, store: BuildActionStore) -> None:
        self.comment("Generated by genrule. Do not edit.")
        self._line()
        for module in store.modules:
            actions = store.actions_for(module)
            name = self.rule_for(module)
            self.rule(name, ninja_command(actions[0]), f'{escape(module)} $out')
            for action in actions:
                self.build(action, name)
            self._line()


def to_ninja(store: BuildActionStore) -> str:
    """Return the ninja file for store as a string."""
    buf = io.StringIO()
    NinjaWriter(buf).write(store)
    return buf.getvalue()

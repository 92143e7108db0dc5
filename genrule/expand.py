"""Command template tokenizer and expander.

Template grammar:
    $$            a literal $
    $(name)       placeholder without argument
    $(name arg)   placeholder with argument (rest of the body, trimmed)

Recognized placeholders live in the VARIABLES table:
    $(location)          path of the first declared tool
    $(location <label>)  path of the tool with that label
    $(in)                task inputs (deferred)
    $(out)               task outputs (deferred)
    $(genDir)            the module's generation directory

Expansion is a single left-to-right pass; substituted text is never
scanned again.

Example:
    cmd = expand_command("$(location) $(in) > $(out)", tools, "out/gen")
    str(cmd)   # "tools/gen.sh ${in} > ${out}"
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Union

from .command import Hole, ResolvedCommand, Segment
from .exceptions import (
    TemplateSyntaxError,
    UnknownLocationLabelError,
    UnknownVariableError,
)
from .tools import ToolTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Literal:
    """Plain text, including the ``$`` produced by a ``$$`` escape."""
    text: str


@dataclass(frozen=True)
class Placeholder:
    """A ``$(...)`` token.

    Attributes:
        body: Trimmed text between the parentheses
        name: First word of body
        arg: Remainder of body after the name, or None
    """
    body: str
    name: str
    arg: Optional[str] = None

    @classmethod
    def parse(cls, body: str) -> 'Placeholder':
        body = body.strip()
        parts = body.split(None, 1)
        if not parts:
            return cls(body=body, name='')
        arg = parts[1].strip() if len(parts) > 1 else None
        return cls(body=body, name=parts[0], arg=arg)


Token = Union[Literal, Placeholder]


def tokenize(template: str) -> Iterator[Token]:
    """Split a template into literals and placeholders.

    Raises:
        TemplateSyntaxError: On a trailing ``$``, an unclosed ``$(`` or a
            ``$`` followed by anything other than ``(`` or ``$``
    """
    start = 0
    pos = 0
    length = len(template)
    while pos < length:
        if template[pos] != '$':
            pos += 1
            continue

        if pos > start:
            yield Literal(template[start:pos])

        if pos + 1 >= length:
            raise TemplateSyntaxError("expected character after '$'")

        nxt = template[pos + 1]
        if nxt == '$':
            yield Literal('$')
            pos += 2
        elif nxt == '(':
            close = template.find(')', pos + 2)
            if close == -1:
                raise TemplateSyntaxError("missing )")
            yield Placeholder.parse(template[pos + 2:close])
            pos = close + 1
        elif nxt.isspace():
            raise TemplateSyntaxError(f"unexpected character '{nxt}' after '$'")
        else:
            word = template[pos + 1:].split(None, 1)[0]
            raise TemplateSyntaxError(
                f"expected '(' after '$', did you mean $({word})?"
            )
        start = pos

    if start < length:
        yield Literal(template[start:])


@dataclass(frozen=True)
class Scope:
    """Values placeholders can refer to for one module."""
    tools: ToolTable
    gen_dir: str


@dataclass(frozen=True)
class Variable:
    """Entry of the placeholder dispatch table."""
    expand: Callable[[Scope, Optional[str]], Segment]
    takes_arg: bool = False


def _location(scope: Scope, label: Optional[str]) -> str:
    if label is None:
        return scope.tools.default_path
    try:
        return scope.tools[label]
    except KeyError:
        raise UnknownLocationLabelError(label) from None


VARIABLES: Dict[str, Variable] = {
    'location': Variable(_location, takes_arg=True),
    'in': Variable(lambda scope, arg: Hole.IN),
    'out': Variable(lambda scope, arg: Hole.OUT),
    'genDir': Variable(lambda scope, arg: scope.gen_dir),
}


def expand_placeholder(token: Placeholder, scope: Scope,
                       variables: Dict[str, Variable] = VARIABLES) -> Segment:
    """Expand one placeholder through the dispatch table."""
    var = variables.get(token.name)
    if var is None or (token.arg is not None and not var.takes_arg):
        raise UnknownVariableError(f"unknown variable '$({token.body})'")
    return var.expand(scope, token.arg)


def expand_command(template: str, tools: ToolTable, gen_dir: str,
                   variables: Dict[str, Variable] = VARIABLES) -> ResolvedCommand:
    """Expand a command template into a ResolvedCommand.

    Trailing line breaks (as left by a YAML block scalar) are dropped; any
    other line break is a TemplateSyntaxError.

    Args:
        template: The module's ``cmd`` property
        tools: Resolved tool table of the module
        gen_dir: The module's generation directory
        variables: Placeholder dispatch table

    Returns:
        ResolvedCommand with ``in``/``out`` left as holes

    Raises:
        ExpansionError: For the first invalid placeholder or syntax error
    """
    template = template.rstrip('\r\n')
    if '\n' in template or '\r' in template:
        raise TemplateSyntaxError("unexpected line break in command")
    scope = Scope(tools=tools, gen_dir=gen_dir)
    segments: List[Segment] = []
    for token in tokenize(template):
        if isinstance(token, Literal):
            segments.append(token.text)
        else:
            segments.append(expand_placeholder(token, scope, variables))
    command = ResolvedCommand.from_segments(segments)
    logger.debug("expanded %r -> %r", template, str(command))
    return command

"""Error kinds raised while turning module declarations into build actions.

Every error is permanent for the declaration that caused it: nothing in
genrule retries. Errors carry the module and, where it is known, the
property the user has to fix.

Hierarchy:
    GenruleError
        ConfigurationError
            PropertyError
            UnknownModuleTypeError
        DependencyCapabilityError
        DuplicateToolError
        ExpansionError
            UnknownVariableError
            UnknownLocationLabelError
            TemplateSyntaxError
        DependencyCycleError
        DuplicateOutputError
"""

from typing import Optional


class GenruleError(Exception):
    """Base class for all genrule errors.

    Attributes:
        message: Error text without module/property context
        module: Name of the module the error is reported against
        property: Name of the offending property, if any
    """

    def __init__(self, message: str, module: Optional[str] = None,
                 property: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.module = module
        self.property = property

    def in_module(self, module: str, property: Optional[str] = None) -> 'GenruleError':
        """Attach module (and property) context unless already set.

        Returns self so callers can ``raise err.in_module(name, 'cmd')``.
        """
        if self.module is None:
            self.module = module
        if self.property is None:
            self.property = property
        return self

    def __str__(self) -> str:
        parts = []
        if self.module is not None:
            parts.append(f'module "{self.module}"')
        if self.property is not None:
            parts.append(self.property)
        parts.append(self.message)
        return ': '.join(parts)


class ConfigurationError(GenruleError):
    """A module declaration is incomplete or inconsistent."""
    pass


class PropertyError(ConfigurationError):
    """A property is not recognized by the module type or has a bad value."""
    pass


class UnknownModuleTypeError(ConfigurationError):
    """No factory is registered for the requested module type."""
    pass


class DependencyCapabilityError(GenruleError):
    """A dependency does not provide what the depending module needs."""
    pass


class DuplicateToolError(GenruleError):
    """Two distinct paths claim the same tool label."""

    def __init__(self, label: str, first: str, second: str, **kwargs):
        super().__init__(
            f'multiple tools for "{label}", "{first}" and "{second}"', **kwargs
        )
        self.label = label
        self.paths = (first, second)


class ExpansionError(GenruleError):
    """Command template could not be expanded."""
    pass


class UnknownVariableError(ExpansionError):
    """Placeholder name outside the recognized set."""
    pass


class UnknownLocationLabelError(ExpansionError):
    """``$(location <label>)`` names a label missing from the tool table."""

    def __init__(self, label: str, **kwargs):
        super().__init__(f'unknown location label "{label}"', **kwargs)
        self.label = label


class TemplateSyntaxError(ExpansionError):
    """Malformed ``$`` sequence in a command template."""
    pass


class DependencyCycleError(GenruleError):
    """Modules depend on each other in a cycle."""

    def __init__(self, cycle, **kwargs):
        self.cycle = list(cycle)
        super().__init__(
            'dependency cycle: ' + ' -> '.join(self.cycle), **kwargs
        )


class DuplicateOutputError(GenruleError):
    """An output path is produced by more than one build action."""

    def __init__(self, output: str, first: str, second: str, **kwargs):
        super().__init__(
            f'output "{output}" produced by both "{first}" and "{second}"',
            **kwargs
        )
        self.output = output

"""Registry of module types.

The registry is a plain object: build one at start-up, register the module
types you need, and pass it to whatever reads declarations.

Example:
    registry = default_registry()
    module = registry.create("genrule", "version", {"cmd": "...", ...})
"""

from typing import Any, Callable, Dict, List, Optional

from .exceptions import UnknownModuleTypeError
from .module import Module, genrule_factory, gensrcs_factory, host_tool_factory

ModuleFactory = Callable[[str, str, Dict[str, Any]], Module]


class ModuleTypeRegistry:
    """Maps module type names to factories."""

    def __init__(self, factories: Optional[Dict[str, ModuleFactory]] = None):
        self._factories: Dict[str, ModuleFactory] = {}
        for type_name, factory in (factories or {}).items():
            self.register(type_name, factory)

    def register(self, type_name: str, factory: ModuleFactory) -> None:
        """Register a factory for type_name.

        Raises:
            ValueError: If type_name is already registered.
        """
        if type_name in self._factories:
            raise ValueError(f"Module type already registered: {type_name}")
        self._factories[type_name] = factory

    def create(self, type_name: str, name: str,
               properties: Optional[Dict[str, Any]] = None,
               source_dir: str = '') -> Module:
        """Instantiate a module of type_name.

        Raises:
            UnknownModuleTypeError: If no factory is registered for type_name
            PropertyError: If the factory rejects the properties
        """
        factory = self._factories.get(type_name)
        if factory is None:
            raise UnknownModuleTypeError(
                f"unrecognized module type '{type_name}'", module=name
            )
        return factory(name, source_dir, dict(properties or {}))

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._factories

    @property
    def types(self) -> List[str]:
        """Registered type names, sorted."""
        return sorted(self._factories)


def default_registry() -> ModuleTypeRegistry:
    """Registry with the built-in genrule, gensrcs and host_tool types."""
    return ModuleTypeRegistry({
        'genrule': genrule_factory,
        'gensrcs': gensrcs_factory,
        'host_tool': host_tool_factory,
    })

"""Convert parsed YAML declarations into modules.

Example:
    config = parse_yaml_string(text)
    graph = yaml_to_graph([("", config)], default_registry())
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from .parser import YAMLConfig

if TYPE_CHECKING:
    from genrule.graph import ModuleGraph
    from genrule.module import Module
    from genrule.registry import ModuleTypeRegistry


def yaml_to_module(
    mod_dict: Dict[str, Any],
    registry: 'ModuleTypeRegistry',
    source_dir: str = '',
) -> 'Module':
    """Create a module from one declaration.

    Everything except ``type`` and ``name`` is passed to the factory as
    properties.
    """
    properties = {k: v for k, v in mod_dict.items() if k not in ('type', 'name')}
    return registry.create(mod_dict['type'], mod_dict['name'], properties, source_dir)


def yaml_to_modules(
    config: YAMLConfig,
    registry: 'ModuleTypeRegistry',
    source_dir: str = '',
) -> List['Module']:
    """Create all modules declared in one file."""
    return [yaml_to_module(mod, registry, source_dir) for mod in config.modules]


def yaml_to_graph(
    configs: Sequence[Tuple[str, YAMLConfig]],
    registry: Optional['ModuleTypeRegistry'] = None,
) -> 'ModuleGraph':
    """Build a ModuleGraph from (source_dir, YAMLConfig) pairs.

    Raises:
        ConfigurationError: For unknown types, bad properties or a module
            name declared twice
    """
    from genrule.graph import ModuleGraph
    from genrule.registry import default_registry

    if registry is None:
        registry = default_registry()

    graph = ModuleGraph()
    for source_dir, config in configs:
        for module in yaml_to_modules(config, registry, source_dir):
            graph.add(module)
    return graph

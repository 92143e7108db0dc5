"""YAML parsing and validation for module declaration files.

This module checks the structure of a declaration file. Per-property
checks belong to the module types (see genrule.module).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Any, Optional, Tuple, Union

import yaml

from genrule.exceptions import GenruleError

DEFAULT_FILENAME = 'genrule.yaml'


@dataclass
class YAMLConfig:
    """Parsed declaration file."""
    config: Dict[str, Any] = field(default_factory=dict)
    modules: List[Dict[str, Any]] = field(default_factory=list)
    subdirs: List[str] = field(default_factory=list)
    path: Optional[Path] = None


class YAMLParseError(GenruleError):
    """Error parsing or validating a declaration file."""
    pass


def parse_yaml_file(path: Union[str, Path]) -> YAMLConfig:
    """Parse and validate a declaration file.

    Raises:
        YAMLParseError: If the file is invalid or missing required fields
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        config = _load(f, source=str(path))
    config.path = path
    return config


def parse_yaml_string(content: str) -> YAMLConfig:
    """Parse declarations from a string."""
    return _load(content)


def _load(stream, source: Optional[str] = None) -> YAMLConfig:
    where = f"{source}: " if source else ""
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise YAMLParseError(f"{where}Invalid YAML syntax: {e}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise YAMLParseError(f"{where}YAML root must be a mapping")

    return _validate_yaml_data(data, where)


def _validate_yaml_data(data: Dict[str, Any], where: str = "") -> YAMLConfig:
    """Validate the top-level structure.

    Raises:
        YAMLParseError: If validation fails
    """
    unknown = set(data) - {'config', 'modules', 'subdirs'}
    if unknown:
        raise YAMLParseError(
            f"{where}unknown top-level key(s): {', '.join(sorted(unknown))}"
        )

    config = data.get('config') or {}
    if not isinstance(config, dict):
        raise YAMLParseError(f"{where}'config' must be a mapping")
    for key in ('build_dir', 'source_root'):
        if key in config and not isinstance(config[key], str):
            raise YAMLParseError(f"{where}config '{key}' must be a string")

    subdirs = data.get('subdirs') or []
    if not isinstance(subdirs, list) or not all(isinstance(s, str) for s in subdirs):
        raise YAMLParseError(f"{where}'subdirs' must be a list of strings")

    modules = data.get('modules') or []
    if not isinstance(modules, list):
        raise YAMLParseError(f"{where}'modules' must be a list")

    validated_modules = [
        _validate_module(mod, i, where) for i, mod in enumerate(modules)
    ]
    return YAMLConfig(config=config, modules=validated_modules, subdirs=subdirs)


def _validate_module(mod: Any, index: int, where: str = "") -> Dict[str, Any]:
    """Validate a single module declaration.

    Raises:
        YAMLParseError: If validation fails
    """
    if not isinstance(mod, dict):
        raise YAMLParseError(f"{where}Module {index} must be a mapping")

    if 'name' not in mod:
        raise YAMLParseError(f"{where}Module {index} missing required field 'name'")
    if not isinstance(mod['name'], str) or not mod['name']:
        raise YAMLParseError(f"{where}Module {index}: 'name' must be a non-empty string")

    if 'type' not in mod:
        raise YAMLParseError(f"{where}Module '{mod['name']}' missing required field 'type'")
    if not isinstance(mod['type'], str):
        raise YAMLParseError(f"{where}Module '{mod['name']}': 'type' must be a string")

    return mod


def load_yaml_tree(path: Union[str, Path],
                   source_root: Union[str, Path, None] = None,
                   ) -> List[Tuple[str, YAMLConfig]]:
    """Parse a declaration file and, recursively, its subdirs.

    A subdir entry loads ``<subdir>/<same file name>``.

    Args:
        path: Root declaration file
        source_root: Directory source dirs are relative to (defaults to
            the root file's directory)

    Returns:
        List of (source_dir, YAMLConfig), root file first
    """
    path = Path(path)
    root = Path(source_root if source_root is not None else path.parent).resolve()
    result: List[Tuple[str, YAMLConfig]] = []

    def visit(file_path: Path) -> None:
        config = parse_yaml_file(file_path)
        try:
            rel = file_path.resolve().parent.relative_to(root).as_posix()
        except ValueError:
            raise YAMLParseError(f"{file_path}: not under source root {root}")
        result.append(('' if rel == '.' else rel, config))
        for sub in config.subdirs:
            visit(file_path.parent / sub / file_path.name)

    visit(path)
    return result

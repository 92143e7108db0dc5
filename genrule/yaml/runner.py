"""Generate build actions from YAML declaration files.

This module provides the main entry point: load declarations, evaluate the
module graph and write the actions as a ninja file or JSON.
"""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Union, TYPE_CHECKING

from .parser import DEFAULT_FILENAME, load_yaml_tree, parse_yaml_file
from .converter import yaml_to_graph

if TYPE_CHECKING:
    from genrule.graph import GenerationResult


def _resolve_settings(yaml_path: Path, root_config: dict,
                      build_dir: Optional[str],
                      source_root: Optional[Union[str, Path]]):
    """Return (build_dir, source_root), CLI values winning over config."""
    if source_root is None:
        source_root = yaml_path.parent / root_config.get('source_root', '.')
    if build_dir is None:
        build_dir = root_config.get('build_dir', 'out')
    return build_dir, Path(source_root).resolve()


def run_yaml(
    yaml_path: Union[str, Path],
    build_dir: Optional[str] = None,
    source_root: Optional[Union[str, Path]] = None,
    registry=None,
    verbose: bool = False,
) -> 'GenerationResult':
    """Load declarations from a YAML file and generate build actions.

    Args:
        yaml_path: Root declaration file
        build_dir: Override ``config.build_dir`` (default "out")
        source_root: Override ``config.source_root`` (default: file's directory)
        registry: ModuleTypeRegistry (default_registry() if None)
        verbose: Print progress information

    Returns:
        GenerationResult with the action store and per-module errors

    Example:
        result = run_yaml('genrule.yaml')
        if result.ok:
            print(f"Generated {len(result.store)} actions")
    """
    yaml_path = Path(yaml_path)
    build_dir, source_root = _resolve_settings(
        yaml_path, parse_yaml_file(yaml_path).config, build_dir, source_root
    )
    configs = load_yaml_tree(yaml_path, source_root)
    graph = yaml_to_graph(configs, registry)

    if verbose:
        print(f"Loaded {len(graph)} module(s) from {len(configs)} file(s)")
        for module in graph:
            print(f"  - {module.name} ({module.module_type})")

    result = graph.generate(build_dir=build_dir, source_root=source_root)

    if verbose:
        print(f"Generated {len(result.store)} action(s) "
              f"for {len(result.generated)} module(s)")

    return result


def write_result(result, fmt: str, output: Optional[str]) -> None:
    """Write the action store as ninja or JSON to output ('-' for stdout)."""
    from genrule.ninja import to_ninja

    if fmt == 'json':
        text = json.dumps([a.to_dict() for a in result.store], indent=2) + '\n'
    else:
        text = to_ninja(result.store)

    if output is None or output == '-':
        sys.stdout.write(text)
    else:
        Path(output).write_text(text)


def main(args: Optional[List[str]] = None) -> int:
    """CLI entry point.

    Usage:
        python -m genrule.yaml [options] [yaml_file]

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    import argparse

    parser = argparse.ArgumentParser(
        description='Generate build actions from genrule YAML declarations',
        prog='python -m genrule.yaml',
    )
    parser.add_argument(
        'yaml_file',
        nargs='?',
        default=DEFAULT_FILENAME,
        help=f'Path to the YAML file (default: {DEFAULT_FILENAME})',
    )
    parser.add_argument(
        '--build-dir',
        type=str,
        default=None,
        help='Override build directory (default: config build_dir or "out")',
    )
    parser.add_argument(
        '--source-root',
        type=str,
        default=None,
        help='Override source root (default: directory of the YAML file)',
    )
    parser.add_argument(
        '-f', '--format',
        choices=('ninja', 'json'),
        default='ninja',
        help='Output format (default: ninja)',
    )
    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output file, "-" for stdout (default: stdout)',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print progress and debug information',
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Generate and list actions without writing output',
    )

    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        result = run_yaml(
            parsed.yaml_file,
            build_dir=parsed.build_dir,
            source_root=parsed.source_root,
            verbose=parsed.verbose,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if parsed.verbose:
            import traceback
            traceback.print_exc()
        return 1

    for err in result.errors:
        print(f"Error: {err}", file=sys.stderr)
    for name in result.skipped:
        print(f"Skipped: {name} (dependency failed)", file=sys.stderr)

    if not result.ok:
        return 1

    if parsed.dry_run:
        print(f"Modules ({len(result.generated)}):")
        for name in result.generated:
            actions = result.store.actions_for(name)
            print(f"  - {name}: {len(actions)} action(s)")
            for action in actions:
                print(f"      {' '.join(action.outputs)}")
        print(f"\n  Total: {len(result.store)} action(s)")
        return 0

    try:
        write_result(result, parsed.format, parsed.output)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

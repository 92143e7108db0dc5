"""CLI entry point for genrule.yaml module.

Usage:
    python -m genrule.yaml [options] [yaml_file]

Example:
    python -m genrule.yaml genrule.yaml -o build.ninja
    python -m genrule.yaml --format json -o actions.json
    python -m genrule.yaml --dry-run
"""

from .runner import main
import sys

if __name__ == '__main__':
    sys.exit(main())

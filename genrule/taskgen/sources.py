"""Source expansion for generator modules.

Turns the ``srcs`` property into an ordered list of paths relative to the
source root.

Source syntax:
- ``file.txt`` - literal path relative to the module's source directory
- ``*.proto``, ``sub/**/*.c`` - glob under the module's source directory
- ``:name`` - outputs of another module that generates sources

Example:
    expander = SourceExpander(ctx)
    expander.expand(["a.proto", "defs/*.proto", ":gen_protos"])
    # ["api/a.proto", "api/defs/b.proto", "out/.intermediates/.../gen/c.proto"]
"""

import logging
import posixpath
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, TYPE_CHECKING

from genrule.exceptions import ConfigurationError

if TYPE_CHECKING:
    from genrule.graph import ModuleContext

logger = logging.getLogger(__name__)

GLOB_CHARS = ('*', '?', '[')


def is_glob(pattern: str) -> bool:
    """Return True if pattern contains glob characters."""
    return any(c in pattern for c in GLOB_CHARS)


def is_module_reference(src: str) -> bool:
    """Return True for ``:name`` references to another module."""
    return src.startswith(':')


class SourceExpander:
    """Expand source specifications for one module.

    Generated sources remember their path inside the producing module's
    generation directory; see relative_name.
    """

    def __init__(self, ctx: 'ModuleContext'):
        self.ctx = ctx
        self._generated_names: Dict[str, str] = {}

    @property
    def base_path(self) -> Path:
        """Directory globs are evaluated in."""
        return Path(self.ctx.source_root) / self.ctx.paths.source_dir

    def _glob(self, pattern: str, property: str = 'srcs') -> List[str]:
        """Files matching pattern, sorted, as source-root relative paths.

        Raises:
            ConfigurationError: For an absolute or otherwise unusable pattern
        """
        if posixpath.isabs(pattern):
            raise ConfigurationError(
                f"glob pattern must be relative to the module directory: {pattern!r}",
                property=property,
            )
        base = self.base_path
        try:
            matches = sorted(
                path.relative_to(base).as_posix()
                for path in base.glob(pattern)
                if path.is_file()
            )
        except (ValueError, NotImplementedError) as e:
            raise ConfigurationError(f"invalid glob pattern {pattern!r}: {e}",
                                     property=property) from e
        return [self.ctx.paths.path_for_source(m) for m in matches]

    def _generated(self, name: str) -> List[str]:
        files = list(self.ctx.generated_sources(name))
        gen_dir = self.ctx.generated_dir(name)
        for path in files:
            if gen_dir and path.startswith(gen_dir.rstrip('/') + '/'):
                self._generated_names[path] = path[len(gen_dir.rstrip('/')) + 1:]
        return files

    def relative_name(self, path: str) -> str:
        """Name of an expanded source relative to where it lives.

        Generated sources are named relative to their producer's generation
        directory, everything else relative to the module's source directory.
        """
        name = self._generated_names.get(path)
        if name is None:
            name = self.ctx.paths.relative_to_source(path)
        return name

    def expand_one(self, src: str) -> List[str]:
        """Expand a single source specification."""
        if is_module_reference(src):
            return self._generated(src[1:])
        if is_glob(src):
            matches = self._glob(src)
            if not matches:
                logger.debug("%s: glob %r matched no files", self.ctx.name, src)
            return matches
        return [self.ctx.paths.path_for_source(src)]

    def excluded_paths(self, excludes: Sequence[str]) -> Set[str]:
        """Paths removed by exclude_srcs.

        Glob excludes are expanded exactly like glob sources, so a pattern
        matches the same files in both lists.
        """
        excluded: Set[str] = set()
        for pattern in excludes:
            if is_module_reference(pattern):
                excluded.update(self.ctx.generated_sources(pattern[1:]))
            elif is_glob(pattern):
                excluded.update(self._glob(pattern, property='exclude_srcs'))
            else:
                excluded.add(self.ctx.paths.path_for_source(pattern))
        return excluded

    def expand(self, srcs: Sequence[str],
               excludes: Optional[Sequence[str]] = None) -> List[str]:
        """Expand srcs in order, dropping paths matched by excludes.

        Module references in excludes remove that module's outputs.

        Returns:
            Ordered list of paths relative to the source root

        Raises:
            ConfigurationError: For an unusable glob pattern
            DependencyCapabilityError: For a ``:name`` that generates nothing
        """
        excluded = self.excluded_paths(excludes or [])
        result: List[str] = []
        for src in srcs:
            for path in self.expand_one(src):
                if path not in excluded:
                    result.append(path)
        return result

"""Path construction for modules.

All paths are POSIX strings relative to the source root, which is also the
directory the build executor runs commands from.

Example:
    paths = ModulePaths(name="protos", source_dir="api", build_dir="out")
    paths.path_for_source("x.proto")     # "api/x.proto"
    paths.gen_dir                        # "out/.intermediates/api/protos/gen"
    paths.gen_path_with_ext("api/x.proto", ".pb.go")
    # "out/.intermediates/api/protos/gen/x.pb.go"
"""

import posixpath
from dataclasses import dataclass, field
from typing import Optional

INTERMEDIATES_DIR = '.intermediates'


def _join(*parts: str) -> str:
    """Join non-empty parts and normalize, keeping the result relative."""
    joined = posixpath.join(*[p for p in parts if p])
    return posixpath.normpath(joined) if joined else ''


def replace_extension(path: str, ext: str) -> str:
    """Replace the final extension of path with ext.

    A missing leading dot on ext is added. Paths without an extension get
    ext appended; only the last extension of a multi-dot name is replaced.
    The extension starts at the last dot of the base name, so a dotfile is
    all extension.

        replace_extension("x.proto", ".pb.go")   -> "x.pb.go"
        replace_extension("a.b.proto", "pb.go")  -> "a.b.pb.go"
        replace_extension("README", ".txt")      -> "README.txt"
        replace_extension("cfg/.bashrc", ".h")   -> "cfg/.h"
    """
    if ext and not ext.startswith('.'):
        ext = '.' + ext
    base = posixpath.basename(path)
    dot = base.rfind('.')
    if dot == -1:
        return path + ext
    return path[:len(path) - len(base) + dot] + ext


@dataclass(frozen=True)
class ModulePaths:
    """Paths owned by a single module.

    Attributes:
        name: Module name
        source_dir: Directory of the declaration file, relative to source root
        build_dir: Root of all build outputs, relative to source root
    """
    name: str
    source_dir: str = ''
    build_dir: str = 'out'
    gen_dir: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self, 'gen_dir',
            _join(self.build_dir, INTERMEDIATES_DIR, self.source_dir,
                  self.name, 'gen'),
        )

    def path_for_source(self, rel: str) -> str:
        """Path of a file in the module's source directory."""
        return _join(self.source_dir, rel)

    def path_for_gen(self, rel: str) -> str:
        """Path of a file in the module's generation directory."""
        return _join(self.gen_dir, rel)

    def relative_to_source(self, path: str) -> str:
        """Path relative to the source directory, or its base name if outside.

        Generated files (anything under build_dir) always count as outside.
        """
        build_dir = posixpath.normpath(self.build_dir)
        path = posixpath.normpath(path)
        outside = (
            posixpath.isabs(path)
            or path == '..' or path.startswith('../')
            or path.startswith(build_dir + '/')
        )
        if outside:
            return posixpath.basename(path)
        if not self.source_dir:
            return path
        prefix = self.source_dir.rstrip('/') + '/'
        if path.startswith(prefix):
            return path[len(prefix):]
        return posixpath.basename(path)

    def gen_path_with_ext(self, src: str, ext: str, rel: Optional[str] = None) -> str:
        """Generation-directory path for src with its extension replaced.

        rel, when given, is the name to use instead of the source-relative
        path (generated sources keep their path inside the producer's gen dir).
        """
        if rel is None:
            rel = self.relative_to_source(src)
        return self.path_for_gen(replace_extension(rel, ext))

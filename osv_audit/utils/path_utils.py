"""Path utilities for finding manifest files and filtering paths."""

import fnmatch
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from ..core.parsers import DependencyParser


@dataclass
class ManifestFile:
    """A manifest file together with its detected dialect."""

    path: Path
    manifest_type: str

    def __post_init__(self) -> None:
        if not self.path.exists():
            raise ValueError(f"Manifest file does not exist: {self.path}")


class PathFilter:
    """Filters paths based on glob patterns."""

    DEFAULT_IGNORE_PATTERNS = [
        "**/node_modules/**",
        "**/.git/**",
        "**/__pycache__/**",
        "**/.venv/**",
        "**/venv/**",
        "**/dist/**",
        "**/build/**",
        "**/target/**",
        "**/vendor/**",
    ]

    def __init__(self, ignore_patterns: Optional[List[str]] = None) -> None:
        """Initialize path filter.

        Args:
            ignore_patterns: Additional glob patterns to ignore
        """
        self.ignore_patterns = self.DEFAULT_IGNORE_PATTERNS + list(ignore_patterns or [])

    def is_ignored(self, path: Path, root_path: Path) -> bool:
        """Match ``path`` relative to the scan root.

        The relative path is anchored with a leading ``/`` so that patterns
        like ``**/node_modules/**`` also match a top-level directory.
        """
        path_str = "/" + path.relative_to(root_path).as_posix()
        return any(fnmatch.fnmatch(path_str, pattern) for pattern in self.ignore_patterns)


def detect_manifest_type(file_path: Path) -> Optional[str]:
    """Detect a manifest's dialect from its file name.

    Args:
        file_path: Path to the manifest

    Returns:
        Dialect tag such as ``yarn-lock``, or None if the name is not recognised
    """
    parser = DependencyParser.find_parser_for_file(Path(file_path))
    return parser.manifest_type if parser else None


def _walk_files(root_path: Path, path_filter: PathFilter) -> Iterator[Path]:
    for file_path in sorted(root_path.rglob("*")):
        if file_path.is_file() and not path_filter.is_ignored(file_path, root_path):
            yield file_path


def find_manifest_files(
    root_path: Path,
    ignore_patterns: Optional[List[str]] = None,
) -> List[ManifestFile]:
    """Find all supported manifest files in a directory tree.

    Args:
        root_path: Root directory to search
        ignore_patterns: Additional ignore patterns

    Returns:
        Manifest files in path order
    """
    root_path = Path(root_path)
    if not root_path.exists():
        raise ValueError(f"Root path does not exist: {root_path}")

    path_filter = PathFilter(ignore_patterns)
    manifests = []
    for file_path in _walk_files(root_path, path_filter):
        manifest_type = detect_manifest_type(file_path)
        if manifest_type:
            manifests.append(ManifestFile(path=file_path, manifest_type=manifest_type))
    return manifests
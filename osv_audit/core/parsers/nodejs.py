"""npm ecosystem lockfile parsers."""

import re
from typing import Any, Dict, List, Optional, Set

from .base import BaseParser, ParsedDependencies

NODE_MODULES = "node_modules/"

# /name@version, /@scope/name@version, /name/version (pnpm v5) and
# name@version (pnpm v9, no leading slash)
PNPM_PACKAGE_KEY = re.compile(r"^/?((?:@[^@/]+/)?[^@/]+)[@/](.+)$")
# Peer dependency suffixes: 1.0.0(react@18.2.0) in v6+, 1.0.0_react@18.2.0 in v5
PNPM_PEER_SUFFIX = re.compile(r"(\(.*\)|_.*)$")

YARN_DECLARATION = re.compile(r"^(@?[^@]+)@")
YARN_VERSION_LINE = re.compile(r"^\s+version:?\s+[\"']?([^\"'\s]+)[\"']?")


class PackageLockParser(BaseParser):
    """Parser for npm package-lock.json (lockfileVersion 1, 2 and 3)."""

    manifest_type = "package-lock"
    file_names = ("package-lock.json", "npm-shrinkwrap.json")

    def parse(self, text: str) -> ParsedDependencies:
        data = self._load_json(text)
        result = self._new_result()

        packages = data.get("packages")
        if isinstance(packages, dict):
            self._extract_packages(packages, result)

        # v1 trees are only consulted when the flat map produced nothing
        dependencies = data.get("dependencies")
        if not result.dependencies and isinstance(dependencies, dict):
            self._extract_nested(dependencies, result, prefix="")

        return result

    def _extract_packages(self, packages: Dict[str, Any], result: ParsedDependencies) -> None:
        """Read the flat ``packages`` map used by lockfile v2/v3."""
        seen: Set[str] = set()

        for path, info in packages.items():
            if not path or not isinstance(info, dict):
                continue

            version = info.get("version")
            if not version:
                continue

            name = self._package_name_from_path(path, info)
            if not name:
                continue

            dependency = self._create_dependency(name, str(version))
            if dependency.key in seen:
                continue
            seen.add(dependency.key)
            result.add_dependency(dependency)

    @staticmethod
    def _package_name_from_path(path: str, info: Dict[str, Any]) -> Optional[str]:
        """Derive a package name from an install path.

        ``node_modules/a/node_modules/@s/b`` resolves to ``@s/b``. Paths outside
        ``node_modules`` (workspace members) use the entry's ``name`` field.
        """
        index = path.rfind(NODE_MODULES)
        if index == -1:
            name = info.get("name")
            return str(name) if name else path
        return path[index + len(NODE_MODULES):] or None

    def _extract_nested(
        self,
        dependencies: Dict[str, Any],
        result: ParsedDependencies,
        prefix: str,
    ) -> None:
        """Walk a lockfile v1 ``dependencies`` tree.

        Nested copies keep their path-qualified name (``parent/child``) so
        that distinct versions installed under different parents stay apart.
        """
        for name, info in dependencies.items():
            if not isinstance(info, dict):
                continue

            full_name = f"{prefix}/{name}" if prefix else name
            version = info.get("version")
            if version:
                result.add_dependency(self._create_dependency(full_name, str(version)))

            nested = info.get("dependencies")
            if isinstance(nested, dict):
                self._extract_nested(nested, result, prefix=full_name)


class PnpmLockParser(BaseParser):
    """Parser for pnpm-lock.yaml files."""

    manifest_type = "pnpm-lock"
    file_names = ("pnpm-lock.yaml",)

    def parse(self, text: str) -> ParsedDependencies:
        data = self._load_yaml(text)
        result = self._new_result()

        packages = data.get("packages")
        if isinstance(packages, dict):
            for key in packages:
                self._add_package_key(str(key), result)

        if not result.dependencies:
            for section in ("dependencies", "devDependencies"):
                self._extract_direct(data.get(section), result)

        return result

    def _add_package_key(self, key: str, result: ParsedDependencies) -> None:
        match = PNPM_PACKAGE_KEY.match(key)
        if not match:
            self.logger.debug(f"Skipping unrecognised pnpm package key: {key}")
            return

        name, version = match.group(1), PNPM_PEER_SUFFIX.sub("", match.group(2))
        if name and version:
            result.add_dependency(self._create_dependency(name, version))

    def _extract_direct(self, section: Any, result: ParsedDependencies) -> None:
        """Read an importer-style map whose values are versions or ``{version: ...}``."""
        if not isinstance(section, dict):
            return

        for name, value in section.items():
            version = value.get("version") if isinstance(value, dict) else value
            if version is None or version == "":
                continue
            result.add_dependency(self._create_dependency(str(name), str(version)))


class YarnLockParser(BaseParser):
    """Parser for yarn.lock files (classic and berry).

    The format is read with a two-state machine. A declaration line opens a
    block of pending names; an indented ``version`` line resolves them; the
    block is emitted when the next declaration starts or the input ends.
    Blocks that never see a version line are dropped.
    """

    manifest_type = "yarn-lock"
    file_names = ("yarn.lock",)

    def parse(self, text: str) -> ParsedDependencies:
        result = self._new_result()
        state = _YarnBlock()
        seen: Set[str] = set()

        for line in text.splitlines():
            if not line.strip() or line.startswith("#"):
                continue

            if not line[0].isspace():
                self._flush(state, result, seen)
                state.open(self._declared_names(line))
                continue

            if state.names and state.version is None:
                match = YARN_VERSION_LINE.match(line)
                if match:
                    state.version = match.group(1)

        self._flush(state, result, seen)
        return result

    @staticmethod
    def _declared_names(line: str) -> List[str]:
        """Split ``"a@^1", "a@^1.2", b@2:`` into package names."""
        names = []
        for part in re.split(r",\s*", line.rstrip().rstrip(":").strip()):
            clean = part.strip().strip("\"'")
            match = YARN_DECLARATION.match(clean)
            if match:
                names.append(match.group(1))
        return names

    def _flush(self, state: "_YarnBlock", result: ParsedDependencies, seen: Set[str]) -> None:
        if state.names and state.version:
            for name in state.names:
                dependency = self._create_dependency(name, state.version)
                if dependency.key not in seen:
                    seen.add(dependency.key)
                    result.add_dependency(dependency)
        state.open([])


class _YarnBlock:
    """Accumulator for the declaration block currently being read."""

    def __init__(self) -> None:
        self.names: List[str] = []
        self.version: Optional[str] = None

    def open(self, names: List[str]) -> None:
        self.names = names
        self.version = None

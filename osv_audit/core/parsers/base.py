"""Base parser class and data models for manifest parsing."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ...utils.logging import get_logger

try:
    import tomllib
except ImportError:
    import tomli as tomllib


# Manifest dialect -> OSV ecosystem
ECOSYSTEM_MAP: Dict[str, str] = {
    "package-lock": "npm",
    "pnpm-lock": "npm",
    "yarn-lock": "npm",
    "requirements": "PyPI",
    "poetry-lock": "PyPI",
    "go-mod": "Go",
    "cargo-lock": "crates.io",
}

MANIFEST_TYPES = tuple(ECOSYSTEM_MAP)

# Version reported for requirements without a pinned version
ANY_VERSION = "*"


class ManifestParseError(Exception):
    """Raised when a manifest's structured data cannot be decoded."""

    def __init__(self, manifest_type: str, reason: str) -> None:
        self.manifest_type = manifest_type
        self.reason = reason
        super().__init__(f"Failed to parse {manifest_type}: {reason}")


@dataclass(frozen=True)
class Dependency:
    """A single resolved package occurrence from a manifest."""

    ecosystem: str
    name: str
    version: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Dependency name cannot be empty")
        if not self.ecosystem:
            raise ValueError("Dependency ecosystem cannot be empty")

    @property
    def key(self) -> str:
        """Composite identity used for deduplication."""
        return f"{self.name}@{self.version}"

    def to_dict(self) -> Dict[str, str]:
        data = {"ecosystem": self.ecosystem, "name": self.name}
        if self.version is not None:
            data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        version = data.get("version")
        return cls(
            ecosystem=str(data.get("ecosystem") or ""),
            name=str(data.get("name") or ""),
            version=str(version) if version is not None else None,
        )


@dataclass
class ParsedDependencies:
    """Container for the dependencies extracted from one manifest."""

    manifest_type: str
    ecosystem: str
    dependencies: List[Dependency] = field(default_factory=list)
    source_file: Optional[Path] = None

    def add_dependency(self, dependency: Dependency) -> None:
        self.dependencies.append(dependency)

    def __len__(self) -> int:
        return len(self.dependencies)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "count": len(self.dependencies),
        }


class BaseParser(ABC):
    """Abstract base class for manifest parsers.

    Parsers are pure: ``parse`` takes manifest text and never touches the
    filesystem. ``can_parse`` only inspects a file name so callers can pick
    a dialect for a path.
    """

    manifest_type: str = ""
    file_names: tuple = ()

    def __init__(self) -> None:
        self.logger = get_logger(type(self).__name__)

    @property
    def ecosystem(self) -> str:
        return ECOSYSTEM_MAP[self.manifest_type]

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser handles files with the given name."""
        return Path(file_path).name in self.file_names

    @abstractmethod
    def parse(self, text: str) -> ParsedDependencies:
        """Extract dependencies from manifest text.

        Args:
            text: Raw manifest content

        Returns:
            Parsed dependencies

        Raises:
            ManifestParseError: If the underlying structured data is malformed
        """

    def _new_result(self) -> ParsedDependencies:
        return ParsedDependencies(manifest_type=self.manifest_type, ecosystem=self.ecosystem)

    def _create_dependency(self, name: str, version: Optional[str]) -> Dependency:
        return Dependency(ecosystem=self.ecosystem, name=name, version=version)

    def _add_package_tables(
        self,
        data: Dict[str, Any],
        result: ParsedDependencies,
        lowercase: bool = False,
    ) -> None:
        """Read a TOML lockfile's ``[[package]]`` array of tables.

        Entries missing either ``name`` or ``version`` are skipped.
        """
        packages = data.get("package")
        if not isinstance(packages, list):
            return

        for package in packages:
            if not isinstance(package, dict):
                continue
            name = package.get("name")
            version = package.get("version")
            if not name or not version:
                continue
            name = str(name)
            result.add_dependency(
                self._create_dependency(name.lower() if lowercase else name, str(version))
            )

    def _load_json(self, text: str) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e
        return self._as_mapping(data)

    def _load_yaml(self, text: str) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e
        return self._as_mapping(data)

    def _load_toml(self, text: str) -> Dict[str, Any]:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e
        return self._as_mapping(data)

    def _as_mapping(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            self.logger.debug(
                f"Ignoring {self.manifest_type} document with a {type(data).__name__} at the top level"
            )
            return {}
        return data

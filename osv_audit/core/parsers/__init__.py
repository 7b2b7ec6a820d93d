"""Manifest parsers for the supported lockfile dialects."""

from .base import (
    ANY_VERSION,
    ECOSYSTEM_MAP,
    MANIFEST_TYPES,
    BaseParser,
    Dependency,
    ManifestParseError,
    ParsedDependencies,
)
from .golang import GoModParser
from .nodejs import PackageLockParser, PnpmLockParser, YarnLockParser
from .python import PoetryLockParser, RequirementsParser
from .registry import ParserRegistry, UnsupportedManifestError
from .rust import CargoLockParser

# Register built-in parsers
registry = ParserRegistry()

registry.register(PackageLockParser())
registry.register(PnpmLockParser())
registry.register(YarnLockParser())
registry.register(RequirementsParser())
registry.register(PoetryLockParser())
registry.register(GoModParser())
registry.register(CargoLockParser())

# Convenience exports
DependencyParser = registry
__all__ = [
    "ANY_VERSION",
    "ECOSYSTEM_MAP",
    "MANIFEST_TYPES",
    "BaseParser",
    "CargoLockParser",
    "Dependency",
    "DependencyParser",
    "GoModParser",
    "ManifestParseError",
    "PackageLockParser",
    "ParsedDependencies",
    "ParserRegistry",
    "PnpmLockParser",
    "PoetryLockParser",
    "RequirementsParser",
    "UnsupportedManifestError",
    "YarnLockParser",
    "registry",
]

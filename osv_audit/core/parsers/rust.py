"""Rust lockfile parser."""

from .base import BaseParser, ParsedDependencies


class CargoLockParser(BaseParser):
    """Parser for Cargo.lock files. Crate names keep their original case."""

    manifest_type = "cargo-lock"
    file_names = ("Cargo.lock",)

    def parse(self, text: str) -> ParsedDependencies:
        result = self._new_result()
        self._add_package_tables(self._load_toml(text), result)
        return result

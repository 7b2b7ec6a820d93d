"""Python dependency file parsers."""

import re
from pathlib import Path
from typing import Optional

from .base import ANY_VERSION, BaseParser, Dependency, ParsedDependencies

EXTRAS = re.compile(r"\[.*?\]")
# Longest operators first so "===" and "==" are not read as "=" prefixes
REQUIREMENT = re.compile(r"^([a-zA-Z0-9._-]+)\s*(===|==|>=|<=|~=|!=|>|<)\s*([^\s;#,]+)")
NAME_ONLY = re.compile(r"^([a-zA-Z0-9._-]+)")


class RequirementsParser(BaseParser):
    """Parser for pip requirements files."""

    manifest_type = "requirements"

    def can_parse(self, file_path: Path) -> bool:
        filename = Path(file_path).name.lower()
        return filename.startswith("requirements") and filename.endswith(".txt")

    def parse(self, text: str) -> ParsedDependencies:
        result = self._new_result()

        for line_num, line in enumerate(text.splitlines(), 1):
            line = line.strip()

            # Blank lines, comments and pip options (-r, -e, --index-url, ...)
            if not line or line.startswith("#") or line.startswith("-"):
                continue

            dependency = self._parse_requirement_line(line)
            if dependency:
                result.add_dependency(dependency)
            else:
                self.logger.debug(f"Skipping unrecognised requirement on line {line_num}: {line}")

        return result

    def _parse_requirement_line(self, line: str) -> Optional[Dependency]:
        """Parse a single requirement line.

        ``name[extras] <op> version`` yields the version as written;
        a bare name (or a ``name @ url`` reference) yields ``*``.

        Args:
            line: Stripped requirement line

        Returns:
            Parsed dependency or None if the line names no package
        """
        line = EXTRAS.sub("", line)

        match = REQUIREMENT.match(line)
        if match:
            return self._create_dependency(match.group(1).lower(), match.group(3))

        match = NAME_ONLY.match(line)
        if match:
            return self._create_dependency(match.group(1).lower(), ANY_VERSION)

        return None


class PoetryLockParser(BaseParser):
    """Parser for poetry.lock files."""

    manifest_type = "poetry-lock"
    file_names = ("poetry.lock",)

    def parse(self, text: str) -> ParsedDependencies:
        result = self._new_result()
        self._add_package_tables(self._load_toml(text), result, lowercase=True)
        return result

"""Go module parser."""

import re
from typing import Optional

from .base import BaseParser, ParsedDependencies

REQUIRE_LINE = re.compile(r"^require\s+(\S+)\s+(\S+)")
REQUIRE_ENTRY = re.compile(r"^(\S+)\s+(\S+)")

OUTSIDE = "outside"
IN_REQUIRE_BLOCK = "require-block"


def _strip_comment(line: str) -> str:
    return line.split("//", 1)[0].strip()


def _strip_v(version: str) -> str:
    return version[1:] if version.startswith("v") else version


class GoModParser(BaseParser):
    """Parser for go.mod files.

    Handles both ``require path version`` lines and ``require ( ... )``
    blocks. Trailing ``// indirect`` markers are dropped before the version
    is read, and the leading ``v`` is removed from every version.
    """

    manifest_type = "go-mod"
    file_names = ("go.mod",)

    def parse(self, text: str) -> ParsedDependencies:
        result = self._new_result()
        state = OUTSIDE

        for raw_line in text.splitlines():
            line = _strip_comment(raw_line)
            if not line:
                continue

            if state == IN_REQUIRE_BLOCK:
                if line == ")":
                    state = OUTSIDE
                else:
                    self._add_entry(REQUIRE_ENTRY.match(line), result)
                continue

            if re.match(r"^require\s*\($", line):
                state = IN_REQUIRE_BLOCK
            elif line.startswith("require "):
                self._add_entry(REQUIRE_LINE.match(line), result)

        return result

    def _add_entry(self, match: Optional[re.Match], result: ParsedDependencies) -> None:
        if not match:
            return
        version = _strip_v(match.group(2))
        if version:
            result.add_dependency(self._create_dependency(match.group(1), version))

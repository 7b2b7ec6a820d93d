"""Registry mapping manifest dialects to their parsers."""

from pathlib import Path
from typing import Dict, List, Optional

from .base import BaseParser, ParsedDependencies


class UnsupportedManifestError(ValueError):
    """Raised when no parser is registered for a manifest type."""

    def __init__(self, manifest_type: str, supported: List[str]) -> None:
        self.manifest_type = manifest_type
        self.supported = supported
        super().__init__(f"Unsupported manifest type: {manifest_type}")


class ParserRegistry:
    """Closed set of manifest parsers keyed by dialect tag."""

    def __init__(self) -> None:
        self._parsers: Dict[str, BaseParser] = {}

    def register(self, parser: BaseParser) -> None:
        """Register a parser under its ``manifest_type``.

        Args:
            parser: Parser instance to register
        """
        self._parsers[parser.manifest_type] = parser

    def get_parser(self, manifest_type: str) -> Optional[BaseParser]:
        return self._parsers.get(manifest_type)

    def find_parser_for_file(self, file_path: Path) -> Optional[BaseParser]:
        """Find a parser that handles the given file name.

        Args:
            file_path: Path to the file

        Returns:
            Parser that can handle the file or None
        """
        for parser in self._parsers.values():
            if parser.can_parse(file_path):
                return parser
        return None

    def get_supported_manifest_types(self) -> List[str]:
        return list(self._parsers)

    def get_supported_ecosystems(self) -> List[str]:
        ecosystems: List[str] = []
        for parser in self._parsers.values():
            if parser.ecosystem not in ecosystems:
                ecosystems.append(parser.ecosystem)
        return ecosystems

    def parse(self, text: str, manifest_type: str) -> ParsedDependencies:
        """Parse manifest text with the parser registered for its dialect.

        Args:
            text: Raw manifest content
            manifest_type: Dialect tag, e.g. ``package-lock``

        Returns:
            Parsed dependencies

        Raises:
            UnsupportedManifestError: If the dialect is not registered
            ManifestParseError: If the manifest's structured data is malformed
        """
        parser = self.get_parser(manifest_type)
        if parser is None:
            raise UnsupportedManifestError(manifest_type, self.get_supported_manifest_types())
        return parser.parse(text)

    def parse_file(self, file_path: Path, manifest_type: Optional[str] = None) -> ParsedDependencies:
        """Read a manifest from disk and parse it.

        The dialect is taken from ``manifest_type`` or, when omitted, detected
        from the file name.
        """
        file_path = Path(file_path)
        if manifest_type is None:
            parser = self.find_parser_for_file(file_path)
            if parser is None:
                raise UnsupportedManifestError(file_path.name, self.get_supported_manifest_types())
            manifest_type = parser.manifest_type

        text = file_path.read_text(encoding="utf-8")
        result = self.parse(text, manifest_type)
        result.source_file = file_path
        return result

"""Async OSV.dev client producing normalised vulnerability results."""

import asyncio
import ssl
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
import certifi
from aiohttp import ClientTimeout

from ..config import Config, load_config
from ..core.parsers import ANY_VERSION, Dependency
from ..core.severity import highest_score, label_from_score
from ..core.suggest import VulnerabilityRecord, VulnerabilityResult
from ..utils.logging import get_logger

SUMMARY_FALLBACK_LENGTH = 200


class OSVError(Exception):
    """Base class for advisory query failures."""


class OSVUpstreamError(OSVError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)


class OSVRateLimitError(OSVError):
    def __init__(self, retry_after: Optional[str] = None) -> None:
        self.status = 429
        self.retry_after = retry_after
        super().__init__("OSV API rate limit exceeded")


class OSVTimeoutError(OSVError):
    def __init__(self, timeout_ms: int) -> None:
        self.timeout = timeout_ms
        super().__init__("OSV API request timed out")


@dataclass
class OSVQuery:
    """One entry of a ``/v1/querybatch`` request."""

    ecosystem: str
    name: str
    version: Optional[str] = None

    @classmethod
    def from_dependency(cls, dependency: Dependency) -> "OSVQuery":
        version = dependency.version
        if version == ANY_VERSION:
            version = None
        return cls(ecosystem=dependency.ecosystem, name=dependency.name, version=version)

    def to_dict(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {"package": {"ecosystem": self.ecosystem, "name": self.name}}
        if self.version:
            query["version"] = self.version
        return query


def _severity_scores(raw: Dict[str, Any]) -> List[str]:
    """Collect raw severity strings at vulnerability and affected level."""
    scores = []
    for entry in raw.get("severity") or []:
        if isinstance(entry, dict) and entry.get("score"):
            scores.append(str(entry["score"]))
    for affected in raw.get("affected") or []:
        for entry in affected.get("severity") or []:
            if isinstance(entry, dict) and entry.get("score"):
                scores.append(str(entry["score"]))
    return scores


def _fixed_versions(raw: Dict[str, Any]) -> List[str]:
    fixed: List[str] = []
    for affected in raw.get("affected") or []:
        for version_range in affected.get("ranges") or []:
            for event in version_range.get("events") or []:
                version = event.get("fixed")
                if version and version not in fixed:
                    fixed.append(str(version))
    return fixed


def normalize_vulnerability(raw: Dict[str, Any]) -> VulnerabilityRecord:
    """Convert an OSV vulnerability document into a VulnerabilityRecord.

    Args:
        raw: Vulnerability as returned by ``/v1/vulns/{id}``

    Returns:
        Normalised record with the highest resolvable severity
    """
    score = highest_score(_severity_scores(raw))
    details = raw.get("details") or ""

    return VulnerabilityRecord(
        id=raw.get("id", ""),
        summary=raw.get("summary") or details[:SUMMARY_FALLBACK_LENGTH] or "No description available",
        severity=label_from_score(score),
        severity_score=score,
        fixed_versions=_fixed_versions(raw),
        aliases=list(raw.get("aliases") or []),
        references=[
            {"type": ref.get("type", ""), "url": ref.get("url", "")}
            for ref in raw.get("references") or []
            if isinstance(ref, dict)
        ],
    )


class OSVClient:
    """Async client for the OSV.dev batch query API."""

    def __init__(
        self,
        config: Optional[Config] = None,
        session: Optional[aiohttp.ClientSession] = None,
        max_concurrent: int = 10,
    ) -> None:
        """Initialize the OSV client.

        Args:
            config: Runtime configuration (loaded from the environment if None)
            session: Optional aiohttp session for connection reuse
            max_concurrent: Maximum concurrent ``/v1/vulns`` lookups
        """
        self.config = config or load_config()
        self.logger = get_logger("OSVClient")
        self._session = session
        self._owns_session = session is None
        self._max_concurrent = max_concurrent
        self._ssl_context = ssl.create_default_context(cafile=certifi.where())

    async def __aenter__(self) -> "OSVClient":
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if not self._session or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=self._ssl_context)
            self._session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.config.request_timeout_seconds),
                connector=connector,
            )
            self._owns_session = True
        return self._session

    async def query_batch(self, dependencies: Sequence[Dependency]) -> List[VulnerabilityResult]:
        """Query vulnerabilities for a batch of dependencies.

        Args:
            dependencies: Dependencies to look up

        Returns:
            One result per dependency, in input order

        Raises:
            OSVRateLimitError: On HTTP 429
            OSVTimeoutError: If a request exceeds the configured timeout
            OSVUpstreamError: On any other HTTP or transport failure
        """
        queries = [OSVQuery.from_dependency(dep).to_dict() for dep in dependencies]
        self.logger.debug(f"Querying OSV for {len(queries)} packages")

        data = await self._request("POST", "/v1/querybatch", json={"queries": queries})
        batch_results = data.get("results") or []

        documents = await self._hydrate(batch_results)

        results = []
        for index, dependency in enumerate(dependencies):
            entry = batch_results[index] if index < len(batch_results) else {}
            vulns = [
                normalize_vulnerability(documents.get(vuln.get("id"), vuln))
                for vuln in (entry or {}).get("vulns") or []
                if vuln.get("id")
            ]
            results.append(VulnerabilityResult(dependency=dependency, vulnerabilities=vulns))

        return results

    async def _hydrate(self, batch_results: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Fetch full documents for batch entries that only carry ids.

        ``/v1/querybatch`` returns ``{id, modified}`` stubs; severity and
        fixed versions live in the full ``/v1/vulns/{id}`` document.
        """
        missing = []
        for entry in batch_results:
            for vuln in (entry or {}).get("vulns") or []:
                vuln_id = vuln.get("id")
                if vuln_id and "affected" not in vuln and vuln_id not in missing:
                    missing.append(vuln_id)

        if not missing:
            return {}

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def fetch(vuln_id: str) -> Dict[str, Any]:
            async with semaphore:
                return await self._request("GET", f"/v1/vulns/{vuln_id}")

        documents = await asyncio.gather(*(fetch(vuln_id) for vuln_id in missing))
        return dict(zip(missing, documents))

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.config.osv_api_url}{path}"
        session = self._get_session()

        try:
            async with session.request(method, url, **kwargs) as response:
                if response.status == 429:
                    raise OSVRateLimitError(response.headers.get("Retry-After"))
                if response.status >= 400:
                    error_text = await response.text()
                    self.logger.error(f"OSV API error: {response.status} - {error_text[:200]}")
                    raise OSVUpstreamError(
                        f"OSV API returned status {response.status}", status=response.status
                    )
                return await response.json()
        except asyncio.TimeoutError as e:
            raise OSVTimeoutError(self.config.request_timeout) from e
        except aiohttp.ClientError as e:
            raise OSVUpstreamError(f"OSV API request failed: {e}") from e

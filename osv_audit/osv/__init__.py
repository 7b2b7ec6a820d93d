"""OSV (Open Source Vulnerabilities) advisory client."""

from .client import (
    OSVClient,
    OSVError,
    OSVQuery,
    OSVRateLimitError,
    OSVTimeoutError,
    OSVUpstreamError,
    normalize_vulnerability,
)

__all__ = [
    "OSVClient",
    "OSVError",
    "OSVQuery",
    "OSVRateLimitError",
    "OSVTimeoutError",
    "OSVUpstreamError",
    "normalize_vulnerability",
]

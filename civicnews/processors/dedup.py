from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass
from typing import Set
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

TRACKING_PARAMS = {
    "fbclid",
    "gclid",
    "dclid",
    "msclkid",
    "yclid",
    "igshid",
    "mc_cid",
    "mc_eid",
    "_ga",
    "ocid",
    "cmp",
    "cmpid",
    "ref",
    "ref_src",
    "spref",
    "sr_share",
    "taid",
}
TRACKING_PREFIXES = ("utm_", "at_", "pk_")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _is_tracking_param(name: str) -> bool:
    lowered = name.lower()
    return lowered in TRACKING_PARAMS or lowered.startswith(TRACKING_PREFIXES)


def canonical_url(url: str) -> str:
    """Return the deduplication key for an article URL.

    - lower-case scheme and host, drop default ports
    - drop tracking query parameters (utm_*, fbclid, gclid, ...)
    - drop the fragment
    - strip trailing slashes from the path

    Path and remaining query parameters keep their case and order.
    """
    parts = urlsplit((url or "").strip())
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    port = parts.port
    netloc = host
    if parts.username:
        netloc = f"{parts.username}@{netloc}"
    if port and _DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"

    query_pairs = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if not _is_tracking_param(k)]
    query = urlencode(query_pairs, doseq=True)
    path = parts.path.rstrip("/")
    return urlunsplit((scheme, netloc, path, query, ""))


def article_id(canonical: str) -> str:
    """Stable identity for an article derived from its canonical URL."""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]


class Deduplicator:
    """Thread-safe record of canonical URLs already claimed in this run.

    The same story is often listed in several feeds of one outlet (politics,
    national, top stories). The first worker to ``claim`` a URL processes it;
    later claims return False. Cross-run deduplication is the gateway's job
    (upsert by canonical URL).
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._lock = threading.Lock()
        self.stats = DedupStats()

    def claim(self, canonical: str) -> bool:
        with self._lock:
            if canonical in self._seen:
                self.stats.duplicates += 1
                return False
            self._seen.add(canonical)
            self.stats.kept += 1
            return True

    def __contains__(self, canonical: object) -> bool:
        with self._lock:
            return canonical in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)


@dataclass(slots=True)
class DedupStats:
    kept: int = 0
    duplicates: int = 0

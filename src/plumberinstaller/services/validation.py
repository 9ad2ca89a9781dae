"""Value and URL validation helpers for the Plumber installer."""

import re
from urllib.parse import urlparse

import requests
from packaging import version

from plumberinstaller.constants import PLACEHOLDER

_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")


class ValidationService:
    """Validates configuration values and probes upstream URLs."""

    def __init__(self, reachability_timeout: float = 10.0, requests_module=requests):
        self.reachability_timeout = reachability_timeout
        self.requests = requests_module

    def contains_placeholder(self, value: str) -> bool:
        return PLACEHOLDER.lower() in (value or "").lower()

    def parse_compose_version(self, raw: str) -> version.Version:
        """Extracts major.minor.patch, ignoring a `v` prefix and build suffixes."""
        match = _VERSION_RE.search(raw or "")
        if not match:
            return version.Version("0.0.0")
        major, minor, patch = match.group(1), match.group(2), match.group(3) or "0"
        return version.Version(f"{major}.{minor}.{patch}")

    def compose_version_ok(self, raw: str, minimum: str) -> bool:
        return self.parse_compose_version(raw) >= version.Version(minimum)

    def normalize_url(self, url: str) -> str:
        return url.strip().rstrip("/")

    def with_scheme(self, url: str) -> str:
        scheme = urlparse(url).scheme.lower()
        if scheme in {"http", "https"}:
            return url
        return f"https://{url}"

    def is_reachable(self, url: str) -> bool:
        try:
            response = self.requests.get(
                url,
                allow_redirects=True,
                timeout=self.reachability_timeout,
            )
            response.raise_for_status()
            response.close()
            return True
        except self.requests.RequestException:
            return False

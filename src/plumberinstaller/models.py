"""Shared domain models for the Plumber installer."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .constants import (
    CERT_METHODS,
    CUSTOM_CERTS,
    INTERNAL_DB,
    LETSENCRYPT,
    LETSENCRYPT_RESOLVER,
)

PASS = "pass"
WARN = "warn"
FAIL = "fail"

PRODUCTION = "production"
LOCAL = "local"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single preflight check."""

    status: str
    message: str
    details: Tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.status == FAIL


@dataclass(frozen=True)
class DeploymentProfile:
    """Compose profile tags: certificate method plus optional internal database."""

    cert_method: str = LETSENCRYPT
    internal_db: bool = True

    def __post_init__(self):
        if self.cert_method not in CERT_METHODS:
            raise ValueError(f"Unknown certificate method: {self.cert_method}")

    @property
    def tags(self) -> List[str]:
        tags = [self.cert_method]
        if self.internal_db:
            tags.append(INTERNAL_DB)
        return tags

    @property
    def cert_resolver(self) -> str:
        return LETSENCRYPT_RESOLVER if self.cert_method == LETSENCRYPT else ""

    def render(self) -> str:
        return ",".join(self.tags)

    @classmethod
    def parse(cls, value: str) -> Optional["DeploymentProfile"]:
        """Returns None when no recognized certificate tag is present."""
        tags = [tag.strip() for tag in (value or "").split(",") if tag.strip()]
        if CUSTOM_CERTS in tags:
            cert_method = CUSTOM_CERTS
        elif LETSENCRYPT in tags:
            cert_method = LETSENCRYPT
        else:
            return None
        return cls(cert_method=cert_method, internal_db=INTERNAL_DB in tags)

    @classmethod
    def choices(cls) -> List["DeploymentProfile"]:
        return [
            cls(LETSENCRYPT, True),
            cls(LETSENCRYPT, False),
            cls(CUSTOM_CERTS, True),
            cls(CUSTOM_CERTS, False),
        ]


@dataclass(frozen=True)
class ImageVersions:
    frontend: str
    backend: str


@dataclass(frozen=True)
class ExternalDatabase:
    host: str
    port: str
    user: str
    name: str
    password: str
    sslmode: str
    timezone: str


@dataclass(frozen=True)
class InstallAnswers:
    """Everything the interactive installer collects from the operator."""

    deploy_type: str
    gitlab_url: str
    client_id: str
    client_secret: str
    organization: str = ""
    domain_name: str = ""
    profile: Optional[DeploymentProfile] = None
    external_db: Optional[ExternalDatabase] = None

    @property
    def is_local(self) -> bool:
        return self.deploy_type == LOCAL


@dataclass(frozen=True)
class GeneratedSecrets:
    secret_key: str
    db_password: str
    redis_password: str


@dataclass(frozen=True)
class InstallerSettings:
    """Resolved runtime settings (defaults, config file, then CLI flags)."""

    repo_url: str
    repo_dir: str
    env_file: str
    versions_file: str
    min_compose_version: str
    reachability_timeout: float
    command_timeout: Optional[float] = None

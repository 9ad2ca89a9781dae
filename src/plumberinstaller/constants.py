"""Shared constants for the Plumber installer."""

REPO_URL = "https://github.com/getplumber/platform.git"
REPO_DIR = "plumber-platform"

COMPOSE_FILE = "compose.yml"
LOCAL_COMPOSE_FILE = "compose.local.yml"
VERSIONS_FILE = "versions.env"
ENV_FILE = ".env"
MARKER_FILES = (COMPOSE_FILE, VERSIONS_FILE)

CONFIG_FILE = ".plumberinstaller.yml"

MIN_COMPOSE_VERSION = "2.20.2"
REACHABILITY_TIMEOUT = 10.0

PRODUCTION_PORTS = (80, 443)
LOCAL_PORTS = (3000, 3001)

PLACEHOLDER = "REPLACE_ME"

FRONTEND_TAG_VAR = "FRONTEND_IMAGE_TAG"
BACKEND_TAG_VAR = "BACKEND_IMAGE_TAG"
IMAGE_TAG_VARS = (FRONTEND_TAG_VAR, BACKEND_TAG_VAR)
PROFILES_VAR = "COMPOSE_PROFILES"
CERT_RESOLVER_VAR = "CERT_RESOLVER"
DB_HOST_VAR = "JOBS_DB_HOST"

REQUIRED_VARS = (
    "DOMAIN_NAME",
    "JOBS_GITLAB_URL",
    "GITLAB_OAUTH2_CLIENT_ID",
    "GITLAB_OAUTH2_CLIENT_SECRET",
    "SECRET_KEY",
    "JOBS_DB_PASSWORD",
    "JOBS_REDIS_PASSWORD",
    PROFILES_VAR,
)
LOCAL_EXEMPT_VARS = ("DOMAIN_NAME", PROFILES_VAR)

LETSENCRYPT = "letsencrypt"
CUSTOM_CERTS = "custom-certs"
CERT_METHODS = (LETSENCRYPT, CUSTOM_CERTS)
INTERNAL_DB = "internal-db"
LETSENCRYPT_RESOLVER = "le"

# Service name of the bundled PostgreSQL container.
INTERNAL_DB_HOST = "postgres"

CERTS_DIR = ".docker/traefik/certs"
CERT_FULLCHAIN = f"{CERTS_DIR}/plumber_fullchain.pem"
CERT_PRIVKEY = f"{CERTS_DIR}/plumber_privkey.pem"
CERT_FILES = (CERT_FULLCHAIN, CERT_PRIVKEY)
CA_CERTS_DIR = ".docker/ca-certificates"
CA_CERT_SUFFIXES = (".pem", ".crt")

DEFAULT_DB_PORT = "5432"
DEFAULT_DB_NAME = "plumber"
DEFAULT_DB_SSLMODE = "disable"
DEFAULT_TIMEZONE = "UTC"

SECRET_KEY_BYTES = 32
PASSWORD_BYTES = 16

OIDC_APP_NAME = "Plumber"
OIDC_SCOPES = "api"
CALLBACK_PATH = "/api/auth/gitlab/callback"
LOCAL_FRONTEND_URL = "http://localhost:3000"
LOCAL_BACKEND_URL = "http://localhost:3001"

DOCKER_INSTALL_URL = "https://docs.docker.com/get-docker/"
COMPOSE_INSTALL_URL = "https://docs.docker.com/compose/install/"
GIT_INSTALL_URL = "https://git-scm.com/downloads"

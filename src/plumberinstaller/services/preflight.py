"""Read-only preflight checks for the host and the generated configuration."""

import os
from typing import List, Optional

from rich.markup import escape

from plumberinstaller.constants import (
    CERT_FILES,
    COMPOSE_INSTALL_URL,
    CUSTOM_CERTS,
    DOCKER_INSTALL_URL,
    IMAGE_TAG_VARS,
    LOCAL_EXEMPT_VARS,
    LOCAL_PORTS,
    PRODUCTION_PORTS,
    PROFILES_VAR,
    REQUIRED_VARS,
)
from plumberinstaller.models import FAIL, PASS, WARN, CheckResult, DeploymentProfile, InstallerSettings
from plumberinstaller.services.docker_runtime import DockerRuntimeService
from plumberinstaller.services.env_file import read_env_values
from plumberinstaller.services.filesystem import FileSystemService
from plumberinstaller.services.probes import DnsResolver, PortProber
from plumberinstaller.services.validation import ValidationService

MODE_PRE = "pre"
MODE_POST = "post"
MODE_ALL = "all"
MODES = (MODE_PRE, MODE_POST, MODE_ALL)

_SYMBOLS = {
    PASS: "[green]✓[/green]",
    WARN: "[yellow]![/yellow]",
    FAIL: "[red]✗[/red]",
}


class PreflightService:
    """Runs independent checks, printing one line each and counting failures."""

    def __init__(
        self,
        settings: InstallerSettings,
        root: str,
        logger,
        console,
        command_runner,
        validation_service: Optional[ValidationService] = None,
        local: bool = False,
    ):
        self.settings = settings
        self.root = root
        self.logger = logger
        self.console = console
        self.local = local
        self.which = command_runner.which
        self.docker = DockerRuntimeService(
            logger=logger,
            run_cmd=command_runner.run,
            which=command_runner.which,
        )
        self.filesystem = FileSystemService(root=root, logger=logger)
        self.port_prober = PortProber(command_runner.run, command_runner.which)
        self.dns_resolver = DnsResolver(command_runner.run, command_runner.which)
        self.validation = validation_service or ValidationService(
            reachability_timeout=settings.reachability_timeout
        )
        self.results: List[CheckResult] = []

    @property
    def failures(self) -> int:
        return sum(1 for result in self.results if result.failed)

    def run(self, mode: str = MODE_ALL) -> int:
        if mode not in MODES:
            raise ValueError(f"Unknown preflight mode: {mode}")
        self.results = []
        if mode in (MODE_PRE, MODE_ALL):
            self.run_pre_checks()
        if mode in (MODE_POST, MODE_ALL):
            self.run_post_checks()

        self.console.print()
        if self.failures:
            self.console.print(
                f"[red]{self.failures} check(s) failed.[/red] "
                "Please fix the issues above before proceeding."
            )
            self.logger.debug("Preflight finished with %s failure(s)", self.failures)
            return 1
        self.console.print("[green]All checks passed.[/green]")
        return 0

    def run_pre_checks(self):
        self._section("Pre-config checks")
        self.check_docker()
        self.check_compose()
        self.check_tool("git", "Git is installed", "Git is not installed")
        self.check_tool(
            "openssl",
            "OpenSSL is installed (for secret generation)",
            "OpenSSL is not installed (needed to generate secrets)",
        )
        for port in LOCAL_PORTS if self.local else PRODUCTION_PORTS:
            self.check_port(port)

    def run_post_checks(self):
        self._section("Post-config checks")
        env_path = os.path.join(self.root, self.settings.env_file)
        if not os.path.isfile(env_path):
            self._record(FAIL, f"{self.settings.env_file} file does not exist (run the installer first)")
            return
        self._record(PASS, f"{self.settings.env_file} file exists")

        values = read_env_values(env_path)
        for var in self.required_vars():
            self.check_required_var(var, values.get(var, ""))
        for var in IMAGE_TAG_VARS:
            self.check_image_tag(var, values.get(var, ""))

        profiles = values.get(PROFILES_VAR, "")
        profile = DeploymentProfile.parse(profiles)
        self.check_profiles(profiles, profile)
        self.check_dns(values.get("DOMAIN_NAME", ""))
        self.check_reachability(values.get("JOBS_GITLAB_URL", ""))
        if profile is not None and profile.cert_method == CUSTOM_CERTS:
            self.check_cert_files()

    def required_vars(self) -> List[str]:
        if not self.local:
            return list(REQUIRED_VARS)
        return [var for var in REQUIRED_VARS if var not in LOCAL_EXEMPT_VARS]

    def check_docker(self):
        if not self.docker.is_installed():
            self._record(FAIL, f"Docker is not installed ({DOCKER_INSTALL_URL})")
        elif self.docker.is_running():
            self._record(PASS, "Docker is installed and running")
        else:
            self._record(FAIL, "Docker is installed but not running (start Docker daemon)")

    def check_compose(self):
        minimum = self.settings.min_compose_version
        if not self.docker.compose_available():
            self._record(FAIL, f"Docker Compose plugin is not installed ({COMPOSE_INSTALL_URL})")
            return

        raw = self.docker.compose_version()
        shown = raw.lstrip("v")
        if self.validation.compose_version_ok(raw, minimum):
            self._record(PASS, f"Docker Compose v{shown} (>= {minimum} required)")
        else:
            self._record(FAIL, f"Docker Compose v{shown} is too old (>= {minimum} required)")

    def check_tool(self, tool: str, ok_message: str, fail_message: str):
        if self.which(tool):
            self._record(PASS, ok_message)
        else:
            self._record(FAIL, fail_message)

    def check_port(self, port: int):
        in_use = self.port_prober.is_in_use(port)
        if in_use is None:
            tools = " or ".join(self.port_prober.tools)
            self._record(WARN, f"Port {port}: cannot check (install {tools})")
        elif in_use:
            self._record(FAIL, f"Port {port} is already in use")
        else:
            self._record(PASS, f"Port {port} is available")

    def check_required_var(self, var: str, value: str):
        if not value:
            self._record(FAIL, f"{var} is not set")
        elif self.validation.contains_placeholder(value):
            self._record(FAIL, f"{var} still contains a placeholder value")
        else:
            self._record(PASS, f"{var} is set")

    def check_image_tag(self, var: str, value: str):
        if value:
            self._record(PASS, f"{var}={value}")
        else:
            self._record(FAIL, f"{var} is not set (run the installer or the updater)")

    def check_profiles(self, profiles: str, profile: Optional[DeploymentProfile]):
        # An empty profile is reported by the required variable check.
        if not profiles:
            return
        if profile is not None:
            self._record(PASS, f"{PROFILES_VAR} has a valid traefik profile")
        else:
            self._record(FAIL, f"{PROFILES_VAR} must include 'letsencrypt' or 'custom-certs'")

    def check_dns(self, domain: str):
        if not domain:
            return
        resolves = self.dns_resolver.resolves(domain)
        if resolves is None:
            tools = " or ".join(self.dns_resolver.tools)
            self._record(WARN, f"Cannot check DNS (install {tools})")
        elif resolves:
            self._record(PASS, f"DNS resolves for {domain}")
        else:
            self._record(
                WARN,
                f"DNS does not resolve for {domain} (ensure your DNS record is configured)",
            )

    def check_reachability(self, url: str):
        if not url:
            return
        if self.validation.is_reachable(url):
            self._record(PASS, f"GitLab instance is reachable at {url}")
        else:
            self._record(WARN, f"Cannot reach GitLab at {url} (check URL and network)")

    def check_cert_files(self):
        if self.filesystem.cert_files_present():
            self._record(PASS, "Custom certificate files found")
            return
        self._record(
            FAIL,
            "Custom certificates profile is active but cert files are missing",
            details=tuple(f"Expected: {path}" for path in CERT_FILES),
        )

    def _section(self, title: str):
        self.console.print()
        self.console.print(title)
        self.console.print("─" * 39)

    def _record(self, status: str, message: str, details=()):
        result = CheckResult(status=status, message=message, details=tuple(details))
        self.results.append(result)
        self.console.print(f"  {_SYMBOLS[status]} {escape(message)}")
        for line in result.details:
            self.console.print(f"      {escape(line)}")
        if status == FAIL:
            self.logger.debug("Check failed: %s", message)
        return result

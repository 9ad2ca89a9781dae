import logging
import os
from typing import Optional, Tuple

import click
import requests
from rich.console import Console

from .constants import (
    CA_CERTS_DIR,
    CALLBACK_PATH,
    CERT_FILES,
    CUSTOM_CERTS,
    DEFAULT_DB_NAME,
    DEFAULT_DB_PORT,
    DEFAULT_DB_SSLMODE,
    DOCKER_INSTALL_URL,
    GIT_INSTALL_URL,
    LETSENCRYPT,
    LOCAL_BACKEND_URL,
    LOCAL_FRONTEND_URL,
    OIDC_APP_NAME,
    OIDC_SCOPES,
)
from .errors import InstallerError
from .errors_catalog import actionable_error
from .models import (
    LOCAL,
    PRODUCTION,
    DeploymentProfile,
    ExternalDatabase,
    GeneratedSecrets,
    ImageVersions,
    InstallAnswers,
    InstallerSettings,
)
from .services.command_runner import CommandRunner
from .services.docker_runtime import DockerRuntimeService
from .services.env_file import EnvFile
from .services.env_renderer import EnvRenderer
from .services.filesystem import FileSystemService
from .services.preflight import MODE_POST, MODE_PRE, PreflightService
from .services.probes import DnsResolver
from .services.prompts import PromptService
from .services.repository import RepositoryService
from .services.secret_generator import SecretService
from .services.validation import ValidationService
from .services.versions import VersionsService

console = Console()
logger = logging.getLogger("plumberinstaller")

RULE = "─" * 39


class Installer:
    """Interactive first-time setup of a self-managed Plumber instance."""

    DEPLOY_TYPES = [
        (PRODUCTION, "Production (domain, TLS, reverse proxy)"),
        (LOCAL, "Local (localhost, no TLS)"),
    ]
    CERT_METHODS = [
        (LETSENCRYPT, "Let's Encrypt (automatic, server must be reachable from internet)"),
        (CUSTOM_CERTS, "Custom certificates (provide your own .pem files)"),
    ]
    DATABASES = [
        (True, "Internal (managed PostgreSQL container)"),
        (False, "External (connect to your own PostgreSQL)"),
    ]

    def __init__(
        self,
        settings: InstallerSettings,
        cwd: Optional[str] = None,
        prompt_service: Optional[PromptService] = None,
        command_runner: Optional[CommandRunner] = None,
        requests_module=requests,
    ):
        self.settings = settings
        self.root = cwd or os.getcwd()
        self.command_runner = command_runner or CommandRunner(
            logger=logger,
            default_timeout=settings.command_timeout,
            cwd=self.root,
        )
        self.prompts = prompt_service or PromptService(console)
        self.validation_service = ValidationService(
            reachability_timeout=settings.reachability_timeout,
            requests_module=requests_module,
        )
        self.env_renderer = EnvRenderer()
        self.repository_service = RepositoryService(logger=logger, run_cmd=self.command_runner.run)
        self.docker_runtime_service = DockerRuntimeService(
            logger=logger,
            run_cmd=self.command_runner.run,
            which=self.command_runner.which,
        )
        self.secret_service = SecretService(run_cmd=self.command_runner.run)
        self.dns_resolver = DnsResolver(self.command_runner.run, self.command_runner.which)
        self._bind_root(self.root)

    def _bind_root(self, root: str):
        self.root = root
        self.command_runner.cwd = root
        self.filesystem_service = FileSystemService(root=root, logger=logger)
        self.versions_service = VersionsService(os.path.join(root, self.settings.versions_file))

    @property
    def env_path(self) -> str:
        return os.path.join(self.root, self.settings.env_file)

    def ensure_repository(self):
        if self.repository_service.is_repository_root(self.root):
            return

        console.print("Plumber repository not detected. Cloning...")
        for tool, url in (("git", GIT_INSTALL_URL), ("docker", DOCKER_INSTALL_URL)):
            if not self.command_runner.which(tool):
                raise InstallerError(actionable_error("tool_required", tool=tool.capitalize(), url=url))

        destination = os.path.join(self.root, self.settings.repo_dir)
        self.repository_service.clone(self.settings.repo_url, destination)
        self._bind_root(destination)
        console.print(f"[green]✓[/green] Repository cloned to {destination}")

    def run_preflight(self, mode: str, local: bool) -> int:
        preflight = PreflightService(
            settings=self.settings,
            root=self.root,
            logger=logger,
            console=console,
            command_runner=self.command_runner,
            validation_service=self.validation_service,
            local=local,
        )
        return preflight.run(mode)

    def choose_deploy_type(self) -> str:
        index = self.prompts.choice("Deployment type:", [label for _, label in self.DEPLOY_TYPES])
        return self.DEPLOY_TYPES[index - 1][0]

    def collect_answers(self, deploy_type: str) -> InstallAnswers:
        console.print()
        console.print("[bold]Configuration[/bold]")
        console.print(RULE)

        domain_name = ""
        if deploy_type == PRODUCTION:
            domain_name = self.prompts.text("Plumber domain name (e.g. plumber.example.com)")
            self.report_dns(domain_name)

        gitlab_url = self.validation_service.normalize_url(
            self.prompts.text("GitLab instance URL (e.g. https://gitlab.example.com)")
        )

        console.print()
        console.print("[dim]Leave empty to connect Plumber to the entire GitLab instance.[/dim]")
        console.print("[dim]Or enter a group path to limit Plumber to that group.[/dim]")
        organization = self.prompts.optional("GitLab group path").strip("/")

        self.show_oidc_instructions(
            app_url=self.oidc_app_url(gitlab_url, organization),
            redirect_uri=self.redirect_uri(deploy_type, domain_name),
        )
        client_id = self.prompts.text("Application ID")
        client_secret = self.prompts.secret("Secret")

        profile = None
        external_db = None
        if deploy_type == PRODUCTION:
            cert_method = self.collect_cert_method()
            internal_db, external_db = self.collect_database()
            profile = DeploymentProfile(cert_method=cert_method, internal_db=internal_db)

        return InstallAnswers(
            deploy_type=deploy_type,
            gitlab_url=gitlab_url,
            client_id=client_id,
            client_secret=client_secret,
            organization=organization,
            domain_name=domain_name,
            profile=profile,
            external_db=external_db,
        )

    def report_dns(self, domain: str):
        if self.dns_resolver.resolves(domain):
            console.print(f"[green]✓[/green] DNS resolves for {domain}")
            return
        console.print(f"[red]![/red] DNS does not resolve for {domain}")
        console.print(f"[dim]  Create a DNS A record pointing {domain} to your server's public IP.[/dim]")
        console.print("[dim]  You can continue the setup and configure DNS before starting Plumber.[/dim]")

    def oidc_app_url(self, gitlab_url: str, organization: str) -> str:
        base_url = self.validation_service.with_scheme(gitlab_url)
        if organization:
            return f"{base_url}/groups/{organization}/-/settings/applications"
        return f"{base_url}/admin/applications"

    def redirect_uri(self, deploy_type: str, domain_name: str) -> str:
        if deploy_type == LOCAL:
            return f"{LOCAL_BACKEND_URL}{CALLBACK_PATH}"
        return f"https://{domain_name}{CALLBACK_PATH}"

    def show_oidc_instructions(self, app_url: str, redirect_uri: str):
        console.print()
        console.print(RULE)
        console.print("[bold]GitLab OIDC Application[/bold]")
        console.print()
        console.print("  1. Open this link to create a new application:")
        console.print()
        console.print(f"     [bold]{app_url}[/bold]")
        console.print()
        console.print("  2. Fill in the following:")
        console.print(f"     - Name:         [bold]{OIDC_APP_NAME}[/bold]")
        console.print(f"     - Redirect URI: [bold]{redirect_uri}[/bold]")
        console.print("     - Confidential: [bold]yes[/bold] (keep the box checked)")
        console.print(f"     - Scopes:       [bold]{OIDC_SCOPES}[/bold]")
        console.print()
        console.print("  3. Click Save and copy the credentials below")
        console.print()

    def collect_cert_method(self) -> str:
        console.print()
        console.print(RULE)
        index = self.prompts.choice("TLS certificate method:", [label for _, label in self.CERT_METHODS])
        cert_method = self.CERT_METHODS[index - 1][0]
        if cert_method == CUSTOM_CERTS:
            self.report_custom_certificates()
        return cert_method

    def report_custom_certificates(self):
        console.print()
        console.print("[dim]Place your certificate files at:[/dim]")
        for cert_file in CERT_FILES:
            console.print(f"  {cert_file}")
        if self.filesystem_service.cert_files_present():
            console.print("  [green]✓[/green] Certificate files found")
        else:
            console.print("  [yellow]![/yellow] Certificate files not found yet (add them before starting)")

        console.print()
        console.print("[bold]Custom Certificate Authority[/bold]")
        console.print()
        console.print("[dim]If your GitLab instance or your Plumber certificates are signed by[/dim]")
        console.print("[dim]a custom Certificate Authority (private CA), Plumber needs the root[/dim]")
        console.print("[dim]CA certificate to trust those connections.[/dim]")
        console.print()
        if not self.prompts.confirm("Are you using a custom CA?", default=False):
            return

        console.print()
        console.print("  Add your root CA certificate file (.pem or .crt) to:")
        console.print()
        console.print(f"     [bold]{CA_CERTS_DIR}/[/bold]")
        console.print()
        self.filesystem_service.ensure_ca_dir()
        count = self.filesystem_service.count_ca_certificates()
        if count:
            console.print(f"  [green]✓[/green] Found {count} CA certificate(s) in {CA_CERTS_DIR}/")
        else:
            console.print("  [yellow]![/yellow] No CA certificates found yet (add them before starting)")

    def collect_database(self) -> Tuple[bool, Optional[ExternalDatabase]]:
        console.print()
        console.print(RULE)
        index = self.prompts.choice("Database:", [label for _, label in self.DATABASES])
        internal_db = self.DATABASES[index - 1][0]
        if internal_db:
            return True, None

        console.print()
        host = self.prompts.text("Database host")
        port = self.prompts.optional("Database port", DEFAULT_DB_PORT)
        user = self.prompts.text("Database user")
        name = self.prompts.optional("Database name", DEFAULT_DB_NAME)
        password = self.prompts.secret("Database password")
        console.print()
        console.print("[dim]SSL mode options: disable, require, verify-ca[/dim]")
        sslmode = self.prompts.optional("SSL mode", DEFAULT_DB_SSLMODE)
        timezone = self.prompts.optional(
            "Timezone",
            self.filesystem_service.detect_timezone(self.command_runner.run),
        )
        return False, ExternalDatabase(
            host=host,
            port=port,
            user=user,
            name=name,
            password=password,
            sslmode=sslmode,
            timezone=timezone,
        )

    def generate_secrets(self, answers: InstallAnswers) -> GeneratedSecrets:
        console.print()
        console.print(RULE)
        console.print("Generating secrets...")
        external_password = answers.external_db.password if answers.external_db else None
        secrets = self.secret_service.generate(db_password=external_password)
        console.print("[green]✓[/green] Secrets generated")
        return secrets

    def read_versions(self) -> ImageVersions:
        versions = self.versions_service.read()
        console.print(
            f"[green]✓[/green] Image versions: frontend={versions.frontend}, backend={versions.backend}"
        )
        return versions

    def write_env(
        self,
        answers: InstallAnswers,
        secrets: GeneratedSecrets,
        versions: ImageVersions,
    ) -> str:
        content = self.env_renderer.render(answers, secrets, versions)
        EnvFile(self.env_path, content.splitlines()).save()
        logger.info("Configuration written to %s", self.env_path)
        console.print(f"[green]✓[/green] Configuration written to {self.settings.env_file}")
        return self.env_path

    def launch(self, answers: InstallAnswers):
        compose_cmd = " ".join(self.docker_runtime_service.compose_cmd(local=answers.is_local))
        plumber_url = LOCAL_FRONTEND_URL if answers.is_local else f"https://{answers.domain_name}"

        console.print()
        console.print(RULE)
        console.print()
        if not self.prompts.confirm("Start Plumber now?", default=True):
            console.print()
            console.print("[green]Configuration complete![/green]")
            console.print()
            console.print("  To start Plumber, run:")
            console.print(f"    [bold]{compose_cmd} up -d[/bold]")
            console.print()
            console.print(f"  Then visit: [bold]{plumber_url}[/bold]")
            return

        console.print()
        console.print("Starting Plumber...")
        self.docker_runtime_service.up(local=answers.is_local)
        console.print()
        console.print("[bold green]Plumber is starting![/bold green]")
        console.print()
        console.print(f"  Visit: [bold]{plumber_url}[/bold]")
        console.print()
        console.print("  Useful commands:")
        console.print(f"    {compose_cmd} ps       # Check service status")
        console.print(f"    {compose_cmd} logs -f  # View logs")
        console.print("    plumberinstaller update  # Update to latest version")

    def run(self) -> int:
        try:
            logger.info("Starting Plumber installer...")
            console.print()
            console.print("[bold]Plumber Installer[/bold]")
            console.print()

            self.ensure_repository()
            deploy_type = self.choose_deploy_type()
            local = deploy_type == LOCAL

            console.print()
            console.print("Running pre-flight checks...")
            if self.run_preflight(MODE_PRE, local=local) != 0:
                raise InstallerError(actionable_error("preflight_failed"))

            answers = self.collect_answers(deploy_type)
            secrets = self.generate_secrets(answers)
            versions = self.read_versions()
            self.write_env(answers, secrets, versions)

            console.print()
            console.print("Running post-config validation...")
            if self.run_preflight(MODE_POST, local=local) != 0:
                logger.warning("Post-config validation reported failures.")

            self.launch(answers)
            return 0

        except (KeyboardInterrupt, click.Abort):
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except InstallerError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            return 1

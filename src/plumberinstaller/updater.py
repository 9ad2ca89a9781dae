import logging
import os
from typing import Optional

import click
from rich.console import Console

from .constants import (
    BACKEND_TAG_VAR,
    CERT_RESOLVER_VAR,
    CUSTOM_CERTS,
    DB_HOST_VAR,
    FRONTEND_TAG_VAR,
    INTERNAL_DB_HOST,
    LETSENCRYPT,
    PROFILES_VAR,
)
from .errors import InstallerError
from .errors_catalog import actionable_error
from .models import DeploymentProfile, ImageVersions, InstallerSettings
from .services.command_runner import CommandRunner
from .services.docker_runtime import DockerRuntimeService
from .services.env_file import EnvFile
from .services.filesystem import FileSystemService
from .services.prompts import PromptService
from .services.repository import RepositoryService
from .services.versions import VersionsService

console = Console()
logger = logging.getLogger("plumberinstaller")

RULE = "─" * 39


class Updater:
    """Pulls the latest release, syncs image tags into `.env` and restarts."""

    def __init__(
        self,
        settings: InstallerSettings,
        cwd: Optional[str] = None,
        prompt_service: Optional[PromptService] = None,
        command_runner: Optional[CommandRunner] = None,
    ):
        self.settings = settings
        self.root = cwd or os.getcwd()
        self.command_runner = command_runner or CommandRunner(
            logger=logger,
            default_timeout=settings.command_timeout,
            cwd=self.root,
        )
        self.prompts = prompt_service or PromptService(console)
        self.repository_service = RepositoryService(logger=logger, run_cmd=self.command_runner.run)
        self.docker_runtime_service = DockerRuntimeService(
            logger=logger,
            run_cmd=self.command_runner.run,
            which=self.command_runner.which,
        )
        self.filesystem_service = FileSystemService(root=self.root, logger=logger)
        self.versions_service = VersionsService(os.path.join(self.root, settings.versions_file))

    @property
    def env_path(self) -> str:
        return os.path.join(self.root, self.settings.env_file)

    def ensure_preconditions(self):
        if not self.repository_service.is_repository_root(self.root):
            raise InstallerError(actionable_error("not_repository_root"))
        if not os.path.isfile(self.env_path):
            raise InstallerError(actionable_error("env_file_missing", path=self.settings.env_file))

    def sync_image_tags(self, env_file: EnvFile, versions: ImageVersions):
        env_file.set(FRONTEND_TAG_VAR, versions.frontend)
        env_file.set(BACKEND_TAG_VAR, versions.backend)

    def detect_profile(self, env_file: EnvFile) -> DeploymentProfile:
        """Best guess for configuration files written before profiles existed."""
        cert_method = CUSTOM_CERTS if self.filesystem_service.cert_files_present() else LETSENCRYPT
        db_host = (env_file.get(DB_HOST_VAR) or "").strip()
        internal_db = db_host in ("", INTERNAL_DB_HOST)
        return DeploymentProfile(cert_method=cert_method, internal_db=internal_db)

    def migrate_profile(self, env_file: EnvFile) -> Optional[DeploymentProfile]:
        if env_file.has(PROFILES_VAR):
            return None

        console.print()
        console.print(f"[yellow]![/yellow] {PROFILES_VAR} not found in {self.settings.env_file} (older format)")
        detected = self.detect_profile(env_file)
        console.print(f"  Detected profile: [bold]{detected.render()}[/bold]")

        if self.prompts.confirm("Use the detected profile?", default=True):
            profile = detected
        else:
            choices = DeploymentProfile.choices()
            index = self.prompts.choice(
                "Deployment profile:",
                [choice.render() for choice in choices],
            )
            profile = choices[index - 1]

        env_file.set(PROFILES_VAR, profile.render())
        if not env_file.has(CERT_RESOLVER_VAR):
            env_file.set(CERT_RESOLVER_VAR, profile.cert_resolver)
        logger.info("Migrated %s to %s", PROFILES_VAR, profile.render())
        return profile

    def run(self) -> int:
        try:
            self.ensure_preconditions()

            console.print()
            console.print("[bold]Updating Plumber...[/bold]")
            console.print(RULE)

            console.print()
            console.print("Pulling latest changes...")
            self.repository_service.pull()
            console.print("[green]✓[/green] Repository updated")

            console.print()
            console.print("Syncing image versions...")
            versions = self.versions_service.read()
            env_file = EnvFile.load(self.env_path)
            self.sync_image_tags(env_file, versions)
            self.migrate_profile(env_file)
            env_file.save()

            console.print(f"[green]✓[/green] Frontend: {versions.frontend}")
            console.print(f"[green]✓[/green] Backend:  {versions.backend}")

            console.print()
            console.print("Restarting containers...")
            self.docker_runtime_service.up()

            console.print()
            console.print("[bold green]✓ Plumber has been updated successfully![/bold green]")
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

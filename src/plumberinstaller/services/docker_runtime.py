"""Docker runtime services for the Plumber installer."""

from typing import Callable, List

from plumberinstaller.constants import LOCAL_COMPOSE_FILE


class DockerRuntimeService:
    """Wraps the docker and docker compose commands the installer relies on."""

    def __init__(self, logger, run_cmd: Callable, which: Callable[[str], bool]):
        self.logger = logger
        self.run_cmd = run_cmd
        self.which = which

    def is_installed(self) -> bool:
        return self.which("docker")

    def is_running(self) -> bool:
        result = self.run_cmd(["docker", "info"], check=False, capture_output=True)
        return result.returncode == 0

    def compose_available(self) -> bool:
        if not self.is_installed():
            return False
        result = self.run_cmd(["docker", "compose", "version"], check=False, capture_output=True)
        return result.returncode == 0

    def compose_version(self) -> str:
        result = self.run_cmd(
            ["docker", "compose", "version", "--short"],
            check=False,
            capture_output=True,
        )
        output = (result.stdout or "").strip()
        if result.returncode != 0 or not output:
            return "0.0.0"
        return output.splitlines()[0].strip()

    def compose_cmd(self, local: bool = False) -> List[str]:
        cmd = ["docker", "compose"]
        if local:
            cmd += ["-f", LOCAL_COMPOSE_FILE]
        return cmd

    def up(self, local: bool = False):
        self.logger.info("Starting services with docker compose...")
        self.run_cmd(self.compose_cmd(local) + ["up", "-d"])

"""Git checkout detection, cloning and pulling."""

import os
from typing import Callable, Sequence

from plumberinstaller.constants import MARKER_FILES


class RepositoryService:
    def __init__(self, logger, run_cmd: Callable):
        self.logger = logger
        self.run_cmd = run_cmd

    def is_repository_root(self, path: str, markers: Sequence[str] = MARKER_FILES) -> bool:
        return all(os.path.isfile(os.path.join(path, marker)) for marker in markers)

    def clone(self, repo_url: str, destination: str):
        self.logger.info("Cloning %s into %s", repo_url, destination)
        self.run_cmd(["git", "clone", repo_url, destination])

    def pull(self):
        self.logger.info("Pulling latest changes...")
        self.run_cmd(["git", "pull"])

"""Filesystem helpers for certificates, CA bundles and host facts."""

import logging
import os
from typing import Callable, Sequence

from plumberinstaller.constants import (
    CA_CERT_SUFFIXES,
    CA_CERTS_DIR,
    CERT_FILES,
    DEFAULT_TIMEZONE,
)


class FileSystemService:
    """Encapsulates file lookups relative to the repository root."""

    def __init__(self, root: str, logger: logging.Logger):
        self.root = root
        self.logger = logger

    def path(self, relative: str) -> str:
        return os.path.join(self.root, relative)

    def exists(self, relative: str) -> bool:
        return os.path.isfile(self.path(relative))

    def cert_files_present(self, cert_files: Sequence[str] = CERT_FILES) -> bool:
        return all(self.exists(cert_file) for cert_file in cert_files)

    def ensure_ca_dir(self) -> str:
        ca_dir = self.path(CA_CERTS_DIR)
        os.makedirs(ca_dir, exist_ok=True)
        return ca_dir

    def count_ca_certificates(self) -> int:
        ca_dir = self.path(CA_CERTS_DIR)
        if not os.path.isdir(ca_dir):
            return 0
        count = 0
        for entry in os.scandir(ca_dir):
            if entry.is_file() and entry.name.endswith(CA_CERT_SUFFIXES):
                count += 1
        return count

    def detect_timezone(self, run_cmd: Callable, timezone_file: str = "/etc/timezone") -> str:
        result = run_cmd(
            ["timedatectl", "show", "--property=Timezone", "--value"],
            check=False,
            capture_output=True,
        )
        value = (result.stdout or "").strip()
        if result.returncode == 0 and value:
            return value

        try:
            with open(timezone_file, "r", encoding="utf-8") as file_obj:
                value = file_obj.read().strip()
        except OSError as exc:
            self.logger.debug("Could not read %s: %s", timezone_file, exc)
            value = ""
        return value or DEFAULT_TIMEZONE

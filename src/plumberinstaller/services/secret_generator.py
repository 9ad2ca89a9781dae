"""Random secret generation through `openssl rand`."""

import re
from typing import Callable, Optional

from plumberinstaller.constants import PASSWORD_BYTES, SECRET_KEY_BYTES
from plumberinstaller.errors import InstallerError
from plumberinstaller.errors_catalog import actionable_error
from plumberinstaller.models import GeneratedSecrets

_HEX_RE = re.compile(r"^[0-9a-f]+$")


class SecretService:
    def __init__(self, run_cmd: Callable):
        self.run_cmd = run_cmd

    def token_hex(self, nbytes: int) -> str:
        result = self.run_cmd(["openssl", "rand", "-hex", str(nbytes)], capture_output=True)
        value = (result.stdout or "").strip().lower()
        if len(value) != nbytes * 2 or not _HEX_RE.match(value):
            raise InstallerError(actionable_error("invalid_secret", nbytes=str(nbytes)))
        return value

    def generate(self, db_password: Optional[str] = None) -> GeneratedSecrets:
        """Generates all secrets, keeping an operator-supplied database password."""
        secret_key = self.token_hex(SECRET_KEY_BYTES)
        if not db_password:
            db_password = self.token_hex(PASSWORD_BYTES)
        redis_password = self.token_hex(PASSWORD_BYTES)
        return GeneratedSecrets(
            secret_key=secret_key,
            db_password=db_password,
            redis_password=redis_password,
        )

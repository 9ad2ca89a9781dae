"""Line-preserving key/value store for the deployment `.env` file."""

import io
import os
import re
import tempfile
from typing import Dict, List, Optional

from dotenv import dotenv_values

from plumberinstaller.errors import InstallerError

_ASSIGNMENT_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")


def quote_value(value: str) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_assignment(key: str, value: str) -> str:
    return f"{key}={quote_value(value)}"


def read_env_values(path: str) -> Dict[str, str]:
    """Parses a KEY=VALUE file without touching the process environment."""
    try:
        with open(path, "r", encoding="utf-8") as file_obj:
            text = file_obj.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise InstallerError(f"Could not read '{path}': {exc}") from exc
    return parse_env_text(text)


def parse_env_text(text: str) -> Dict[str, str]:
    parsed = dotenv_values(stream=io.StringIO(text), interpolate=False)
    return {key: value or "" for key, value in parsed.items()}


class EnvFile:
    """Keeps the raw lines of an env file and upserts individual keys in place.

    Existing keys keep their position, new keys are appended, and comments,
    blank lines and unknown keys are written back untouched.
    """

    def __init__(self, path: str, lines: Optional[List[str]] = None):
        self.path = path
        self.lines: List[str] = list(lines or [])

    @classmethod
    def load(cls, path: str) -> "EnvFile":
        if not os.path.exists(path):
            return cls(path)
        try:
            with open(path, "r", encoding="utf-8") as file_obj:
                return cls(path, file_obj.read().splitlines())
        except (OSError, UnicodeDecodeError) as exc:
            raise InstallerError(f"Could not read '{path}': {exc}") from exc

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n" if self.lines else ""

    @property
    def values(self) -> Dict[str, str]:
        return parse_env_text(self.text)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key, default)

    def has(self, key: str) -> bool:
        return any(self._key_of(line) == key for line in self.lines)

    def set(self, key: str, value: str):
        assignment = render_assignment(key, value)
        updated: List[str] = []
        replaced = False
        for line in self.lines:
            if self._key_of(line) != key:
                updated.append(line)
            elif not replaced:
                updated.append(assignment)
                replaced = True
        if not replaced:
            updated.append(assignment)
        self.lines = updated

    def save(self):
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, temp_path = tempfile.mkstemp(prefix=".env-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(self.text)
            if os.path.exists(self.path):
                os.chmod(temp_path, os.stat(self.path).st_mode & 0o777)
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise InstallerError(f"Could not write '{self.path}': {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    @staticmethod
    def _key_of(line: str) -> Optional[str]:
        match = _ASSIGNMENT_RE.match(line)
        return match.group(1) if match else None

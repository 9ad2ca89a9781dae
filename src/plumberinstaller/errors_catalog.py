"""Actionable error catalog for the Plumber installer."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "not_repository_root": {
        "what": "This command must be run from the Plumber platform repository root.",
        "next": "Change into the directory containing `compose.yml` and `versions.env`.",
    },
    "env_file_missing": {
        "what": "Configuration file not found: {path}",
        "next": "Run `plumberinstaller install` first.",
    },
    "missing_image_tags": {
        "what": "{path} is missing image tags.",
        "next": "Pull the latest repository revision or restore `FRONTEND_IMAGE_TAG` "
        "and `BACKEND_IMAGE_TAG` in {path}.",
    },
    "tool_required": {
        "what": "{tool} is required but not installed.",
        "next": "Install it: {url}",
    },
    "preflight_failed": {
        "what": "Pre-flight checks failed.",
        "next": "Fix the issues above and try again.",
    },
    "invalid_secret": {
        "what": "Secret generator returned an unexpected value.",
        "next": "Check that `openssl rand -hex {nbytes}` works on this host.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"

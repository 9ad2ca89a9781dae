"""Reads image tags from the repository versions manifest."""

import os

from plumberinstaller.constants import BACKEND_TAG_VAR, FRONTEND_TAG_VAR
from plumberinstaller.errors import InstallerError
from plumberinstaller.errors_catalog import actionable_error
from plumberinstaller.models import ImageVersions
from plumberinstaller.services.env_file import read_env_values


class VersionsService:
    def __init__(self, versions_file: str):
        self.versions_file = versions_file

    def read(self) -> ImageVersions:
        if not os.path.isfile(self.versions_file):
            raise InstallerError(actionable_error("missing_image_tags", path=self.versions_file))

        values = read_env_values(self.versions_file)
        frontend = values.get(FRONTEND_TAG_VAR, "").strip()
        backend = values.get(BACKEND_TAG_VAR, "").strip()
        if not frontend or not backend:
            raise InstallerError(actionable_error("missing_image_tags", path=self.versions_file))

        return ImageVersions(frontend=frontend, backend=backend)

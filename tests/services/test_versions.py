import pytest

from plumberinstaller.errors import InstallerError
from plumberinstaller.services.versions import VersionsService


def test_versions_service_reads_both_tags(tmp_path):
    manifest = tmp_path / "versions.env"
    manifest.write_text("FRONTEND_IMAGE_TAG=1.4.0\nBACKEND_IMAGE_TAG=\"2.3.1\"\n", encoding="utf-8")

    versions = VersionsService(str(manifest)).read()

    assert versions.frontend == "1.4.0"
    assert versions.backend == "2.3.1"


def test_versions_service_requires_both_tags(tmp_path):
    manifest = tmp_path / "versions.env"
    manifest.write_text("FRONTEND_IMAGE_TAG=1.4.0\nBACKEND_IMAGE_TAG=\n", encoding="utf-8")

    with pytest.raises(InstallerError, match="missing image tags"):
        VersionsService(str(manifest)).read()


def test_versions_service_missing_file_is_fatal(tmp_path):
    with pytest.raises(InstallerError, match="missing image tags"):
        VersionsService(str(tmp_path / "versions.env")).read()

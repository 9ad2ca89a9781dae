import subprocess

import pytest

from plumberinstaller.constants import CERT_FULLCHAIN, CERT_PRIVKEY
from plumberinstaller.errors import InstallerError
from plumberinstaller.services.config_loader import ConfigLoader
from plumberinstaller.services.env_file import EnvFile
from plumberinstaller.updater import Updater


class FakeCommandRunner:
    def __init__(self, fail_pull=False):
        self.fail_pull = fail_pull
        self.cwd = None
        self.calls = []

    def which(self, name):
        return True

    def run(self, cmd, check=True, capture_output=False, timeout=None):
        self.calls.append(cmd)
        if cmd == ["git", "pull"] and self.fail_pull:
            raise InstallerError("Command failed (1): git pull")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


class FakePrompts:
    def __init__(self, accept=True, choice=None):
        self.accept = accept
        self.choice_value = choice
        self.confirmations = []
        self.menus = []

    def confirm(self, message, default=True):
        self.confirmations.append(message)
        return self.accept

    def choice(self, message, options):
        self.menus.append(options)
        return self.choice_value


OLD_ENV = (
    "# Plumber configuration file\n"
    'DOMAIN_NAME="plumber.example.com"\n'
    "FRONTEND_IMAGE_TAG=1.0.0\n"
    "BACKEND_IMAGE_TAG=1.0.0\n"
    "CUSTOM_SETTING=keep-me\n"
)


@pytest.fixture
def repo(tmp_path):
    (tmp_path / "compose.yml").write_text("services: {}\n", encoding="utf-8")
    (tmp_path / "versions.env").write_text(
        "FRONTEND_IMAGE_TAG=1.4.0\nBACKEND_IMAGE_TAG=2.3.1\n",
        encoding="utf-8",
    )
    return tmp_path


def build_updater(root, prompts=None, runner=None):
    runner = runner or FakeCommandRunner()
    prompts = prompts or FakePrompts()
    updater = Updater(
        settings=ConfigLoader().build_settings({}),
        cwd=str(root),
        prompt_service=prompts,
        command_runner=runner,
    )
    return updater, prompts, runner


def _write_certs(root):
    (root / CERT_FULLCHAIN).parent.mkdir(parents=True)
    (root / CERT_FULLCHAIN).write_text("cert", encoding="utf-8")
    (root / CERT_PRIVKEY).write_text("key", encoding="utf-8")


def test_update_syncs_tags_in_place_and_restarts(repo):
    (repo / ".env").write_text(OLD_ENV + 'COMPOSE_PROFILES="letsencrypt,internal-db"\n', encoding="utf-8")
    updater, prompts, runner = build_updater(repo)

    assert updater.run() == 0

    lines = (repo / ".env").read_text(encoding="utf-8").splitlines()
    assert lines == [
        "# Plumber configuration file",
        'DOMAIN_NAME="plumber.example.com"',
        'FRONTEND_IMAGE_TAG="1.4.0"',
        'BACKEND_IMAGE_TAG="2.3.1"',
        "CUSTOM_SETTING=keep-me",
        'COMPOSE_PROFILES="letsencrypt,internal-db"',
    ]
    assert prompts.confirmations == []
    assert runner.calls == [["git", "pull"], ["docker", "compose", "up", "-d"]]


def test_update_twice_is_idempotent(repo):
    (repo / ".env").write_text(OLD_ENV + 'COMPOSE_PROFILES="letsencrypt"\n', encoding="utf-8")
    updater, _, _ = build_updater(repo)

    assert updater.run() == 0
    first = (repo / ".env").read_text(encoding="utf-8")
    assert updater.run() == 0

    assert (repo / ".env").read_text(encoding="utf-8") == first


def test_update_appends_missing_tags(repo):
    (repo / ".env").write_text('DOMAIN_NAME="x"\nCOMPOSE_PROFILES="letsencrypt"\n', encoding="utf-8")
    updater, _, _ = build_updater(repo)

    assert updater.run() == 0

    env_file = EnvFile.load(str(repo / ".env"))
    assert env_file.lines[-2:] == ['FRONTEND_IMAGE_TAG="1.4.0"', 'BACKEND_IMAGE_TAG="2.3.1"']


def test_migration_detects_custom_certs_with_default_database(repo):
    (repo / ".env").write_text(OLD_ENV, encoding="utf-8")
    _write_certs(repo)
    updater, prompts, _ = build_updater(repo)

    detected = updater.detect_profile(EnvFile.load(str(repo / ".env")))
    assert detected.render() == "custom-certs,internal-db"

    assert updater.run() == 0

    env_file = EnvFile.load(str(repo / ".env"))
    assert env_file.get("COMPOSE_PROFILES") == "custom-certs,internal-db"
    assert env_file.get("CERT_RESOLVER") == ""
    assert prompts.confirmations == ["Use the detected profile?"]


def test_migration_detects_letsencrypt_and_external_database(repo):
    (repo / ".env").write_text(OLD_ENV + 'JOBS_DB_HOST="db.internal"\n', encoding="utf-8")
    updater, _, _ = build_updater(repo)

    detected = updater.detect_profile(EnvFile.load(str(repo / ".env")))

    assert detected.render() == "letsencrypt"


def test_migration_treats_internal_service_host_as_internal(repo):
    (repo / ".env").write_text(OLD_ENV + 'JOBS_DB_HOST="postgres"\n', encoding="utf-8")
    updater, _, _ = build_updater(repo)

    assert updater.detect_profile(EnvFile.load(str(repo / ".env"))).internal_db is True


def test_migration_manual_override(repo):
    (repo / ".env").write_text(OLD_ENV, encoding="utf-8")
    prompts = FakePrompts(accept=False, choice=4)
    updater, _, _ = build_updater(repo, prompts=prompts)

    assert updater.run() == 0

    assert prompts.menus == [
        ["letsencrypt,internal-db", "letsencrypt", "custom-certs,internal-db", "custom-certs"]
    ]
    assert EnvFile.load(str(repo / ".env")).get("COMPOSE_PROFILES") == "custom-certs"


def test_update_requires_repository_root(tmp_path):
    (tmp_path / ".env").write_text(OLD_ENV, encoding="utf-8")
    updater, _, runner = build_updater(tmp_path)

    assert updater.run() == 1
    assert runner.calls == []


def test_update_requires_env_file(repo):
    updater, _, runner = build_updater(repo)

    assert updater.run() == 1
    assert runner.calls == []


def test_update_aborts_when_pull_fails(repo):
    (repo / ".env").write_text(OLD_ENV, encoding="utf-8")
    updater, _, runner = build_updater(repo, runner=FakeCommandRunner(fail_pull=True))

    assert updater.run() == 1
    assert (repo / ".env").read_text(encoding="utf-8") == OLD_ENV
    assert runner.calls == [["git", "pull"]]


def test_update_aborts_on_missing_image_tags(repo):
    (repo / ".env").write_text(OLD_ENV, encoding="utf-8")
    (repo / "versions.env").write_text("FRONTEND_IMAGE_TAG=1.4.0\n", encoding="utf-8")
    updater, _, runner = build_updater(repo)

    assert updater.run() == 1
    assert (repo / ".env").read_text(encoding="utf-8") == OLD_ENV
    assert ["docker", "compose", "up", "-d"] not in runner.calls

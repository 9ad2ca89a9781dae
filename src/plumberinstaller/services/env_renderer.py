"""Renders a complete `.env` from installer answers."""

from typing import List, Tuple

from plumberinstaller.constants import BACKEND_TAG_VAR, CERT_RESOLVER_VAR, FRONTEND_TAG_VAR, PROFILES_VAR
from plumberinstaller.models import GeneratedSecrets, ImageVersions, InstallAnswers
from plumberinstaller.services.env_file import render_assignment

_LOCAL_HEADER = (
    "###############################################################################",
    "# Plumber local configuration file                                            #",
    "# Documentation: https://getplumber.io/docs/installation/local-docker-compose #",
    "###############################################################################",
)
_PRODUCTION_HEADER = (
    "##########################################################################",
    "# Plumber configuration file                                             #",
    "# Documentation: https://getplumber.io/docs/installation/docker-compose/ #",
    "##########################################################################",
)

Section = Tuple[str, List[Tuple[str, str]]]


class EnvRenderer:
    def render(
        self,
        answers: InstallAnswers,
        secrets: GeneratedSecrets,
        versions: ImageVersions,
    ) -> str:
        if answers.is_local:
            header = _LOCAL_HEADER
            main = [
                ("JOBS_GITLAB_URL", answers.gitlab_url),
                ("ORGANIZATION", answers.organization),
            ]
        else:
            header = _PRODUCTION_HEADER
            main = [
                ("DOMAIN_NAME", answers.domain_name),
                ("JOBS_GITLAB_URL", answers.gitlab_url),
                ("ORGANIZATION", answers.organization),
            ]

        sections: List[Section] = [
            ("Main configuration", main),
            (
                "GitLab OIDC",
                [
                    ("GITLAB_OAUTH2_CLIENT_ID", answers.client_id),
                    ("GITLAB_OAUTH2_CLIENT_SECRET", answers.client_secret),
                ],
            ),
            (
                "Secrets",
                [
                    ("SECRET_KEY", secrets.secret_key),
                    ("JOBS_DB_PASSWORD", secrets.db_password),
                    ("JOBS_REDIS_PASSWORD", secrets.redis_password),
                ],
            ),
        ]

        if not answers.is_local and answers.profile is not None:
            sections.append(
                (
                    "Deployment profile",
                    [
                        (PROFILES_VAR, answers.profile.render()),
                        (CERT_RESOLVER_VAR, answers.profile.cert_resolver),
                    ],
                )
            )

        sections.append(
            (
                "Image versions (managed by the updater)",
                [
                    (FRONTEND_TAG_VAR, versions.frontend),
                    (BACKEND_TAG_VAR, versions.backend),
                ],
            )
        )

        db = answers.external_db
        if not answers.is_local and db is not None:
            sections.append(
                (
                    "External database configuration",
                    [
                        ("JOBS_DB_HOST", db.host),
                        ("JOBS_DB_PORT", db.port),
                        ("JOBS_DB_USER", db.user),
                        ("JOBS_DB_NAME", db.name),
                        ("JOBS_DB_SSLMODE", db.sslmode),
                        ("JOBS_DB_TIMEZONE", db.timezone),
                    ],
                )
            )

        lines = list(header)
        for title, pairs in sections:
            lines.append("")
            lines.append(f"# {title}")
            lines.extend(render_assignment(key, value) for key, value in pairs)
        return "\n".join(lines) + "\n"

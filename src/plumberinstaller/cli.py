import logging
import os

import click
from rich.logging import RichHandler

from .constants import CONFIG_FILE
from .errors import InstallerError
from .installer import Installer, console
from .services.command_runner import CommandRunner
from .services.config_loader import ConfigLoader
from .services.preflight import MODE_ALL, MODE_POST, MODE_PRE, PreflightService
from .updater import Updater


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.group()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML settings file. Defaults to {CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.pass_context
def main(ctx, config, verbose, log_file):
    """Install, validate and update a self-managed Plumber instance."""
    logger = logging.getLogger("plumberinstaller")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
        settings = config_loader.build_settings(config_values)
    except InstallerError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    ctx.obj = settings


@main.command()
@click.option("--pre", "mode", flag_value=MODE_PRE, help="Run only pre-config checks (no .env needed).")
@click.option("--post", "mode", flag_value=MODE_POST, help="Run only post-config checks (.env required).")
@click.option("--all", "mode", flag_value=MODE_ALL, default=True, help="Run all checks (default).")
@click.option("--local", is_flag=True, default=False, help="Check the local (no TLS) deployment.")
@click.pass_obj
def preflight(settings, mode, local):
    """Validate system requirements and configuration."""
    logger = logging.getLogger("plumberinstaller")
    cwd = os.getcwd()
    command_runner = CommandRunner(logger=logger, default_timeout=settings.command_timeout, cwd=cwd)
    service = PreflightService(
        settings=settings,
        root=cwd,
        logger=logger,
        console=console,
        command_runner=command_runner,
        local=local,
    )
    try:
        exit_code = service.run(mode)
    except InstallerError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        logger.error(str(exc))
        exit_code = 1
    raise SystemExit(exit_code)


@main.command()
@click.pass_obj
def install(settings):
    """Interactive setup wizard for a new instance."""
    raise SystemExit(Installer(settings=settings).run())


@main.command()
@click.pass_obj
def update(settings):
    """Update the instance to the latest released images."""
    raise SystemExit(Updater(settings=settings).run())


if __name__ == "__main__":
    main()

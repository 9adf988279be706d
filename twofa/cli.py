from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import click

from . import __version__
from .errors import Stopped, TwofaError
from .log import Logger
from .storage import StoragePaths
from .transaction import Transaction

DEFAULT_STORAGE_DIR = Path.home() / ".twofa"


def die(msg: str) -> None:
    raise click.ClickException(msg)


@dataclass(frozen=True)
class Cfg:
    paths: StoragePaths
    logger: Logger


def perform(action: Callable[[], object]) -> bool:
    """
    Run one transaction and translate its outcome for the shell.

    Returns False for an expected early exit (exit code 0, message printed);
    any TwofaError becomes a ClickException (exit code 1).
    """
    try:
        action()
    except Stopped as e:
        click.echo(str(e))
        return False
    except TwofaError as e:
        die(str(e))
    return True


def log_action(cfg: Cfg, action: str, application: Optional[str] = None) -> None:
    if application is None:
        cfg.logger.min(f"Action: {action}")
    else:
        cfg.logger.min(f"Action: {action}, App: {application}")


password_option = click.option(
    "--password", "-p",
    prompt=True,
    hide_input=True,
    envvar="TWOFA_PASSWORD",
    help="Storage password.",
)

application_option = click.option(
    "--application", "-a",
    required=True,
    help="Name of the application.",
)


@click.group(context_settings=dict(help_option_names=["--help"]))
@click.option(
    "--storage-dir",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=DEFAULT_STORAGE_DIR,
    envvar="TWOFA_STORAGE_DIR",
    show_default=True,
    help="Directory holding the encrypted storage.",
)
@click.option("--debug", "-d", count=True, help="Debug level, repeat for more (-d, -dd, -ddd).")
@click.version_option(__version__, prog_name="twofa")
@click.pass_context
def cli(ctx: click.Context, storage_dir: Path, debug: int) -> None:
    """twofa - TOTP codes from an encrypted local storage."""
    ctx.obj = Cfg(paths=StoragePaths(storage_dir), logger=Logger(debug))


@cli.command("init")
@click.option(
    "--password", "-p",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    envvar="TWOFA_PASSWORD",
    help="Password for the new storage.",
)
@click.pass_obj
def cmd_init(cfg: Cfg, password: str) -> None:
    """Create an empty encrypted storage."""
    log_action(cfg, "init")
    if perform(Transaction(cfg.paths, password, cfg.logger).init):
        click.echo(f"✅ Storage created at {cfg.paths.encrypted_file}")


@cli.command("set")
@application_option
@password_option
@click.option("--secret", "-s", default=None, help="Shared secret of the application.")
@click.option("--window", "-w", type=int, default=None, help="Time step in seconds.  [default: 30]")
@click.option("--hash", "-h", "hash_name", default=None, help="sha1, sha256 or sha512.  [default: sha512]")
@click.option("--encoding", "-e", default=None, help="base32, hex or ascii.  [default: base32]")
@click.pass_obj
def cmd_set(
    cfg: Cfg,
    application: str,
    password: str,
    secret: Optional[str],
    window: Optional[int],
    hash_name: Optional[str],
    encoding: Optional[str],
) -> None:
    """Store OTP settings for an application."""
    log_action(cfg, "set", application)
    tx = Transaction(cfg.paths, password, cfg.logger)
    if perform(lambda: tx.set(application, secret, window, hash_name, encoding)):
        click.echo(f"✅ Stored {application}")


@cli.command("get")
@application_option
@password_option
@click.pass_obj
def cmd_get(cfg: Cfg, application: str, password: str) -> None:
    """Print the current code of an application."""
    log_action(cfg, "get", application)
    tx = Transaction(cfg.paths, password, cfg.logger)
    perform(lambda: tx.get(application))


if __name__ == "__main__":
    cli()

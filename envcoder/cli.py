import functools
import logging
import os.path
import pathlib
import typing

import click

from . import __doc__, __version__
from .dotenv import format_value
from .envfile import EnvFile
from .policy import Disposition, Outcome, ResolutionPolicy
from .reconcile import Decide, Difference
from .utils import default_directory

log = logging.getLogger(__name__)


@functools.lru_cache()
def rel(path: pathlib.Path) -> str:
    """
    Convert a path to a relative Path.

    Returns a string as these should only be used for presentation.
    """
    return os.path.relpath(path.as_posix(), pathlib.Path.cwd().as_posix())


def enc(env: EnvFile) -> str:
    """Style a path to a encrypted file."""
    return click.style(rel(env.encrypted), fg='green')


def dec(env: EnvFile) -> str:
    """Style a path to a plaintext file."""
    return click.style(rel(env.plaintext), fg='red')


class PathType(click.Path):
    def convert(self, value, param, ctx):
        return pathlib.Path(super().convert(value, param, ctx))


def parse_policy(ctx, param, value) -> ResolutionPolicy:
    if isinstance(value, ResolutionPolicy):
        return value
    return ResolutionPolicy.parse(value)


password_option = click.option(
    '--password',
    envvar='ENVCODER_PASSWORD',
    default=None,
    type=click.STRING,
    help="Defaults to ENV_PASSWORD in the plaintext file, or a prompt.")


def password_for(env: EnvFile, password: typing.Optional[str], action: str) -> str:
    return env.password(password) or click.prompt(
        f"Enter encryption key to {action} {env}", hide_input=True)


def ask(env: EnvFile) -> Decide:
    """Build a decision callback that asks about each difference on the terminal."""

    def decide(difference: Difference) -> Outcome:
        if difference.disposition is Disposition.CHANGED:
            answer = click.prompt(
                f"Env variable {difference.key} has encrypted value (E) "
                f"{difference.encrypted} vs unencrypted value (U) {difference.local}",
                type=click.Choice(['E', 'U'], case_sensitive=False))
            return Outcome.ENCRYPTED if answer.upper() == 'E' else Outcome.LOCAL

        if difference.disposition is Disposition.ADDED_REMOTELY:
            message = (
                f"Env variable {difference.key} has encrypted value {difference.encrypted} "
                f"but does not exist in {env.plaintext.name} add (A) or skip (S)")
            add = Outcome.ENCRYPTED
        else:
            message = (
                f"Env variable {difference.key} with value {difference.local} found in "
                f"{env.plaintext.name} not in {env.encrypted.name} add (A) or skip (S)")
            add = Outcome.LOCAL

        answer = click.prompt(message, type=click.Choice(['A', 'S'], case_sensitive=False))
        return add if answer.upper() == 'A' else Outcome.OMIT

    return decide


@click.group(help=__doc__)
@click.option(
    '-p', '--path',
    type=PathType(
        file_okay=False,
        dir_okay=True,
        exists=True),
    default=default_directory,
    required=True,
    help="Defaults to the current git repository.")
@click.option(
    '-e', '--env-file',
    envvar='ENVCODER_ENV_FILE',
    default='.env',
    show_default=True,
    help="Name of the plaintext file in the directory.")
@click.option(
    '-o', '--encrypted-file',
    envvar='ENVCODER_ENCRYPTED_FILE',
    default='.env.enc',
    show_default=True,
    help="Name of the encrypted file in the directory.")
@click.option(
    '--check-gitignore/--no-check-gitignore',
    default=True,
    help="Check the plaintext file is excluded by .gitignore.")
@click.option(
    '-d', '--debug', 'debug',
    default=False,
    is_flag=True,
    help="Enable debug logging.")
@click.pass_context
def main(
        ctx,
        path: pathlib.Path,
        env_file: str,
        encrypted_file: str,
        check_gitignore: bool,
        debug: bool):
    logging.basicConfig(level=(logging.DEBUG if debug else logging.WARNING))
    ctx.obj = EnvFile.in_directory(path, env_file, encrypted_file)
    if check_gitignore:
        ctx.obj.run_gitignore_check()


@main.command()
def version():
    """Show the application version."""
    click.echo(f"envcoder {__version__}")


@main.command()
@password_option
@click.option(
    '--force/--no-force',
    default=False,
    help='Re-encrypt when the variables are unchanged.')
@click.pass_obj
def encrypt(env: EnvFile, password: typing.Optional[str], force: bool):
    """
    Create the encrypted file from the plaintext file.

    ENV_PASSWORD is never written to the encrypted file.
    """
    if env.encrypt(password_for(env, password, 'encode'), force=force):
        click.echo(f"Encrypted {enc(env)} from the plaintext in {dec(env)}")
    else:
        click.echo(f"Skipping {enc(env)} as no changes have been made in {dec(env)}")


@main.command()
@password_option
@click.option(
    '--resolve', 'policy',
    envvar='ENVCODER_RESOLVE',
    default='merge',
    show_default=True,
    callback=parse_policy,
    metavar='[overwrite|ignore|merge|prompt]',
    help="How to settle differences between the two files.")
@click.pass_obj
def decrypt(env: EnvFile, password: typing.Optional[str], policy: ResolutionPolicy):
    """Create or update the plaintext file from the encrypted file."""
    password = password_for(env, password, 'decode')
    decide = ask(env) if policy is ResolutionPolicy.PROMPT else None

    resolved = env.decrypt(password, policy, decide)
    click.echo(f"Decrypted {len(resolved)} variables from {enc(env)} to {dec(env)}")

    if policy is ResolutionPolicy.PROMPT and click.confirm(
            f"Do you wish to encrypt your newly generated {env}?", default=False):
        env.encrypt(password, force=True)
        click.echo(f"Encrypted {enc(env)} from the plaintext in {dec(env)}")


@main.command()
@password_option
@click.pass_obj
def compare(env: EnvFile, password: typing.Optional[str]):
    """Show variables in the plaintext file that differ from the encrypted file."""
    differences = env.compare(password_for(env, password, 'decode'))

    if not differences:
        click.echo(f"No differences between {dec(env)} and {enc(env)}")
        return

    for key, value in differences.items():
        click.echo(f"{key}={format_value(value)}")


@main.command()
@password_option
@click.pass_obj
def cat(env: EnvFile, password: typing.Optional[str]):
    """Print the contents of the encrypted file."""
    click.echo(env.contents(password_for(env, password, 'decode')), nl=False)

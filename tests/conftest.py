import pathlib
import typing

import attr
import click.testing
import pytest

import envcoder.cli
from envcoder.crypto import Cipher
from envcoder.envfile import EnvFile
from envcoder.policy import ResolutionPolicy

PASSWORD = 'password'


@pytest.fixture()
def directory(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path


@pytest.fixture()
def env(directory: pathlib.Path) -> EnvFile:
    return EnvFile.in_directory(directory, cipher=Cipher())


@pytest.fixture()
def invoke(directory: pathlib.Path):
    def invoke_func(
            arguments: typing.Sequence[str],
            input: typing.Optional[str] = None,
            exit_code: int = 0):
        assert all(isinstance(arg, str) for arg in arguments)
        runner = click.testing.CliRunner()
        result = runner.invoke(
            envcoder.cli.main,
            ['-p', directory.as_posix(), '--no-check-gitignore', *arguments],
            input=input)
        if result.exit_code != exit_code:
            message = f"Command envcoder {' '.join(arguments)} exited with {result.exit_code}:\n{result.output}"
            raise Exception(message) from result.exception
        return result.output.splitlines()

    return invoke_func


def write_encrypted(env: EnvFile, text: str, password: str = PASSWORD) -> None:
    env.encrypted.write_bytes(env.cipher.encrypt(text.encode('utf-8'), password))


@attr.s(frozen=True)
class Scenario:
    name: str = attr.ib()
    policy: ResolutionPolicy = attr.ib()
    encrypted: typing.Dict[str, str] = attr.ib()
    local: typing.Dict[str, str] = attr.ib()
    resolved: typing.Dict[str, str] = attr.ib()

    def __str__(self):
        return self.name


@pytest.fixture(params=[
    Scenario(
        'overwrite',
        ResolutionPolicy.OVERWRITE,
        encrypted={'VAR1': 'TEST', 'VAR2': 'TEST2'},
        local={'VAR1': 'CHANGED', 'VAR2': 'TEST2', 'VAR3': 'NEW'},
        resolved={'VAR1': 'TEST', 'VAR2': 'TEST2'},
    ),
    Scenario(
        'ignore',
        ResolutionPolicy.IGNORE,
        encrypted={'VAR3': 'TEST3', 'VAR4': 'TEST4'},
        local={'VAR1': 'TEST', 'VAR2': 'TEST2'},
        resolved={'VAR1': 'TEST', 'VAR2': 'TEST2'},
    ),
    Scenario(
        'merge',
        ResolutionPolicy.MERGE,
        encrypted={'VAR3': 'TEST3', 'VAR4': 'TEST4'},
        local={'VAR1': 'TEST', 'VAR2': 'TEST2'},
        resolved={'VAR1': 'TEST', 'VAR2': 'TEST2', 'VAR3': 'TEST3', 'VAR4': 'TEST4'},
    ),
    Scenario(
        'merge-conflict',
        ResolutionPolicy.MERGE,
        encrypted={'VAR1': 'TEST', 'VAR2': 'OLD'},
        local={'VAR2': 'NEW', 'VAR3': 'TEST3'},
        resolved={'VAR2': 'NEW', 'VAR3': 'TEST3', 'VAR1': 'TEST'},
    ),
], ids=str)
def scenario(request) -> Scenario:
    return request.param

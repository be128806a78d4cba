import pathlib
import typing

import click
import git


def find_git_directory() -> typing.Optional[pathlib.Path]:
    try:
        repo = git.Repo(search_parent_directories=True)
    except git.exc.InvalidGitRepositoryError:
        return None
    return pathlib.Path(repo.working_dir)


def default_directory() -> pathlib.Path:
    """The enclosing git repository, or the current directory outside one."""
    return find_git_directory() or pathlib.Path.cwd()


def in_git_repository(path: pathlib.Path) -> bool:
    try:
        git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return False
    return True


class EnvcoderException(click.ClickException):
    pass


class ParseError(EnvcoderException):
    def __init__(self, line: int, message: str):
        super().__init__(f"Line {line}: {message}")
        self.line = line


class AuthenticationError(EnvcoderException):
    pass


class ConfigurationError(EnvcoderException):
    pass

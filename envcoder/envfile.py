import logging
import pathlib
import subprocess
import typing

import attr

from . import dotenv
from .crypto import Cipher
from .dotenv import ConfigMapping
from .policy import ResolutionPolicy
from .reconcile import PASSWORD_KEY, Decide, compare, reconcile
from .utils import AuthenticationError, ConfigurationError, EnvcoderException, in_git_repository

log = logging.getLogger(__name__)


@attr.s(frozen=True, kw_only=True)
class EnvFile:
    """A plaintext .env file paired with its encrypted counterpart."""

    plaintext: pathlib.Path = attr.ib()
    encrypted: pathlib.Path = attr.ib()
    cipher: Cipher = attr.ib(factory=Cipher)

    @classmethod
    def in_directory(
            cls,
            directory: pathlib.Path,
            plaintext: str = '.env',
            encrypted: str = '.env.enc',
            cipher: typing.Optional[Cipher] = None) -> 'EnvFile':
        return cls(
            plaintext=directory / plaintext,
            encrypted=directory / encrypted,
            cipher=cipher or Cipher())

    def __str__(self):
        return self.plaintext.name

    def local(self) -> ConfigMapping:
        if not self.plaintext.exists():
            log.debug(f"{self.plaintext} does not exist")
            return {}
        log.debug(f"Reading contents of {self.plaintext}")
        return dotenv.parse(self.plaintext.read_text(encoding='utf-8'))

    def password(self, explicit: typing.Optional[str] = None) -> typing.Optional[str]:
        """Use an explicit password, falling back to ENV_PASSWORD in the plaintext."""
        if explicit:
            return explicit
        return self.local().get(PASSWORD_KEY) or None

    def contents(self, password: str) -> str:
        if not self.encrypted.exists():
            raise EnvcoderException(f"Encrypted file {self.encrypted} does not exist")
        log.debug(f"Reading contents of {self.encrypted}")
        return self.cipher.decrypt(self.encrypted.read_bytes(), password).decode('utf-8')

    def remote(self, password: str) -> ConfigMapping:
        return dotenv.parse(self.contents(password))

    def unchanged(self, mapping: ConfigMapping, password: str) -> bool:
        try:
            return self.remote(password) == mapping
        except AuthenticationError as error:
            raise AuthenticationError(
                f"{error.message}. Use --force to replace {self.encrypted.name} "
                f"without checking its contents") from error

    def encrypt(self, password: str, force: bool = False) -> bool:
        """
        Write the plaintext, without ENV_PASSWORD, to the encrypted file.

        Returns False if the encrypted file already held the same values and
        was left alone.
        """
        if not self.plaintext.exists():
            raise EnvcoderException(f"Plaintext {self.plaintext} does not exist")

        mapping = self.local()
        mapping.pop(PASSWORD_KEY, None)

        if not force and self.encrypted.exists() and self.unchanged(mapping, password):
            log.info(f"Skipping {self.encrypted} as {self.plaintext} is unchanged")
            return False

        log.info(f"Encrypting {len(mapping)} variables from {self.plaintext} to {self.encrypted}")
        text = dotenv.format(mapping)
        self.encrypted.write_bytes(self.cipher.encrypt(text.encode('utf-8'), password))
        return True

    def decrypt(
            self,
            password: str,
            policy: ResolutionPolicy,
            decide: typing.Optional[Decide] = None) -> ConfigMapping:
        """
        Reconcile the encrypted file into the plaintext file.

        A missing plaintext file is replaced by the encrypted values whatever
        the policy. A local ENV_PASSWORD line keeps its place among the local
        variables.
        """
        if not isinstance(policy, ResolutionPolicy):
            raise ConfigurationError(f"Unknown resolution policy {policy!r}")
        if policy is ResolutionPolicy.PROMPT and decide is None:
            raise ConfigurationError("The prompt policy needs a decision callback")

        remote = self.remote(password)

        if self.plaintext.exists():
            local = self.local()
            resolved = reconcile(remote, local, policy, decide)
        else:
            log.info(f"{self.plaintext} does not exist, writing all encrypted values")
            local = {}
            resolved = {k: v for k, v in remote.items() if k != PASSWORD_KEY}

        output = keep_password(resolved, local)
        log.info(f"Writing {len(resolved)} variables to {self.plaintext}")
        self.plaintext.write_text(dotenv.format(output), encoding='utf-8')
        return resolved

    def compare(self, password: str) -> ConfigMapping:
        return compare(self.remote(password), self.local())

    def run_gitignore_check(self):
        if not in_git_repository(self.plaintext.parent):
            log.info(f"Skipping .gitignore check as {self.plaintext.parent} is not in a git repository")
            return

        log.info(f"Checking {self.plaintext} is ignored by git")
        result = subprocess.run(
            ('git', 'check-ignore', '--quiet', str(self.plaintext)),
            cwd=str(self.plaintext.parent),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding='utf-8')
        if result.returncode == 1:
            raise EnvcoderException(
                f"Plaintext file not excluded by .gitignore: {self.plaintext}")
        if result.returncode != 0:
            for line in result.stderr.splitlines():
                log.error(line)
            raise EnvcoderException(f"git check-ignore failed for {self.plaintext}")


def keep_password(resolved: ConfigMapping, local: ConfigMapping) -> ConfigMapping:
    """
    Put a local ENV_PASSWORD back into the resolved variables.

    It goes before the first resolved key that followed it in the local
    file, or last if no such key survived.
    """
    if PASSWORD_KEY not in local:
        return dict(resolved)

    keys = list(local)
    following = set(keys[keys.index(PASSWORD_KEY) + 1:])

    output: ConfigMapping = {}
    for key, value in resolved.items():
        if PASSWORD_KEY not in output and key in following:
            output[PASSWORD_KEY] = local[PASSWORD_KEY]
        output[key] = value
    output.setdefault(PASSWORD_KEY, local[PASSWORD_KEY])
    return output

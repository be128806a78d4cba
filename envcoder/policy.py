"""
How each kind of difference is settled by the non-interactive policies.
"""

import enum
import typing

from .utils import ConfigurationError


class Disposition(enum.Enum):
    UNCHANGED = 'unchanged'
    CHANGED = 'changed'
    ADDED_LOCALLY = 'added-locally'
    ADDED_REMOTELY = 'added-remotely'


class Outcome(enum.Enum):
    ENCRYPTED = 'encrypted'
    LOCAL = 'local'
    OMIT = 'omit'


class ResolutionPolicy(enum.Enum):
    OVERWRITE = 'overwrite'
    IGNORE = 'ignore'
    MERGE = 'merge'
    PROMPT = 'prompt'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: str) -> 'ResolutionPolicy':
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ', '.join(policy.value for policy in cls)
            raise ConfigurationError(
                f"Unknown resolution policy {value!r} (expected one of {choices})")


OUTCOMES: typing.Dict[ResolutionPolicy, typing.Dict[Disposition, Outcome]] = {
    # The encrypted file is authoritative.
    ResolutionPolicy.OVERWRITE: {
        Disposition.UNCHANGED: Outcome.LOCAL,
        Disposition.CHANGED: Outcome.ENCRYPTED,
        Disposition.ADDED_LOCALLY: Outcome.OMIT,
        Disposition.ADDED_REMOTELY: Outcome.ENCRYPTED,
    },
    # The local file is authoritative.
    ResolutionPolicy.IGNORE: {
        Disposition.UNCHANGED: Outcome.LOCAL,
        Disposition.CHANGED: Outcome.LOCAL,
        Disposition.ADDED_LOCALLY: Outcome.LOCAL,
        Disposition.ADDED_REMOTELY: Outcome.OMIT,
    },
    # Keep additions from both sides, prefer local values on conflict.
    ResolutionPolicy.MERGE: {
        Disposition.UNCHANGED: Outcome.LOCAL,
        Disposition.CHANGED: Outcome.LOCAL,
        Disposition.ADDED_LOCALLY: Outcome.LOCAL,
        Disposition.ADDED_REMOTELY: Outcome.ENCRYPTED,
    },
    ResolutionPolicy.PROMPT: {
        Disposition.UNCHANGED: Outcome.LOCAL,
    },
}


def outcome(disposition: Disposition, policy: ResolutionPolicy) -> typing.Optional[Outcome]:
    """
    Select the outcome for a disposition under a policy.

    Returns None when the policy leaves the choice to a decision callback.
    """
    if not isinstance(policy, ResolutionPolicy):
        raise ConfigurationError(f"Unknown resolution policy {policy!r}")
    return OUTCOMES[policy].get(disposition)

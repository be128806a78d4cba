"""
Compare the mapping held in an encrypted file with the local plaintext
mapping, and settle the differences under a resolution policy.
"""

import logging
import typing

import attr

from .dotenv import ConfigMapping
from .policy import Disposition, Outcome, ResolutionPolicy, outcome
from .utils import ConfigurationError

log = logging.getLogger(__name__)

PASSWORD_KEY = 'ENV_PASSWORD'

DECISIONS: typing.Dict[Disposition, typing.Tuple[Outcome, ...]] = {
    Disposition.UNCHANGED: (Outcome.LOCAL,),
    Disposition.CHANGED: (Outcome.ENCRYPTED, Outcome.LOCAL),
    Disposition.ADDED_LOCALLY: (Outcome.LOCAL, Outcome.OMIT),
    Disposition.ADDED_REMOTELY: (Outcome.ENCRYPTED, Outcome.OMIT),
}


@attr.s(frozen=True, kw_only=True)
class Difference:
    key: str = attr.ib()
    encrypted: typing.Optional[str] = attr.ib()
    local: typing.Optional[str] = attr.ib()
    disposition: Disposition = attr.ib()

    def __str__(self):
        return f"{self.key} ({self.disposition.value})"

    @property
    def outcomes(self) -> typing.Tuple[Outcome, ...]:
        """The outcomes a decision may pick for this difference."""
        return DECISIONS[self.disposition]

    def value(self, chosen: Outcome) -> typing.Optional[str]:
        if chosen is Outcome.ENCRYPTED:
            return self.encrypted
        if chosen is Outcome.LOCAL:
            return self.local
        return None


Decide = typing.Callable[[Difference], Outcome]


def classify(encrypted: typing.Optional[str], local: typing.Optional[str]) -> Disposition:
    if encrypted is None:
        return Disposition.ADDED_LOCALLY
    if local is None:
        return Disposition.ADDED_REMOTELY
    if encrypted == local:
        return Disposition.UNCHANGED
    return Disposition.CHANGED


def diff(
        encrypted: ConfigMapping,
        local: ConfigMapping,
        encrypted_first: bool = False) -> typing.List[Difference]:
    """
    Classify every key present on either side.

    Keys follow the local mapping's order, then keys only present in the
    encrypted mapping in its order. With encrypted_first the encrypted
    mapping leads and local-only keys follow.
    """
    first, second = (encrypted, local) if encrypted_first else (local, encrypted)
    keys = [*first, *(key for key in second if key not in first)]

    return [Difference(
        key=key,
        encrypted=encrypted.get(key),
        local=local.get(key),
        disposition=classify(encrypted.get(key), local.get(key)),
    ) for key in keys if key != PASSWORD_KEY]


def resolve(
        differences: typing.Sequence[Difference],
        policy: ResolutionPolicy,
        decide: typing.Optional[Decide] = None) -> ConfigMapping:
    if not isinstance(policy, ResolutionPolicy):
        raise ConfigurationError(f"Unknown resolution policy {policy!r}")

    if policy is ResolutionPolicy.PROMPT and decide is None:
        raise ConfigurationError("The prompt policy needs a decision callback")

    resolved: ConfigMapping = {}
    for difference in differences:
        if difference.key == PASSWORD_KEY:
            continue

        chosen = outcome(difference.disposition, policy)
        if chosen is None:
            assert decide is not None
            chosen = decide(difference)
            if chosen not in difference.outcomes:
                raise ConfigurationError(
                    f"Decision {chosen!r} does not apply to {difference}")

        log.debug(f"Resolved {difference} as {chosen.value}")
        if chosen is not Outcome.OMIT:
            value = difference.value(chosen)
            assert value is not None, f"No {chosen.value} value for {difference}"
            resolved[difference.key] = value

    log.info(f"Resolved {len(differences)} keys to {len(resolved)} using {policy}")
    return resolved


def reconcile(
        encrypted: ConfigMapping,
        local: ConfigMapping,
        policy: ResolutionPolicy,
        decide: typing.Optional[Decide] = None) -> ConfigMapping:
    """
    Diff and resolve two mappings.

    Prompts walk the encrypted mapping first, asking about local-only keys
    last.
    """
    differences = diff(
        encrypted, local, encrypted_first=(policy is ResolutionPolicy.PROMPT))
    return resolve(differences, policy, decide)


def compare(encrypted: ConfigMapping, local: ConfigMapping) -> ConfigMapping:
    """Local values that differ from, or are missing in, the encrypted mapping."""
    return {
        difference.key: typing.cast(str, difference.local)
        for difference in diff(encrypted, local)
        if difference.disposition in (Disposition.CHANGED, Disposition.ADDED_LOCALLY)
    }

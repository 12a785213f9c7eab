"""Grouping rule: decide which variant of an experiment a subject sees.

A decision runs three stages in order:

    preconditions_met -> resolve -> decide

`resolve` may short-circuit with a final outcome (forced variant for
internal accounts, False for opted-out countries). Otherwise it hands a
rollout rate to the bucketer. The outcome is False or a variant name.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from src.ab.assignment import HashRandomizer, Randomizer, decide
from src.ab.experiment import SEND_SMS_INSTALL_LINK, Experiment
from src.ab.rollout import RolloutPolicy, as_country_rollout
from src.ab.subject import Account, Subject

logger = logging.getLogger(__name__)

# QA and staff accounts always see the forced variant
FORCED_EMAIL_DOMAINS = (
    "softvision.com",
    "softvision.ro",
    "mozilla.com",
    "mozilla.org",
)

Outcome = str | bool


@dataclass(frozen=True)
class Continue:
    """Resolution that defers to the bucketer with the given rate."""

    rollout_rate: float


def preconditions_met(
    account: Account | None,
    country: str | None,
    unique_user_id: str | None,
) -> bool:
    return bool(account) and bool(country) and bool(unique_user_id)


def is_forced_email(email: str | None, domains: Iterable[str] = FORCED_EMAIL_DOMAINS) -> bool:
    """True if the email's domain is, or is a subdomain of, an allow-listed domain."""
    if not email or "@" not in email:
        return False
    domain = email.rsplit("@", 1)[1].strip().lower()
    for allowed in domains:
        allowed = allowed.lower()
        if domain == allowed or domain.endswith("." + allowed):
            return True
    return False


def resolve(
    account: Account,
    country: str,
    feature_flags: Mapping | None,
    policy: RolloutPolicy,
    forced_domains: Iterable[str] = FORCED_EMAIL_DOMAINS,
    forced_variant: str = SEND_SMS_INSTALL_LINK.forced_variant,
) -> Outcome | Continue:
    """Apply overrides in precedence order.

    Feature flags, when supplied at all, replace the rollout policy: a
    country missing from them, or present without a rate, is opted out.
    """
    if is_forced_email(account.email, forced_domains):
        return forced_variant

    if feature_flags is not None:
        entry = feature_flags.get(country)
        rate = as_country_rollout(entry).rollout_rate if entry is not None else None
        if rate is None:
            return False
        return Continue(rate)

    rate = policy.rate_for(country)
    if rate is None:
        return False
    return Continue(rate)


class GroupingRule:
    """Assigns subjects to the variants of one experiment.

    The rollout policy is passed to every `choose` call and read at that
    moment; the rule itself holds no per-decision state.
    """

    def __init__(
        self,
        experiment: Experiment = SEND_SMS_INSTALL_LINK,
        randomizer: Randomizer | None = None,
        forced_domains: Iterable[str] = FORCED_EMAIL_DOMAINS,
    ) -> None:
        self.experiment = experiment
        self.randomizer = randomizer or HashRandomizer(experiment.experiment_id)
        self.forced_domains = tuple(forced_domains)

    def choose(self, subject: Subject, policy: RolloutPolicy) -> Outcome:
        if not preconditions_met(subject.account, subject.country, subject.unique_user_id):
            logger.debug("%s: preconditions not met", self.experiment.experiment_id)
            return False

        resolution = resolve(
            subject.account,
            subject.country,
            subject.feature_flags,
            policy,
            self.forced_domains,
            self.experiment.forced_variant,
        )
        if not isinstance(resolution, Continue):
            logger.debug(
                "%s: country=%s resolved by override to %r",
                self.experiment.experiment_id,
                subject.country,
                resolution,
            )
            return resolution

        return decide(
            resolution.rollout_rate,
            subject.unique_user_id,
            self.experiment.variants,
            self.randomizer,
        )

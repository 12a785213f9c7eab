"""Simulation engine that runs a grouping rule over synthetic visitors.

Each simulated visitor gets a country, optionally an account with an
email address, and a stable unique id. The grouping rule then decides
their variant. Visitor generation is seeded, and assignment is
deterministic, so the whole run is reproducible.
"""

import random
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass

from src.ab.grouping import GroupingRule
from src.ab.rollout import RolloutPolicy, default_policy
from src.ab.subject import Account, Subject
from src.simulator.config import SimulationConfig


@dataclass(frozen=True)
class AssignmentRecord:
    unique_user_id: str
    country: str
    email: str | None
    outcome: str | bool


def generate_subjects(
    config: SimulationConfig | None = None,
    feature_flags: Mapping | None = None,
) -> list[Subject]:
    if config is None:
        config = SimulationConfig()

    rng = random.Random(config.seed)
    subjects: list[Subject] = []
    for i in range(config.num_users):
        unique_user_id = f"user_{i:05d}"
        country = rng.choices(config.countries, weights=config.country_weights, k=1)[0]
        account = None
        if rng.random() >= config.prob_anonymous:
            domain = rng.choices(
                config.email_domains, weights=config.email_domain_weights, k=1,
            )[0]
            account = Account(email=f"{unique_user_id}@{domain}")
        subjects.append(Subject(
            account=account,
            country=country,
            unique_user_id=unique_user_id,
            feature_flags=feature_flags,
        ))
    return subjects


def simulate_assignments(
    config: SimulationConfig | None = None,
    rule: GroupingRule | None = None,
    policy: RolloutPolicy | None = None,
    feature_flags: Mapping | None = None,
) -> list[AssignmentRecord]:
    """Assign every simulated visitor and return one record per visitor."""
    if rule is None:
        rule = GroupingRule()
    if policy is None:
        policy = default_policy()

    records = []
    for subject in generate_subjects(config, feature_flags):
        records.append(AssignmentRecord(
            unique_user_id=subject.unique_user_id,
            country=subject.country,
            email=subject.account.email if subject.account else None,
            outcome=rule.choose(subject, policy),
        ))
    return records


def summarize(records: list[AssignmentRecord]) -> dict[str, Counter]:
    """Count outcomes per country. Excluded visitors are counted as "excluded"."""
    summary: dict[str, Counter] = {}
    for r in records:
        label = r.outcome if r.outcome is not False else "excluded"
        summary.setdefault(r.country, Counter())[label] += 1
    return summary

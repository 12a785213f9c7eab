"""Deterministic, hash-based randomization for grouping rules.

A decision has two phases, both driven by the same unique user id:

1. Bernoulli trial: does the user take part in the experiment at all?
2. Uniform choice: which of the experiment's variants does the user get?

No random number generator state is kept. Every value is derived from a
SHA-256 hash of (salt, key), where the salt is the experiment id, so:
- Consistency: the same user always gets the same outcome
- Independence: the same user is bucketed independently per experiment
- No coordination: no database lookups needed for assignment
"""

import hashlib
import logging
from collections.abc import Sequence
from typing import Protocol

from src.ab.experiment import validate_variants

logger = logging.getLogger(__name__)


def _hash_int(hash_input: str) -> int:
    hash_bytes = hashlib.sha256(hash_input.encode()).digest()
    # First 8 bytes as unsigned big-endian int
    return int.from_bytes(hash_bytes[:8], "big")


def hash_unit(key: str, salt: str = "") -> float:
    """Map (salt, key) to a stable value in [0.0, 1.0)."""
    # Keep 53 bits so the division is exact and never rounds up to 1.0
    return (_hash_int(f"{salt}:{key}") >> 11) / (2**53)


def bernoulli_trial(rate: float, key: str, salt: str = "") -> bool:
    """Return True iff the hashed value for `key` is below `rate`.

    The hashed value lies in [0, 1), so a rate of 1.0 always succeeds and
    a rate of 0.0 never does.
    """
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"Rollout rate must be within [0, 1], got {rate}")
    return hash_unit(key, salt) < rate


def uniform_choice(choices: Sequence[str], key: str, salt: str = "") -> str:
    """Pick one of `choices` with equal probability, stable per key.

    Uses a separate hash derivation from `bernoulli_trial` so the variant
    is not correlated with participation.
    """
    validate_variants(choices)
    return choices[_hash_int(f"{salt}:uniform:{key}") % len(choices)]


class Randomizer(Protocol):
    def bernoulli_trial(self, rate: float, key: str) -> bool: ...

    def uniform_choice(self, choices: Sequence[str], key: str) -> str: ...


class HashRandomizer:
    """Default randomizer, namespaced by an experiment-specific salt."""

    def __init__(self, salt: str = "") -> None:
        self.salt = salt

    def bernoulli_trial(self, rate: float, key: str) -> bool:
        return bernoulli_trial(rate, key, self.salt)

    def uniform_choice(self, choices: Sequence[str], key: str) -> str:
        return uniform_choice(choices, key, self.salt)


def decide(
    rollout_rate: float,
    unique_user_id: str,
    variants: Sequence[str],
    randomizer: Randomizer,
) -> str | bool:
    """Run the participation trial, then choose a variant.

    Returns False when the user is not selected for the trial, otherwise
    the chosen variant name. An empty variant list raises
    ExperimentConfigError even for users who would not participate.
    """
    validate_variants(variants)
    if not randomizer.bernoulli_trial(rollout_rate, unique_user_id):
        logger.debug("decide rate=%s user=%s participating=False", rollout_rate, unique_user_id)
        return False

    variant = randomizer.uniform_choice(list(variants), unique_user_id)
    logger.debug(
        "decide rate=%s user=%s participating=True variant=%s",
        rollout_rate,
        unique_user_id,
        variant,
    )
    return variant

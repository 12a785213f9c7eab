"""Experiment definitions for grouping rules.

Each experiment has a unique ID (also used to namespace its hashes),
an ordered list of variant names, and a forced variant delivered to
allow-listed accounts without any randomization.
"""

from dataclasses import dataclass


class ExperimentConfigError(ValueError):
    """Raised when an experiment or its variant list is misconfigured."""


def validate_variants(variants) -> None:
    if not variants:
        raise ExperimentConfigError("Experiment must have at least 1 variant")
    for name in variants:
        if not isinstance(name, str) or not name.strip():
            raise ExperimentConfigError(f"Variant names must be non-empty strings, got {name!r}")
    if len(variants) != len(set(variants)):
        raise ExperimentConfigError("Variant names must be unique")


@dataclass(frozen=True)
class Experiment:
    experiment_id: str
    name: str
    variants: tuple[str, ...]
    forced_variant: str

    def __post_init__(self):
        if not self.experiment_id:
            raise ExperimentConfigError("Experiment id must not be empty")
        # Lists are accepted but stored as a tuple to keep the definition hashable
        object.__setattr__(self, "variants", tuple(self.variants))
        validate_variants(self.variants)
        if not self.forced_variant:
            raise ExperimentConfigError("Forced variant must not be empty")


# SMS install link experiment served on the index page
SEND_SMS_INSTALL_LINK = Experiment(
    experiment_id="sendSmsInstallLink",
    name="Send SMS Install Link",
    variants=("control", "signinCodes"),
    forced_variant="signinCodes",
)

"""CLI entrypoint: simulate SMS install link assignments and print the split.

Usage:
    python -m src.simulator.generate
    python -m src.simulator.generate --users 5000 --seed 7
    python -m src.simulator.generate --flags '{"smsCountries": {"GB": {"rolloutRate": 0}}}'
"""

import argparse
import json
import logging

from pydantic import ValidationError

from src.ab.experiment import SEND_SMS_INSTALL_LINK
from src.ab.grouping import GroupingRule
from src.ab.rollout import FeatureFlagDocument, default_policy
from src.simulator.config import SimulationConfig
from src.simulator.engine import simulate_assignments, summarize


def _parse_flags(parser: argparse.ArgumentParser, raw: str | None) -> dict | None:
    """Return the SMS country overrides from a feature flag document."""
    if raw is None:
        return None
    try:
        document = FeatureFlagDocument.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        parser.error(f"--flags is not valid JSON: {exc}")
    except ValidationError as exc:
        parser.error(f"--flags is not a valid feature flag document:\n{exc}")
    return document.sms_countries


def main(args: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate experiment assignments")
    parser.add_argument("--users", type=int, default=2000, help="Number of users")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--flags", type=str, default=None,
        help='Feature flags as JSON, e.g. {"smsCountries": {"GB": {"rolloutRate": 1}}}',
    )
    parser.add_argument("--verbose", action="store_true", help="Log every decision")
    opts = parser.parse_args(args)
    feature_flags = _parse_flags(parser, opts.flags)

    logging.basicConfig(level=logging.DEBUG if opts.verbose else logging.WARNING)

    config = SimulationConfig(num_users=opts.users, seed=opts.seed)
    experiment = SEND_SMS_INSTALL_LINK

    print(f"Experiment: {experiment.name} ({experiment.experiment_id})")
    print(f"  variants: {', '.join(experiment.variants)}")
    if feature_flags is not None:
        overrides = {code: entry.rollout_rate for code, entry in sorted(feature_flags.items())}
        print(f"  feature flag overrides: {overrides}")

    print(f"Simulating {config.num_users} users (seed={config.seed})...")
    records = simulate_assignments(
        config, GroupingRule(experiment), default_policy(), feature_flags,
    )

    print("Outcome breakdown by country:")
    for country, counts in sorted(summarize(records).items()):
        total = sum(counts.values())
        parts = ", ".join(f"{label}={n} ({n / total:.0%})" for label, n in sorted(counts.items()))
        print(f"  {country}: {parts}")
    print("Done.")


if __name__ == "__main__":
    main()

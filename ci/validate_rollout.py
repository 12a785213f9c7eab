"""CI validation: verify a rollout configuration document before deploy.

The document holds the per-country rollout policy and, optionally, the
SMS country feature flag overrides:

    {
        "rollout": {"GB": {"rolloutRate": 0.5}, "AU": {}},
        "smsCountries": {"US": {"rolloutRate": 1}}
    }

If anything is wrong the script exits non-zero and fails the build.

Usage:
    python ci/validate_rollout.py
    python ci/validate_rollout.py --data config/rollout.json
"""

import argparse
import json
import sys
from pathlib import Path

from pydantic import ConfigDict, ValidationError

from src.ab.rollout import CountryRollout

REQUIRED_TOP_KEYS = {"rollout"}
OPTIONAL_TOP_KEYS = {"smsCountries"}


class StrictCountryRollout(CountryRollout):
    """Same rules the loader applies, minus type coercion and extra fields."""

    model_config = ConfigDict(extra="forbid", strict=True)


def _entry_errors(prefix: str, exc: ValidationError) -> list[str]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"])
        if err["type"] == "extra_forbidden":
            errors.append(f"{prefix} has unknown field: {field}")
        elif err["type"] in ("float_type", "float_parsing"):
            errors.append(f"{prefix} {field} is not a number: {err['input']!r}")
        else:
            errors.append(f"{prefix} {field} invalid: {err['msg']} (got {err['input']!r})")
    return errors


def _validate_countries(section: str, countries) -> list[str]:
    errors = []
    if not isinstance(countries, dict):
        return [f"{section} must be an object keyed by country code"]

    for code, entry in countries.items():
        if len(code) != 2 or not code.isalpha() or not code.isupper():
            errors.append(f"{section}: invalid country code {code!r}")
        if not isinstance(entry, dict):
            errors.append(f"{section}.{code} must be an object")
            continue

        try:
            StrictCountryRollout.model_validate(entry)
        except ValidationError as exc:
            errors.extend(_entry_errors(f"{section}.{code}", exc))

    return errors


def validate(data: dict) -> list[str]:
    """Return a list of validation errors (empty = pass)."""
    errors = []

    for key in sorted(REQUIRED_TOP_KEYS):
        if key not in data:
            errors.append(f"Missing top-level key: {key}")
    for key in sorted(set(data) - REQUIRED_TOP_KEYS - OPTIONAL_TOP_KEYS):
        errors.append(f"Unknown top-level key: {key}")

    if "rollout" in data:
        errors.extend(_validate_countries("rollout", data["rollout"]))
    if "smsCountries" in data:
        errors.extend(_validate_countries("smsCountries", data["smsCountries"]))

    return errors


def main(args: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Validate a rollout configuration")
    parser.add_argument(
        "--data",
        default="config/rollout.json",
        help="Path to rollout configuration JSON",
    )
    opts = parser.parse_args(args)

    path = Path(opts.data)
    if not path.exists():
        print(f"FAIL: {opts.data} not found.")
        sys.exit(1)

    data = json.loads(path.read_text())
    errors = validate(data)

    if errors:
        print(f"FAIL: {len(errors)} validation error(s):")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)

    rollout = data["rollout"]
    enabled = [code for code, entry in rollout.items() if entry.get("rolloutRate")]
    print("PASS: Rollout configuration validated")
    print(f"  Countries configured: {len(rollout)}")
    print(f"  Countries rolled out: {', '.join(sorted(enabled)) or 'none'}")
    if "smsCountries" in data:
        print(f"  Feature flag overrides: {len(data['smsCountries'])} countries")


if __name__ == "__main__":
    main()

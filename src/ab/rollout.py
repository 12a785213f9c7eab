"""Per-country rollout configuration and feature flag overrides.

Both are plain JSON documents on the wire, using camelCase keys:

    {"GB": {"rolloutRate": 0.5}, "US": {"rolloutRate": 1.0}, "AU": {}}

A RolloutPolicy is mutable and is read at decision time, so a change to
a country's rate is seen by the very next decision.
"""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field


class CountryRollout(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    # None means no rollout configured for the country
    rollout_rate: float | None = Field(default=None, ge=0.0, le=1.0, alias="rolloutRate")


def as_country_rollout(entry: CountryRollout | Mapping | None) -> CountryRollout:
    if isinstance(entry, CountryRollout):
        return entry
    return CountryRollout.model_validate(entry or {})


class RolloutPolicy(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    countries: dict[str, CountryRollout] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping]) -> "RolloutPolicy":
        return cls(countries={code: as_country_rollout(entry) for code, entry in data.items()})

    def to_mapping(self) -> dict:
        return {
            code: entry.model_dump(by_alias=True, exclude_none=True)
            for code, entry in self.countries.items()
        }

    def rate_for(self, country: str) -> float | None:
        entry = self.countries.get(country)
        if entry is None:
            return None
        return entry.rollout_rate

    def set_rate(self, country: str, rate: float) -> None:
        entry = self.countries.get(country)
        if entry is None:
            self.countries[country] = CountryRollout(rollout_rate=rate)
        else:
            entry.rollout_rate = rate

    def clear_rate(self, country: str) -> None:
        """Remove the rate but keep the country entry."""
        entry = self.countries.get(country)
        if entry is not None:
            entry.rollout_rate = None


class FeatureFlagDocument(BaseModel):
    """Feature flags as served to the content server.

    Only the SMS country overrides are interpreted here; other flags are
    kept untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sms_countries: dict[str, CountryRollout] | None = Field(default=None, alias="smsCountries")


# Countries where sending the install link by SMS is rolled out
DEFAULT_SMS_ROLLOUT = {
    "CA": {"rolloutRate": 1.0},
    "GB": {"rolloutRate": 1.0},
    "RO": {"rolloutRate": 1.0},
    "US": {"rolloutRate": 1.0},
    "AT": {"rolloutRate": 0.5},
    "DE": {"rolloutRate": 0.5},
    "FR": {"rolloutRate": 0.5},
    # Telephone info known but not rolled out yet
    "AU": {},
    "BE": {},
    "NL": {},
}


def default_policy() -> RolloutPolicy:
    """Return a fresh copy of the default SMS rollout policy."""
    return RolloutPolicy.from_mapping(DEFAULT_SMS_ROLLOUT)

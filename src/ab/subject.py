"""The entity a grouping rule assigns a variant to."""

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass
class Account:
    email: str | None = None


@dataclass(frozen=True)
class Subject:
    account: Account | None = None
    country: str | None = None
    unique_user_id: str | None = None
    # Country code -> override record, e.g. {"GB": {"rolloutRate": 1}}
    feature_flags: Mapping | None = None

"""Simulation parameters for a synthetic population of visitors.

The population mixes countries with and without an SMS rollout, plus a
small share of internal accounts whose email domain forces the
treatment variant.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    num_users: int = 2000
    # Random seed for reproducibility
    seed: int = 42

    # Countries visitors arrive from
    countries: tuple[str, ...] = ("US", "GB", "CA", "DE", "FR", "AU", "JP")
    # Weighted toward the largest markets
    country_weights: tuple[float, ...] = (0.35, 0.15, 0.1, 0.15, 0.1, 0.05, 0.1)

    email_domains: tuple[str, ...] = ("example.com", "mail.test", "mozilla.com")
    # Internal accounts are rare
    email_domain_weights: tuple[float, ...] = (0.57, 0.38, 0.05)

    # Share of visitors that are not signed in (no account)
    prob_anonymous: float = 0.1

"""Tests for experiment definitions and hash-based randomization."""

import pytest

from src.ab.assignment import (
    HashRandomizer,
    bernoulli_trial,
    decide,
    hash_unit,
    uniform_choice,
)
from src.ab.experiment import Experiment, ExperimentConfigError, SEND_SMS_INSTALL_LINK

VARIANTS = ["control", "signinCodes"]


class TestExperimentDefinition:
    def test_valid_experiment(self):
        exp = Experiment(
            experiment_id="test",
            name="Test",
            variants=["a", "b"],
            forced_variant="b",
        )
        assert exp.variants == ("a", "b")

    def test_needs_at_least_one_variant(self):
        with pytest.raises(ExperimentConfigError, match="at least 1"):
            Experiment(experiment_id="test", name="Test", variants=(), forced_variant="a")

    def test_variant_names_must_be_unique(self):
        with pytest.raises(ExperimentConfigError, match="unique"):
            Experiment(experiment_id="test", name="Test", variants=("a", "a"), forced_variant="a")

    def test_variant_names_must_not_be_blank(self):
        with pytest.raises(ExperimentConfigError, match="non-empty"):
            Experiment(experiment_id="test", name="Test", variants=("a", " "), forced_variant="a")

    def test_config_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            Experiment(experiment_id="", name="Test", variants=("a",), forced_variant="a")

    def test_default_experiment_valid(self):
        assert SEND_SMS_INSTALL_LINK.experiment_id == "sendSmsInstallLink"
        assert SEND_SMS_INSTALL_LINK.variants == ("control", "signinCodes")
        assert SEND_SMS_INSTALL_LINK.forced_variant == "signinCodes"


class TestBernoulliTrial:
    def test_hash_unit_in_range(self):
        for i in range(1000):
            assert 0.0 <= hash_unit(f"user_{i}", "salt") < 1.0

    def test_largest_hash_stays_below_one(self, monkeypatch):
        monkeypatch.setattr("src.ab.assignment._hash_int", lambda hash_input: 2**64 - 1)
        assert hash_unit("user-id") < 1.0
        assert bernoulli_trial(1.0, "user-id") is True

    def test_deterministic(self):
        assert bernoulli_trial(0.5, "user-id") == bernoulli_trial(0.5, "user-id")

    def test_rate_one_always_participates(self):
        assert all(bernoulli_trial(1.0, f"user_{i}") for i in range(1000))

    def test_rate_zero_never_participates(self):
        assert not any(bernoulli_trial(0.0, f"user_{i}") for i in range(1000))

    def test_roughly_matches_rate(self):
        selected = sum(bernoulli_trial(0.25, f"user_{i}", "exp") for i in range(10000))
        assert 2000 <= selected <= 3000

    @pytest.mark.parametrize("rate", [-0.1, 1.5, float("nan")])
    def test_invalid_rate_rejected(self, rate):
        with pytest.raises(ValueError, match="within"):
            bernoulli_trial(rate, "user-id")


class TestUniformChoice:
    def test_deterministic(self):
        assert uniform_choice(VARIANTS, "user-id") == uniform_choice(VARIANTS, "user-id")

    def test_returns_valid_variant_name(self):
        for i in range(100):
            assert uniform_choice(VARIANTS, f"user_{i}") in VARIANTS

    def test_roughly_even_split(self):
        """Two variants should each get about half the users."""
        choices = [uniform_choice(VARIANTS, f"user_{i}", "exp") for i in range(10000)]
        control_count = choices.count("control")
        assert 4500 <= control_count <= 5500

    def test_three_variants_all_used(self):
        choices = {uniform_choice(["a", "b", "c"], f"user_{i}") for i in range(300)}
        assert choices == {"a", "b", "c"}

    def test_different_salt_different_assignment(self):
        """Same user in different experiments can get different variants."""
        differ = any(
            uniform_choice(VARIANTS, f"user_{i}", "exp_a")
            != uniform_choice(VARIANTS, f"user_{i}", "exp_b")
            for i in range(100)
        )
        assert differ

    def test_empty_choices_rejected(self):
        with pytest.raises(ExperimentConfigError):
            uniform_choice([], "user-id")


class TestDecide:
    def test_rate_zero_returns_false(self):
        randomizer = HashRandomizer("exp")
        assert all(decide(0.0, f"user_{i}", VARIANTS, randomizer) is False for i in range(500))

    def test_rate_one_returns_variant(self):
        randomizer = HashRandomizer("exp")
        for i in range(500):
            assert decide(1.0, f"user_{i}", VARIANTS, randomizer) in VARIANTS

    def test_empty_variants_fail_loudly(self):
        with pytest.raises(ExperimentConfigError):
            decide(0.0, "user-id", [], HashRandomizer())

    def test_participation_independent_of_variant(self):
        """Participants at 50% should still split evenly between variants."""
        randomizer = HashRandomizer("exp")
        outcomes = [decide(0.5, f"user_{i}", VARIANTS, randomizer) for i in range(20000)]
        chosen = [o for o in outcomes if o is not False]
        assert 9000 <= len(chosen) <= 11000
        control_share = chosen.count("control") / len(chosen)
        assert 0.45 <= control_share <= 0.55

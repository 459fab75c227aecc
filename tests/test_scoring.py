"""Tests for identity signals, scoring policy and confidence scoring."""

import pytest

from crosstag.core.errors import ConfigurationError
from crosstag.matching.policy import ScoringPolicy, SignalKind
from crosstag.matching.scorer import ConfidenceScorer, combine_weights
from crosstag.matching.signals import extract_identity_signals
from crosstag.resources.models import ManagedResource


def _resource(factory, name, **kwargs):
    return ManagedResource(factory("Bucket", name, **kwargs))


class TestCombineWeights:
    """Tests for the weight aggregation formula."""

    def test_empty(self):
        assert combine_weights([]) == 0.0

    def test_single_weight_is_identity(self):
        assert combine_weights([0.8]) == pytest.approx(0.8)

    def test_leans_toward_strongest(self):
        """Test Σw³/Σw² exceeds the plain mean."""
        weights = [0.9, 0.5]
        expected = (0.9**3 + 0.5**3) / (0.9**2 + 0.5**2)

        assert combine_weights(weights) == pytest.approx(expected)
        assert combine_weights(weights) > sum(weights) / 2

    def test_all_zero_weights(self):
        """Test the mean fallback when every weight is zero."""
        assert combine_weights([0.0, 0.0]) == 0.0

    def test_bounded_by_max(self):
        weights = [0.9, 0.8, 0.6, 0.5]
        assert min(weights) <= combine_weights(weights) <= max(weights)


class TestExtractIdentitySignals:
    """Tests for signal extraction."""

    def test_name_contains(self, resource_factory):
        """Test case-insensitive name containment."""
        resource = _resource(resource_factory, "Billing-Prod-db-1")

        signals = extract_identity_signals(resource, "billing-prod")

        assert [s.kind for s in signals] == [SignalKind.NAME_CONTAINS]
        assert signals[0].reason == "Resource name contains namespace: billing-prod"

    def test_exact_well_known_label(self, resource_factory):
        resource = _resource(
            resource_factory, "data", labels={"kubernetes-namespace": "billing-prod"}
        )

        signals = extract_identity_signals(resource, "billing-prod")

        assert len(signals) == 1
        assert signals[0].kind is SignalKind.LABEL_EXACT
        assert signals[0].weight == 0.9
        assert signals[0].reason == "Resource has 'kubernetes-namespace' label matching the namespace"

    def test_exact_key_not_double_counted(self, resource_factory):
        """Test an exact match does not also count as a containment."""
        resource = _resource(resource_factory, "data", labels={"app": "checkout"})

        signals = extract_identity_signals(resource, "checkout")

        assert [s.kind for s in signals] == [SignalKind.LABEL_EXACT]

    def test_other_label_value_contains(self, resource_factory):
        resource = _resource(resource_factory, "data", labels={"owner": "team-billing-prod"})

        signals = extract_identity_signals(resource, "billing-prod")

        assert [s.kind for s in signals] == [SignalKind.LABEL_VALUE_CONTAINS]
        assert signals[0].reason == "Resource has label 'owner' with value containing namespace"

    def test_well_known_label_partial_match_ignored(self, resource_factory):
        """Test a well-known key with a non-exact value gives no signal."""
        resource = _resource(resource_factory, "data", labels={"namespace": "billing-prod-eu"})

        assert extract_identity_signals(resource, "billing-prod") == []

    def test_environment_substring_ignored(self, resource_factory):
        resource = _resource(resource_factory, "data", labels={"environment": "prod"})

        assert extract_identity_signals(resource, "pro") == []

    def test_spec_label_exact(self, resource_factory):
        resource = _resource(
            resource_factory,
            "data",
            for_provider={"labels": {"environment": "billing-prod"}},
        )

        signals = extract_identity_signals(resource, "billing-prod")

        assert [s.kind for s in signals] == [SignalKind.SPEC_LABEL_EXACT]
        assert signals[0].weight == 0.7

    def test_for_provider_field_contains(self, resource_factory):
        resource = _resource(
            resource_factory,
            "data",
            for_provider={"description": "Storage for Billing-Prod", "replicas": 3},
        )

        signals = extract_identity_signals(resource, "billing-prod")

        assert [s.kind for s in signals] == [SignalKind.FIELD_CONTAINS]
        assert signals[0].reason == "Resource spec.forProvider.description contains namespace"

    def test_workload_subject_in_reasons(self, resource_factory):
        resource = _resource(resource_factory, "api-cache")

        signals = extract_identity_signals(resource, "api", subject="workload")

        assert signals[0].reason == "Resource name contains workload: api"

    def test_empty_target(self, resource_factory):
        """Test an empty target never matches."""
        resource = _resource(resource_factory, "anything", labels={"app": ""})

        assert extract_identity_signals(resource, "") == []

    def test_signal_order(self, resource_factory):
        """Test signals follow check order."""
        resource = _resource(
            resource_factory,
            "billing-prod-data",
            labels={"namespace": "billing-prod", "owner": "billing-prod-team"},
            for_provider={"location": "billing-prod-region"},
        )

        kinds = [s.kind for s in extract_identity_signals(resource, "billing-prod")]

        assert kinds == [
            SignalKind.NAME_CONTAINS,
            SignalKind.LABEL_EXACT,
            SignalKind.LABEL_VALUE_CONTAINS,
            SignalKind.FIELD_CONTAINS,
        ]


class TestConfidenceScorer:
    """Tests for ConfidenceScorer."""

    def test_no_signals_zero(self, resource_factory):
        """Test confidence is zero with no evidence."""
        reasons, confidence = ConfidenceScorer().score(
            _resource(resource_factory, "unrelated"), "billing-prod"
        )

        assert reasons == []
        assert confidence == 0.0

    def test_namespace_label_only(self, resource_factory):
        """Test a lone kubernetes-namespace label match is strong."""
        resource = _resource(resource_factory, "data", labels={"kubernetes-namespace": "billing-prod"})

        reasons, confidence = ConfidenceScorer().score(resource, "billing-prod")

        assert confidence >= 0.85
        assert len(reasons) == 1

    def test_name_only(self, resource_factory):
        """Test a name-only match scores above 0.75 with a single reason."""
        reasons, confidence = ConfidenceScorer().score(
            _resource(resource_factory, "billing-prod-db-1"), "billing-prod"
        )

        assert confidence >= 0.75
        assert reasons == ["Resource name contains namespace: billing-prod"]

    def test_custom_policy(self, resource_factory):
        policy = ScoringPolicy.from_dict({"weights": {"name_contains": 0.2}})

        _, confidence = ConfidenceScorer(policy=policy).score(
            _resource(resource_factory, "billing-prod-db-1"), "billing-prod"
        )

        assert confidence == pytest.approx(0.2)


class TestScoringPolicy:
    """Tests for ScoringPolicy configuration."""

    def test_defaults(self):
        policy = ScoringPolicy()

        assert policy.weight(SignalKind.NAME_CONTAINS) == 0.8
        assert policy.weight(SignalKind.LABEL_VALUE_CONTAINS) == 0.6
        assert policy.weight(SignalKind.FIELD_CONTAINS) == 0.5
        assert policy.label_weight("kubernetes-namespace") == 0.9
        assert policy.label_weight("environment") == 0.7
        assert policy.label_weight("unknown") == 0.0

    def test_from_dict_none(self):
        assert ScoringPolicy.from_dict(None).to_dict() == ScoringPolicy().to_dict()

    def test_from_dict_adds_label(self):
        policy = ScoringPolicy.from_dict({"label_weights": {"team": 0.6}})

        assert "team" in policy.well_known_labels
        assert policy.label_weight("team") == 0.6

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown signal kind"):
            ScoringPolicy.from_dict({"weights": {"made_up": 0.5}})

    def test_out_of_range(self):
        with pytest.raises(ConfigurationError, match="between 0 and 1"):
            ScoringPolicy.from_dict({"label_weights": {"team": 1.5}})

    def test_not_a_number(self):
        with pytest.raises(ConfigurationError, match="not a number"):
            ScoringPolicy.from_dict({"weights": {"name_contains": "high"}})

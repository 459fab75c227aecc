"""
Resource identity resolution.

Decides which managed resources belong to a namespace or workload, using
weighted metadata signals and an IP address index.
"""

from crosstag.matching.addresses import (
    extract_addresses,
    extract_ips_from_connection_string,
    looks_like_ip,
)
from crosstag.matching.network import NetworkIndex, NetworkIndexCache, build_network_index
from crosstag.matching.policy import (
    DEFAULT_LABEL_WEIGHTS,
    DEFAULT_WEIGHTS,
    ScoringPolicy,
    SignalKind,
)
from crosstag.matching.resolver import MatchResolver, sort_matches
from crosstag.matching.scorer import ConfidenceScorer, combine_weights
from crosstag.matching.signals import Signal, extract_identity_signals

__all__ = [
    # Policy
    "SignalKind",
    "ScoringPolicy",
    "DEFAULT_WEIGHTS",
    "DEFAULT_LABEL_WEIGHTS",
    # Signals
    "Signal",
    "extract_identity_signals",
    "extract_addresses",
    "extract_ips_from_connection_string",
    "looks_like_ip",
    # Scoring
    "ConfidenceScorer",
    "combine_weights",
    # Network
    "NetworkIndex",
    "NetworkIndexCache",
    "build_network_index",
    # Resolver
    "MatchResolver",
    "sort_matches",
]

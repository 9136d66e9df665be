"""Deterministic routing and classification rules.

Keyword lookups only. Every suggestion can be explained by the keyword that
matched.
"""

from app.rules.episode_classification import ClassificationResult, classify_episode
from app.rules.routing import (
    EpisodeTypeRoute,
    NewPatientExamType,
    RoutingBadge,
    get_new_patient_exam_type,
    get_routing_badge,
    get_suggested_episode_type,
)

__all__ = [
    "EpisodeTypeRoute",
    "NewPatientExamType",
    "RoutingBadge",
    "get_suggested_episode_type",
    "get_routing_badge",
    "get_new_patient_exam_type",
    "ClassificationResult",
    "classify_episode",
]

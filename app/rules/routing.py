"""Lead routing suggestions.

Maps the intake system category and the free-text primary concern to a
suggested episode type. The rules are deterministic keyword lookups:

1. The category is checked first because it is picked from a fixed list
   on the intake form.
2. The free-text concern is checked only when the category is silent.
3. Within each input, neuro keywords are tried before MSK keywords.
4. No match falls through to UNKNOWN, which sends the lead to admin review.
"""

from dataclasses import dataclass
from enum import Enum


class EpisodeTypeRoute(str, Enum):
    """Suggested episode type for a lead."""

    NEURO = "NEURO"
    MSK = "MSK"
    UNKNOWN = "UNKNOWN"


class NewPatientExamType(str, Enum):
    """Admin-facing new patient exam label used for scheduling."""

    MSK = "Musculoskeletal New Patient"
    NEURO = "Neurologic New Patient"
    ADMIN_REVIEW = "Admin Review Required"


NEURO_CATEGORIES = (
    "concussion",
    "cognitive",
    "balance",
    "headaches",
    "dizziness",
    "neurologic",
    "neuro",
)

MSK_CATEGORIES = (
    "msk",
    "acute",
    "acute-injury",
    "chronic",
    "chronic-injury",
    "neck",
    "sports",
    "sports-injury",
    "growth-pain",
    "fatigue",
)

NEURO_REASONS = (
    "concussion",
    "dizziness",
    "headaches",
    "neurologic",
    "balance",
    "cognitive",
    "brain fog",
    "vision issues",
    "coordination",
)

MSK_REASONS = (
    "acute",
    "acute-injury",
    "neck",
    "chronic",
    "chronic-injury",
    "sports",
    "sports-injury",
    "growth-pain",
    "msk",
    "musculoskeletal",
    "movement",
    "whiplash",
    "return-to-play",
)


@dataclass(frozen=True)
class RoutingBadge:
    """Display label for a routing suggestion."""

    label: str
    variant: str


ROUTING_BADGES: dict[EpisodeTypeRoute, RoutingBadge] = {
    EpisodeTypeRoute.NEURO: RoutingBadge(label="→ Neuro", variant="secondary"),
    EpisodeTypeRoute.MSK: RoutingBadge(label="→ MSK", variant="secondary"),
    EpisodeTypeRoute.UNKNOWN: RoutingBadge(label="Review", variant="outline"),
}


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def get_suggested_episode_type(
    system_category: str | None = None,
    primary_concern: str | None = None,
) -> EpisodeTypeRoute:
    """Suggest an episode type from a lead's category and concern.

    Args:
        system_category: Category picked on the intake form
        primary_concern: Free-text description of the concern

    Returns:
        NEURO, MSK, or UNKNOWN when neither input matches.
    """
    category = (system_category or "").lower().strip()
    concern = (primary_concern or "").lower().strip()

    if _contains_any(category, NEURO_CATEGORIES):
        return EpisodeTypeRoute.NEURO
    if _contains_any(category, MSK_CATEGORIES):
        return EpisodeTypeRoute.MSK

    if _contains_any(concern, NEURO_REASONS):
        return EpisodeTypeRoute.NEURO
    if _contains_any(concern, MSK_REASONS):
        return EpisodeTypeRoute.MSK

    return EpisodeTypeRoute.UNKNOWN


def get_routing_badge(route: EpisodeTypeRoute) -> RoutingBadge:
    """Return the badge shown next to a lead in the admin queue."""
    return ROUTING_BADGES.get(route, ROUTING_BADGES[EpisodeTypeRoute.UNKNOWN])


def get_new_patient_exam_type(
    route_label: str | None = None,
    system_category: str | None = None,
) -> NewPatientExamType:
    """Derive the new patient exam type for scheduling.

    The route label (e.g. "MSK NP - Monday") is used for new leads. Older
    leads only carry a system category, which must match exactly.
    """
    if route_label:
        label = route_label.lower()
        if "msk" in label or "musculoskeletal" in label:
            return NewPatientExamType.MSK
        if "neuro" in label:
            return NewPatientExamType.NEURO
        if "review" in label or "admin" in label:
            return NewPatientExamType.ADMIN_REVIEW

    if system_category:
        category = system_category.lower().strip()
        if category == "msk":
            return NewPatientExamType.MSK
        if category == "neuro":
            return NewPatientExamType.NEURO

    return NewPatientExamType.ADMIN_REVIEW

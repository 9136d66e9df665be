"""Chief complaint classification into episode type and body region."""

from dataclasses import dataclass

NEURO_KEYWORDS = (
    "concussion", "headache", "migraine", "vertigo", "dizziness", "dizzy",
    "balance", "vision", "visual", "eye", "nausea", "brain", "head injury",
    "post-concussion", "pcs", "tbi", "traumatic brain", "whiplash",
    "vestibular", "neurologic", "neurological", "nerve", "neuropathy",
    "tremor", "coordination", "cognitive", "memory", "light sensitivity",
    "sound sensitivity", "photophobia", "phonophobia",
)

PERFORMANCE_KEYWORDS = (
    "athlete", "athletic", "sport", "sports", "training", "performance",
    "return to play", "rtp", "competition", "game", "running", "lifting",
    "strength", "conditioning", "gym", "workout", "exercise", "fitness",
    "speed", "agility", "endurance", "baseball", "football", "soccer",
    "basketball", "hockey", "lacrosse", "tennis", "golf", "swimming",
    "cycling", "track", "field", "wrestling", "volleyball",
)

# Insertion order decides ties
REGION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Cervical Spine": ("neck", "cervical", "c-spine", "whiplash", "throat"),
    "Thoracic Spine": ("upper back", "thoracic", "t-spine", "mid back", "ribcage", "ribs"),
    "Lumbar Spine": ("low back", "lower back", "lumbar", "l-spine", "lumbago", "sciatica"),
    "Shoulder": ("shoulder", "rotator cuff", "cuff", "deltoid", "clavicle", "collarbone"),
    "Elbow": ("elbow", "forearm", "tennis elbow", "golfers elbow"),
    "Wrist/Hand": ("wrist", "hand", "finger", "thumb", "carpal", "palm"),
    "Hip": ("hip", "groin", "pelvis", "pelvic", "glute", "gluteal", "piriformis"),
    "Knee": ("knee", "patella", "kneecap", "meniscus", "acl", "pcl", "mcl", "lcl"),
    "Ankle/Foot": ("ankle", "foot", "heel", "achilles", "toe", "arch", "plantar"),
    "Head": ("head", "skull", "face", "jaw", "tmj", "concussion", "headache"),
}


@dataclass
class ClassificationResult:
    """Episode classification of a chief complaint."""

    episode_type: str  # MSK, Neuro or Performance
    body_region: str | None
    confidence: str  # high, medium or low

    def format(self) -> str:
        """Return "Type - Region", or just the type when no region matched."""
        if self.body_region:
            return f"{self.episode_type} - {self.body_region}"
        return self.episode_type


def _count_matches(text: str, keywords: tuple[str, ...]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def classify_episode(chief_complaint: str) -> ClassificationResult:
    """Classify a chief complaint.

    Neuro keywords win over performance keywords, and MSK is the default.
    Two or more keyword hits give high confidence and one hit gives medium.
    A body region match lifts low confidence to medium.
    """
    complaint = (chief_complaint or "").lower()

    neuro_matches = _count_matches(complaint, NEURO_KEYWORDS)
    performance_matches = _count_matches(complaint, PERFORMANCE_KEYWORDS)

    episode_type = "MSK"
    confidence = "low"

    if neuro_matches > 0:
        episode_type = "Neuro"
        confidence = "high" if neuro_matches >= 2 else "medium"
    elif performance_matches > 0:
        episode_type = "Performance"
        confidence = "high" if performance_matches >= 2 else "medium"

    body_region: str | None = None
    max_matches = 0
    for region, keywords in REGION_KEYWORDS.items():
        matches = _count_matches(complaint, keywords)
        if matches > max_matches:
            max_matches = matches
            body_region = region

    if body_region and confidence == "low":
        confidence = "medium"

    return ClassificationResult(
        episode_type=episode_type,
        body_region=body_region,
        confidence=confidence,
    )

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Artifact:
    """Single redaction record."""

    type: str  # "NATIONAL_ID", "CARD_NUMBER" or "PHONE"
    original: str
    replacement: str  # placeholder used in redacted text, e.g. "PHONE_1"


@dataclass
class RedactionResult:
    redacted_text: str
    artifacts: list[Artifact] = field(default_factory=list)

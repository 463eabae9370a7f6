from dataclasses import dataclass, field
from enum import StrEnum

from statement_ledger.imaging.normalizer import PreparedImage


class ExtractionMode(StrEnum):
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    image: PreparedImage


PayloadPart = TextPart | ImagePart


@dataclass
class AnalysisPayload:
    """Everything one inference call needs, in send order."""

    fingerprint: str
    mode: ExtractionMode
    parts: list[PayloadPart] = field(default_factory=list)

    @property
    def image_count(self) -> int:
        return sum(1 for p in self.parts if isinstance(p, ImagePart))

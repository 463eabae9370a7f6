import icu  # type: ignore[import-untyped]


class MeaningfulCharCounter:
    """Counts characters of one Unicode script, e.g. Han ideographs.

    A statement whose text layer holds fewer of these than the threshold is
    almost certainly a scan with at most a few stray labels.
    """

    def __init__(self, script: str = "Han") -> None:
        try:
            self._charset: icu.UnicodeSet = icu.UnicodeSet(f"[:Script={script}:]")
        except icu.ICUError as exc:
            raise ValueError(f"Unknown Unicode script '{script}'") from exc
        self._charset.freeze()

    def count(self, text: str) -> int:
        return sum(1 for ch in text if self._charset.contains(ch))

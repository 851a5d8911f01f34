"""Score and weight ledgers.

Both ledgers hold at most one entry per key. Writes are upserts that
replace the previous value; every value is clamped to 1-5 before it
is stored. There is no delete: removing an option or criterion does
not touch existing entries.
"""

from src.models.decision import MAX_RATING, MIN_RATING, Score, Weight

DEFAULT_RATING = 3


def clamp_rating(value: int | float | None, default: int = DEFAULT_RATING) -> int:
    """Clamp a raw rating into the 1-5 range.

    Args:
        value: Raw rating (None falls back to default)
        default: Value used when the rating is missing

    Returns:
        Integer rating between MIN_RATING and MAX_RATING
    """
    if value is None:
        return default
    return max(MIN_RATING, min(MAX_RATING, int(round(value))))


class ScoreLedger:
    """Mapping from (option index, criterion index) to a 1-5 score."""

    def __init__(self) -> None:
        self._entries: dict[tuple[int, int], int] = {}

    def upsert(self, option_index: int, criterion_index: int, value: int) -> int:
        """Store a score, replacing any previous one for the pair.

        Returns:
            The clamped value that was stored
        """
        clamped = clamp_rating(value)
        self._entries[(option_index, criterion_index)] = clamped
        return clamped

    def get(self, option_index: int, criterion_index: int) -> int | None:
        return self._entries.get((option_index, criterion_index))

    def count(self) -> int:
        return len(self._entries)

    def is_complete(self, option_count: int, criterion_count: int) -> bool:
        """Check whether every pair has been scored."""
        return self.count() == option_count * criterion_count

    def entries(self) -> list[Score]:
        """Entries in insertion order."""
        return [
            Score(option_index=o, criterion_index=c, value=v)
            for (o, c), v in self._entries.items()
        ]

    def __len__(self) -> int:
        return self.count()


class WeightLedger:
    """Mapping from criterion index to a 1-5 importance weight."""

    def __init__(self) -> None:
        self._entries: dict[int, int] = {}

    def upsert(self, criterion_index: int, value: int) -> int:
        """Store a weight, replacing any previous one for the criterion.

        Returns:
            The clamped value that was stored
        """
        clamped = clamp_rating(value)
        self._entries[criterion_index] = clamped
        return clamped

    def get(self, criterion_index: int) -> int | None:
        return self._entries.get(criterion_index)

    def count(self) -> int:
        return len(self._entries)

    def is_complete(self, criterion_count: int) -> bool:
        """Check whether every criterion has a weight."""
        return self.count() == criterion_count

    def entries(self) -> list[Weight]:
        """Entries in insertion order."""
        return [Weight(criterion_index=c, value=v) for c, v in self._entries.items()]

    def __len__(self) -> int:
        return self.count()

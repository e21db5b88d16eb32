"""Exception types shared across the coach"""


class CoachError(Exception):
    """Base class for coach errors"""


class StrategyLookupError(CoachError, LookupError):
    """The strategy table has no entry for a hand/upcard pair.

    Raised only when the universe and the strategy tables disagree, which
    means the constants are corrupted. Callers must not treat it as bad
    user input.
    """

    def __init__(self, category, upcard):
        self.category = category
        self.upcard = upcard
        super().__init__(f"No strategy entry for {category!r} vs {upcard!r}")

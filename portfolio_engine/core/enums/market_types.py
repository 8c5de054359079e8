"""
Market signal enumerations.
"""

from enum import StrEnum


class Direction(StrEnum):
    """Price movement between two consecutive polls."""

    UP = "up"
    DOWN = "down"
    NONE = "none"

    @classmethod
    def between(cls, previous: object, current: object) -> "Direction":
        """Get the direction from a previous price to a current price."""
        if current == previous:
            return cls.NONE
        return cls.UP if current > previous else cls.DOWN  # type: ignore[operator]

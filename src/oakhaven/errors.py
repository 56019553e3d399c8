class OakhavenError(Exception):
    """Base error for Oakhaven map generation exceptions."""


class InvalidDimensions(OakhavenError, ValueError):
    """Raised when a map is requested with a width or height too small to hold a walled interior."""

    def __init__(self, width: int, height: int, minimum: int = 3) -> None:
        super().__init__(f"Map dimensions must be at least {minimum}x{minimum}, got {width}x{height}")
        self.width = width
        self.height = height
        self.minimum = minimum


class NotADoor(OakhavenError):
    """Raised when a door operation targets a tile that is not a door."""


class ScheduleError(OakhavenError):
    """Raised when a biome schedule or villager roster file cannot be parsed or validated."""

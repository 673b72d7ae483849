"""Errors raised by world generation."""


class WorldGenError(RuntimeError):
    """Base class for world generation failures."""


class PlacementError(WorldGenError):
    """Cities cannot be placed: the minimum city distance would go negative.

    Raised when there is too little (or too fragmented) land for the
    configured number of cities. Not recoverable by retrying.
    """


class NoContinentsError(WorldGenError):
    """No landmass holds two cities with at least one on the shore."""


class AssignmentError(WorldGenError):
    """No unowned city is left for a player's starting position."""


class WorldGenerationError(WorldGenError):
    """Every generation attempt was discarded."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class InsufficientLandError(WorldGenError):
    """The classified map has fewer on-board land cells than cities to place."""

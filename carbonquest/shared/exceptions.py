"""Custom exception hierarchy for CarbonQuest."""


class CarbonQuestError(Exception):
    """Base exception for all CarbonQuest errors."""

    pass


class ConfigError(CarbonQuestError):
    """Raised when configuration validation fails."""

    pass


class StateError(CarbonQuestError):
    """Raised when state persistence operations fail."""

    pass


class HabitValidationError(CarbonQuestError):
    """Raised when a habit is rejected at the input boundary.

    The caller can correct the input and retry; no state is mutated.
    """

    pass

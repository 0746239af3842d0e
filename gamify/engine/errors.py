"""Engine error taxonomy."""


class GamificationError(Exception):
    """Base class for engine errors."""


class ConfigurationError(GamificationError):
    """Malformed season, multiplier or rating table. Must be fixed by an operator."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid configuration")


class PredicateError(GamificationError):
    """An achievement criterion could not be evaluated."""

    def __init__(self, achievement_id: str, message: str):
        self.achievement_id = achievement_id
        self.message = message
        super().__init__(f"Achievement {achievement_id}: {message}")


class DuplicateUnlockError(GamificationError):
    """An achievement was granted twice to the same attendant."""

    def __init__(self, attendant_id: str, achievement_id: str):
        self.attendant_id = attendant_id
        self.achievement_id = achievement_id
        super().__init__(
            f"Achievement {achievement_id} already unlocked for attendant {attendant_id}"
        )

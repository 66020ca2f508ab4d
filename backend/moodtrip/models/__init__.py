from moodtrip.models.trip import Trip

__all__ = ["Trip"]

"""Error taxonomy for the personalization engine.

Both errors are caught at the generator boundary and converted into the
task's fallback result. A user with no trips is not an error.
"""


class PersonalizationError(Exception):
    """Base class for personalization failures."""


class UpstreamUnavailable(PersonalizationError):
    """Trip store or completion provider failed (network, HTTP, timeout)."""


class MalformedResponse(PersonalizationError):
    """Completion text did not parse into the expected task schema."""

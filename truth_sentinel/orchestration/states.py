"""Pipeline states, verdicts and evidence stances."""

from enum import Enum


class PipelineState(str, Enum):
    """Steps a message passes through, in order.

    A skipped message goes RECEIVED -> GATED -> DONE (or RECEIVED -> DONE
    when empty) and is never logged.
    """

    RECEIVED = "received"
    GATED = "gated"
    MEDIA_CHECKED = "media_checked"
    LOCAL_SEARCHED = "local_searched"
    EXTERNALLY_SEARCHED = "externally_searched"
    DECIDED = "decided"
    LOGGED = "logged"
    DONE = "done"


class Verdict(str, Enum):
    """Outcome shown to the user."""

    HOAX = "HOAX"
    VERIFIED = "VERIFIED"
    UNABLE_TO_VERIFY = "UNABLE_TO_VERIFY"
    SKIP = "SKIP"

    @property
    def log_label(self) -> str:
        """Verdict name stored in the learning log."""
        if self is Verdict.UNABLE_TO_VERIFY:
            return "UNCERTAIN"
        return self.value


class Stance(str, Enum):
    """Position of one evidence result relative to the claim."""

    SUPPORTS = "supports"
    CONTRADICTS = "contradicts"
    NEUTRAL = "neutral"

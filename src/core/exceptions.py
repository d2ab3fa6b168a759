"""
Custom exceptions shared by all layers.

Only verification failures are real error paths towards the client.
Everything raised by the state machine is caught by the service and turned into an ordinary screen.
"""


class FrameError(Exception):
    """Top-level exception of the application."""


# --- VERIFICATION (adapter layer) ---
class VerificationError(FrameError):
    """The inbound callback could not be turned into a trusted action."""


class MissingSignatureError(VerificationError):
    """No signed blob (trustedData.messageBytes) in the request body."""


class InvalidSignatureError(VerificationError):
    """The signed blob was rejected, or the validation service returned nothing usable."""


# --- STATE MACHINE / PERSISTENCE ---
class RepositoryError(FrameError):
    """Problems looking up records in the match store."""


class MatchNotFoundError(RepositoryError):
    """No live match for the given id."""


class InvalidMoveSelectionError(FrameError):
    """Button index does not map to a move."""


# --- PRESENTATION ---
class ScreenError(FrameError):
    """A screen descriptor violates the frame protocol (e.g. too many buttons)."""

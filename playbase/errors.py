"""
Error taxonomy shared by the store, the aggregator and the season manager.

Every error carries a ``retryable`` flag so callers can tell a conflict or an
outage (re-run the whole read-modify-write cycle) from a terminal failure.
"""


class PlaybaseError(Exception):
    retryable = False

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ValidationError(PlaybaseError):
    """Malformed or out-of-range input, rejected before any I/O"""


class AuthError(PlaybaseError):
    """Credential or token exchange failure"""


class AccessDenied(PlaybaseError):
    """The credential was accepted but lacks rights on the document"""


class VersionConflict(PlaybaseError):
    """The version token no longer matches the stored document"""
    retryable = True


class NotFound(PlaybaseError):
    """The document does not exist"""


class AlreadyArchived(PlaybaseError):
    """An archive already exists for the season being closed"""

    def __init__(self, season: int, path: str = None):
        super().__init__(f"Season {season} is already archived", path)
        self.season = season


class TransientError(PlaybaseError):
    """Network or server-side failure; nothing was written"""
    retryable = True

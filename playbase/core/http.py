from fastapi import HTTPException

from ..errors import (
    AccessDenied,
    AlreadyArchived,
    AuthError,
    NotFound,
    PlaybaseError,
    TransientError,
    ValidationError,
    VersionConflict,
)

STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    VersionConflict: 409,
    AlreadyArchived: 409,
    AuthError: 502,
    AccessDenied: 502,
    TransientError: 503,
}

def to_http_exception(error: PlaybaseError) -> HTTPException:
    """Map a store or domain error to the response the caller should see"""
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(
                status_code=status_code,
                detail={'error': error.message, 'retryable': error.retryable},
            )
    return HTTPException(status_code=500, detail={'error': 'Internal server error', 'retryable': False})

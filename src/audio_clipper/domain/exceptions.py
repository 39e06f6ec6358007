"""Domain exceptions."""


class AudioClipperError(Exception):
    """Base exception for the application."""


class RequestValidationError(AudioClipperError):
    """A processing request is malformed or inconsistent."""


class NotFoundError(AudioClipperError):
    """A referenced source item, job or selection does not exist."""


class InvalidStateError(AudioClipperError):
    """An operation is not allowed in the entity's current state."""


class MediaFetchError(AudioClipperError):
    """Source media could not be probed or downloaded."""


class SegmentExtractionError(AudioClipperError):
    """A time range could not be cut out of a source asset."""


class RemoteStorageError(AudioClipperError):
    """Authorization with or upload to a remote storage provider failed."""

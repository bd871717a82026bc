"""
Rotation error types.

Every failure inside the Staging Selector or the Rollover Reconciler is
raised as a RotationError subclass. Like DRF's APIException, each class
carries the HTTP status the trigger endpoint answers with.
"""

from rest_framework import status


class RotationError(Exception):
    """Base class for daily rotation failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Daily rotation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ----- Lookup -----

class RotationLookupError(RotationError):
    """A catalog or slot record is missing or in an invalid state."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class CatalogEmptyError(RotationLookupError):
    default_message = "Song catalog is empty"


class NothingStagedError(RotationLookupError):
    default_message = "Error finding next daily song"


class SequenceError(RotationLookupError):
    """The "current" slot is missing or has no day number."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Couldn't find previous daily song or its day number"


# ----- Media -----

class MediaError(RotationError):
    default_message = "Media collaborator failed"


class MediaLookupError(MediaError):
    default_message = "Could not resolve song duration"


class MediaFetchError(MediaError):
    default_message = "Could not download song clip"


# ----- Storage / persistence -----

class StorageError(RotationError):
    default_message = "Error uploading file to storage"


class PersistenceError(RotationError):
    default_message = "Database operation failed"

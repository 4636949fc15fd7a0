"""Exception types raised across the CRM core."""


class TangoCRMError(Exception):
    """Base class for errors raised by tango_crm."""


class StoreError(TangoCRMError):
    """The persistence store failed or is unavailable."""


class RecordNotFoundError(StoreError, LookupError):
    """No record with the given id exists for the requesting owner."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection} record not found: {record_id}")
        self.collection = collection
        self.record_id = record_id


class InvalidDateRangeError(TangoCRMError, ValueError):
    """A reporting window has equal or inverted bounds."""

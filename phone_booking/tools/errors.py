"""Errors raised by the external collaborator adapters."""


class AdapterError(Exception):
    """Base class for transport or domain failures of an external collaborator."""


class SchedulingError(AdapterError):
    """The scheduling service failed to list slots or create a booking."""


class NotificationError(AdapterError):
    """The SMS gateway rejected or failed to deliver a message."""


class IntentClassifierError(AdapterError):
    """The fallback intent classifier failed for a reason other than a timeout."""


class ContactsError(AdapterError):
    """The client address book could not be searched or updated."""

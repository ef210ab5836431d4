"""Error types raised by the relay. Client exceptions are chained as __cause__."""


class RelayError(Exception):
    """Base class for relay failures."""


class ConfigurationError(RelayError):
    """Settings were missing or failed validation."""


class ProvisioningError(RelayError):
    """The topic could not be created for a reason other than already existing."""


class SendError(RelayError):
    """A message could not be handed to the broker."""


class DeserializationError(RelayError):
    """A received record could not be decoded into a Message."""

"""Exception taxonomy for the installation engine.

Per-asset failures (validation, native config, file writes) are caught by the
client batch loop and reported as Failed results. ScopeResolutionError is the
only error that aborts a whole batch.
"""


class SxError(Exception):
    """Base class for all sx errors."""


class ScopeResolutionError(SxError):
    """An install scope cannot be mapped to a target directory."""


class AssetValidationError(SxError):
    """An asset archive or its metadata is malformed."""


class NativeConfigError(SxError):
    """A client's native config file is unreadable or has an unexpected shape."""


class UnsupportedHookEventError(SxError):
    """A canonical hook event has no mapping for the target client."""

    def __init__(self, event: str, client_id: str) -> None:
        super().__init__(f"hook event '{event}' is not supported by {client_id}")
        self.event = event
        self.client_id = client_id


class UnknownClientError(SxError):
    """A client ID was requested that the registry does not know."""

    def __init__(self, client_id: str) -> None:
        super().__init__(f"unknown client: {client_id}")
        self.client_id = client_id


class RegistryError(SxError):
    """The client registry was used before composition finished, or given a duplicate ID."""


class RegistryFrozenError(RegistryError):
    """The client registry was mutated after startup composition finished."""


class OperationCancelledError(SxError):
    """A long-running operation observed a cancellation request."""


class MissingResultError(SxError):
    """A client returned no result for a requested asset."""


class UserConfigError(SxError):
    """The sx user configuration file is malformed."""

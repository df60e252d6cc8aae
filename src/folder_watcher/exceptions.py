"""Custom exceptions for the folder watcher package."""


class WatcherError(Exception):
    """Base exception for all watcher errors."""
    pass


class ProtocolError(WatcherError):
    """A frame could not be decoded into a command or event."""
    pass


class WatchError(WatcherError):
    """Error related to watch management."""
    pass


class WatchAlreadyExistsError(WatchError):
    """A watch with the same id is already active."""
    pass


class WatchNotFoundError(WatchError):
    """No active watch has the given id."""
    pass


class WatchPathNotFoundError(WatchError):
    """The directory to watch does not exist."""
    pass


class WatchPathNotADirectoryError(WatchError):
    """The path to watch exists but is not a directory."""
    pass


class SubscriptionError(WatchError):
    """The change notification source could not start watching."""
    pass


class TransportError(WatcherError):
    """Error reading from or writing to the client connection."""
    pass


class TransportClosedError(TransportError):
    """The peer has already closed the connection."""
    pass

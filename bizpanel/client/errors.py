"""Errors raised by the panel client"""


class ClientError(Exception):
    """Base class for every panel client failure"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ClientError):
    """A draft broke a form rule; raised before any network call"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class TransportError(ClientError):
    """Connection failure, timeout or a body that is not an envelope"""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class RemoteRejected(ClientError):
    """The server answered with a {"success": false} envelope"""

    def __init__(self, message: str, code=None, details=None, status_code=None):
        super().__init__(message)
        self.code = code
        self.details = list(details or [])
        self.status_code = status_code


class ReorderFailed(ClientError):
    """One or more writes of a reorder failed"""

    def __init__(self, failures):
        self.failures = list(failures)
        messages = sorted({error.message for _, error in self.failures})
        super().__init__(f"{len(self.failures)} position update(s) failed: {'; '.join(messages)}")


class Aborted(ClientError):
    """The owning session or collection was closed"""

    def __init__(self, message: str = 'The panel session was closed'):
        super().__init__(message)

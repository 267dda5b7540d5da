class JobSageError(Exception):
    """Base class for errors raised by JobSage components."""


class PersistenceError(JobSageError):
    """A snapshot could not be written; in-memory state is ahead of storage."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to persist '{key}': {reason}")


class UnsupportedFileError(JobSageError):
    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Unsupported file type: {filename}")

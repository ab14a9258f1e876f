from typing import List


class AvcError(Exception):
    """Base exception for all avc errors."""
    pass


class RepositoryError(AvcError):
    """Repository initialization or structure errors."""
    pass


class NotInitializedError(RepositoryError):
    """Raised when no avc repository exists in the current directory."""

    def __init__(self, message: str = "Not an avc repository: .avc directory not found"):
        super().__init__(message)


class AlreadyInitializedError(RepositoryError):
    """Raised when initializing over an existing repository."""
    pass


class UnexpectedDirectoryError(RepositoryError):
    """Raised when a directory is found inside an object shard directory."""
    pass


class HashTooShortError(AvcError):
    """Raised when a hash prefix is shorter than the shard key."""
    pass


class ObjectNotFoundError(AvcError):
    """Raised when an object cannot be found."""
    pass


class HashCollisionError(AvcError):
    """Raised when a hash prefix matches more than one object."""

    def __init__(self, candidates: List[str]):
        self.candidates = sorted(candidates)
        if self.candidates:
            message = "Hash prefix is ambiguous. Possible matches:\n{}".format(
                '\n'.join(self.candidates)
            )
        else:
            message = "Hash prefix is ambiguous"
        super().__init__(message)


class DuplicateObjectError(AvcError):
    """Raised when stored content already exists in the object store."""

    def __init__(self, digest: str):
        self.digest = digest
        super().__init__(f"Object {digest} already exists in the object store")


class InvalidObjectError(AvcError):
    """Raised when an object has invalid format or type."""
    pass


class WrongObjectTypeError(InvalidObjectError):
    """Raised when an encoding's header does not belong to the expected type."""
    pass


class CorruptObjectError(InvalidObjectError):
    """Raised when an object body is truncated or malformed."""
    pass


class IndexError(AvcError):
    """Errors related to reading or writing the index."""
    pass


class CorruptIndexError(IndexError):
    pass


class IndexEntryNotFoundError(IndexError):
    pass


class IndexEntryAlreadyExistsError(IndexError):
    pass


class PathNotFoundError(AvcError):
    """Raised when a working tree path does not exist."""
    pass


class UnsupportedFileTypeError(AvcError):
    """Raised for paths that are neither regular files nor directories."""
    pass

from .core import fetch_by_hash, store
from .exceptions import DuplicateObjectError, InvalidObjectError
from .signature import BLOB_HEADER, BLOB_VERSION, HEADER_SIZE, ObjectType, check_header


class Blob:
    """Raw file content. The body of an encoded Blob is the content itself."""

    def __init__(self, content: bytes):
        self.content = content

    def encode(self) -> bytes:
        return BLOB_HEADER + self.content

    @classmethod
    def decode(cls, data: bytes) -> 'Blob':
        """
        Raises:
            WrongObjectTypeError: If data does not start with a Blob header
        """
        version = check_header(data, ObjectType.BLOB)
        if version != BLOB_VERSION:
            raise InvalidObjectError(f"Unsupported blob version: {version}")
        return cls(data[HEADER_SIZE:])

    def __eq__(self, other):
        if not isinstance(other, Blob):
            return NotImplemented
        return self.content == other.content

    def __repr__(self):
        return f"Blob({len(self.content)} bytes)"


def store_blob(blob: Blob) -> str:
    """
    Returns:
        Digest of the stored Blob; an already stored Blob reuses its digest
    """
    try:
        return store(blob.encode())
    except DuplicateObjectError as e:
        return e.digest


def read_blob(prefix: str) -> Blob:
    return Blob.decode(fetch_by_hash(prefix).content)

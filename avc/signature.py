"""Type and version headers shared by every persisted structure.

Each encoding starts with a signature, ``type base + structure version``,
written as a big-endian unsigned 16-bit integer and followed by a single
NUL separator. Signature 121 is a Blob with structure version 21.
"""
import struct
from typing import Optional
from .exceptions import WrongObjectTypeError


class ObjectType:
    BLOB = 'blob'
    TREE = 'tree'
    COMMIT = 'commit'
    INDEX = 'index'


TYPE_BASES = {
    ObjectType.BLOB: 100,
    ObjectType.TREE: 200,
    ObjectType.COMMIT: 300,
    ObjectType.INDEX: 400,
}

BLOB_VERSION = 0
TREE_VERSION = 0
COMMIT_VERSION = 0
INDEX_VERSION = 0

SEPARATOR = b'\x00'
HEADER_SIZE = struct.calcsize('!H') + len(SEPARATOR)


def make_header(obj_type: str, version: int) -> bytes:
    return struct.pack('!H', TYPE_BASES[obj_type] + version) + SEPARATOR


BLOB_HEADER = make_header(ObjectType.BLOB, BLOB_VERSION)
TREE_HEADER = make_header(ObjectType.TREE, TREE_VERSION)
COMMIT_HEADER = make_header(ObjectType.COMMIT, COMMIT_VERSION)
INDEX_HEADER = make_header(ObjectType.INDEX, INDEX_VERSION)


def read_signature(data: bytes) -> Optional[int]:
    """
    Args:
        data: Encoded bytes starting with a header

    Returns:
        The signature value, or None if data has no well-formed header
    """
    if len(data) < HEADER_SIZE or data[HEADER_SIZE - 1:HEADER_SIZE] != SEPARATOR:
        return None
    return struct.unpack('!H', data[:HEADER_SIZE - 1])[0]


def object_type(data: bytes) -> Optional[str]:
    """Return the type name a header belongs to, or None."""
    signature = read_signature(data)
    if signature is None:
        return None
    for obj_type, base in TYPE_BASES.items():
        if base <= signature < base + 100:
            return obj_type
    return None


def check_header(data: bytes, obj_type: str) -> int:
    """
    Args:
        data: Encoded bytes
        obj_type: Expected type name

    Returns:
        Structure version carried by the header

    Raises:
        WrongObjectTypeError: If the header is missing or of another type
    """
    found = object_type(data)
    if found != obj_type:
        raise WrongObjectTypeError(
            f"Expected {obj_type} header, got {found or 'unknown'}"
        )
    return read_signature(data) - TYPE_BASES[obj_type]

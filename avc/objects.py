from typing import Tuple, Union
from .blob import Blob
from .commit import Commit
from .core import fetch_by_hash
from .exceptions import WrongObjectTypeError
from .signature import ObjectType, object_type
from .tree import Tree

DECODERS = {
    ObjectType.BLOB: Blob.decode,
    ObjectType.TREE: Tree.decode,
    ObjectType.COMMIT: Commit.decode,
}


def decode_object(data: bytes) -> Tuple[str, Union[Blob, Tree, Commit]]:
    """
    Args:
        data: Stored object bytes, header included

    Returns:
        Tuple of (object_type, decoded object)

    Raises:
        WrongObjectTypeError: If the header belongs to no object type
    """
    obj_type = object_type(data)
    if obj_type not in DECODERS:
        raise WrongObjectTypeError(f"Not a stored object type: {obj_type or 'unknown'}")
    return obj_type, DECODERS[obj_type](data)


def read_object(prefix: str) -> Tuple[str, Union[Blob, Tree, Commit]]:
    obj = fetch_by_hash(prefix)
    obj_type, decoded = decode_object(obj.content)
    if obj_type == ObjectType.TREE:
        decoded.hash = obj.hash
    return obj_type, decoded

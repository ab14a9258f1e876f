import hashlib
import logging
import os
from collections import namedtuple
from datetime import datetime
from typing import List, Set, Tuple
from .repository import OBJECTS_DIR, require_repository
from .exceptions import (AvcError, DuplicateObjectError, HashCollisionError, HashTooShortError,
                         ObjectNotFoundError, RepositoryError, UnexpectedDirectoryError)

logger = logging.getLogger(__name__)

SHARD_KEY_LENGTH = 2
HEX_DIGITS = frozenset('0123456789abcdef')

Object = namedtuple('Object', ['hash', 'content'])


def compute_hash(content: bytes) -> str:
    """
    Args:
        content: Encoded object bytes, header included

    Returns:
        40-character SHA-1 hex string
    """
    return hashlib.sha1(content).hexdigest()


def object_path(digest: str) -> str:
    return os.path.join(OBJECTS_DIR, digest[:SHARD_KEY_LENGTH], digest[SHARD_KEY_LENGTH:])


def object_exists(digest: str) -> bool:
    return os.path.exists(object_path(digest))


def store(content: bytes) -> str:
    """
    Args:
        content: Encoded object bytes

    Returns:
        Digest of the newly written object

    Raises:
        NotInitializedError: If not in an avc repository
        DuplicateObjectError: If identical content is already stored
        RepositoryError: If the object's shard path is not a directory
    """
    require_repository()

    digest = compute_hash(content)
    path = object_path(digest)

    if os.path.exists(path):
        logger.debug('Object %s already in store', digest)
        raise DuplicateObjectError(digest)

    shard_dir = os.path.dirname(path)
    try:
        os.makedirs(shard_dir, exist_ok=True)
    except FileExistsError:
        raise RepositoryError(f"Object shard {shard_dir!r} is not a directory")
    except OSError as e:
        raise AvcError(f"Could not create object shard {shard_dir!r}: {e}")

    try:
        f = open(path, 'xb')
    except FileExistsError:
        # another writer stored the same content first
        raise DuplicateObjectError(digest)
    except OSError as e:
        raise AvcError(f"Could not write object {digest}: {e}")

    try:
        with f:
            f.write(content)
    except OSError as e:
        _discard(path)
        raise AvcError(f"Could not write object {digest}: {e}")

    logger.debug('Stored object %s (%d bytes)', digest, len(content))
    return digest


def _discard(path: str):
    # a truncated object must not stay at its content address
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning('Could not remove partial object %s: %s', path, e)


def _list_shard(shard_dir: str) -> List[str]:
    try:
        names = sorted(os.listdir(shard_dir))
    except FileNotFoundError:
        return []
    except OSError as e:
        raise AvcError(f"Could not list {shard_dir!r}: {e}")

    for name in names:
        if os.path.isdir(os.path.join(shard_dir, name)):
            raise UnexpectedDirectoryError(
                f"Directory {name!r} is not expected in object shard {shard_dir!r}"
            )
    return names


def fetch_by_hash(prefix: str) -> Object:
    """
    Args:
        prefix: Partial or full hash

    Returns:
        Object with the full hash and the stored bytes

    Raises:
        NotInitializedError: If not in an avc repository
        HashTooShortError: If prefix is shorter than the shard key
        ObjectNotFoundError: If no object matches
        HashCollisionError: If more than one object matches
        UnexpectedDirectoryError: If the shard directory holds a directory
    """
    require_repository()

    if len(prefix) < SHARD_KEY_LENGTH:
        raise HashTooShortError(
            f"Hash prefix must be {SHARD_KEY_LENGTH} or more characters"
        )

    prefix = prefix.lower()
    if not all(c in HEX_DIGITS for c in prefix):
        raise ObjectNotFoundError(f"Object {prefix!r} not found")

    shard = prefix[:SHARD_KEY_LENGTH]
    shard_dir = os.path.join(OBJECTS_DIR, shard)

    full_names = [shard + name for name in _list_shard(shard_dir)]
    if not full_names:
        raise ObjectNotFoundError(f"Object {prefix!r} not found")

    if len(prefix) == SHARD_KEY_LENGTH:
        candidates = full_names
    else:
        candidates = [name for name in full_names if prefix in name]

    if not candidates:
        raise ObjectNotFoundError(f"Object {prefix!r} not found")

    if len(candidates) > 1:
        raise HashCollisionError(candidates)

    digest = candidates[0]
    try:
        return Object(digest, read_file(object_path(digest)))
    except FileNotFoundError:
        raise ObjectNotFoundError(f"Object {prefix!r} not found")


def fetch_all_object_names() -> Set[str]:
    """
    Returns:
        Full hashes of every stored object

    Raises:
        NotInitializedError: If not in an avc repository
        UnexpectedDirectoryError: If a shard directory holds a directory
    """
    require_repository()

    try:
        shards = os.listdir(OBJECTS_DIR)
    except FileNotFoundError:
        return set()

    names = set()
    for shard in shards:
        shard_dir = os.path.join(OBJECTS_DIR, shard)
        if not os.path.isdir(shard_dir):
            continue
        names.update(shard + name for name in _list_shard(shard_dir))

    return names


def read_file(path: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except FileNotFoundError:
        raise
    except OSError as e:
        raise AvcError(f"Could not read file {path!r}: {e}")


def write_file(path: str, data: bytes):
    try:
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise AvcError(f"Could not write file {path!r}: {e}")


def file_times(st: os.stat_result) -> Tuple[datetime, datetime]:
    """
    Args:
        st: Result of os.stat on a working tree file

    Returns:
        Tuple of (created, modified) as timezone-aware datetimes
    """
    created_ts = getattr(st, 'st_birthtime', None) or st.st_ctime
    if created_ts:
        created = datetime.fromtimestamp(created_ts).astimezone()
    else:
        created = datetime.now().astimezone()
    modified = datetime.fromtimestamp(st.st_mtime).astimezone()
    return created, modified

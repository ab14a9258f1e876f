import logging
import os
from datetime import datetime
from typing import Optional, Tuple
from .core import fetch_by_hash, store
from .encoding import Reader, pack_string, pack_timestamp
from .exceptions import AvcError, CorruptObjectError, DuplicateObjectError, InvalidObjectError
from .signature import COMMIT_HEADER, COMMIT_VERSION, HEADER_SIZE, ObjectType, check_header

logger = logging.getLogger(__name__)


class Commit:
    """
    A snapshot with at most one parent.

    The body holds the tree digest only; dereferencing the tree is up to the
    caller. A root commit has an empty ``parent_hash``.
    """

    def __init__(self, parent_hash: str, author: str, author_email: str,
                 committer: str, committer_email: str, commit_date: datetime,
                 tree_hash: str):
        self.parent_hash = parent_hash
        self.author = author
        self.author_email = author_email
        self.committer = committer
        self.committer_email = committer_email
        self.commit_date = commit_date
        self.tree_hash = tree_hash

    def is_root(self) -> bool:
        return self.parent_hash == ''

    def encode(self) -> bytes:
        return b''.join([
            COMMIT_HEADER,
            pack_string(self.parent_hash),
            pack_string(self.author),
            pack_string(self.author_email),
            pack_string(self.committer),
            pack_string(self.committer_email),
            pack_timestamp(self.commit_date),
            pack_string(self.tree_hash),
        ])

    @classmethod
    def decode(cls, data: bytes) -> 'Commit':
        """
        Raises:
            WrongObjectTypeError: If data does not start with a Commit header
            CorruptObjectError: If the body is truncated or has trailing bytes
        """
        version = check_header(data, ObjectType.COMMIT)
        if version != COMMIT_VERSION:
            raise InvalidObjectError(f"Unsupported commit version: {version}")

        reader = Reader(data[HEADER_SIZE:], CorruptObjectError)
        commit = cls(
            parent_hash=reader.read_string(),
            author=reader.read_string(),
            author_email=reader.read_string(),
            committer=reader.read_string(),
            committer_email=reader.read_string(),
            commit_date=reader.read_timestamp(),
            tree_hash=reader.read_string(),
        )
        if reader.remaining():
            raise CorruptObjectError(f"{reader.remaining()} trailing bytes after commit")
        return commit

    def __eq__(self, other):
        if not isinstance(other, Commit):
            return NotImplemented
        return self.encode() == other.encode()

    def __repr__(self):
        return f"Commit(tree={self.tree_hash}, parent={self.parent_hash or None})"


def get_identity(kind: str = 'AUTHOR') -> Tuple[str, str]:
    """
    Args:
        kind: 'AUTHOR' or 'COMMITTER'

    Returns:
        Tuple of (name, email) from AVC_<kind>_NAME / AVC_<kind>_EMAIL;
        the committer falls back to the author

    Raises:
        AvcError: If the environment variables are not set
    """
    try:
        return os.environ[f'AVC_{kind}_NAME'], os.environ[f'AVC_{kind}_EMAIL']
    except KeyError:
        if kind == 'COMMITTER':
            return get_identity('AUTHOR')
        raise AvcError(
            f"{kind.capitalize()} not specified and AVC_{kind}_NAME/AVC_{kind}_EMAIL "
            "environment variables not set"
        )


def create_commit(tree_hash: str, parent_hash: str = '',
                  author: Optional[Tuple[str, str]] = None,
                  committer: Optional[Tuple[str, str]] = None) -> str:
    """
    Args:
        tree_hash: Digest of a stored Tree
        parent_hash: Digest of the parent commit, empty for a root commit
        author: (name, email) tuple (uses env vars if None)
        committer: (name, email) tuple (uses env vars, then author, if None)

    Returns:
        Digest of the stored commit
    """
    if author is None:
        author = get_identity('AUTHOR')
    if committer is None:
        try:
            committer = get_identity('COMMITTER')
        except AvcError:
            committer = author

    commit = Commit(
        parent_hash=parent_hash,
        author=author[0],
        author_email=author[1],
        committer=committer[0],
        committer_email=committer[1],
        commit_date=datetime.now().astimezone(),
        tree_hash=tree_hash,
    )
    digest = store_commit(commit)
    logger.debug('Created commit %s for tree %s', digest, tree_hash)
    return digest


def store_commit(commit: Commit) -> str:
    try:
        return store(commit.encode())
    except DuplicateObjectError as e:
        return e.digest


def read_commit(prefix: str) -> Commit:
    return Commit.decode(fetch_by_hash(prefix).content)

import enum
import logging
import os
import struct
from datetime import datetime
from typing import List, Optional, Union
from .blob import Blob, read_blob, store_blob
from .core import compute_hash, fetch_by_hash, file_times, read_file, store
from .encoding import Reader, pack_string
from .exceptions import (AvcError, CorruptObjectError, DuplicateObjectError, InvalidObjectError,
                         PathNotFoundError, UnsupportedFileTypeError)
from .repository import is_hidden
from .signature import HEADER_SIZE, TREE_HEADER, TREE_VERSION, ObjectType, check_header

logger = logging.getLogger(__name__)

KIND_FORMAT = '!B'


class EntryKind(enum.IntEnum):
    TREE = 0
    BLOB = 1


class TreeEntry:
    """
    A single child of a Tree: a subdirectory (Tree) or a file (Blob).

    The child is either unresolved, known only by ``entry_hash``, or resolved
    to an in-memory Blob/Tree. ``resolve`` fetches an unresolved child once
    and caches it on the entry.
    """

    def __init__(self, kind: EntryKind, name: str, entry_hash: Optional[str] = None,
                 child: Union['Tree', Blob, None] = None,
                 created: Optional[datetime] = None, modified: Optional[datetime] = None):
        self.kind = EntryKind(kind)
        if child is None and not entry_hash:
            raise AvcError(f"Tree entry {name!r} needs a hash or a child")
        expected = Tree if self.kind == EntryKind.TREE else Blob
        if child is not None and not isinstance(child, expected):
            raise AvcError(
                f"Tree entry {name!r} of kind {self.kind.name} cannot hold {type(child).__name__}"
            )
        self.name = name
        self.entry_hash = entry_hash
        self.created = created
        self.modified = modified
        self._child = child

    @property
    def is_resolved(self) -> bool:
        return self._child is not None

    def resolve(self) -> Union['Tree', Blob]:
        if self._child is None:
            if self.kind == EntryKind.TREE:
                self._child = read_tree(self.entry_hash)
            elif self.kind == EntryKind.BLOB:
                self._child = read_blob(self.entry_hash)
            else:
                raise AssertionError(f"unreachable entry kind {self.kind!r}")
        return self._child

    def __repr__(self):
        return f"TreeEntry({self.kind.name}, {self.name!r}, {self.entry_hash})"


class Tree:
    """Directory snapshot; owns its entries in order."""

    def __init__(self, entries: Optional[List[TreeEntry]] = None, hash: Optional[str] = None):
        self.entries = entries if entries is not None else []
        self.hash = hash

    def encode(self) -> bytes:
        """
        Returns:
            Header followed by kind, hash and name of every entry

        Raises:
            AvcError: If an entry has no hash yet
        """
        parts = [TREE_HEADER]
        for entry in self.entries:
            if not entry.entry_hash:
                raise AvcError(f"Tree entry {entry.name!r} has no hash, store the tree first")
            parts.append(struct.pack(KIND_FORMAT, entry.kind))
            parts.append(pack_string(entry.entry_hash))
            parts.append(pack_string(entry.name))
        return b''.join(parts)

    @classmethod
    def decode(cls, data: bytes) -> 'Tree':
        """
        Raises:
            WrongObjectTypeError: If data does not start with a Tree header
            CorruptObjectError: If an entry is truncated or has an unknown kind
        """
        version = check_header(data, ObjectType.TREE)
        if version != TREE_VERSION:
            raise InvalidObjectError(f"Unsupported tree version: {version}")

        reader = Reader(data[HEADER_SIZE:], CorruptObjectError)
        entries = []
        while reader.remaining():
            kind_value, = reader.read_struct(KIND_FORMAT)
            try:
                kind = EntryKind(kind_value)
            except ValueError:
                raise CorruptObjectError(f"Unknown tree entry kind {kind_value}")
            entry_hash = reader.read_string()
            name = reader.read_string()
            if not entry_hash:
                raise CorruptObjectError(f"Tree entry {name!r} has an empty hash")
            entries.append(TreeEntry(kind, name, entry_hash=entry_hash))

        return cls(entries)

    def __repr__(self):
        return f"Tree({len(self.entries)} entries, {self.hash})"


def build_tree_from_path(path: str) -> Tree:
    """
    Args:
        path: Directory to snapshot

    Returns:
        Tree holding every regular file and subdirectory in memory, unhashed.
        Hidden names are skipped at every depth.

    Raises:
        PathNotFoundError: If path does not exist
        UnsupportedFileTypeError: If path is not a directory
    """
    if not os.path.exists(path):
        raise PathNotFoundError(f"Path not found: {path}")
    if not os.path.isdir(path):
        raise UnsupportedFileTypeError(f"Expected a directory: {path}")

    entries = []
    with os.scandir(path) as it:
        dir_entries = sorted(it, key=lambda e: e.name)

    for dir_entry in dir_entries:
        if is_hidden(dir_entry.name):
            logger.debug('Skipping hidden entry %s', dir_entry.path)
            continue

        created, modified = file_times(dir_entry.stat(follow_symlinks=False))

        if dir_entry.is_dir(follow_symlinks=False):
            kind = EntryKind.TREE
            child = build_tree_from_path(dir_entry.path)
        elif dir_entry.is_file(follow_symlinks=False):
            kind = EntryKind.BLOB
            child = Blob(read_file(dir_entry.path))
        else:
            logger.debug('Skipping unsupported entry %s', dir_entry.path)
            continue

        entries.append(TreeEntry(kind, dir_entry.name, child=child,
                                 created=created, modified=modified))

    return Tree(entries)


def store_tree(tree: Tree) -> str:
    """
    Persist every child, then the tree itself.

    Identical files or subtrees collapse onto one stored object: a child or
    tree that is already stored keeps its existing digest.

    Returns:
        Digest of the stored tree
    """
    for entry in tree.entries:
        child = entry.resolve()
        if entry.kind == EntryKind.TREE:
            entry.entry_hash = store_tree(child)
        else:
            entry.entry_hash = store_blob(child)

    try:
        tree.hash = store(tree.encode())
    except DuplicateObjectError as e:
        tree.hash = e.digest

    return tree.hash


def hash_tree(tree: Tree) -> str:
    """
    Returns:
        Digest the tree would be stored under, without writing anything
    """
    for entry in tree.entries:
        if not entry.is_resolved:
            continue
        child = entry.resolve()
        if entry.kind == EntryKind.TREE:
            entry.entry_hash = hash_tree(child)
        else:
            entry.entry_hash = compute_hash(child.encode())
    return compute_hash(tree.encode())


def read_tree(prefix: str) -> Tree:
    obj = fetch_by_hash(prefix)
    tree = Tree.decode(obj.content)
    tree.hash = obj.hash
    return tree


def format_tree(tree: Tree) -> List[str]:
    """
    Returns:
        One "kind hash<TAB>name" line per entry
    """
    lines = []
    for entry in tree.entries:
        kind = ObjectType.TREE if entry.kind == EntryKind.TREE else ObjectType.BLOB
        lines.append(f'{kind} {entry.entry_hash}\t{entry.name}')
    return lines

import logging
import os
from collections import namedtuple
from typing import List
from .blob import Blob
from .core import compute_hash, file_times, read_file, write_file
from .encoding import Reader, pack_string, pack_timestamp
from .exceptions import (AvcError, PathNotFoundError, UnsupportedFileTypeError,
                         CorruptIndexError, IndexEntryAlreadyExistsError, IndexEntryNotFoundError)
from .repository import (AVC_DIR, INDEX_FILE, is_hidden, is_inside_repository_dir,
                         require_repository)
from .signature import HEADER_SIZE, INDEX_HEADER, INDEX_VERSION, ObjectType, check_header

logger = logging.getLogger(__name__)


IndexEntry = namedtuple('IndexEntry', [
    'entry_hash',            # Digest of the file's Blob encoding
    'name',                  # Normalized file path
    'created', 'modified',   # Timezone-aware datetimes
])


class Index:
    """Staging list of regular files, keyed by name."""

    def __init__(self, entries: List[IndexEntry] = None):
        self.entries = entries if entries is not None else []

    def find(self, name: str):
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def encode(self) -> bytes:
        parts = [INDEX_HEADER]
        for entry in self.entries:
            parts.append(pack_string(entry.entry_hash))
            parts.append(pack_string(entry.name))
            parts.append(pack_timestamp(entry.created))
            parts.append(pack_timestamp(entry.modified))
        return b''.join(parts)

    @classmethod
    def decode(cls, data: bytes) -> 'Index':
        """
        Raises:
            WrongObjectTypeError: If data does not start with an Index header
            CorruptIndexError: If an entry is truncated
        """
        version = check_header(data, ObjectType.INDEX)
        if version != INDEX_VERSION:
            raise CorruptIndexError(f"Unsupported index version: {version}")

        reader = Reader(data[HEADER_SIZE:], CorruptIndexError)
        entries = []
        while reader.remaining():
            entries.append(IndexEntry(
                entry_hash=reader.read_string(),
                name=reader.read_string(),
                created=reader.read_timestamp(),
                modified=reader.read_timestamp(),
            ))
        return cls(entries)


def normalize_path(path: str) -> str:
    return os.path.normpath(path).replace('\\', '/')


def read_index() -> Index:
    """
    Returns:
        The persisted Index; an empty Index if the file does not exist yet

    Raises:
        NotInitializedError: If not in an avc repository
    """
    require_repository()

    try:
        data = read_file(INDEX_FILE)
    except FileNotFoundError:
        return Index()

    return Index.decode(data)


def write_index(index: Index):
    require_repository()
    write_file(INDEX_FILE, index.encode())
    logger.debug('Wrote index with %d entries', len(index.entries))


def _make_entry(path: str) -> IndexEntry:
    try:
        content = read_file(path)
        st = os.stat(path)
    except OSError as e:
        raise AvcError(f"Could not add {path!r}: {e}")

    created, modified = file_times(st)
    return IndexEntry(
        entry_hash=compute_hash(Blob(content).encode()),
        name=normalize_path(path),
        created=created,
        modified=modified,
    )


def _walk_files(path: str) -> List[str]:
    files = []
    for root, dirs, names in os.walk(path):
        dirs[:] = sorted(d for d in dirs if not is_hidden(d))
        for name in sorted(names):
            file_path = os.path.join(root, name)
            if is_hidden(name):
                logger.debug('Skipping hidden file %s', file_path)
                continue
            if os.path.isfile(file_path) and not os.path.islink(file_path):
                files.append(file_path)
    return files


def add(path: str):
    """
    Stage a regular file, or every regular file under a directory.

    Every file is checked before the index is rewritten, so a rejected call
    leaves the persisted index untouched.

    Args:
        path: File or directory to stage

    Raises:
        PathNotFoundError: If path does not exist
        IndexEntryAlreadyExistsError: If a file is already staged
        UnsupportedFileTypeError: If path is neither a file nor a directory, or
            lies inside the repository directory
    """
    if not os.path.lexists(path):
        raise PathNotFoundError(f"File not found: {path}")

    if is_inside_repository_dir(path):
        raise UnsupportedFileTypeError(f"Cannot add {path}: inside the {AVC_DIR} directory")

    if os.path.isdir(path):
        paths = _walk_files(path)
    elif os.path.isfile(path):
        paths = [path]
    else:
        raise UnsupportedFileTypeError(f"Cannot add {path}: not a regular file or directory")

    index = read_index()
    staged = {entry.name for entry in index.entries}

    new_entries = []
    for file_path in paths:
        name = normalize_path(file_path)
        if name in staged:
            raise IndexEntryAlreadyExistsError(f"Path already exists in index: {name}")
        new_entries.append(_make_entry(file_path))
        staged.add(name)

    index.entries.extend(new_entries)
    write_index(index)
    return [entry.name for entry in new_entries]


def remove(path: str):
    """
    Raises:
        IndexEntryNotFoundError: If path is not staged
    """
    name = normalize_path(path)
    index = read_index()

    entry = index.find(name)
    if entry is None:
        raise IndexEntryNotFoundError(f"Path not found in index: {name}")

    index.entries.remove(entry)
    write_index(index)


def list_files(details: bool = False) -> List[str]:
    """
    Args:
        details: If True, include the entry hash and modification time

    Returns:
        List of formatted entry strings
    """
    results = []
    for entry in read_index().entries:
        if details:
            results.append(
                f'{entry.entry_hash} {entry.modified.isoformat()}\t{entry.name}'
            )
        else:
            results.append(entry.name)
    return results

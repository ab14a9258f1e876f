__version__ = '1.0.0'

from .core import compute_hash, store, fetch_by_hash, fetch_all_object_names, Object
from .repository import init_repository, is_repository
from .blob import Blob, store_blob, read_blob
from .tree import Tree, TreeEntry, EntryKind, build_tree_from_path, store_tree, read_tree
from .commit import Commit, create_commit, store_commit, read_commit
from .index import Index, IndexEntry, add, remove, read_index
from .exceptions import AvcError

__all__ = [
    'compute_hash',
    'store',
    'fetch_by_hash',
    'fetch_all_object_names',
    'Object',
    'init_repository',
    'is_repository',
    'Blob',
    'store_blob',
    'read_blob',
    'Tree',
    'TreeEntry',
    'EntryKind',
    'build_tree_from_path',
    'store_tree',
    'read_tree',
    'Commit',
    'create_commit',
    'store_commit',
    'read_commit',
    'Index',
    'IndexEntry',
    'add',
    'remove',
    'read_index',
    'AvcError',
]

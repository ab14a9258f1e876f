import logging
import os
from .exceptions import AlreadyInitializedError, NotInitializedError, RepositoryError

logger = logging.getLogger(__name__)

AVC_DIR = '.avc'
OBJECTS_DIR = os.path.join(AVC_DIR, 'objects')
INDEX_FILE = os.path.join(AVC_DIR, 'index')
HIDDEN_PREFIX = '.'


def init_repository():
    """
    Create an empty repository in the current directory.

    Raises:
        AlreadyInitializedError: If the .avc directory already exists
        RepositoryError: If the directory structure cannot be created
    """
    if os.path.lexists(AVC_DIR):
        raise AlreadyInitializedError(
            f"avc repository is already initialized at {os.path.abspath(AVC_DIR)}"
        )

    try:
        os.makedirs(OBJECTS_DIR)
    except OSError as e:
        raise RepositoryError(f"Could not create repository structure: {e}")

    logger.info('Initialized empty avc repository in %s', os.path.abspath(AVC_DIR))


def is_repository() -> bool:
    """
    Returns:
        True if the current directory contains an .avc folder
    """
    return os.path.isdir(AVC_DIR)


def require_repository():
    """
    Raises:
        NotInitializedError: If the current directory holds no repository
    """
    if not is_repository():
        raise NotInitializedError()


def is_hidden(name: str) -> bool:
    """Hidden names are skipped by both the tree builder and the index walk."""
    return name.startswith(HIDDEN_PREFIX)


def is_inside_repository_dir(path: str) -> bool:
    """
    Returns:
        True if path is the .avc directory itself or lies underneath it
    """
    avc_dir = os.path.realpath(AVC_DIR)
    target = os.path.realpath(path)
    return target == avc_dir or target.startswith(avc_dir + os.sep)

"""
Folder resolver

Finds the import folder of a process. The main title is shortened to the
part before its last '-' and the first entry of the image root whose name
starts with that prefix is the import folder.
"""

import logging
from pathlib import Path
from typing import Optional

from .exceptions import FileOperationError, FolderNotFoundError, InvalidTitleError
from .storage_provider import StorageProvider


def title_prefix(main_title: str) -> str:
    """
    Shorten a main title to its folder prefix

    "Konsulatsprotokolle 1636 - 1638" becomes "Konsulatsprotokolle 1636".

    Args:
        main_title: main title of the process

    Returns:
        text before the last '-', stripped of surrounding whitespace

    Raises:
        InvalidTitleError: if the title has no '-' or nothing precedes it
    """
    position = main_title.rfind('-')
    if position < 0:
        raise InvalidTitleError(f"Main title contains no '-': {main_title!r}")
    prefix = main_title[:position].strip()
    if not prefix:
        raise InvalidTitleError(f"Main title has no text before the last '-': {main_title!r}")
    return prefix


class FolderResolver:
    """Locates the import folder for a main title"""

    def __init__(self, storage: Optional[StorageProvider] = None):
        """
        Initialize the FolderResolver

        Args:
            storage: filesystem provider
        """
        self.storage = storage or StorageProvider()
        self.logger = logging.getLogger(__name__)

    def resolve(self, root_directory: Path, main_title: str) -> Path:
        """
        Find the import folder for a main title

        Entries are checked in name order, so the lexicographically first
        entry wins when several share the prefix.

        Args:
            root_directory: directory holding the import folders
            main_title: main title of the process

        Returns:
            path of the import folder

        Raises:
            InvalidTitleError: if the title cannot be shortened
            FolderNotFoundError: if no entry matches or the match is not
                                 a directory
        """
        prefix = title_prefix(main_title)

        if not self.storage.is_directory(root_directory):
            raise FolderNotFoundError(f"Image root is not a directory: {root_directory}")

        try:
            entries = self.storage.list_entries(root_directory)
        except FileOperationError as e:
            raise FolderNotFoundError(str(e)) from e

        for name in entries:
            if not name.startswith(prefix):
                continue
            folder = root_directory / name
            if not self.storage.is_directory(folder):
                raise FolderNotFoundError(f"Matching entry is not a directory: {folder}")
            self.logger.debug(f"Import folder found: {folder} (prefix: {prefix!r})")
            return folder

        raise FolderNotFoundError(f"No folder to import found for prefix {prefix!r} in {root_directory}")

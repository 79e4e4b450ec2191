"""
Storage provider

Filesystem access used by the folder import: listing directories,
listing image files and copying them into the master directory.
All listings are sorted by name.
"""

import logging
import shutil
from pathlib import Path
from typing import List

from .exceptions import FileOperationError


class StorageProvider:
    """Filesystem operations on local directories"""

    def __init__(self):
        """Initialize the StorageProvider"""
        self.logger = logging.getLogger(__name__)

    def is_directory(self, path: Path) -> bool:
        return path.is_dir()

    def list_entries(self, directory: Path) -> List[str]:
        """
        List the names of all immediate entries of a directory

        Args:
            directory: directory to list

        Returns:
            entry names sorted by name

        Raises:
            FileOperationError: if the directory cannot be read
        """
        try:
            return sorted(entry.name for entry in directory.iterdir())
        except OSError as e:
            raise FileOperationError(f"Cannot list directory: {directory} - {e}") from e

    def list_subfolders(self, directory: Path) -> List[str]:
        """
        List the names of the immediate subdirectories of a directory

        Args:
            directory: directory to list

        Returns:
            subfolder names sorted by name

        Raises:
            FileOperationError: if the directory cannot be read
        """
        try:
            return sorted(entry.name for entry in directory.iterdir() if entry.is_dir())
        except OSError as e:
            raise FileOperationError(f"Cannot list directory: {directory} - {e}") from e

    def list_files(self, directory: Path) -> List[Path]:
        """
        List the regular files immediately inside a directory

        Args:
            directory: directory to list

        Returns:
            file paths sorted by file name

        Raises:
            FileOperationError: if the directory cannot be read
        """
        try:
            files = [entry for entry in directory.iterdir() if entry.is_file()]
        except OSError as e:
            raise FileOperationError(f"Cannot list directory: {directory} - {e}") from e
        return sorted(files, key=lambda path: path.name)

    def create_directories(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Cannot create directory: {directory} - {e}") from e

    def copy_file(self, source: Path, destination: Path) -> None:
        """
        Copy a file, keeping its timestamps

        Args:
            source: file to copy
            destination: target file path

        Raises:
            FileOperationError: if the copy fails
        """
        try:
            # shutil.copy2 keeps the file metadata
            shutil.copy2(source, destination)
        except PermissionError as e:
            raise FileOperationError(f"Permission denied: {e}") from e
        except OSError as e:
            raise FileOperationError(f"File operation failed: {e}") from e
        self.logger.debug(f"Copied: {source.name} -> {destination}")

    def delete_file(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            self.logger.debug(f"Already removed: {path}")
        except OSError as e:
            raise FileOperationError(f"Cannot delete file: {path} - {e}") from e

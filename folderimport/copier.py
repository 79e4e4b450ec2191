"""
Image copy module

Copies renamed images into the master directory of the process.
Existing destinations are reported as conflicts unless overwriting is
enabled, and copies made during a run can be removed again.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from .exceptions import DestinationConflictError, FileOperationError
from .models import ImageAsset, StepOutcome
from .storage_provider import StorageProvider


class ImageCopier:
    """Copies images into the master directory"""

    # kept free on the target disk
    SAFETY_MARGIN = 10 * 1024 * 1024

    def __init__(self, storage: Optional[StorageProvider] = None, overwrite: bool = False):
        """
        Initialize the ImageCopier

        Args:
            storage: filesystem provider
            overwrite: replace existing destination files instead of
                       reporting a conflict
        """
        self.storage = storage or StorageProvider()
        self.overwrite = overwrite
        self.logger = logging.getLogger(__name__)

    def copy_image(self, asset: ImageAsset) -> StepOutcome:
        """
        Copy a single image

        Args:
            asset: source and destination of the image

        Returns:
            outcome of the copy; 'failed' outcomes carry the error kind
        """
        try:
            self._copy(asset)
        except DestinationConflictError as e:
            self.logger.error(f"Copy failed: {asset.source_path} - {e}")
            return StepOutcome(str(asset.source_path), 'failed', 'DestinationConflict', str(e))
        except FileOperationError as e:
            self.logger.error(f"Copy failed: {asset.source_path} - {e}")
            return StepOutcome(str(asset.source_path), 'failed', 'CopyFailed', str(e))
        return StepOutcome(str(asset.source_path), 'success')

    def _copy(self, asset: ImageAsset) -> None:
        source_path = asset.source_path
        target_path = asset.destination_path

        if not source_path.exists():
            raise FileOperationError("Source file does not exist")

        if target_path.exists() and not self.overwrite:
            raise DestinationConflictError(f"Destination already exists: {target_path}")

        try:
            source_size = source_path.stat().st_size
        except OSError as e:
            self.logger.warning(f"Disk space check skipped: {source_path} - {e}")
        else:
            if not self._check_disk_space(target_path.parent, source_size):
                raise FileOperationError("Not enough disk space")

        self.storage.copy_file(source_path, target_path)

    def remove_copies(self, paths: List[Path]) -> int:
        """
        Delete files copied earlier in the run

        Args:
            paths: copied destination files

        Returns:
            number of removed files
        """
        removed = 0
        for path in paths:
            try:
                self.storage.delete_file(path)
                removed += 1
            except FileOperationError as e:
                self.logger.error(f"Rollback failed: {path} - {e}")
        self.logger.info(f"Rollback: removed {removed} of {len(paths)} copied files")
        return removed

    def _check_disk_space(self, target_dir: Path, required_bytes: int) -> bool:
        """
        Check the free space of the target disk

        Args:
            target_dir: destination directory
            required_bytes: size of the file to copy

        Returns:
            True if enough space is left
        """
        try:
            free_bytes = shutil.disk_usage(target_dir).free
        except OSError as e:
            self.logger.warning(f"Disk space check failed: {e}")
            return True

        if free_bytes < (required_bytes + self.SAFETY_MARGIN):
            self.logger.warning(
                f"Not enough disk space: required={required_bytes:,}bytes, "
                f"available={free_bytes:,}bytes"
            )
            return False
        return True

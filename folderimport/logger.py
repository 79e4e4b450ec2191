"""
Logging system

Logging for the folder import step. Supports console and file output,
run summaries and error logs.
"""

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import FolderAssignment, ImportStats


@dataclass
class LogConfig:
    """Log settings"""
    console_level: int = logging.INFO
    file_level: int = logging.DEBUG
    log_file: Optional[Path] = None
    verbose: bool = False


class ImportLogger:
    """Manages progress output and logging of an import run"""

    def __init__(self, config: LogConfig):
        self.config = config
        self.logger = self._setup_logger()
        self._start_time: Optional[datetime] = None

    def _setup_logger(self) -> logging.Logger:
        """Set up the logger"""
        logger = logging.getLogger('folderimport.run')
        logger.setLevel(logging.DEBUG)

        # drop handlers of a previous run
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

        console_formatter = logging.Formatter(
            '%(message)s'
        )
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.config.console_level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        if self.config.log_file:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.config.log_file, encoding='utf-8')
            file_handler.setLevel(self.config.file_level)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        return logger

    def log_processing_start(self, process_id: str, image_root: Path):
        """Summary at the start of a run"""
        self._start_time = datetime.now()

        self.logger.info("=" * 60)
        self.logger.info("Folder import - start")
        self.logger.info("=" * 60)
        self.logger.info(f"Start time: {self._start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info(f"Process: {process_id}")
        self.logger.info(f"Image root: {image_root}")
        self.logger.info("")

    def log_folder_resolved(self, main_title: str, folder: Path):
        self.logger.info(f"Main title: {main_title}")
        self.logger.info(f"Import folder: {folder}")

    def log_folder_start(self, assignment: FolderAssignment):
        """Log the folder being processed"""
        if self.config.verbose:
            self.logger.info(f"Processing: {assignment.folder_name} -> {assignment.structure_type}")

    def log_processing_complete(self, stats: ImportStats):
        """Summary at the end of a run"""
        end_time = datetime.now()
        total_time = (end_time - self._start_time).total_seconds() if self._start_time else 0

        self.logger.info("=" * 60)
        self.logger.info("Import summary")
        self.logger.info("=" * 60)
        self.logger.info(f"End time: {end_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info(f"Total time: {total_time:.2f}s")
        self.logger.info("")
        self.logger.info("Results:")
        self.logger.info(f"  - Folders found: {stats.folders_found}")
        self.logger.info(f"  - Structure elements: {stats.structures_created}")
        self.logger.info(f"  - Pages: {stats.pages_created}")
        self.logger.info(f"  - Files copied: {stats.files_copied}")
        self.logger.info(f"  - Failures: {stats.files_failed}")
        if stats.files_removed:
            self.logger.info(f"  - Files removed by rollback: {stats.files_removed}")

        if stats.errors:
            self.logger.info("")
            self.logger.info(f"Error details ({len(stats.errors)}):")
            for unit, error_msg in stats.errors:
                self.logger.error(f"  - {unit}: {error_msg}")

        self.logger.info("=" * 60)

    def log_error(self, file_path: Path, error_message: str, exception: Optional[Exception] = None):
        """Log an error together with the affected path"""
        error_msg = f"Error - {file_path}: {error_message}"

        if exception:
            error_msg += f" ({type(exception).__name__}: {str(exception)})"

        self.logger.error(error_msg)

        # stack traces go to the log file only
        if exception and self.config.log_file:
            self.logger.debug("Stack trace:", exc_info=exception)

    def log_warning(self, message: str):
        self.logger.warning(f"Warning: {message}")

    def log_info(self, message: str):
        self.logger.info(message)

    def log_debug(self, message: str):
        self.logger.debug(message)


def create_default_logger(verbose: bool = False, log_file: Optional[Path] = None) -> ImportLogger:
    """Create the default logger"""
    config = LogConfig(
        console_level=logging.DEBUG if verbose else logging.INFO,
        file_level=logging.DEBUG,
        log_file=log_file,
        verbose=verbose
    )
    return ImportLogger(config)


def get_default_log_file() -> Path:
    """Default log file path"""
    log_dir = Path.home() / '.folderimport' / 'logs'
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return log_dir / f'folderimport_{timestamp}.log'

"""
Folder import step plugin

Entry point called by the workflow for one step of a process. Reads the
metadata file, finds the import folder for the main title, builds the
structure from its subfolders and writes the metadata file back.
"""

from pathlib import Path
from typing import List, Optional

from .config import PLUGIN_TITLE, PluginConfig, load_config
from .copier import ImageCopier
from .document import DocStruct
from .exceptions import (
    FileOperationError, FolderNotFoundError, InvalidTitleError,
    MetadataUnreadableError, MetadataWriteError, NoMainTitleError
)
from .logger import ImportLogger, create_default_logger
from .models import BuildResult, ImportRequest, ImportStats, PluginReturnValue
from .process import Process, Step
from .resolver import FolderResolver
from .storage_provider import StorageProvider
from .structure_builder import StructureBuilder


class FolderImportStepPlugin:
    """Imports a folder of image subfolders into the structure of a process"""

    title = PLUGIN_TITLE

    def __init__(self, progress_logger: Optional[ImportLogger] = None):
        """
        Initialize the FolderImportStepPlugin

        Args:
            progress_logger: logger for the run; a default logger is
                             created when omitted
        """
        self.step: Optional[Step] = None
        self.process: Optional[Process] = None
        self.config: Optional[PluginConfig] = None
        self.root_folder: Optional[Path] = None
        self.storage = StorageProvider()
        self.progress_logger = progress_logger or create_default_logger()
        self.messages: List[str] = []
        self.last_result: Optional[BuildResult] = None

    def initialize(self, step: Step, config_file: Optional[Path] = None,
                   config: Optional[PluginConfig] = None) -> None:
        """
        Prepare the plugin for a step

        Args:
            step: workflow step to run in
            config_file: YAML configuration file of the plugin
            config: configuration to use instead of loading config_file

        Raises:
            ConfigurationError: if no configuration applies to the step
        """
        self.step = step
        self.process = step.process
        if config is None:
            if config_file is None:
                raise ValueError("Either config_file or config is required")
            config = load_config(config_file, self.process.project, step.title)
        self.config = config
        self.root_folder = config.image_folder

    def set_root_folder(self, root_folder: Path) -> None:
        """Override the configured image root"""
        self.root_folder = root_folder

    def execute(self) -> bool:
        return self.run() != PluginReturnValue.ERROR

    def run(self) -> PluginReturnValue:
        """
        Run the folder import

        Returns:
            FINISH on success, ERROR if the import could not be done
        """
        if self.step is None or self.config is None:
            raise RuntimeError("Plugin is not initialized")

        self.messages = []
        self.last_result = None
        process = self.process
        self.progress_logger.log_processing_start(process.id, self.root_folder)

        # 1. open the metadata file
        try:
            fileformat = process.read_metadata_file()
            document = fileformat.get_digital_document()
            logical = self._logical_container(document.logical)
            physical = document.physical
            if physical is None:
                raise MetadataUnreadableError("Metadata file has no physical structure")
        except MetadataUnreadableError as e:
            return self._fail("Metadata not readable", e)

        # 2. main title
        try:
            main_title = self._main_title(logical)
        except NoMainTitleError as e:
            return self._fail("No main title found.", e)

        # 3. import folder
        request = ImportRequest(self.root_folder, main_title, self.config.rule_set())
        resolver = FolderResolver(self.storage)
        try:
            folder = resolver.resolve(request.root_directory, request.main_title)
        except (FolderNotFoundError, InvalidTitleError) as e:
            return self._fail("No folder to import found.", e)
        self.progress_logger.log_folder_resolved(main_title, folder)

        # 4. structure elements, pages and images
        master_folder = process.images_master_directory
        copier = ImageCopier(self.storage, overwrite=self.config.overwrite_existing)
        builder = StructureBuilder(
            document,
            copier=copier,
            storage=self.storage,
            title_metadata=self.config.title_metadata,
            year_metadata=self.config.year_metadata,
            dating_metadata=self.config.dating_metadata,
            main_title_prefix=self.config.main_title_prefix,
        )
        try:
            self.storage.create_directories(master_folder)
            result = builder.build(folder, request.rule_set, logical, physical,
                                   master_folder, progress_logger=self.progress_logger)
        except FileOperationError as e:
            return self._fail("Import folder not readable.", e)
        self.last_result = result

        # 5. save
        status = PluginReturnValue.FINISH
        removed = 0
        try:
            process.write_metadata_file(fileformat)
        except MetadataWriteError as e:
            self.progress_logger.log_error(process.metadata_file_path, "Metadata not writable", e)
            self.messages.append("Metadata not writable.")
            if self.config.rollback_on_write_failure:
                removed = copier.remove_copies(result.copied_files)
                result.copied_files = []
                status = PluginReturnValue.ERROR

        self.progress_logger.log_processing_complete(self._stats(result, removed))
        self.progress_logger.log_info("Folder import step plugin executed")
        return status

    def _logical_container(self, logical: Optional[DocStruct]) -> DocStruct:
        if logical is None:
            raise MetadataUnreadableError("Metadata file has no logical structure")
        if logical.type.anchor:
            children = logical.get_all_children()
            if not children:
                raise MetadataUnreadableError("Anchor element has no child element")
            return children[0]
        return logical

    def _main_title(self, logical: DocStruct) -> str:
        title_type = self.process.prefs.get_metadata_type_by_name(self.config.title_metadata)
        titles = logical.get_all_metadata_by_type(title_type) if title_type else []
        if not titles:
            raise NoMainTitleError(f"No main title found for {self.process.id}")
        return titles[0].value

    def _fail(self, message: str, error: Exception) -> PluginReturnValue:
        self.progress_logger.log_error(Path(str(self.process.id)), message, error)
        self.messages.append(message)
        return PluginReturnValue.ERROR

    @staticmethod
    def _stats(result: BuildResult, files_removed: int = 0) -> ImportStats:
        return ImportStats(
            folders_found=result.folders_found,
            structures_created=result.structures_created,
            pages_created=result.pages_created,
            files_copied=sum(1 for outcome in result.outcomes if outcome.status == 'success'),
            files_removed=files_removed,
            files_failed=len(result.errors),
            errors=[(outcome.unit, f"{outcome.kind}: {outcome.reason}") for outcome in result.errors],
        )

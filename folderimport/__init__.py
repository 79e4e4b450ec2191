# Folder import step
# Imports folders of scanned images into the structure of a digitization process

from .models import (
    Rule, RuleSet, ImportRequest, FolderAssignment, FolderPartition, ImageAsset,
    StepOutcome, BuildResult, ImportStats, PluginReturnValue
)
from .exceptions import (
    ProcessingError, ValidationError, FileOperationError, ConfigurationError,
    MetadataUnreadableError, NoMainTitleError, InvalidTitleError, FolderNotFoundError,
    StructureCreationError, TypeNotAllowedAsChildError, MetadataTypeNotAllowedError,
    DestinationConflictError, MetadataWriteError
)
from .config import PluginConfig, load_config
from .document import Prefs, DocStruct, DocStructType, MetadataType, Metadata, DigitalDocument, Fileformat
from .process import Process, Step
from .storage_provider import StorageProvider
from .copier import ImageCopier
from .resolver import FolderResolver, title_prefix
from .structure_builder import StructureBuilder, partition_folders, destination_file_name
from .logger import ImportLogger, LogConfig, create_default_logger, get_default_log_file
from .plugin import FolderImportStepPlugin

__all__ = [
    'Rule',
    'RuleSet',
    'ImportRequest',
    'FolderAssignment',
    'FolderPartition',
    'ImageAsset',
    'StepOutcome',
    'BuildResult',
    'ImportStats',
    'PluginReturnValue',
    'ProcessingError',
    'ValidationError',
    'FileOperationError',
    'ConfigurationError',
    'MetadataUnreadableError',
    'NoMainTitleError',
    'InvalidTitleError',
    'FolderNotFoundError',
    'StructureCreationError',
    'TypeNotAllowedAsChildError',
    'MetadataTypeNotAllowedError',
    'DestinationConflictError',
    'MetadataWriteError',
    'PluginConfig',
    'load_config',
    'Prefs',
    'DocStruct',
    'DocStructType',
    'MetadataType',
    'Metadata',
    'DigitalDocument',
    'Fileformat',
    'Process',
    'Step',
    'StorageProvider',
    'ImageCopier',
    'FolderResolver',
    'title_prefix',
    'StructureBuilder',
    'partition_folders',
    'destination_file_name',
    'ImportLogger',
    'LogConfig',
    'create_default_logger',
    'get_default_log_file',
    'FolderImportStepPlugin'
]

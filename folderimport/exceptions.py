"""
Custom exception classes

Exception classes used by the folder import step.
"""


class ProcessingError(Exception):
    """Base class for processing errors"""
    pass


class ValidationError(ProcessingError):
    """Validation error"""
    pass


class FileOperationError(ProcessingError):
    """File operation error"""
    pass


class ConfigurationError(ProcessingError):
    """Plugin configuration or ruleset could not be loaded"""
    pass


class MetadataUnreadableError(ProcessingError):
    """The metadata file of the process could not be read"""
    pass


class NoMainTitleError(ProcessingError):
    """The logical root carries no main title"""
    pass


class InvalidTitleError(ValidationError):
    """The main title cannot be shortened to a folder prefix"""
    pass


class FolderNotFoundError(ProcessingError):
    """No import folder matches the main title"""
    pass


class StructureCreationError(ProcessingError):
    """A structure element could not be created"""
    pass


class TypeNotAllowedAsChildError(StructureCreationError):
    """The structure type may not be added below the given parent"""
    pass


class MetadataTypeNotAllowedError(ProcessingError):
    """The metadata type is not allowed for the structure type"""
    pass


class DestinationConflictError(FileOperationError):
    """The copy destination already exists"""
    pass


class MetadataWriteError(ProcessingError):
    """The metadata file of the process could not be written"""
    pass

"""
Process context

A process of the workflow together with the step the import runs in.
The process owns the metadata file and the master image directory.
"""

from dataclasses import dataclass
from pathlib import Path

from .document import Fileformat, Prefs

METADATA_FILE_NAME = 'meta.json'


@dataclass
class Process:
    """A digitization process"""
    id: str
    title: str
    directory: Path
    prefs: Prefs
    project: str = '*'

    @property
    def metadata_file_path(self) -> Path:
        return self.directory / METADATA_FILE_NAME

    @property
    def images_master_directory(self) -> Path:
        return self.directory / 'images' / f'{self.title}_master'

    def read_metadata_file(self) -> Fileformat:
        """
        Read the metadata file of the process

        Raises:
            MetadataUnreadableError: if the file cannot be read
        """
        return Fileformat.read(self.metadata_file_path, self.prefs)

    def write_metadata_file(self, fileformat: Fileformat) -> None:
        """
        Write the metadata file of the process

        Raises:
            MetadataWriteError: if the file cannot be written
        """
        fileformat.write(self.metadata_file_path)


@dataclass
class Step:
    """Workflow step the plugin is executed in"""
    title: str
    process: Process

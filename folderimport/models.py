"""
Data model definitions

Data classes used by the folder import step.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class PluginReturnValue(Enum):
    """Result of a plugin run as reported to the workflow"""
    FINISH = 'finish'
    ERROR = 'error'


@dataclass(frozen=True)
class Rule:
    """Mapping of a subfolder name to a structure type"""
    folder_name: str  # compared case-insensitively
    structure_type: str

    def matches(self, name: str) -> bool:
        return self.folder_name.lower() == name.lower()


@dataclass(frozen=True)
class RuleSet:
    """Ordered prefix and suffix rules plus the main structure type"""
    prefix_rules: Tuple[Rule, ...]
    suffix_rules: Tuple[Rule, ...]
    main_structure_type: str


@dataclass(frozen=True)
class ImportRequest:
    """Input of a single folder import"""
    root_directory: Path
    main_title: str
    rule_set: RuleSet


@dataclass(frozen=True)
class FolderAssignment:
    """A subfolder together with the structure type it was assigned"""
    folder_name: str
    structure_type: str
    create_metadata: bool  # True for main folders only


@dataclass
class FolderPartition:
    """Subfolders of an import folder split into prefix, main and suffix groups"""
    prefix_folders: List[FolderAssignment]
    main_folders: List[FolderAssignment]  # sorted by name
    suffix_folders: List[FolderAssignment]

    def ordered(self) -> List[FolderAssignment]:
        """Assignments in creation order: prefix, main, suffix"""
        return self.prefix_folders + self.main_folders + self.suffix_folders

    def folder_names(self) -> List[str]:
        return [assignment.folder_name for assignment in self.ordered()]


@dataclass(frozen=True)
class ImageAsset:
    """An image to copy into the master directory"""
    source_path: Path
    destination_path: Path


@dataclass
class StepOutcome:
    """Result of one folder or image step"""
    unit: str
    status: str  # 'success', 'skipped' or 'failed'
    kind: Optional[str] = None  # error kind for 'failed'
    reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == 'failed'


@dataclass
class BuildResult:
    """Report of a structure build"""
    next_image_index: int
    folders_found: int = 0
    structures_created: int = 0
    pages_created: int = 0
    copied_files: List[Path] = field(default_factory=list)  # files created by this build
    outcomes: List[StepOutcome] = field(default_factory=list)

    @property
    def images_processed(self) -> int:
        return self.pages_created

    @property
    def errors(self) -> List[StepOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]


@dataclass
class ImportStats:
    """Summary of an import run"""
    folders_found: int
    structures_created: int
    pages_created: int
    files_copied: int
    files_failed: int
    errors: List[Tuple[str, str]]  # (unit, error_message)
    files_removed: int = 0

"""
Structure builder

Assigns the subfolders of an import folder to structure elements and
creates one page per image. Folders named in the prefix rules come
first, then all remaining folders in name order, then the folders named
in the suffix rules. Every image is copied into the master directory
under a name made of its folder and file name.

Failures of single folders or images are recorded in the build result
and logged; the build continues with the next folder or image.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

from .copier import ImageCopier
from .document import (
    PAGE_TYPE, PHYSICAL_PAGE_NUMBER, DigitalDocument, DocStruct, Metadata
)
from .exceptions import (
    FileOperationError, MetadataTypeNotAllowedError, StructureCreationError
)
from .models import (
    BuildResult, FolderAssignment, FolderPartition, ImageAsset, Rule, RuleSet,
    StepOutcome
)
from .storage_provider import StorageProvider

THUMBS_DB = 'Thumbs.db'

_INVALID_CHARACTERS = re.compile(r'[^A-Za-z0-9_.]')


def destination_file_name(subfolder: str, file_name: str) -> str:
    """
    Name of an image in the master directory

    Args:
        subfolder: name of the folder the image comes from
        file_name: original file name

    Returns:
        "<subfolder>_<file_name>" with every character other than
        letters, digits, '_' and '.' replaced by '_'
    """
    return _INVALID_CHARACTERS.sub('_', f"{subfolder}_{file_name}")


def partition_folders(folder_names: Sequence[str], rule_set: RuleSet) -> FolderPartition:
    """
    Split subfolders into prefix, main and suffix groups

    Rules are applied in configured order and compare names
    case-insensitively. A folder is assigned to the first rule it matches;
    prefix rules are checked before suffix rules. Unmatched folders get the
    main type and are sorted by name.

    Args:
        folder_names: subfolder names of the import folder
        rule_set: prefix and suffix rules and the main type

    Returns:
        the partition
    """
    assigned = set()

    def collect(rules: Sequence[Rule]) -> List[FolderAssignment]:
        assignments = []
        for rule in rules:
            for position, name in enumerate(folder_names):
                if position in assigned or not rule.matches(name):
                    continue
                assigned.add(position)
                assignments.append(FolderAssignment(name, rule.structure_type, False))
        return assignments

    prefix_folders = collect(rule_set.prefix_rules)
    suffix_folders = collect(rule_set.suffix_rules)
    remaining = sorted(name for position, name in enumerate(folder_names) if position not in assigned)
    main_folders = [FolderAssignment(name, rule_set.main_structure_type, True) for name in remaining]
    return FolderPartition(prefix_folders, main_folders, suffix_folders)


class StructureBuilder:
    """Creates structure elements and pages from the folders of an import folder"""

    def __init__(self, document: DigitalDocument, copier: Optional[ImageCopier] = None,
                 storage: Optional[StorageProvider] = None,
                 title_metadata: str = 'TitleDocMain',
                 year_metadata: str = 'PublicationYear',
                 dating_metadata: str = 'Dating',
                 main_title_prefix: str = 'Protokoll vom '):
        """
        Initialize the StructureBuilder

        Args:
            document: document the elements are created in
            copier: copies images into the master directory
            storage: filesystem provider
            title_metadata: metadata type of the derived title
            year_metadata: metadata type of the publication year
            dating_metadata: metadata type of the dating
            main_title_prefix: text put before the folder name in titles
        """
        self.document = document
        self.storage = storage or StorageProvider()
        self.copier = copier or ImageCopier(self.storage)
        self.title_metadata = title_metadata
        self.year_metadata = year_metadata
        self.dating_metadata = dating_metadata
        self.main_title_prefix = main_title_prefix
        self.logger = logging.getLogger(__name__)

    def build(self, resolved_folder: Path, rule_set: RuleSet, logical: DocStruct,
              physical: DocStruct, master_folder: Path, starting_image_index: int = 1,
              progress_logger=None) -> BuildResult:
        """
        Create structure elements and pages for all subfolders

        Args:
            resolved_folder: import folder
            rule_set: folder rules
            logical: logical container the elements are appended to
            physical: physical container the pages are appended to
            master_folder: destination directory of the images
            starting_image_index: physical page number of the first image
            progress_logger: optional ImportLogger for progress output

        Returns:
            build result with the next free image index and all outcomes

        Raises:
            FileOperationError: if the import folder cannot be listed
        """
        partition = partition_folders(self.storage.list_subfolders(resolved_folder), rule_set)
        result = BuildResult(next_image_index=starting_image_index,
                             folders_found=len(partition.folder_names()))

        self.logger.info(
            f"Folder assignment: prefix={len(partition.prefix_folders)}, "
            f"main={len(partition.main_folders)}, suffix={len(partition.suffix_folders)}"
        )

        for assignment in partition.ordered():
            if progress_logger:
                progress_logger.log_folder_start(assignment)
            self._process_folder(assignment, resolved_folder, logical, physical,
                                 master_folder, result, progress_logger)

        self.logger.info(
            f"Structure build complete: {result.structures_created} elements, "
            f"{result.pages_created} pages, {len(result.errors)} errors"
        )
        return result

    def _process_folder(self, assignment: FolderAssignment, resolved_folder: Path,
                        logical: DocStruct, physical: DocStruct, master_folder: Path,
                        result: BuildResult, progress_logger) -> None:
        folder_name = assignment.folder_name
        folder = resolved_folder / folder_name

        try:
            element = self.document.create_doc_struct(assignment.structure_type)
            logical.add_child(element)
        except StructureCreationError as e:
            self._record_failure(result, folder, 'StructureCreationFailed', str(e), progress_logger)
            return
        result.structures_created += 1

        try:
            files = self.storage.list_files(folder)
        except FileOperationError as e:
            self._record_failure(result, folder, 'FolderUnreadable', str(e), progress_logger)
            return

        metadata_assigned = False
        for source in files:
            file_name = destination_file_name(folder_name, source.name)
            if file_name.endswith(THUMBS_DB):
                result.outcomes.append(StepOutcome(str(source), 'skipped', reason=THUMBS_DB))
                continue

            try:
                page = self._create_page(file_name, result.next_image_index, logical, element, physical)
            except (StructureCreationError, MetadataTypeNotAllowedError) as e:
                self._record_failure(result, source, 'StructureCreationFailed', str(e), progress_logger)
                continue
            result.next_image_index += 1
            result.pages_created += 1
            self.logger.debug(f"Page {page.get_metadata_value(PHYSICAL_PAGE_NUMBER)}: {file_name}")

            # main folders with at least one page get their metadata once
            if assignment.create_metadata and not metadata_assigned:
                self._assign_metadata(element, folder_name, result, progress_logger)
                metadata_assigned = True

            destination = master_folder / file_name
            replaced = destination.exists()
            outcome = self.copier.copy_image(ImageAsset(source, destination))
            result.outcomes.append(outcome)
            if outcome.failed:
                if progress_logger:
                    progress_logger.log_error(source, f"{outcome.kind}: {outcome.reason}")
            elif not replaced:
                # only new files are removed by a rollback
                result.copied_files.append(destination)

    def _create_page(self, file_name: str, image_index: int, logical: DocStruct,
                     element: DocStruct, physical: DocStruct) -> DocStruct:
        page = self.document.create_doc_struct(PAGE_TYPE)
        page.image_name = file_name
        physical_number = self.document.prefs.get_metadata_type_by_name(PHYSICAL_PAGE_NUMBER)
        page.add_metadata(Metadata(physical_number, str(image_index)))
        physical.add_child(page)
        logical.add_reference_to(page)
        element.add_reference_to(page)
        return page

    def _assign_metadata(self, element: DocStruct, folder_name: str, result: BuildResult,
                         progress_logger) -> None:
        """
        Set title, year and dating derived from a main folder name

        "1636-01-21;Sitzung" gives the title "Protokoll vom 1636-01-21;Sitzung"
        and the date "1636-01-21". Existing values are replaced, so repeated
        calls leave a single value per type.
        """
        self._replace_metadata(element, self.title_metadata, self.main_title_prefix + folder_name,
                               result, progress_logger)

        date = folder_name.split(';')[0]
        if date.strip():
            self._replace_metadata(element, self.year_metadata, date, result, progress_logger)
            self._replace_metadata(element, self.dating_metadata, date, result, progress_logger)

    def _replace_metadata(self, element: DocStruct, type_name: str, value: str,
                          result: BuildResult, progress_logger) -> None:
        metadata_type = self.document.prefs.get_metadata_type_by_name(type_name)
        if metadata_type is None:
            # not part of the ruleset
            return
        try:
            element.remove_all_metadata_by_type(metadata_type)
            element.add_metadata(Metadata(metadata_type, value))
        except MetadataTypeNotAllowedError as e:
            self._record_failure(result, f"{element.type.name} [{type_name}]",
                                 'MetadataAssignmentFailed', str(e), progress_logger)

    def _record_failure(self, result: BuildResult, unit, kind: str, message: str,
                        progress_logger) -> None:
        result.outcomes.append(StepOutcome(str(unit), 'failed', kind, message))
        if progress_logger:
            progress_logger.log_error(unit, f"{kind}: {message}")
        else:
            self.logger.error(f"{kind}: {unit} - {message}")

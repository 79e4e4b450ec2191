"""
Document model

Logical and physical structure of a digitized item, the ruleset that
defines the allowed structure and metadata types, and the JSON metadata
file the structure is persisted in.
"""

import itertools
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from .exceptions import (
    ConfigurationError, MetadataTypeNotAllowedError, MetadataUnreadableError,
    MetadataWriteError, StructureCreationError, TypeNotAllowedAsChildError
)

PAGE_TYPE = 'page'
PHYSICAL_PAGE_NUMBER = 'physPageNumber'
LOGICAL_PAGE_NUMBER = 'logicalPageNumber'
LOGICAL_PHYSICAL = 'logical_physical'


@dataclass(frozen=True)
class MetadataType:
    """Metadata type defined in the ruleset"""
    name: str


@dataclass(frozen=True)
class DocStructType:
    """Structure type defined in the ruleset"""
    name: str
    anchor: bool = False
    allowed_metadata: Tuple[str, ...] = ()  # empty: any metadata
    allowed_children: Tuple[str, ...] = ()  # empty: any child type

    def allows_metadata(self, metadata_name: str) -> bool:
        return not self.allowed_metadata or metadata_name in self.allowed_metadata

    def allows_child(self, type_name: str) -> bool:
        return not self.allowed_children or type_name in self.allowed_children


class Prefs:
    """Ruleset with the structure and metadata types of a project"""

    def __init__(self, doc_struct_types: Optional[List[DocStructType]] = None,
                 metadata_types: Optional[List[MetadataType]] = None):
        """
        Initialize the ruleset

        Page structures and page number metadata are always defined.

        Args:
            doc_struct_types: structure types of the ruleset
            metadata_types: metadata types of the ruleset
        """
        self.doc_struct_types: Dict[str, DocStructType] = {
            PAGE_TYPE: DocStructType(
                PAGE_TYPE, allowed_metadata=(PHYSICAL_PAGE_NUMBER, LOGICAL_PAGE_NUMBER)
            )
        }
        self.metadata_types: Dict[str, MetadataType] = {
            PHYSICAL_PAGE_NUMBER: MetadataType(PHYSICAL_PAGE_NUMBER),
            LOGICAL_PAGE_NUMBER: MetadataType(LOGICAL_PAGE_NUMBER),
        }
        for doc_struct_type in doc_struct_types or []:
            self.doc_struct_types[doc_struct_type.name] = doc_struct_type
        for metadata_type in metadata_types or []:
            self.metadata_types[metadata_type.name] = metadata_type

    def get_doc_struct_type(self, name: str) -> Optional[DocStructType]:
        return self.doc_struct_types.get(name)

    def get_metadata_type_by_name(self, name: str) -> Optional[MetadataType]:
        return self.metadata_types.get(name)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Prefs':
        """
        Build a ruleset from its dictionary form

        Args:
            data: mapping with 'metadataTypes' and 'docStructTypes' lists

        Returns:
            the ruleset

        Raises:
            ConfigurationError: if an entry is malformed
        """
        try:
            metadata_types = [MetadataType(str(name)) for name in data.get('metadataTypes') or []]
            doc_struct_types = []
            for entry in data.get('docStructTypes') or []:
                doc_struct_types.append(DocStructType(
                    name=str(entry['name']),
                    anchor=bool(entry.get('anchor', False)),
                    allowed_metadata=tuple(entry.get('metadata') or ()),
                    allowed_children=tuple(entry.get('children') or ()),
                ))
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Invalid ruleset entry: {e}") from e
        return cls(doc_struct_types, metadata_types)

    @classmethod
    def load(cls, path: Path) -> 'Prefs':
        """
        Load a ruleset from a YAML file

        Args:
            path: ruleset file

        Returns:
            the ruleset

        Raises:
            ConfigurationError: if the file cannot be read or parsed
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read ruleset: {path} - {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Ruleset is empty or not a mapping: {path}")
        return cls.from_dict(data)


@dataclass
class Metadata:
    """A typed metadata value"""
    type: MetadataType
    value: str


class DocStruct:
    """Node of the logical or physical structure"""

    def __init__(self, doc_struct_type: DocStructType):
        self.type = doc_struct_type
        self.parent: Optional['DocStruct'] = None
        self.children: List['DocStruct'] = []
        self.metadata: List[Metadata] = []
        self.references_to: List[Tuple['DocStruct', str]] = []
        self.references_from: List[Tuple['DocStruct', str]] = []
        self.image_name: Optional[str] = None

    def __repr__(self) -> str:
        return f"DocStruct({self.type.name!r}, children={len(self.children)})"

    def add_child(self, child: 'DocStruct') -> None:
        """
        Append a child element

        Raises:
            TypeNotAllowedAsChildError: if this type does not accept the
                                        child's type
        """
        if not self.type.allows_child(child.type.name):
            raise TypeNotAllowedAsChildError(
                f"Type {child.type.name} is not allowed below {self.type.name}"
            )
        child.parent = self
        self.children.append(child)

    def get_all_children(self) -> List['DocStruct']:
        return list(self.children)

    def add_metadata(self, metadata: Metadata) -> None:
        """
        Add a metadata value

        Raises:
            MetadataTypeNotAllowedError: if the metadata type is not allowed
                                         for this structure type
        """
        if not self.type.allows_metadata(metadata.type.name):
            raise MetadataTypeNotAllowedError(
                f"Metadata {metadata.type.name} is not allowed for {self.type.name}"
            )
        self.metadata.append(metadata)

    def get_all_metadata_by_type(self, metadata_type: MetadataType) -> List[Metadata]:
        return [md for md in self.metadata if md.type.name == metadata_type.name]

    def remove_all_metadata_by_type(self, metadata_type: MetadataType) -> int:
        before = len(self.metadata)
        self.metadata = [md for md in self.metadata if md.type.name != metadata_type.name]
        return before - len(self.metadata)

    def get_metadata_value(self, name: str) -> Optional[str]:
        for md in self.metadata:
            if md.type.name == name:
                return md.value
        return None

    def add_reference_to(self, target: 'DocStruct', reference_type: str = LOGICAL_PHYSICAL) -> None:
        """Link this element to a target; the link is visible from both ends"""
        self.references_to.append((target, reference_type))
        target.references_from.append((self, reference_type))

    def get_referenced_pages(self) -> List['DocStruct']:
        return [target for target, _ in self.references_to if target.type.name == PAGE_TYPE]


class DigitalDocument:
    """Logical and physical structure of one process"""

    def __init__(self, prefs: Prefs, logical: Optional[DocStruct] = None,
                 physical: Optional[DocStruct] = None):
        self.prefs = prefs
        self.logical = logical
        self.physical = physical

    def create_doc_struct(self, type_name: str) -> DocStruct:
        """
        Create a new, unattached structure element

        Args:
            type_name: structure type name

        Returns:
            the new element

        Raises:
            StructureCreationError: if the ruleset does not define the type
        """
        doc_struct_type = self.prefs.get_doc_struct_type(type_name)
        if doc_struct_type is None:
            raise StructureCreationError(f"Unknown structure type: {type_name}")
        return DocStruct(doc_struct_type)


class Fileformat:
    """JSON metadata file holding a DigitalDocument"""

    def __init__(self, prefs: Prefs, digital_document: Optional[DigitalDocument] = None):
        self.prefs = prefs
        self.digital_document = digital_document or DigitalDocument(prefs)
        self.logger = logging.getLogger(__name__)

    def get_digital_document(self) -> DigitalDocument:
        return self.digital_document

    @classmethod
    def read(cls, path: Path, prefs: Prefs) -> 'Fileformat':
        """
        Read a metadata file

        Args:
            path: metadata file
            prefs: ruleset used to resolve type names

        Returns:
            the loaded file format

        Raises:
            MetadataUnreadableError: if the file cannot be read or does not
                                     match the ruleset
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise MetadataUnreadableError(f"Cannot read metadata file: {path} - {e}") from e
        if not isinstance(data, dict):
            raise MetadataUnreadableError(f"Metadata file is not a JSON object: {path}")

        fileformat = cls(prefs)
        try:
            fileformat._from_dict(data)
        except (KeyError, TypeError, AttributeError,
                StructureCreationError, MetadataTypeNotAllowedError) as e:
            raise MetadataUnreadableError(f"Invalid metadata file: {path} - {e}") from e
        return fileformat

    def write(self, path: Path) -> None:
        """
        Write the metadata file, replacing it atomically

        Args:
            path: metadata file

        Raises:
            MetadataWriteError: if the file cannot be written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix='.json.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise MetadataWriteError(f"Cannot write metadata file: {path} - {e}") from e
        self.logger.debug(f"Metadata file written: {path}")

    def to_dict(self) -> Dict:
        """
        Convert the document into its dictionary form

        Returns:
            mapping with 'logical' and 'physical' trees; references are
            stored on the logical side as physical ids
        """
        document = self.digital_document
        physical_ids: Dict[int, str] = {}

        def physical_node(doc_struct: DocStruct) -> Dict:
            node_id = f"PHYS_{len(physical_ids):04d}"
            physical_ids[id(doc_struct)] = node_id
            node = self._node(doc_struct, node_id)
            node['children'] = [physical_node(child) for child in doc_struct.children]
            return node

        logical_ids = itertools.count()

        def logical_node(doc_struct: DocStruct) -> Dict:
            node = self._node(doc_struct, f"LOG_{next(logical_ids):04d}")
            node['references'] = [
                {'target': physical_ids[id(target)], 'type': reference_type}
                for target, reference_type in doc_struct.references_to
                if id(target) in physical_ids
            ]
            node['children'] = [logical_node(child) for child in doc_struct.children]
            return node

        physical = physical_node(document.physical) if document.physical else None
        logical = logical_node(document.logical) if document.logical else None
        return {'logical': logical, 'physical': physical}

    @staticmethod
    def _node(doc_struct: DocStruct, node_id: str) -> Dict:
        node = {
            'id': node_id,
            'type': doc_struct.type.name,
            'metadata': [{'type': md.type.name, 'value': md.value} for md in doc_struct.metadata],
        }
        if doc_struct.image_name is not None:
            node['image'] = doc_struct.image_name
        return node

    def _from_dict(self, data: Dict) -> None:
        document = self.digital_document
        physical_by_id: Dict[str, DocStruct] = {}

        def build(node: Dict, register: Optional[Dict[str, DocStruct]]) -> DocStruct:
            if not isinstance(node, dict):
                raise TypeError(f"structure node is not an object: {node!r}")
            doc_struct = document.create_doc_struct(node['type'])
            doc_struct.image_name = node.get('image')
            for entry in node.get('metadata', []):
                metadata_type = self.prefs.get_metadata_type_by_name(entry['type'])
                if metadata_type is None:
                    raise KeyError(f"unknown metadata type {entry['type']}")
                doc_struct.add_metadata(Metadata(metadata_type, str(entry['value'])))
            if register is not None:
                register[node['id']] = doc_struct
            else:
                for reference in node.get('references', []):
                    doc_struct.add_reference_to(physical_by_id[reference['target']], reference['type'])
            for child in node.get('children', []):
                doc_struct.add_child(build(child, register))
            return doc_struct

        if data.get('physical'):
            document.physical = build(data['physical'], physical_by_id)
        if data.get('logical'):
            document.logical = build(data['logical'], None)

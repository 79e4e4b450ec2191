"""
Test helpers

Ruleset, metadata documents and import folders shared by the tests.
"""

from pathlib import Path
from typing import Dict, List, Optional

from folderimport.document import DigitalDocument, Fileformat, Metadata, Prefs
from folderimport.process import Process

RULESET = {
    'metadataTypes': ['TitleDocMain', 'PublicationYear', 'Dating', 'CatalogIDDigital'],
    'docStructTypes': [
        {'name': 'BoundBook', 'children': ['page']},
        {'name': 'Periodical', 'anchor': True, 'metadata': ['TitleDocMain', 'CatalogIDDigital']},
        {'name': 'Volume', 'metadata': ['TitleDocMain', 'CatalogIDDigital']},
        {'name': 'Cover', 'metadata': ['TitleDocMain']},
        {'name': 'TitlePage', 'metadata': ['TitleDocMain']},
        {'name': 'Chapter', 'metadata': ['TitleDocMain', 'PublicationYear', 'Dating']},
        {'name': 'Spine'},
        {'name': 'Document', 'metadata': ['CatalogIDDigital']},
    ],
}

MAIN_TITLE = 'Konsulatsprotokolle 1636 - 1638'
IMPORT_FOLDER = 'Konsulatsprotokolle 1636-01-21 - 1638-04-17'


def make_prefs(ruleset: Optional[Dict] = None) -> Prefs:
    return Prefs.from_dict(ruleset or RULESET)


def make_document(prefs: Prefs, title: Optional[str] = MAIN_TITLE, anchor: bool = False) -> DigitalDocument:
    """Document with an empty volume (optionally below a periodical) and a physical root"""
    document = DigitalDocument(prefs)
    volume = document.create_doc_struct('Volume')
    if title is not None:
        volume.add_metadata(Metadata(prefs.get_metadata_type_by_name('TitleDocMain'), title))
    if anchor:
        periodical = document.create_doc_struct('Periodical')
        periodical.add_child(volume)
        document.logical = periodical
    else:
        document.logical = volume
    document.physical = document.create_doc_struct('BoundBook')
    return document


def make_process(directory: Path, prefs: Prefs, title: Optional[str] = MAIN_TITLE,
                 anchor: bool = False) -> Process:
    """Process directory with a meta.json describing an empty volume"""
    directory.mkdir(parents=True, exist_ok=True)
    process = Process(id='1', title='konsulatsprotokolle_1636', directory=directory, prefs=prefs)
    Fileformat(prefs, make_document(prefs, title, anchor)).write(process.metadata_file_path)
    return process


def make_folder_tree(root: Path, tree: Dict[str, List[str]]) -> Path:
    """Create subfolders with small image files; returns root"""
    root.mkdir(parents=True, exist_ok=True)
    for folder, files in tree.items():
        (root / folder).mkdir()
        for file_name in files:
            (root / folder / file_name).write_bytes(f"{folder}/{file_name}".encode('utf-8'))
    return root


def page_numbers(physical) -> List[int]:
    return [int(page.get_metadata_value('physPageNumber')) for page in physical.children]

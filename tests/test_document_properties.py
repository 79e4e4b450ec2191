"""
Document model tests

Ruleset loading, structure rules and the JSON metadata file.
"""

import json

import pytest
from hypothesis import given, settings, strategies as st

from folderimport.document import DigitalDocument, Fileformat, Metadata, Prefs
from folderimport.exceptions import (
    ConfigurationError, MetadataTypeNotAllowedError, MetadataUnreadableError,
    MetadataWriteError, StructureCreationError, TypeNotAllowedAsChildError
)

from helpers import MAIN_TITLE, make_document, make_prefs


class TestPrefs:
    """Ruleset tests"""

    def test_builtin_page_types(self):
        prefs = Prefs()

        assert prefs.get_doc_struct_type('page') is not None
        assert prefs.get_metadata_type_by_name('physPageNumber') is not None
        assert prefs.get_metadata_type_by_name('logicalPageNumber') is not None

    def test_load_yaml_ruleset(self, tmp_path):
        ruleset_file = tmp_path / "ruleset.yaml"
        ruleset_file.write_text(
            "metadataTypes: [TitleDocMain]\n"
            "docStructTypes:\n"
            "  - name: Periodical\n"
            "    anchor: true\n"
            "    children: [Volume]\n"
            "  - name: Volume\n",
            encoding='utf-8'
        )

        prefs = Prefs.load(ruleset_file)

        assert prefs.get_doc_struct_type('Periodical').anchor
        assert prefs.get_doc_struct_type('Periodical').allowed_children == ('Volume',)
        assert not prefs.get_doc_struct_type('Volume').anchor
        assert prefs.get_metadata_type_by_name('TitleDocMain').name == 'TitleDocMain'

    def test_invalid_yaml_ruleset(self, tmp_path):
        ruleset_file = tmp_path / "ruleset.yaml"
        ruleset_file.write_text("docStructTypes: [unclosed", encoding='utf-8')

        with pytest.raises(ConfigurationError):
            Prefs.load(ruleset_file)

    def test_ruleset_entry_without_name(self):
        with pytest.raises(ConfigurationError):
            Prefs.from_dict({'docStructTypes': [{'anchor': True}]})

    def test_missing_ruleset_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Prefs.load(tmp_path / "missing.yaml")


class TestDocStruct:
    """Structure rule tests"""

    def test_unknown_type(self):
        with pytest.raises(StructureCreationError):
            DigitalDocument(make_prefs()).create_doc_struct('Unknown')

    def test_child_type_not_allowed(self):
        document = DigitalDocument(make_prefs())
        physical = document.create_doc_struct('BoundBook')

        with pytest.raises(TypeNotAllowedAsChildError):
            physical.add_child(document.create_doc_struct('Chapter'))

    def test_metadata_type_not_allowed(self):
        prefs = make_prefs()
        cover = DigitalDocument(prefs).create_doc_struct('Cover')

        with pytest.raises(MetadataTypeNotAllowedError):
            cover.add_metadata(Metadata(prefs.get_metadata_type_by_name('Dating'), '1636'))

    def test_remove_metadata_by_type(self):
        prefs = make_prefs()
        chapter = DigitalDocument(prefs).create_doc_struct('Chapter')
        title_type = prefs.get_metadata_type_by_name('TitleDocMain')
        chapter.add_metadata(Metadata(title_type, 'a'))
        chapter.add_metadata(Metadata(title_type, 'b'))

        assert chapter.remove_all_metadata_by_type(title_type) == 2
        assert chapter.get_all_metadata_by_type(title_type) == []

    def test_references_are_bidirectional(self):
        document = DigitalDocument(make_prefs())
        chapter = document.create_doc_struct('Chapter')
        page = document.create_doc_struct('page')

        chapter.add_reference_to(page)

        assert chapter.get_referenced_pages() == [page]
        assert page.references_from == [(chapter, 'logical_physical')]


@settings(max_examples=30, deadline=None)
@given(st.lists(st.text(min_size=1, max_size=30), min_size=1, max_size=6))
def test_metadata_file_persistence_property(titles):
    """
    **Feature: folder-import, metadata file persistence**

    For any chapters with titles and pages, writing and reading the metadata
    file keeps the structure, the metadata and the page references.
    """
    import tempfile
    from pathlib import Path

    prefs = make_prefs()
    document = make_document(prefs)
    title_type = prefs.get_metadata_type_by_name('TitleDocMain')
    page_number = prefs.get_metadata_type_by_name('physPageNumber')
    for index, title in enumerate(titles, start=1):
        chapter = document.create_doc_struct('Chapter')
        chapter.add_metadata(Metadata(title_type, title))
        document.logical.add_child(chapter)
        page = document.create_doc_struct('page')
        page.image_name = f"img_{index}.tif"
        page.add_metadata(Metadata(page_number, str(index)))
        document.physical.add_child(page)
        document.logical.add_reference_to(page)
        chapter.add_reference_to(page)

    with tempfile.TemporaryDirectory() as temp_dir:
        path = Path(temp_dir) / "meta.json"
        Fileformat(prefs, document).write(path)
        loaded = Fileformat.read(path, prefs).get_digital_document()

    assert loaded.logical.get_metadata_value('TitleDocMain') == MAIN_TITLE
    assert [c.get_metadata_value('TitleDocMain') for c in loaded.logical.children] == titles
    assert [p.image_name for p in loaded.physical.children] == [f"img_{i}.tif" for i in range(1, len(titles) + 1)]
    assert len(loaded.logical.get_referenced_pages()) == len(titles)
    for chapter, page in zip(loaded.logical.children, loaded.physical.children):
        assert chapter.get_referenced_pages() == [page]


class TestFileformat:
    """Metadata file error tests"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(MetadataUnreadableError):
            Fileformat.read(tmp_path / "meta.json", make_prefs())

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "meta.json"
        path.write_text("{not json", encoding='utf-8')

        with pytest.raises(MetadataUnreadableError):
            Fileformat.read(path, make_prefs())

    def test_json_that_is_not_an_object(self, tmp_path):
        path = tmp_path / "meta.json"
        for content in ('[]', 'null', '42', '{"physical": ["PHYS_0000"]}'):
            path.write_text(content, encoding='utf-8')

            with pytest.raises(MetadataUnreadableError):
                Fileformat.read(path, make_prefs())

    def test_type_missing_in_ruleset(self, tmp_path):
        path = tmp_path / "meta.json"
        path.write_text(json.dumps({
            'logical': {'id': 'LOG_0000', 'type': 'Newspaper', 'metadata': [], 'children': []},
            'physical': None,
        }), encoding='utf-8')

        with pytest.raises(MetadataUnreadableError):
            Fileformat.read(path, make_prefs())

    def test_write_to_directory_fails(self, tmp_path):
        target = tmp_path / "meta.json"
        target.mkdir()
        prefs = make_prefs()

        with pytest.raises(MetadataWriteError):
            Fileformat(prefs, make_document(prefs)).write(target)
        assert [p.name for p in tmp_path.iterdir()] == ["meta.json"]

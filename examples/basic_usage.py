#!/usr/bin/env python3
"""
Folder import - basic usage

Shows how to call the folder import step from a program: a sample process
and import folder are created in a temporary directory and imported.
"""

import tempfile
from pathlib import Path

from folderimport import (
    DigitalDocument, Fileformat, FolderImportStepPlugin, Metadata, PluginConfig,
    Prefs, Process, Rule, Step, create_default_logger, partition_folders
)

RULESET = {
    'metadataTypes': ['TitleDocMain', 'PublicationYear', 'Dating'],
    'docStructTypes': [
        {'name': 'BoundBook', 'children': ['page']},
        {'name': 'Volume', 'metadata': ['TitleDocMain']},
        {'name': 'Cover', 'metadata': ['TitleDocMain']},
        {'name': 'Chapter', 'metadata': ['TitleDocMain', 'PublicationYear', 'Dating']},
        {'name': 'Spine'},
    ],
}

SUBFOLDERS = {
    'Titelblatt': ['001.tif'],
    '1636-01-21;Sitzung': ['002.tif', '003.tif'],
    '1637-03-02;Sitzung': ['004.tif'],
    'Ruecken': ['005.tif'],
}


def create_sample_process(base_dir: Path, prefs: Prefs) -> Process:
    """Process with an empty volume titled 'Konsulatsprotokolle 1636 - 1638'"""
    process_dir = base_dir / 'metadata' / '1'
    process_dir.mkdir(parents=True)

    document = DigitalDocument(prefs)
    document.logical = document.create_doc_struct('Volume')
    document.logical.add_metadata(
        Metadata(prefs.get_metadata_type_by_name('TitleDocMain'), 'Konsulatsprotokolle 1636 - 1638')
    )
    document.physical = document.create_doc_struct('BoundBook')

    process = Process(id='1', title='konsulatsprotokolle_1636', directory=process_dir, prefs=prefs)
    process.write_metadata_file(Fileformat(prefs, document))
    return process


def create_sample_images(image_root: Path) -> None:
    import_folder = image_root / 'Konsulatsprotokolle 1636-01-21 - 1638-04-17'
    for folder, files in SUBFOLDERS.items():
        (import_folder / folder).mkdir(parents=True)
        for file_name in files:
            (import_folder / folder / file_name).write_bytes(b'sample image')


def example_folder_assignment(config: PluginConfig):
    """Show how subfolders are assigned to structure types"""
    print("=" * 60)
    print("Folder import - folder assignment")
    print("=" * 60)

    partition = partition_folders(list(SUBFOLDERS), config.rule_set())
    for assignment in partition.ordered():
        print(f"  {assignment.folder_name} -> {assignment.structure_type}")
    print()


def example_import(base_dir: Path, config: PluginConfig, prefs: Prefs):
    """Run the import step for a sample process"""
    print("=" * 60)
    print("Folder import - import run")
    print("=" * 60)

    process = create_sample_process(base_dir, prefs)

    plugin = FolderImportStepPlugin(create_default_logger(verbose=True))
    plugin.initialize(Step('Folder import', process), config=config)

    if plugin.execute():
        print()
        print("Master directory:")
        for image in sorted(process.images_master_directory.iterdir()):
            print(f"  {image.name}")
        print("✅ Import finished")
    else:
        for message in plugin.messages:
            print(f"❌ {message}")


def main():
    with tempfile.TemporaryDirectory() as temp_dir:
        base_dir = Path(temp_dir)
        image_root = base_dir / 'import'
        create_sample_images(image_root)

        prefs = Prefs.from_dict(RULESET)
        config = PluginConfig(
            image_folder=image_root,
            main_type='Chapter',
            prefix_rules=(Rule('Titelblatt', 'Cover'),),
            suffix_rules=(Rule('Ruecken', 'Spine'),),
        )

        example_folder_assignment(config)
        example_import(base_dir, config, prefs)


if __name__ == '__main__':
    main()

"""
Command line interface

Main entry point of the folder import. Runs the import step for a single
process directory or shows how its import folder would be assigned.
"""

import argparse
import os
import sys
from pathlib import Path

from .config import load_config
from .document import Prefs
from .exceptions import ProcessingError, ValidationError
from .logger import create_default_logger, get_default_log_file
from .models import PluginReturnValue
from .plugin import FolderImportStepPlugin
from .process import METADATA_FILE_NAME, Process, Step
from .resolver import FolderResolver
from .storage_provider import StorageProvider
from .structure_builder import partition_folders

DEFAULT_STEP = 'Folder import'


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser

    Returns:
        configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='folderimport',
        description='Import a folder of scanned image subfolders into the structure of a process',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # run the import step for a process
  folderimport run /opt/digiverso/metadata/1 --config plugin.yaml --ruleset ruleset.yaml

  # show the folder assignment without changing anything
  folderimport plan /opt/digiverso/metadata/1 --config plugin.yaml --ruleset ruleset.yaml
        """
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='available commands',
        metavar='<command>'
    )

    run_parser = subparsers.add_parser(
        'run',
        help='run the import step',
        description='Reads the metadata file, imports the matching folder and writes the metadata file back.',
    )
    plan_parser = subparsers.add_parser(
        'plan',
        help='show the folder assignment',
        description='Resolves the import folder and lists the structure type of every subfolder.',
    )

    for sub in (run_parser, plan_parser):
        sub.add_argument('process', type=str, help='process directory holding meta.json')
        sub.add_argument('--config', '-c', type=str, required=True,
                         help='YAML configuration of the plugin')
        sub.add_argument('--ruleset', '-r', type=str, required=True,
                         help='YAML ruleset of the project')
        sub.add_argument('--step', type=str, default=DEFAULT_STEP,
                         help=f'step title used to select the configuration (default: {DEFAULT_STEP})')
        sub.add_argument('--project', type=str, default='*',
                         help='project name used to select the configuration')
        sub.add_argument('--title', type=str,
                         help='process title (default: name of the process directory)')
        sub.add_argument('--image-folder', type=str,
                         help='overrides imageFolder of the configuration')
        sub.add_argument('--verbose', '-v', action='store_true', help='verbose output')

    return parser


def _normalize_path(path_str: str) -> Path:
    return Path(path_str).expanduser().resolve()


def _process_directory(path_str: str, writable: bool = False) -> Path:
    """
    Resolve the process directory given on the command line

    Raises:
        ValidationError: if it is not an accessible directory holding
                         the metadata file
    """
    process_dir = _normalize_path(path_str)
    if not process_dir.is_dir():
        raise ValidationError(f"Process directory does not exist: {process_dir}")
    if not (process_dir / METADATA_FILE_NAME).is_file():
        raise ValidationError(f"Process directory has no {METADATA_FILE_NAME}: {process_dir}")
    if writable and not os.access(process_dir, os.W_OK):
        raise ValidationError(f"Process directory is not writable: {process_dir}")
    return process_dir


def _create_process(args, writable: bool = False) -> Process:
    process_dir = _process_directory(args.process, writable)
    prefs = Prefs.load(Path(args.ruleset))
    return Process(
        id=process_dir.name,
        title=args.title or process_dir.name,
        directory=process_dir,
        prefs=prefs,
        project=args.project,
    )


def handle_run_command(args) -> int:
    """
    Handle the run command

    Args:
        args: parsed arguments

    Returns:
        exit code (0: success, 1: error)
    """
    try:
        process = _create_process(args, writable=True)

        log_file = get_default_log_file() if args.verbose else None
        plugin = FolderImportStepPlugin(create_default_logger(verbose=args.verbose, log_file=log_file))
        plugin.initialize(Step(args.step, process), config_file=Path(args.config))
        if args.image_folder:
            plugin.set_root_folder(_normalize_path(args.image_folder))

        if plugin.run() == PluginReturnValue.ERROR:
            for message in plugin.messages:
                print(f"❌ {message}", file=sys.stderr)
            return 1
        return 0

    except ValidationError as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return 1
    except ProcessingError as e:
        print(f"❌ Processing error: {e}", file=sys.stderr)
        return 1


def handle_plan_command(args) -> int:
    """
    Handle the plan command

    Args:
        args: parsed arguments

    Returns:
        exit code (0: success, 1: error)
    """
    try:
        process = _create_process(args)
        config = load_config(Path(args.config), process.project, args.step)
        root_folder = (_normalize_path(args.image_folder)
                       if args.image_folder else config.image_folder)

        document = process.read_metadata_file().get_digital_document()
        logical = document.logical
        if logical is not None and logical.type.anchor and logical.children:
            logical = logical.children[0]
        title_type = process.prefs.get_metadata_type_by_name(config.title_metadata)
        titles = logical.get_all_metadata_by_type(title_type) if logical and title_type else []
        if not titles:
            print("❌ No main title found.", file=sys.stderr)
            return 1

        storage = StorageProvider()
        folder = FolderResolver(storage).resolve(root_folder, titles[0].value)
        partition = partition_folders(storage.list_subfolders(folder), config.rule_set())

        print(f"Import folder: {folder}")
        for assignment in partition.ordered():
            print(f"  {assignment.folder_name} -> {assignment.structure_type}")
        return 0

    except ValidationError as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return 1
    except ProcessingError as e:
        print(f"❌ Processing error: {e}", file=sys.stderr)
        return 1


def main(argv=None) -> int:
    """
    Main entry point

    Returns:
        exit code (0: success, 1: error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == 'run':
        return handle_run_command(args)
    elif args.command == 'plan':
        return handle_plan_command(args)
    else:
        print(f"❌ Unknown command: {args.command}", file=sys.stderr)
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())

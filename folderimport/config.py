"""
Plugin configuration

Reads the YAML configuration of the folder import step. The file holds a
list of blocks under 'config'; each block applies to a project and a step
('*' matches any name). The most specific block wins.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from .exceptions import ConfigurationError
from .models import Rule, RuleSet

PLUGIN_TITLE = 'intranda_step_folderimport'
WILDCARD = '*'


@dataclass(frozen=True)
class PluginConfig:
    """Settings of the folder import step for one project and step"""
    image_folder: Path
    main_type: str
    prefix_rules: Tuple[Rule, ...] = ()
    suffix_rules: Tuple[Rule, ...] = ()
    title_metadata: str = 'TitleDocMain'
    year_metadata: str = 'PublicationYear'
    dating_metadata: str = 'Dating'
    main_title_prefix: str = 'Protokoll vom '
    overwrite_existing: bool = False
    rollback_on_write_failure: bool = False

    def rule_set(self) -> RuleSet:
        return RuleSet(self.prefix_rules, self.suffix_rules, self.main_type)

    @classmethod
    def from_block(cls, block: Dict) -> 'PluginConfig':
        """
        Create the configuration from a single block

        Args:
            block: mapping of one 'config' entry

        Returns:
            the plugin configuration

        Raises:
            ConfigurationError: if required keys are missing or malformed
        """
        image_folder = block.get('imageFolder')
        main_type = block.get('mainType')
        if not image_folder:
            raise ConfigurationError("Missing configuration value: imageFolder")
        if not main_type:
            raise ConfigurationError("Missing configuration value: mainType")

        return cls(
            image_folder=Path(str(image_folder)).expanduser(),
            main_type=str(main_type),
            prefix_rules=_parse_rules(block.get('prefixType'), 'prefixType'),
            suffix_rules=_parse_rules(block.get('suffixType'), 'suffixType'),
            title_metadata=str(block.get('titleMetadata', cls.title_metadata)),
            year_metadata=str(block.get('yearMetadata', cls.year_metadata)),
            dating_metadata=str(block.get('datingMetadata', cls.dating_metadata)),
            main_title_prefix=str(block.get('mainTitlePrefix', cls.main_title_prefix)),
            overwrite_existing=bool(block.get('overwriteExisting', False)),
            rollback_on_write_failure=bool(block.get('rollbackOnWriteFailure', False)),
        )


def _parse_rules(entries: Optional[List], key: str) -> Tuple[Rule, ...]:
    rules = []
    for entry in entries or []:
        try:
            rules.append(Rule(str(entry['foldername']), str(entry['doctype'])))
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid {key} entry: {entry!r}") from e
    return tuple(rules)


def select_block(blocks: List[Dict], project: str, step: str) -> Dict:
    """
    Select the configuration block for a project and step

    Exact project and step first, then the project with any step, then any
    project with the step, then the block for any project and any step.

    Args:
        blocks: all configuration blocks
        project: project name of the process
        step: title of the workflow step

    Returns:
        the matching block

    Raises:
        ConfigurationError: if no block applies
    """
    candidates = [(project, step), (project, WILDCARD), (WILDCARD, step), (WILDCARD, WILDCARD)]
    for wanted_project, wanted_step in candidates:
        for block in blocks:
            if wanted_project in _selectors(block, 'project') and wanted_step in _selectors(block, 'step'):
                return block
    raise ConfigurationError(f"No configuration block for project '{project}' and step '{step}'")


def _selectors(block: Dict, key: str) -> List[str]:
    value = block.get(key, WILDCARD)
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


def load_config(config_file: Path, project: str, step: str) -> PluginConfig:
    """
    Load the plugin configuration for a project and step

    Args:
        config_file: YAML configuration file
        project: project name of the process
        step: title of the workflow step

    Returns:
        the plugin configuration

    Raises:
        ConfigurationError: if the file cannot be read or holds no
                            applicable block
    """
    logger = logging.getLogger(__name__)
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration: {config_file} - {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get('config'), list):
        raise ConfigurationError(f"Configuration has no 'config' list: {config_file}")

    block = select_block(data['config'], project, step)
    logger.debug(f"Configuration block selected: project={block.get('project', WILDCARD)}, "
                 f"step={block.get('step', WILDCARD)}")
    return PluginConfig.from_block(block)

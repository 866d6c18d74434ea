"""
Preset catalog

Maps preset file names to .cube content stored in a presets directory and
keeps the grouping shown to users.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import LutLoadError, PresetNotFoundError
from ..grading.lut import load_lut, fallback_to_identity
from ..grading.models import Lut

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    """A single selectable LUT preset"""
    file: str
    label: str


@dataclass
class PresetGroup:
    """Named group of presets"""
    label: str
    options: List[Preset] = field(default_factory=list)


class PresetCatalog:
    """
    Catalog of grouped LUT presets backed by a directory of .cube files.
    """

    def __init__(self, directory: Union[str, Path],
                 groups: Optional[List[PresetGroup]] = None):
        self.directory = Path(directory)
        self.groups = groups or []

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PresetCatalog':
        """
        Build a catalog from the ``presets`` section of the configuration.
        """
        section = config.get('presets', {}) or {}
        groups = []
        for group in section.get('groups', []) or []:
            options = [Preset(file=option['file'], label=option.get('label', option['file']))
                       for option in group.get('options', [])]
            groups.append(PresetGroup(label=group.get('label', ''), options=options))
        return cls(section.get('directory', 'presets'), groups)

    @property
    def presets(self) -> List[Preset]:
        """All presets in group order"""
        return [preset for group in self.groups for preset in group.options]

    @property
    def default_preset(self) -> Optional[Preset]:
        """First option of the first group"""
        presets = self.presets
        return presets[0] if presets else None

    def get_group(self, label: str) -> Optional[PresetGroup]:
        for group in self.groups:
            if group.label == label:
                return group
        return None

    def path_for(self, name: str) -> Path:
        """
        Resolve a preset file name inside the catalog directory.

        Raises:
            PresetNotFoundError: if the name tries to leave the directory
        """
        if not name or Path(name).name != name or name in ('.', '..'):
            raise PresetNotFoundError(f"Invalid preset name: {name!r}", name)
        return self.directory / name

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).is_file()
        except PresetNotFoundError:
            return False

    def available(self) -> List[str]:
        """File names of all .cube files present in the directory"""
        if not self.directory.is_dir():
            return []
        return sorted(p.name for p in self.directory.glob('*.cube') if p.is_file())

    def fetch(self, name: str) -> str:
        """
        Fetch the .cube text for a preset.

        Raises:
            PresetNotFoundError: if the preset file does not exist
            LutLoadError: if the file cannot be read
        """
        path = self.path_for(name)
        if not path.is_file():
            raise PresetNotFoundError(
                f"Preset file not found: {name}. Make sure the '{self.directory}' "
                f"folder exists and contains it.", name
            )
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise LutLoadError(f"Failed to read preset {path}: {e}", name) from e

    def load(self, name: str) -> Lut:
        """
        Resolve a preset to a usable Lut, falling back to the identity LUT.
        """
        try:
            text = self.fetch(name)
        except LutLoadError as e:
            return fallback_to_identity(e, name)
        lut = load_lut(text, source=name)
        logger.info(f"Loaded preset {name} (size {lut.size})")
        return lut

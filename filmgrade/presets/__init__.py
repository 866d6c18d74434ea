"""
Preset catalog for FilmGrade
"""

from .catalog import PresetCatalog, PresetGroup, Preset

__all__ = ['PresetCatalog', 'PresetGroup', 'Preset']

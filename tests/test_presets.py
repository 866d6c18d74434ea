"""
Tests for the preset catalog.
"""

import pytest

from filmgrade.config import get_default_config
from filmgrade.exceptions import LutParseError, PresetNotFoundError
from filmgrade.presets import PresetCatalog, PresetGroup, Preset


class TestPresetCatalog:
    """Test preset lookup and resolution."""

    def test_from_default_config(self):
        catalog = PresetCatalog.from_config(get_default_config())

        assert [group.label for group in catalog.groups] == ['Film Preset', 'Signature Preset']
        assert catalog.default_preset == Preset('Film10.cube', 'Film 10')
        assert catalog.get_group('Signature Preset').options[0].label == 'Misty'
        assert catalog.get_group('Missing') is None

    def test_from_config_label_defaults_to_file(self, presets_dir):
        config = {'presets': {'directory': str(presets_dir),
                              'groups': [{'label': 'Mine', 'options': [{'file': 'Swap.cube'}]}]}}
        catalog = PresetCatalog.from_config(config)

        assert catalog.directory == presets_dir
        assert catalog.presets == [Preset('Swap.cube', 'Swap.cube')]

    def test_empty_catalog(self, tmp_path):
        catalog = PresetCatalog.from_config({})

        assert catalog.presets == []
        assert catalog.default_preset is None
        assert PresetCatalog(tmp_path / "absent").available() == []

    def test_available_lists_cube_files(self, presets_dir):
        (presets_dir / "readme.txt").write_text("not a lut")
        catalog = PresetCatalog(presets_dir)

        assert catalog.available() == ['Broken.cube', 'Swap.cube']

    @pytest.mark.parametrize("name", ["", ".", "..", "../Swap.cube", "sub/Swap.cube"])
    def test_path_for_rejects_escapes(self, presets_dir, name):
        catalog = PresetCatalog(presets_dir)

        with pytest.raises(PresetNotFoundError):
            catalog.path_for(name)
        assert not catalog.exists(name)

    def test_fetch_returns_text(self, presets_dir, swap_cube_text):
        assert PresetCatalog(presets_dir).fetch('Swap.cube') == swap_cube_text

    def test_fetch_missing_raises(self, presets_dir):
        with pytest.raises(PresetNotFoundError) as excinfo:
            PresetCatalog(presets_dir).fetch('Film10.cube')

        assert excinfo.value.source == 'Film10.cube'

    def test_load_valid_preset(self, presets_dir):
        lut = PresetCatalog(presets_dir).load('Swap.cube')

        assert lut.size == 2
        assert lut.source == 'Swap.cube'
        assert lut.title == 'Swap'
        assert not lut.is_identity_fallback

    def test_load_missing_preset_falls_back(self, presets_dir):
        lut = PresetCatalog(presets_dir).load('Film10.cube')

        assert lut.size == 32
        assert isinstance(lut.fallback_error, PresetNotFoundError)

    def test_load_broken_preset_falls_back(self, presets_dir):
        lut = PresetCatalog(presets_dir).load('Broken.cube')

        assert lut.size == 32
        assert isinstance(lut.fallback_error, LutParseError)

    def test_groups_keep_order(self, presets_dir):
        catalog = PresetCatalog(presets_dir, [
            PresetGroup('B', [Preset('Swap.cube', 'Swap')]),
            PresetGroup('A', [Preset('Broken.cube', 'Broken')]),
        ])

        assert [p.file for p in catalog.presets] == ['Swap.cube', 'Broken.cube']
        assert catalog.exists('Swap.cube')
        assert not catalog.exists('Film10.cube')

"""输出命名测试"""

import pytest

from resloc_tools.core.filetypes import FileType
from resloc_tools.core.naming import (
    culture_specific_resource_name,
    derive_output_name,
    is_valid_locale_tag,
    neutral_resource_name,
    output_file_name,
    satellite_bundle_name,
)


@pytest.mark.parametrize("tag", ["fr", "en-US", "sr-Latn-RS", "zh-Hans", "es-419", "de-CH-1901"])
def test_valid_locale_tags(tag):
    assert is_valid_locale_tag(tag)


@pytest.mark.parametrize("tag", ["", None, "App", "english", "en_US", "EN-us", "e", "en-"])
def test_invalid_locale_tags(tag):
    assert not is_valid_locale_tag(tag)


class TestDeriveOutputName:

    def test_replaces_embedded_locale(self):
        assert derive_output_name("App.de.resources", "de", "fr") == "App.fr.resources"

    def test_replaces_other_valid_locale(self):
        assert derive_output_name("Strings.en-US.resx", None, "fr-CA") == "Strings.fr-CA.resx"

    def test_no_locale_segment_unchanged(self):
        assert derive_output_name("App.resources", "de", "fr") == "App.resources"
        assert derive_output_name("My.App.resources", None, "fr") == "My.App.resources"
        assert derive_output_name("noext", "de", "fr") == "noext"

    def test_composite_suffix(self):
        assert derive_output_name("App.resources.dll", "de", "fr") == "App.fr.resources.dll"
        assert derive_output_name("App.de.resources.dll", "de", "fr") == "App.fr.resources.dll"
        assert derive_output_name("APP.RESOURCES.DLL", None, "fr") == "APP.fr.RESOURCES.DLL"

    @pytest.mark.parametrize("name", [
        "App.de.resources",
        "App.resources",
        "App.resources.dll",
        "App.de.resources.dll",
        "Strings.en-US.resx",
        "plain",
    ])
    def test_idempotent(self, name):
        once = derive_output_name(name, "de", "fr")
        assert derive_output_name(once, "de", "fr") == once


class TestSatelliteNames:

    def test_satellite_bundle_name(self):
        assert satellite_bundle_name("App.resources.dll", "fr") == "App.fr.resources.dll"
        assert satellite_bundle_name("App.dll", "fr") == "App.dll"
        assert satellite_bundle_name(".resources.dll", "fr") == ".resources.dll"

    def test_satellite_bundle_name_idempotent(self):
        once = satellite_bundle_name("App.resources.dll", "fr")
        assert satellite_bundle_name(once, "fr") == once

    def test_neutral_resource_name(self):
        assert neutral_resource_name("App.g.de.resources", "de") == "App.g.resources"
        assert neutral_resource_name("App.g.DE.resources", "de") == "App.g.resources"
        assert neutral_resource_name("App.g.resources", "de") == "App.g.resources"
        assert neutral_resource_name("App.g.de.resources", None) == "App.g.de.resources"
        assert neutral_resource_name("icon.png", "de") == "icon.png"

    def test_culture_specific_resource_name(self):
        assert culture_specific_resource_name("App.g.resources", "fr") == "App.g.fr.resources"
        assert culture_specific_resource_name("main.baml", "fr") == "main.fr.baml"
        assert culture_specific_resource_name("README", "fr") == "README.fr"
        assert culture_specific_resource_name("App.g.resources", None) == "App.g.resources"

    def test_culture_specific_resource_name_idempotent(self):
        once = culture_specific_resource_name("App.g.resources", "fr")
        assert culture_specific_resource_name(once, "fr") == once


class TestOutputFileName:

    def test_leaf_keeps_name(self):
        assert output_file_name("/in/main.baml", FileType.LEAF, "fr") == "main.baml"

    def test_executable_becomes_satellite(self):
        assert output_file_name("/in/App.exe", FileType.COMPOSITE, "fr", executable=True) == "App.resources.dll"

    def test_library_keeps_name(self):
        assert output_file_name("/in/App.resources.dll", FileType.COMPOSITE, "fr") == "App.resources.dll"

    def test_flat_replaces_locale(self):
        assert output_file_name("/in/App.g.de.resources", FileType.FLAT, "fr", "de") == "App.g.fr.resources"
        assert output_file_name("/in/App.g.resources", FileType.FLAT, "fr", "de") == "App.g.resources"

    def test_translation_file_has_no_output_name(self):
        with pytest.raises(ValueError):
            output_file_name("t.csv", FileType.CSV, "fr")

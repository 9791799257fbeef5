"""
容器遍历与重新打包测试

测试叶记录过滤、扁平容器顺序保持、复合包重命名以及错误策略
"""

import io
import shutil
import tempfile
from pathlib import Path

import pytest

from conftest import element, leaf_bytes, leaf_properties, write_bundle
from resloc_tools.containers import BundleInfo, BundleReader, EntryKind, ResourceReader, build_resources
from resloc_tools.core.localizer import AttributeTableResolver
from resloc_tools.core.models import LocalizableKey, LocalizableUnit, LocalizationCategory
from resloc_tools.core.table import TranslationTable
from resloc_tools.core.walker import Repackager, iter_leaf_streams, localize_leaf
from resloc_tools.localizers import JsonLeafLocalizer
from resloc_tools.utils.config import LocalizeConfig
from resloc_tools.utils.logger import ContainerIOError, InputOpenError

TEXT_KEY = "Title_1:System.Windows.Controls.TextBlock.Text"
CONTENT_KEY = "Ok_2:System.Windows.Controls.Button.Content"


def row(stream, key, content):
    return [stream, key, "Text", "True", "True", "", content]


class SpyLocalizer(JsonLeafLocalizer):
    """记录 apply 收到的翻译集合"""

    def __init__(self):
        super().__init__()
        self.applied = []

    def apply(self, data, translations, comments=None):
        self.applied.append(dict(translations))
        return super().apply(data, translations, comments)


def read_entries(path):
    with ResourceReader(path) as reader:
        return [(e.name, e.kind, e.read_bytes()) for e in reader]


class TestLocalizeLeaf:
    """测试单个叶记录的过滤与应用"""

    def setup_method(self):
        self.localizer = SpyLocalizer()
        self.resolver = AttributeTableResolver()
        self.data = leaf_bytes(
            element("Title_1", "System.Windows.Controls.TextBlock", Text="Hello"),
            element("Ok_2", "System.Windows.Controls.Button", Content="OK"),
        )

    def translations(self, *rows):
        return TranslationTable.from_rows(rows)["main.baml"]

    def test_no_translations_returns_source_bytes(self):
        assert localize_leaf(self.data, None, self.localizer, self.resolver) is self.data
        assert localize_leaf(self.data, {}, self.localizer, self.resolver) is self.data
        assert self.localizer.applied == []

    def test_unchanged_content_filtered(self):
        result = localize_leaf(
            self.data,
            self.translations(row("main.baml", TEXT_KEY, "Hello")),
            self.localizer,
            self.resolver,
        )
        assert result is self.data
        assert self.localizer.applied == []

    def test_unknown_key_filtered(self):
        result = localize_leaf(
            self.data,
            self.translations(row("main.baml", "Nope_9:System.Windows.Controls.Button.Content", "x")),
            self.localizer,
            self.resolver,
        )
        assert result is self.data

    def test_only_changed_units_applied(self):
        result = localize_leaf(
            self.data,
            self.translations(
                row("main.baml", TEXT_KEY, "Hello"),
                row("main.baml", CONTENT_KEY, "D'accord"),
            ),
            self.localizer,
            self.resolver,
        )
        assert len(self.localizer.applied) == 1
        assert list(self.localizer.applied[0]) == [LocalizableKey("Ok_2", "System.Windows.Controls.Button", "Content")]
        assert leaf_properties(result)["Ok_2"]["Content"] == "D'accord"

    def test_deletion_of_existing_key_applied(self):
        result = localize_leaf(
            self.data,
            self.translations(["main.baml", CONTENT_KEY]),
            self.localizer,
            self.resolver,
        )
        assert leaf_properties(result)["Ok_2"] == {}


class TestRepackager:
    """测试 Repackager.generate"""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.out_dir = self.temp_dir / "out"
        self.localizer = JsonLeafLocalizer()
        self.resolver = AttributeTableResolver()
        self.leaf = leaf_bytes(
            element("Title_1", "System.Windows.Controls.TextBlock", Text="Hello"),
            element("Ok_2", "System.Windows.Controls.Button", Content="OK"),
        )

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def repackager(self, rows, policy="strict", source_locale=None, target_locale="fr"):
        return Repackager(
            TranslationTable.from_rows(rows),
            self.localizer,
            self.resolver,
            target_locale,
            source_locale=source_locale,
            config=LocalizeConfig(error_policy=policy),
        )

    def make_flat(self, name, entries):
        path = self.temp_dir / name
        path.write_bytes(build_resources(entries))
        return path

    def test_standalone_leaf(self):
        source = self.temp_dir / "main.baml"
        source.write_bytes(self.leaf)

        output = self.repackager([row("main.baml", TEXT_KEY, "Bonjour")]).generate(source, self.out_dir)

        assert output == self.out_dir / "main.baml"
        assert leaf_properties(output.read_bytes())["Title_1"]["Text"] == "Bonjour"

    def test_flat_preserves_order_and_opaque_bytes(self):
        icon = b"\x89PNG\r\n\x1a\n-icon-"
        source = self.make_flat("App.g.resources", [
            ("icon.png", icon, EntryKind.STREAM),
            ("main.baml", self.leaf, EntryKind.STREAM),
            ("other.baml", self.leaf, EntryKind.VALUE),
            ("version", b"1.0.0", EntryKind.VALUE),
        ])

        output = self.repackager([
            row("App.g.resources:main.baml", TEXT_KEY, "Bonjour"),
        ]).generate(source, self.out_dir)

        entries = read_entries(output)
        assert [e[0] for e in entries] == ["icon.png", "main.baml", "other.baml", "version"]
        assert [e[1] for e in entries] == [EntryKind.STREAM, EntryKind.STREAM, EntryKind.VALUE, EntryKind.VALUE]
        assert entries[0][2] == icon
        assert leaf_properties(entries[1][2])["Title_1"]["Text"] == "Bonjour"
        assert entries[2][2] == self.leaf
        assert entries[3][2] == b"1.0.0"

    def test_flat_output_name_uses_target_locale(self):
        source = self.make_flat("App.g.de.resources", [("main.baml", self.leaf, EntryKind.STREAM)])
        output = self.repackager([], source_locale="de").generate(source, self.out_dir)
        assert output.name == "App.g.fr.resources"
        assert read_entries(output)[0][2] == self.leaf

    def test_composite_bundle(self):
        inner = build_resources([
            ("main.baml", self.leaf, EntryKind.STREAM),
            ("data.bin", b"\x00\x01", EntryKind.VALUE),
        ])
        page = leaf_bytes(element("Hdr_1", "Label", Content="Start"))
        source = write_bundle(
            self.temp_dir / "App.exe",
            [("App.g.de.resources", inner), ("Page.baml", page), ("logo.png", b"png")],
            name="App",
            culture="de",
        )

        output = self.repackager([
            row("App.g.de.resources:main.baml", CONTENT_KEY, "D'accord"),
            row("Page.baml", "Hdr_1:Label.Content", "Début"),
        ]).generate(source, self.out_dir)

        assert output == self.out_dir / "App.resources.dll"
        with BundleReader(output) as bundle:
            assert bundle.names() == ["App.g.fr.resources", "Page.fr.baml", "logo.fr.png"]
            assert bundle.info == BundleInfo("App.resources", "fr", "App.fr.resources.dll")
            assert bundle.info.module == "App.fr.resources.dll"
            inner_entries = list(ResourceReader(io.BytesIO(bundle.read("App.g.fr.resources"))))
            assert [e.name for e in inner_entries] == ["main.baml", "data.bin"]
            assert leaf_properties(inner_entries[0].read_bytes())["Ok_2"]["Content"] == "D'accord"
            assert inner_entries[1].read_bytes() == b"\x00\x01"
            assert leaf_properties(bundle.read("Page.fr.baml"))["Hdr_1"]["Content"] == "Début"
            assert bundle.read("logo.fr.png") == b"png"

    def test_configured_executable_gets_satellite_name(self):
        source = write_bundle(self.temp_dir / "Tool.bin", [("logo.png", b"png")])
        config = LocalizeConfig(composite_extensions=[".dll", ".bin"], executable_extensions=[".bin"])
        repackager = Repackager(TranslationTable(), self.localizer, self.resolver, "fr", config=config)

        output = repackager.generate(source, self.out_dir)

        assert output == self.out_dir / "Tool.resources.dll"
        with BundleReader(output) as bundle:
            assert bundle.info.module == "Tool.fr.resources.dll"

    def test_strict_leaf_failure_writes_nothing(self):
        source = self.make_flat("App.g.resources", [
            ("main.baml", self.leaf, EntryKind.STREAM),
            ("broken.baml", b"not json", EntryKind.STREAM),
        ])
        repackager = self.repackager([row("App.g.resources:broken.baml", TEXT_KEY, "x")])

        with pytest.raises(ContainerIOError) as exc_info:
            repackager.generate(source, self.out_dir)

        assert exc_info.value.entry == "App.g.resources:broken.baml"
        assert list(self.out_dir.iterdir()) == []

    def test_tolerant_leaf_failure_keeps_source_bytes(self):
        source = self.make_flat("App.g.resources", [
            ("main.baml", self.leaf, EntryKind.STREAM),
            ("broken.baml", b"not json", EntryKind.STREAM),
            ("tail", b"t", EntryKind.VALUE),
        ])
        repackager = self.repackager([row("App.g.resources:broken.baml", TEXT_KEY, "x")], policy="tolerant")

        output = repackager.generate(source, self.out_dir)

        entries = read_entries(output)
        assert [e[0] for e in entries] == ["main.baml", "broken.baml", "tail"]
        assert entries[1][1] == EntryKind.STREAM
        assert entries[1][2] == b"not json"
        assert [s.stream_name for s in repackager.skipped] == ["App.g.resources:broken.baml"]

    def test_tolerant_bare_leaf_in_bundle_keeps_source_bytes(self):
        source = write_bundle(
            self.temp_dir / "App.dll",
            [("Page.baml", b"[1]"), ("logo.png", b"png")],
            culture="de",
        )
        repackager = self.repackager([row("Page.baml", "Hdr_1:Label.Content", "x")], policy="tolerant")

        output = repackager.generate(source, self.out_dir)

        with BundleReader(output) as bundle:
            assert bundle.names() == ["Page.fr.baml", "logo.fr.png"]
            assert bundle.read("Page.fr.baml") == b"[1]"
        assert [s.stream_name for s in repackager.skipped] == ["Page.baml"]

    def test_tolerant_standalone_leaf_failure(self):
        source = self.temp_dir / "broken.baml"
        source.write_bytes(b"not json")
        repackager = self.repackager([row("broken.baml", TEXT_KEY, "x")], policy="tolerant")

        assert repackager.generate(source, self.out_dir) is None
        assert len(repackager.skipped) == 1
        assert list(self.out_dir.iterdir()) == []

    def test_defensive_copy_failure_aborts_container(self):
        data = build_resources([
            ("main.baml", self.leaf, EntryKind.STREAM),
            ("blob.bin", b"0123456789", EntryKind.STREAM),
        ])
        source = self.temp_dir / "App.g.resources"
        source.write_bytes(data[:-4])
        repackager = self.repackager([], policy="tolerant")

        with pytest.raises(ContainerIOError) as exc_info:
            repackager.generate(source, self.out_dir)

        assert exc_info.value.entry == "blob.bin"
        assert list(self.out_dir.iterdir()) == []

    def test_missing_input(self):
        with pytest.raises(InputOpenError):
            self.repackager([], policy="tolerant").generate(self.temp_dir / "absent.baml", self.out_dir)


class TestIterLeafStreams:
    """测试提取方向的叶记录枚举"""

    def test_flat(self, flat_container):
        names = [leaf.stream_name for leaf in iter_leaf_streams(flat_container)]
        assert names == ["App.g.resources:main.baml"]

    def test_leaf_bytes_readable_while_iterating(self, flat_container, main_leaf):
        leaves = iter_leaf_streams(flat_container)
        assert next(leaves).read() == main_leaf
        leaves.close()

    def test_composite(self, tmp_path, main_leaf):
        inner = build_resources([("main.baml", main_leaf, EntryKind.STREAM), ("x.bin", b"x", EntryKind.VALUE)])
        bundle = write_bundle(tmp_path / "App.dll", [
            ("App.g.resources", inner),
            ("Page.baml", main_leaf),
            ("logo.png", b"png"),
        ])
        names = [leaf.stream_name for leaf in iter_leaf_streams(bundle)]
        assert names == ["App.g.resources:main.baml", "Page.baml"]

    def test_standalone(self, tmp_path, main_leaf):
        path = tmp_path / "main.baml"
        path.write_bytes(main_leaf)
        leaves = list(iter_leaf_streams(path))
        assert [(l.stream_name, l.read()) for l in leaves] == [("main.baml", main_leaf)]

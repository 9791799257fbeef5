"""
Pytest 配置文件

为所有测试配置共享的 fixtures 和设置
"""

import json
import sys
from pathlib import Path

import pytest

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))

from resloc_tools.containers import BundleInfo, BundleWriter, EntryKind, build_resources
from resloc_tools.core.localizer import AttributeTableResolver, ResolverCache
from resloc_tools.localizers import JsonLeafLocalizer


def element(uid, type_name, **properties):
    """构造一个叶记录元素"""
    return {"uid": uid, "type": type_name, "properties": properties}


def leaf_bytes(*elements, assembly="App"):
    """把元素序列化为 JSON 叶记录"""
    doc = {"assembly": assembly, "elements": list(elements)}
    return json.dumps(doc, ensure_ascii=False, indent=2).encode("utf-8")


def leaf_properties(data):
    """{uid: properties}，便于断言"""
    doc = json.loads(data.decode("utf-8"))
    return {el["uid"]: el["properties"] for el in doc["elements"]}


def write_bundle(path, entries, name="App", culture=None):
    """写出一个复合包：entries 为 [(name, bytes)]"""
    with open(path, "wb") as f:
        with BundleWriter(f, BundleInfo(name=name, culture=culture)) as writer:
            for entry_name, data in entries:
                writer.add(entry_name, data)
    return Path(path)


@pytest.fixture(scope="session")
def project_root_path():
    """返回项目根目录路径"""
    return Path(__file__).parent.parent


@pytest.fixture
def localizer():
    return JsonLeafLocalizer()


@pytest.fixture
def resolver():
    return AttributeTableResolver(cache=ResolverCache())


@pytest.fixture
def main_leaf():
    """两个元素的示例叶记录"""
    return leaf_bytes(
        element("Title_1", "System.Windows.Controls.TextBlock", Text="Hello"),
        element("Ok_2", "System.Windows.Controls.Button", Content="OK"),
    )


@pytest.fixture
def flat_container(tmp_path, main_leaf):
    """App.g.resources：叶记录夹在不透明条目之间"""
    path = tmp_path / "App.g.resources"
    path.write_bytes(build_resources([
        ("icon.png", b"\x89PNG\r\n\x1a\n-icon-", EntryKind.STREAM),
        ("main.baml", main_leaf, EntryKind.STREAM),
        ("version", b"1.0.0", EntryKind.VALUE),
    ]))
    return path

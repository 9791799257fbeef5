"""容器格式：扁平资源表 (.resources) 与复合包 (.dll / .exe)"""

from .resources import EntryKind, ResourceEntry, ResourceReader, ResourceWriter, build_resources
from .bundle import BundleInfo, BundleReader, BundleWriter

__all__ = [
    "EntryKind",
    "ResourceEntry",
    "ResourceReader",
    "ResourceWriter",
    "build_resources",
    "BundleInfo",
    "BundleReader",
    "BundleWriter",
]

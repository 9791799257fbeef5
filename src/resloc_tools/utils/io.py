"""
文件 I/O 工具函数

提供安全的文件读写功能：
- 原子写入（先写临时文件再重命名，失败时不留下半成品）
- 翻译表文本的读取与写入（UTF-8 BOM，不做换行转换）
"""

from __future__ import annotations

import os
import tempfile
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

# 获取模块级 logger
logger = logging.getLogger(__name__)

# 写出翻译表时使用带 BOM 的 UTF-8；读取时 utf-8-sig 自动去掉 BOM
TABLE_WRITE_ENCODING = "utf-8-sig"
TABLE_READ_ENCODING = "utf-8-sig"


def ensure_parent_dir(path: str | Path) -> Path:
    """确保父目录存在"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


@contextmanager
def atomic_output(
    path: str | Path,
    mode: str = "wb",
    encoding: str | None = None,
    newline: str | None = None,
) -> Iterator[IO]:
    """原子写入上下文管理器

    在目标目录中创建临时文件并交给调用方写入；正常退出时用 os.replace
    替换目标文件，发生异常时删除临时文件并重新抛出，目标文件保持不变。

    Args:
        path: 目标文件路径
        mode: 打开模式（'wb' 或 'w'）
        encoding: 文本模式下的编码
        newline: 文本模式下的换行处理

    Yields:
        已打开的临时文件对象
    """
    p = ensure_parent_dir(path)
    fd, tmp_path = tempfile.mkstemp(
        dir=p.parent,
        prefix=f".{p.name}.",
        suffix=".tmp"
    )
    try:
        if "b" in mode:
            f = os.fdopen(fd, mode)
        else:
            f = os.fdopen(fd, mode, encoding=encoding, newline=newline)
        with f:
            yield f
        # 原子重命名
        os.replace(tmp_path, p)
    except BaseException:
        # 清理临时文件
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def open_table_for_read(path: str | Path) -> IO[str]:
    """以翻译表所需的方式打开文本文件（去 BOM，保留原始换行）"""
    return open(path, "r", encoding=TABLE_READ_ENCODING, newline="")


def read_optional_text(path: str | Path, encoding: str = "utf-8-sig") -> str | None:
    """读取可选的附属文本文件，不存在时返回 None"""
    p = Path(path)
    if not p.is_file():
        return None
    return p.read_text(encoding=encoding)

"""
资源本地化工具集

提供二进制资源容器的完整本地化流程：
- 提取可本地化文本到 CSV / TXT 翻译表
- 读取并校验编辑后的翻译表
- 按目标语言重新生成容器（未翻译内容逐字节保留）
- 目标语言的输出命名
"""

from .core.pipeline import RunReport, generate_resources, parse_resources

__version__ = "0.1.0"
__all__ = ["utils", "core", "containers", "localizers", "RunReport", "parse_resources", "generate_resources"]

"""叶记录本地化器"""

from .json_leaf import JsonLeafLocalizer

__all__ = ["JsonLeafLocalizer"]

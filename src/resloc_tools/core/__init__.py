"""
本地化核心模块

提供翻译表编解码、资源键、容器遍历与输出命名
"""

from .delimited import DelimitedReader, DelimitedWriter, TableFormat, format_for_path
from .keys import combine_stream_name, decode_key, encode_key
from .models import LocalizableKey, LocalizableUnit, LocalizationCategory
from .table import TranslationTable, load_translation_table
from .localizer import (
    AttributeTableResolver,
    CommentLocator,
    LeafLocalizer,
    Localizability,
    LocalizabilityResolver,
    ResolverCache,
)
from .naming import derive_output_name, is_valid_locale_tag, satellite_bundle_name
from .walker import Repackager, iter_leaf_streams
from .pipeline import RunReport, generate_resources, parse_resources

__all__ = [
    'DelimitedReader',
    'DelimitedWriter',
    'TableFormat',
    'format_for_path',
    'combine_stream_name',
    'decode_key',
    'encode_key',
    'LocalizableKey',
    'LocalizableUnit',
    'LocalizationCategory',
    'TranslationTable',
    'load_translation_table',
    'AttributeTableResolver',
    'CommentLocator',
    'LeafLocalizer',
    'Localizability',
    'LocalizabilityResolver',
    'ResolverCache',
    'derive_output_name',
    'is_valid_locale_tag',
    'satellite_bundle_name',
    'Repackager',
    'iter_leaf_streams',
    'RunReport',
    'generate_resources',
    'parse_resources',
]

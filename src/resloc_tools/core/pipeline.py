"""
Run boundary

``parse_resources()`` and ``generate_resources()`` are the two entry points.
Neither raises a ResLocError: the outcome of a run, including the first fatal
error, is returned as a RunReport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from .delimited import TableFormat, format_for_path
from .extractor import write_translations
from .localizer import (
    AttributeTableResolver,
    CommentLocator,
    LeafLocalizer,
    LocalizabilityResolver,
    ResolverCache,
)
from .naming import is_valid_locale_tag
from .table import TranslationTable, load_translation_table
from .walker import Repackager, SkippedLeaf
from ..utils.config import LocalizeConfig, get_config
from ..utils.logger import (
    ConfigurationError,
    ContainerIOError,
    InputOpenError,
    ResLocError,
    get_logger,
    setup_logger,
)

logger = logging.getLogger(__name__)

Inputs = Union[str, Path, Iterable[Union[str, Path]]]


@dataclass
class RunReport:
    """Outcome of one extraction or generation run."""

    operation: str
    outputs: list[Path] = field(default_factory=list)
    skipped: list[SkippedLeaf] = field(default_factory=list)
    error: Optional[ResLocError] = None
    rows: int = 0
    cache: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, error: ResLocError) -> "RunReport":
        if self.error is None:
            self.error = error
        get_logger().error(f"{self.operation} failed: {error}")
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "ok": self.ok,
            "outputs": [str(p) for p in self.outputs],
            "skipped": [s.to_dict() for s in self.skipped],
            "error": None if self.error is None else {
                "kind": self.error.kind.value,
                "message": self.error.message,
                "details": dict(self.error.details),
            },
            "rows": self.rows,
            "cache": dict(self.cache),
        }


def _as_paths(inputs: Inputs) -> list[Path]:
    if isinstance(inputs, (str, Path)):
        return [Path(inputs)]
    return [Path(p) for p in inputs]


def _configure_logging(config: LocalizeConfig) -> None:
    if config.log_file or config.log_level != "INFO":
        setup_logger(
            level=getattr(logging, config.log_level),
            log_file=Path(config.log_file) if config.log_file else None,
        )


def _default_resolver(config: LocalizeConfig, cache: ResolverCache) -> LocalizabilityResolver:
    if config.attributes_file:
        return AttributeTableResolver.load(config.attributes_file, cache=cache)
    return AttributeTableResolver(cache=cache)


def _cache_stats(resolver: LocalizabilityResolver) -> dict[str, int]:
    cache = getattr(resolver, "cache", None)
    return cache.stats() if isinstance(cache, ResolverCache) else {}


def parse_resources(
    inputs: Inputs,
    output: Optional[str | Path] = None,
    *,
    localizer: LeafLocalizer,
    resolver: Optional[LocalizabilityResolver] = None,
    config: Optional[LocalizeConfig] = None,
) -> RunReport:
    """Extract every localizable unit of ``inputs`` into a translation file.

    ``output`` defaults to the first input with the extension of
    ``config.translation_format``; a ``.csv`` output is comma separated,
    anything else tab separated.
    """
    config = config or get_config().config
    _configure_logging(config)
    report = RunReport("parse")
    paths = _as_paths(inputs)
    if not paths:
        return report.fail(ConfigurationError("No input files", config_key="inputs"))

    if output:
        target = Path(output)
    else:
        target = paths[0].with_suffix(TableFormat.from_name(config.translation_format).extension)

    try:
        resolver = resolver or _default_resolver(config, ResolverCache())
        with get_logger().timer(f"Extracting {len(paths)} input(s) to {target.name}"):
            report.rows = write_translations(
                paths,
                target,
                format_for_path(target),
                localizer,
                resolver,
                comments=CommentLocator(config.comment_extension),
                config=config,
                skipped=report.skipped,
            )
    except ResLocError as e:
        return report.fail(e)
    except OSError as e:
        return report.fail(ContainerIOError(f"Cannot write translations: {e}", file_path=target))

    report.outputs.append(target)
    report.cache = _cache_stats(resolver)
    return report


def generate_resources(
    translations: Union[str, Path, TranslationTable],
    inputs: Inputs,
    output_dir: str | Path,
    target_locale: str,
    *,
    localizer: LeafLocalizer,
    resolver: Optional[LocalizabilityResolver] = None,
    source_locale: Optional[str] = None,
    config: Optional[LocalizeConfig] = None,
) -> RunReport:
    """Generate localized copies of ``inputs`` into ``output_dir``.

    A malformed translation file aborts the run before anything is written.
    Under the strict policy the first failing input stops the run; under the
    tolerant policy failing leaves and containers are left out and listed in
    ``report.skipped``. An input that cannot be opened always stops the run.
    """
    config = config or get_config().config
    _configure_logging(config)
    report = RunReport("generate")

    if not target_locale:
        return report.fail(ConfigurationError("A target locale is required", config_key="target_locale"))
    if not is_valid_locale_tag(target_locale):
        logger.warning(f"Target locale {target_locale!r} does not look like a locale tag")

    try:
        table = translations if isinstance(translations, TranslationTable) else load_translation_table(translations)
        resolver = resolver or _default_resolver(config, ResolverCache())
    except ResLocError as e:
        return report.fail(e)
    except OSError as e:
        return report.fail(ContainerIOError(f"Cannot read translations: {e}", file_path=Path(translations)))

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    repackager = Repackager(
        table,
        localizer,
        resolver,
        target_locale,
        source_locale=source_locale or config.source_locale,
        config=config,
    )
    repackager.skipped = report.skipped
    comments = CommentLocator(config.comment_extension)
    paths = _as_paths(inputs)

    with get_logger().timer(f"Generating {target_locale} resources for {len(paths)} input(s)"):
        for path in paths:
            try:
                written = repackager.generate(path, out_dir, comments.read(path))
            except InputOpenError as e:
                report.fail(e)
                break
            except ContainerIOError as e:
                if not config.tolerates_partial_output:
                    report.fail(e)
                    break
                logger.warning(f"Skipping {path.name}: {e}")
                report.skipped.append(SkippedLeaf(path.name, e.entry or path.name, str(e)))
                continue
            except ResLocError as e:
                report.fail(e)
                break
            except OSError as e:
                report.fail(ContainerIOError(f"Cannot write output: {e}", container=path.name, file_path=out_dir))
                break
            if written is not None:
                report.outputs.append(written)

    report.cache = _cache_stats(resolver)
    return report

"""
Extraction writer

Enumerates every leaf stream of the inputs, extracts its localizable units and
writes one seven column row per unit to the translation file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from .delimited import DelimitedWriter, TableFormat
from .keys import encode_key
from .localizer import CommentLocator, LeafLocalizer, LocalizabilityResolver
from .models import format_bool
from .walker import SkippedLeaf, iter_leaf_streams
from ..utils.config import LocalizeConfig
from ..utils.io import TABLE_WRITE_ENCODING, atomic_output
from ..utils.logger import ContainerIOError, get_logger

logger = logging.getLogger(__name__)


def write_translations(
    inputs: Iterable[str | Path],
    output: str | Path,
    fmt: TableFormat,
    localizer: LeafLocalizer,
    resolver: LocalizabilityResolver,
    comments: Optional[CommentLocator] = None,
    config: Optional[LocalizeConfig] = None,
    skipped: Optional[list[SkippedLeaf]] = None,
) -> int:
    """
    Write the translation file for ``inputs``.

    Args:
        inputs: leaf, flat container or bundle paths
        output: translation file path (written atomically, UTF-8 with BOM)
        fmt: CSV or TXT
        localizer: leaf record localizer
        resolver: localizability resolver
        comments: locator of companion comment files
        config: run settings
        skipped: receives leaves left out under the tolerant policy

    Returns:
        Number of rows written

    Raises:
        InputOpenError: an input cannot be opened
        ContainerIOError: a leaf cannot be read or extracted (strict policy)
    """
    config = config or LocalizeConfig()
    paths = [Path(p) for p in inputs]
    rows = 0

    with atomic_output(output, "w", encoding=TABLE_WRITE_ENCODING, newline="") as f:
        writer = DelimitedWriter(f, fmt, line_terminator=os.linesep)
        with get_logger().progress(len(paths), "Extracting", disable=not config.verbose) as advance:
            for path in paths:
                notes = comments.read(path) if comments else None
                for leaf in iter_leaf_streams(path, config):
                    logger.debug(f"Processing {leaf.stream_name}")
                    try:
                        units = localizer.extract(leaf.read(), resolver, notes)
                    except (OSError, ValueError) as e:
                        error = ContainerIOError(
                            f"Cannot extract leaf: {e}", container=path.name, entry=leaf.stream_name
                        )
                        if not config.tolerates_partial_output:
                            raise error from e
                        logger.warning(f"Skipping leaf {leaf.stream_name}: {error}")
                        if skipped is not None:
                            skipped.append(SkippedLeaf(path.name, leaf.stream_name, str(error)))
                        continue

                    for key, unit in units.items():
                        writer.write_row([
                            leaf.stream_name,
                            encode_key(key),
                            str(unit.category),
                            format_bool(unit.readable),
                            format_bool(unit.modifiable),
                            unit.comment,
                            unit.content,
                        ])
                    rows += len(units)
                advance(1)

    logger.info(f"Wrote {rows} rows to {output}")
    return rows

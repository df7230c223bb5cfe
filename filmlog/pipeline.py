#!/usr/bin/env python3
"""
End-to-end analysis of one export archive

Pipeline position:
  reader  →  merger (identity + records)  →  anomaly/debug summaries
                                           →  statistics
Each stage returns a new immutable structure; nothing flows backwards.
"""

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from filmlog.config import AnalysisConfig
from filmlog.merger import merge
from filmlog.models import ExportTables, MergeResult, StatPack
from filmlog.reader import read_export_path, read_export_zip
from filmlog.stats import compute_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    tables: ExportTables
    merge: MergeResult
    stats: StatPack


def analyze_tables(tables: ExportTables, label: Optional[str] = None,
                   config: Optional[AnalysisConfig] = None,
                   rng: Optional[random.Random] = None) -> AnalysisResult:
    config = config or AnalysisConfig()
    merged = merge(tables, config=config, rng=rng)
    stats = compute_stats(merged.films, label, config=config)
    return AnalysisResult(tables=tables, merge=merged, stats=stats)


def analyze_archive(data: bytes, label: Optional[str] = None,
                    config: Optional[AnalysisConfig] = None,
                    rng: Optional[random.Random] = None) -> AnalysisResult:
    """
    Read, merge and summarize one archive held in memory

    Raises:
        MalformedArchive: the archive could not be read (nothing is returned)
    """
    tables = read_export_zip(data)
    return analyze_tables(tables, label, config, rng)


def analyze_path(path: Union[str, Path], label: Optional[str] = None,
                 config: Optional[AnalysisConfig] = None,
                 rng: Optional[random.Random] = None) -> AnalysisResult:
    logger.info(f"Analyzing export: {path}")
    tables = read_export_path(path)
    return analyze_tables(tables, label, config, rng)

#!/usr/bin/env python3
"""
analyze.py - Analyze one film-diary export archive

Read-only. Never modifies the archive.

Pipeline:
  read ZIP  →  reconcile tables into film records  →  anomaly/debug summary
            →  statistics  →  report files

Outputs (in --output, default output/):
  stat_pack.json      full statistics pack
  merge_summary.json  anomaly flags + merge debug counters
  dossier.json        bounded summary for the commentary service
  films.csv           one row per merged film
  monthly_trend.csv   per-month watched count and mean rating

Usage:
    python analyze.py export.zip
    python analyze.py export.zip --label "Sam" --output output/sam
    python analyze.py export.zip --config config.yaml --seed 7
"""

import sys
import logging
import argparse
import random
from pathlib import Path

from filmlog.config import ConfigError, load_config
from filmlog.export import films_to_frame, trend_to_frame, write_json
from filmlog.pipeline import AnalysisResult, analyze_path
from filmlog.profile import build_dossier
from filmlog.reader import MalformedArchive

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def write_reports(result: AnalysisResult, output_dir: Path, config) -> dict:
    """Write every report file; returns {report name: path}"""
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = {
        'stat_pack': write_json(result.stats, output_dir / 'stat_pack.json'),
        'merge_summary': write_json(
            {'anomaly': result.merge.anomaly, 'debug': result.merge.debug},
            output_dir / 'merge_summary.json'),
        'dossier': write_json(build_dossier(result.merge, result.stats, config),
                              output_dir / 'dossier.json'),
    }

    films_path = output_dir / 'films.csv'
    films_to_frame(result.merge.films).to_csv(films_path, index=False)
    paths['films'] = films_path

    trend_path = output_dir / 'monthly_trend.csv'
    trend_to_frame(result.stats.trends.timeline).to_csv(trend_path, index=False)
    paths['monthly_trend'] = trend_path

    return paths


def print_summary(result: AnalysisResult, paths: dict):
    stats = result.stats
    anomaly = result.merge.anomaly
    debug = result.merge.debug
    totals = stats.totals

    print(f"\n{'=' * 50}")
    print(f"EXPORT ANALYSIS: {stats.label}")
    print(f"{'=' * 50}")
    print(f"  {'Merged films':<22} {debug.merged_film_count:6d}")
    print(f"  {'Watched':<22} {totals.films_watched:6d}")
    print(f"  {'Rated':<22} {totals.films_rated:6d}")
    print(f"  {'Reviewed':<22} {totals.films_reviewed:6d}")
    print(f"  {'Unrated watched':<22} {totals.unrated_watched:6d}")
    print(f"  {'Longest streak (days)':<22} {stats.activity.longest_streak_days:6d}")
    mean_rating = stats.ratings.mean
    print(f"\n  Mean rating:    {mean_rating:.2f}" if mean_rating is not None else "\n  Mean rating:    n/a")
    print(f"  Badge:          {stats.indices.badge}")
    print(f"  Import spike:   {anomaly.import_spike_detected}"
          + (f"  ({anomaly.largest_single_day_import_date} x {anomaly.largest_single_day_import_count})"
             if anomaly.largest_single_day_import_date else ''))
    if debug.unknown_tables:
        print(f"  Unknown tables: {', '.join(debug.unknown_tables)}")
    print()
    for name, path in paths.items():
        print(f"  {name:<14} {path}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Reconcile a film-diary export archive and compute statistics',
        epilog='Outputs: stat_pack.json, merge_summary.json, dossier.json, films.csv, monthly_trend.csv'
    )
    parser.add_argument('archive', type=Path,
                        help='Export ZIP archive')
    parser.add_argument('--label', '-l', default=None,
                        help='Display label for reports (default: "You")')
    parser.add_argument('--output', '-o', type=Path, default=Path('output'),
                        help='Output directory (default: output/)')
    parser.add_argument('--config', type=Path, default=None,
                        help='YAML config overriding thresholds (default: built-in constants)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the debug film sample')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.archive.exists():
        logger.error(f"Archive does not exist: {args.archive}")
        return 1

    if args.config is not None and not args.config.exists():
        logger.error(f"Config file not found: {args.config}")
        return 1

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Invalid config: {e}")
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None

    try:
        result = analyze_path(args.archive, args.label, config=config, rng=rng)
    except MalformedArchive as e:
        logger.error(f"Import failed: {e}")
        return 2

    paths = write_reports(result, args.output, config)
    print_summary(result, paths)
    return 0


if __name__ == '__main__':
    sys.exit(main())

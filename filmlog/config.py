#!/usr/bin/env python3
"""
Analysis configuration

Every tunable threshold lives in constants.py; AnalysisConfig carries them into
the pipeline so a YAML file can override them per run.

YAML format (see config_example.yaml):
  diary_sets_rating: false
  import_spike_min_share: 0.30
  ...
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from filmlog import constants as C

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Configuration file is not a mapping or holds values of the wrong type"""


# Sizes that make no sense below one
POSITIVE_FIELDS = ('review_sample_max_chars', 'top_words', 'min_token_length', 'top_streaks', 'top_years')


@dataclass(frozen=True)
class AnalysisConfig:
    diary_sets_rating: bool = C.DIARY_SETS_RATING

    import_spike_min_share: float = C.IMPORT_SPIKE_MIN_SHARE
    import_spike_min_count: int = C.IMPORT_SPIKE_MIN_COUNT
    import_spike_min_span_years: int = C.IMPORT_SPIKE_MIN_SPAN_YEARS

    debug_sample_size: int = C.DEBUG_SAMPLE_SIZE

    review_sample_max_chars: int = C.REVIEW_SAMPLE_MAX_CHARS
    top_words: int = C.TOP_WORDS
    min_token_length: int = C.MIN_TOKEN_LENGTH

    top_streaks: int = C.TOP_STREAKS
    top_years: int = C.TOP_YEARS

    commitment_high: float = C.COMMITMENT_HIGH
    commitment_low: float = C.COMMITMENT_LOW
    volatility_high: float = C.VOLATILITY_HIGH
    volatility_low: float = C.VOLATILITY_LOW

    dossier_film_limit: int = C.DOSSIER_FILM_LIMIT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        """Build a config from a plain mapping; unknown keys are logged and ignored"""
        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            values[key] = _coerce(key, value, known[key].type)
            if key in POSITIVE_FIELDS and values[key] < 1:
                raise ConfigError(f"Invalid value for '{key}': must be at least 1")
        return cls(**values)


def _coerce(key: str, value: Any, type_name: Any) -> Any:
    type_name = getattr(type_name, '__name__', type_name)
    try:
        if type_name == 'bool':
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().lower() in ('true', 'false', 'yes', 'no'):
                return value.strip().lower() in ('true', 'yes')
            raise ValueError(f"not a boolean: {value!r}")
        if type_name == 'int':
            if isinstance(value, bool):
                raise ValueError(f"not an integer: {value!r}")
            return int(value)
        if type_name == 'float':
            return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for '{key}': {e}") from e
    return value


def load_config(config_path: Optional[Union[str, Path]] = None) -> AnalysisConfig:
    """Load configuration from YAML file (defaults when no path is given)"""
    if config_path is None:
        return AnalysisConfig()

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        return AnalysisConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")

    config = AnalysisConfig.from_dict(data)
    logger.info(f"Loaded config from {config_path}")
    return config

#!/usr/bin/env python3
"""
Upload session with generation tagging

A new upload may start while the previous archive is still being analyzed.
Each run is stamped with the generation current when it began; a run that
finishes after a newer upload started is discarded, never merged into or
substituted for the newer result.
"""

import logging
import random
import threading
from typing import Optional

from filmlog.config import AnalysisConfig
from filmlog.pipeline import AnalysisResult, analyze_archive

logger = logging.getLogger(__name__)


class ImportSession:
    """Tracks the latest accepted analysis for one user session"""

    def __init__(self, config: Optional[AnalysisConfig] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or AnalysisConfig()
        self.rng = rng
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[AnalysisResult] = None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def latest(self) -> Optional[AnalysisResult]:
        with self._lock:
            return self._latest

    def begin(self) -> int:
        """Start a new upload; every earlier in-flight run becomes stale"""
        with self._lock:
            self._generation += 1
            self._latest = None
            return self._generation

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._generation

    def accept(self, ticket: int, result: AnalysisResult) -> bool:
        """Store a finished result if its run is still the newest; False if stale"""
        with self._lock:
            if ticket != self._generation:
                logger.info(f"Discarding stale result (generation {ticket}, "
                            f"current {self._generation})")
                return False
            self._latest = result
            return True

    def run(self, data: bytes, label: Optional[str] = None) -> Optional[AnalysisResult]:
        """
        Analyze an archive as the newest upload

        Returns:
            The result, or None when a newer upload began before this one finished

        Raises:
            MalformedArchive: propagated unchanged from the reader
        """
        ticket = self.begin()
        result = analyze_archive(data, label, self.config, self.rng)
        if not self.accept(ticket, result):
            return None
        return result

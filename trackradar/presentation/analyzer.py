#!/usr/bin/env python
"""
View state for the track analyzer page.

Two independent state machines live here: search
(idle -> searching -> results shown | search failed) and analysis of the
selected track (idle -> analyzing -> features shown | analysis failed).
Each action is split into ``begin_*`` (returns a ticket) and
``complete_*`` / ``fail_*``. A response carrying an outdated ticket is
dropped, so a slow earlier request can never overwrite a newer one. The
synchronous ``search`` and ``select_track`` helpers chain the two halves.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Any, Dict, List, Optional, Protocol, Sequence

from trackradar.errors import TrackRadarError
from trackradar.models.dto import AudioFeatures, Track
from trackradar.presentation.radar import RadarChart, build_radar
from trackradar.utils.cancellation import GenerationCounter

logger = logging.getLogger(__name__)

SEARCH_ERROR_MESSAGE = 'Failed to search tracks. Please try again.'
ANALYSIS_ERROR_MESSAGE = 'Failed to get audio features. Please try again.'
EMPTY_QUERY_MESSAGE = 'Enter a track name to search.'
UNKNOWN_TRACK_MESSAGE = 'That track is not in the current results.'


class SearchState(str, enum.Enum):
    IDLE = 'idle'
    SEARCHING = 'searching'
    RESULTS_SHOWN = 'results_shown'
    SEARCH_FAILED = 'search_failed'


class AnalysisState(str, enum.Enum):
    IDLE = 'idle'
    ANALYZING = 'analyzing'
    FEATURES_SHOWN = 'features_shown'
    ANALYSIS_FAILED = 'analysis_failed'


class CatalogGateway(Protocol):
    def search(self, query: str) -> List[Track]: ...

    def get_audio_features(self, track_id: str) -> AudioFeatures: ...


def round_bpm(tempo: float) -> int:
    """Round half up, as a browser's Math.round would."""
    return int(math.floor(tempo + 0.5))


class AnalyzerView:
    def __init__(self, gateway: CatalogGateway):
        self._gateway = gateway
        self.query = ''
        self.results: List[Track] = []
        self.selected_track: Optional[Track] = None
        self.features: Optional[AudioFeatures] = None
        self.error: Optional[str] = None
        self.search_state = SearchState.IDLE
        self.analysis_state = AnalysisState.IDLE
        self._search_generation = GenerationCounter()
        self._analysis_generation = GenerationCounter()

    @property
    def loading(self) -> bool:
        return self.search_state is SearchState.SEARCHING or self.analysis_state is AnalysisState.ANALYZING

    # -- search ---------------------------------------------------------

    def begin_search(self, query: Optional[str]) -> Optional[int]:
        """Enter ``searching``; returns None (and stays put) for an empty query."""
        self.query = (query or '').strip()
        if not self.query:
            self.error = EMPTY_QUERY_MESSAGE
            return None
        ticket = self._search_generation.next()
        self.search_state = SearchState.SEARCHING
        self.error = None
        return ticket

    def complete_search(self, ticket: int, tracks: Sequence[Track]) -> bool:
        if not self._search_generation.is_current(ticket):
            logger.debug("Dropping superseded search response (ticket %s)", ticket)
            return False
        self.results = list(tracks)
        self.search_state = SearchState.RESULTS_SHOWN
        return True

    def fail_search(self, ticket: int, exc: BaseException) -> bool:
        if not self._search_generation.is_current(ticket):
            logger.debug("Dropping superseded search failure (ticket %s): %s", ticket, exc)
            return False
        logger.warning("Track search for %r failed: %s", self.query, exc)
        self.search_state = SearchState.SEARCH_FAILED
        self.error = SEARCH_ERROR_MESSAGE
        return True

    def search(self, query: Optional[str]) -> SearchState:
        ticket = self.begin_search(query)
        if ticket is None:
            return self.search_state
        try:
            tracks = self._gateway.search(self.query)
        except TrackRadarError as exc:
            self.fail_search(ticket, exc)
        else:
            self.complete_search(ticket, tracks)
        return self.search_state

    # -- analysis -------------------------------------------------------

    def begin_analysis(self, track: Track) -> int:
        ticket = self._analysis_generation.next()
        self.selected_track = track
        self.features = None
        self.analysis_state = AnalysisState.ANALYZING
        self.error = None
        return ticket

    def complete_analysis(self, ticket: int, features: AudioFeatures) -> bool:
        if not self._analysis_generation.is_current(ticket):
            logger.debug("Dropping superseded audio features (ticket %s)", ticket)
            return False
        self.features = features
        self.analysis_state = AnalysisState.FEATURES_SHOWN
        return True

    def fail_analysis(self, ticket: int, exc: BaseException) -> bool:
        if not self._analysis_generation.is_current(ticket):
            logger.debug("Dropping superseded analysis failure (ticket %s): %s", ticket, exc)
            return False
        track_id = self.selected_track.id if self.selected_track else None
        logger.warning("Audio features for %s failed: %s", track_id, exc)
        self.analysis_state = AnalysisState.ANALYSIS_FAILED
        self.error = ANALYSIS_ERROR_MESSAGE
        return True

    def select_track(self, track: Track) -> AnalysisState:
        ticket = self.begin_analysis(track)
        try:
            features = self._gateway.get_audio_features(track.id)
        except TrackRadarError as exc:
            self.fail_analysis(ticket, exc)
        else:
            self.complete_analysis(ticket, features)
        return self.analysis_state

    def select_track_by_id(self, track_id: str) -> AnalysisState:
        track = next((t for t in self.results if t.id == track_id), None)
        if track is None:
            self.error = UNKNOWN_TRACK_MESSAGE
            return self.analysis_state
        return self.select_track(track)

    # -- rendering ------------------------------------------------------

    def chart(self) -> Optional[RadarChart]:
        if self.features is None:
            return None
        return build_radar(self.features)

    def display(self) -> Dict[str, Any]:
        """Everything the template needs, as plain values."""
        selected_id = self.selected_track.id if self.selected_track else None
        features = None
        if self.selected_track is not None and self.features is not None:
            features = {
                'bpm': round_bpm(self.features.bpm),
                'key': self.features.key_name,
            }
        return {
            'query': self.query,
            'loading': self.loading,
            'error': self.error,
            'search_state': self.search_state.value,
            'analysis_state': self.analysis_state.value,
            'search_label': 'Searching...' if self.search_state is SearchState.SEARCHING else 'Search',
            'results': [
                {
                    'id': track.id,
                    'name': track.name,
                    'artist': track.primary_artist,
                    'image_url': track.thumbnail_url,
                    'selected': track.id == selected_id,
                }
                for track in self.results
            ],
            'selected': self.selected_track,
            'features': features,
            'chart': self.chart() if features else None,
        }


__all__ = [
    "AnalyzerView",
    "AnalysisState",
    "SearchState",
    "CatalogGateway",
    "round_bpm",
    "SEARCH_ERROR_MESSAGE",
    "ANALYSIS_ERROR_MESSAGE",
    "EMPTY_QUERY_MESSAGE",
]

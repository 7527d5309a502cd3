"""Analyzer page state and chart geometry."""

from .analyzer import AnalysisState, AnalyzerView, SearchState
from .radar import RadarChart, build_radar

__all__ = ["AnalyzerView", "AnalysisState", "SearchState", "RadarChart", "build_radar"]

"""Reshape an audio-feature vector into radar-chart geometry for SVG rendering."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from trackradar.models.dto import AudioFeatures

RADAR_AXES: Tuple[Tuple[str, str], ...] = (
    ('acousticness', 'Acousticness'),
    ('danceability', 'Danceability'),
    ('energy', 'Energy'),
    ('instrumentalness', 'Instrumentalness'),
    ('liveness', 'Liveness'),
    ('speechiness', 'Speechiness'),
)
VALENCE_AXIS = ('valence', 'Valence')


@dataclass(frozen=True)
class RadarPoint:
    label: str
    value: float
    x: float
    y: float


@dataclass(frozen=True)
class RadarChart:
    size: int
    center: float
    radius: float
    points: List[RadarPoint]
    rings: List[str] = field(default_factory=list)
    spokes: List[Tuple[float, float]] = field(default_factory=list)
    label_positions: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def labels(self) -> List[str]:
        return [p.label for p in self.points]

    @property
    def values(self) -> List[float]:
        return [p.value for p in self.points]

    @property
    def polygon(self) -> str:
        return _points_attr((p.x, p.y) for p in self.points)

    def as_dataset(self) -> dict:
        """Chart.js-style payload (labels + one dataset) for JSON consumers."""
        return {
            'labels': self.labels,
            'datasets': [{'label': 'Audio Features', 'data': self.values}],
        }


def _points_attr(coords) -> str:
    return ' '.join(f"{x:.2f},{y:.2f}" for x, y in coords)


def radar_vertex(value: float, index: int, count: int, center: float, radius: float) -> Tuple[float, float]:
    """Polar (value, axis index) to SVG coordinates; axis 0 points straight up."""
    theta = 2 * math.pi * index / count
    r = radius * value
    return center + r * math.sin(theta), center - r * math.cos(theta)


def build_radar(features: AudioFeatures, size: int = 320, padding: int = 48,
                include_valence: bool = False, ring_steps: int = 5) -> RadarChart:
    axes: Sequence[Tuple[str, str]] = RADAR_AXES
    if include_valence and features.valence is not None:
        axes = RADAR_AXES + (VALENCE_AXIS,)

    count = len(axes)
    center = size / 2
    radius = center - padding

    points = []
    for index, (attr, label) in enumerate(axes):
        value = getattr(features, attr)
        # Data keeps the upstream value; only the drawn vertex is bounded to the chart
        x, y = radar_vertex(min(max(value, 0.0), 1.0), index, count, center, radius)
        points.append(RadarPoint(label=label, value=value, x=x, y=y))

    rings = [
        _points_attr(radar_vertex(step / ring_steps, i, count, center, radius) for i in range(count))
        for step in range(1, ring_steps + 1)
    ]
    spokes = [radar_vertex(1.0, i, count, center, radius) for i in range(count)]
    label_positions = [radar_vertex(1.0, i, count, center, radius + padding / 2) for i in range(count)]

    return RadarChart(
        size=size,
        center=center,
        radius=radius,
        points=points,
        rings=rings,
        spokes=spokes,
        label_positions=label_positions,
    )


__all__ = ["RADAR_AXES", "RadarPoint", "RadarChart", "radar_vertex", "build_radar"]

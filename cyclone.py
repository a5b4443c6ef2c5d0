"""
Cyclone state record.

A Cyclone is owned by exactly one driver and mutated in place once per
3-hour tick by CycloneModel.advance(). Forecast ensembles work on deep
copies (Cyclone.copy()), never on the live record.

Lifecycle sub-states are small tagged objects so that contradictory
combinations (an extratropical stage on a tropical storm, an ERC window
with no state) cannot be expressed.
"""

import copy
from collections import namedtuple
from enum import Enum

TrackPoint = namedtuple('TrackPoint', [
    'lon', 'lat', 'intensity', 'is_transitioning', 'is_extratropical',
    'circulation_size', 'is_subtropical',
])

STATUS_ACTIVE = 'active'
STATUS_DISSIPATED = 'dissipated'


class ExtratropicalStage(Enum):
    NONE = 'none'
    DEVELOPING = 'developing'
    DECAYING = 'decaying'


class ERCState(Enum):
    NONE = 'none'
    WEAKENING = 'weakening'
    RECOVERING = 'recovering'


class EyewallCycle:
    """Eyewall replacement cycle: none -> weakening -> recovering -> none."""

    def __init__(self):
        self.state = ERCState.NONE
        self.end_time = 0
        self.mpi_reduction = 0.0

    @property
    def active(self):
        return self.state is not ERCState.NONE

    def start_weakening(self, end_time, mpi_reduction):
        self.state = ERCState.WEAKENING
        self.end_time = end_time
        self.mpi_reduction = mpi_reduction

    def start_recovering(self, end_time):
        self.state = ERCState.RECOVERING
        self.end_time = end_time

    def finish(self):
        self.state = ERCState.NONE
        self.end_time = 0
        self.mpi_reduction = 0.0

    def __repr__(self):
        return f"EyewallCycle({self.state.value}, end={self.end_time}h, mpi-{self.mpi_reduction:.1f})"


class ShearEvent:
    """A transient burst of vertical wind shear with a fixed magnitude."""

    def __init__(self):
        self.active = False
        self.end_time = 0
        self.magnitude = 0.0

    def start(self, end_time, magnitude):
        self.active = True
        self.end_time = end_time
        self.magnitude = magnitude

    def stop(self):
        self.active = False
        self.magnitude = 0.0

    def __repr__(self):
        return f"ShearEvent(active={self.active}, end={self.end_time}h, magnitude={self.magnitude:.2f})"


class Cyclone:
    """
    Mutable per-tick state of a single storm.

    UNITS:
        - lat, lon: degrees (lon in [-180, 180])
        - direction: compass bearing of motion (degrees)
        - speed, intensity: knots
        - age: hours since genesis
        - circulation_size, r34, r50, r64: km
        - upwelling_cooling_effect: degC
    """

    def __init__(self, lat, lon, intensity, direction=280.0, speed=10.0, circulation_size=300.0):
        self.lat = lat
        self.lon = lon
        self.direction = direction
        self.speed = speed
        self.age = 0

        self.intensity = intensity
        self.circulation_size = circulation_size
        self.ace = 0.0

        self.status = STATUS_ACTIVE
        self.is_subtropical = False
        self.subtropical_transition_time = 0
        self.is_monsoon_depression = False
        self.monsoon_depression_end_time = 0
        self.is_transitioning = False

        self.extratropical_stage = ExtratropicalStage.NONE
        self.extratropical_development_end_time = 0
        self.extratropical_max_intensity = 0.0

        self.erc = EyewallCycle()
        self.shear_event = ShearEvent()
        self.upwelling_cooling_effect = 0.0

        self.r34 = 0.0
        self.r50 = 0.0
        self.r64 = 0.0

        self.track = []

    # === DERIVED FLAGS ===

    @property
    def is_extratropical(self):
        return self.extratropical_stage is not ExtratropicalStage.NONE

    @property
    def is_active(self):
        return self.status == STATUS_ACTIVE

    # === TRACK ===

    def snapshot(self):
        return TrackPoint(
            self.lon, self.lat, self.intensity, self.is_transitioning,
            self.is_extratropical, self.circulation_size, self.is_subtropical,
        )

    def record_track_point(self):
        self.track.append(self.snapshot())

    def copy(self):
        """Independent deep copy; nothing is shared with self."""
        return copy.deepcopy(self)

    def __repr__(self):
        return (f"Cyclone(T+{self.age}h, {self.lat:.1f}, {self.lon:.1f}, "
                f"{self.intensity:.0f} kt, {self.status})")

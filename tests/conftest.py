# File: tests/conftest.py

"""Shared fixtures: factories for raw segments, axes and frames.

All coordinates are plan millimetres.
"""

import pytest

from wallaxis.models import AxisLine, Point2D, Point3D, SapFrame, WallSegment


def _segment(x1, y1, x2, y2, handle="", thickness=0.0, single=False, wall_type=""):
    return WallSegment(
        start=Point2D(x=x1, y=y1),
        end=Point2D(x=x2, y=y2),
        handle=handle,
        thickness=thickness,
        is_single_line=single,
        wall_type=wall_type,
    )


def _axis(x1, y1, x2, y2, name=""):
    return AxisLine(start=Point2D(x=x1, y=y1), end=Point2D(x=x2, y=y2), name=name)


def _frame(name, x1, y1, x2, y2, z=0.0, z2=None):
    return SapFrame(
        name=name,
        start=Point3D(x=x1, y=y1, z=z),
        end=Point3D(x=x2, y=y2, z=z if z2 is None else z2),
    )


@pytest.fixture
def make_segment():
    """Factory: make_segment(x1, y1, x2, y2, handle=..., thickness=..., single=...)."""
    return _segment


@pytest.fixture
def make_axis():
    return _axis


@pytest.fixture
def make_frame():
    """Factory: make_frame(name, x1, y1, x2, y2, z=0.0)."""
    return _frame


@pytest.fixture
def wall_faces():
    """Two 3000-long faces of a 200 wall along the X axis."""
    return [
        _segment(0, 0, 3000, 0, handle="h1"),
        _segment(0, 200, 3000, 200, handle="h2"),
    ]

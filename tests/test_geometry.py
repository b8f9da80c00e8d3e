import math

import pytest

from vertexsim.geometry import Cylinder, Hit, Line, Point


def test_point_defaults_to_origin():
    assert Point() == Point(0.0, 0.0, 0.0)


def test_hit_defaults():
    hit = Hit()
    assert (hit.z, hit.phi, hit.label) == (0.0, 0.0, 0)


def test_line_cosines_along_x():
    line = Line(Point(), math.pi / 2, 0.0)
    assert line.cosines == pytest.approx((1.0, 0.0, 0.0), abs=1e-12)


def test_line_cosines_are_unit_vector():
    line = Line(Point(), 0.7, 2.3)
    assert sum(c * c for c in line.cosines) == pytest.approx(1.0)


@pytest.mark.parametrize("theta,phi", [(0.3, 0.5), (1.2, 2.0), (2.5, 4.0), (1.0, 5.9)])
def test_from_cosines_round_trip(theta, phi):
    original = Line(Point(1.0, 2.0, 3.0), theta, phi)
    rebuilt = Line.from_cosines(original.point, original.cosines)
    assert rebuilt.theta == pytest.approx(theta)
    assert rebuilt.phi == pytest.approx(phi)
    assert rebuilt.point == original.point


def test_negative_y_gives_azimuth_in_upper_half_turn():
    line = Line.from_cosines(Point(), (0.0, -1.0, 0.0))
    assert math.pi <= line.phi < 2 * math.pi
    assert line.phi == pytest.approx(3 * math.pi / 2)


def test_set_cosines_requires_three_values():
    line = Line(Point(), 0.0, 0.0)
    with pytest.raises(ValueError):
        line.set_cosines((1.0, 0.0))


def test_update_direction_changes_angles_and_cosines():
    line = Line(Point(), 0.1, 0.2)
    line.update_direction(math.pi / 2, math.pi / 2)
    assert line.direction == (math.pi / 2, math.pi / 2)
    assert line.cosines == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)


def test_position_moves_along_direction():
    line = Line(Point(1.0, 2.0, 3.0), math.pi / 2, math.pi / 2)
    line.parameter = 2.0
    assert line.position() == pytest.approx(Point(1.0, 4.0, 3.0))
    line.parameter = 0.0
    assert line.position() == line.point


def test_intersection_from_axis():
    cylinder = Cylinder(4.0, 27.0)
    line = Line(Point(), math.pi / 2, 0.0)
    point, hit = cylinder.intersect(line)
    assert hit is True
    assert point.x == pytest.approx(4.0)
    assert line.parameter == pytest.approx(4.0)


@pytest.mark.parametrize("theta,phi", [(0.5, 0.1), (1.5, 3.0), (2.4, 5.5)])
def test_intersection_lies_on_surface(theta, phi):
    cylinder = Cylinder(7.0, 100.0)
    line = Line(Point(0.01, -0.02, 1.0), theta, phi)
    point, hit = cylinder.intersect(line)
    assert hit is True
    assert math.hypot(point.x, point.y) == pytest.approx(7.0)
    assert line.parameter > 0.0


def test_intersection_outside_surface_reports_miss_and_origin():
    cylinder = Cylinder(4.0, 27.0)
    line = Line(Point(10.0, 0.0, 0.0), math.pi / 2, 0.0)
    point, hit = cylinder.intersect(line)
    assert hit is False
    assert point == Point()


def test_negative_discriminant_is_a_miss():
    cylinder = Cylinder(4.0, 27.0)
    line = Line(Point(10.0, 0.0, 0.0), math.pi / 2, math.pi / 2)
    point, hit = cylinder.intersect(line)
    assert (point, hit) == (Point(), False)


def test_crossing_beyond_length_is_not_a_hit():
    cylinder = Cylinder(4.0, 27.0)
    line = Line(Point(), 0.05, 0.0)
    point, hit = cylinder.intersect(line)
    assert hit is False
    assert point.z > 13.5
    assert math.hypot(point.x, point.y) == pytest.approx(4.0)


def test_chained_intersections_move_outward():
    beampipe, inner, outer = Cylinder(3.0, 100.0), Cylinder(4.0, 27.0), Cylinder(7.0, 27.0)
    line = Line(Point(), 1.2, 0.8)
    radii = []
    for surface in (beampipe, inner, outer):
        point, hit = surface.intersect(line)
        assert hit is True
        radii.append(math.hypot(point.x, point.y))
        line.point = point
    assert radii == pytest.approx([3.0, 4.0, 7.0])
"""Tests for the implicit surfaces module."""

import inspect
import random

import pytest
from math import pi, sqrt

from csgeom.boundary import BoundaryCondition
from csgeom.errors import InvalidParameterError
from csgeom.surfaces import (
    Cone, InfCylinder, Plane, Sphere,
    halfspace, implicit, intersect, is_surface, normal_at, reflect,
    x_plane, y_plane, z_plane,
)
from csgeom.vec import Coord, Ray, ORIGIN, XAXIS, YAXIS, ZAXIS, dot, isunit, unitize


def _ray(origin, direction):
    return Ray(Coord(*origin), unitize(Coord(*direction)))


class TestPlane:
    """Test plane surface operations."""

    def test_implicit_is_signed_distance(self):
        p = Plane(Coord(1.0, 0.0, 0.0), XAXIS)
        assert p.implicit(Coord(3.0, 7.0, -2.0)) == pytest.approx(2.0)
        assert p.implicit(Coord(-1.0, 0.0, 0.0)) == pytest.approx(-2.0)
        assert p.implicit(Coord(1.0, 5.0, 5.0)) == pytest.approx(0.0)

    def test_intersect_ahead(self):
        t = list(x_plane(0.0).intersect(_ray((-5, 0, 0), (1, 0, 0))))
        assert t == [pytest.approx(5.0)]

    def test_intersect_oblique(self):
        t = list(z_plane(1.0).intersect(_ray((0, 0, 0), (1, 0, 1))))
        assert t == [pytest.approx(sqrt(2))]

    def test_no_intersection_behind_or_parallel(self):
        plane = x_plane(0.0)
        assert list(plane.intersect(_ray((-5, 0, 0), (-1, 0, 0)))) == []
        assert list(plane.intersect(_ray((-5, 0, 0), (0, 1, 0)))) == []

    def test_intersect_is_lazy(self):
        assert inspect.isgenerator(x_plane(0.0).intersect(_ray((-5, 0, 0), (1, 0, 0))))

    def test_axis_plane_helpers(self):
        assert y_plane(2.0).implicit(Coord(0.0, 5.0, 0.0)) == pytest.approx(3.0)
        assert z_plane(-1.0).normal == ZAXIS
        assert x_plane(0.0, BoundaryCondition.VACUUM).boundary is BoundaryCondition.VACUUM

    def test_default_boundary_is_transmission(self):
        assert Plane(ORIGIN, ZAXIS).boundary is BoundaryCondition.TRANSMISSION

    def test_rejects_non_unit_normal(self):
        with pytest.raises(InvalidParameterError):
            Plane(ORIGIN, Coord(0.0, 0.0, 2.0))

    def test_rejects_boundary_string(self):
        """Boundary spellings must be resolved before construction."""
        with pytest.raises(InvalidParameterError):
            Plane(ORIGIN, ZAXIS, "vacuum")

    def test_accepts_sequences(self):
        p = Plane((0, 0, 1), (0, 0, 1))
        assert p.point == Coord(0.0, 0.0, 1.0)


class TestSphere:
    """Test sphere surface operations."""

    def test_implicit(self):
        s = Sphere(ORIGIN, 2.0)
        assert s.implicit(ORIGIN) == pytest.approx(-4.0)
        assert s.implicit(Coord(2.0, 0.0, 0.0)) == pytest.approx(0.0)
        assert s.implicit(Coord(3.0, 0.0, 0.0)) == pytest.approx(5.0)

    def test_round_trip_through_center(self):
        """A ray through the centre crosses twice, one diameter apart."""
        r = 2.0
        s = Sphere(ORIGIN, r)
        ray = _ray((-3, -4, 0), (3, 4, 0))
        t1, t2 = list(s.intersect(ray))
        assert t1 < t2
        assert t2 - t1 == pytest.approx(2 * r)
        # closest approach is the centre, 5 units away
        closest = -dot(ray.origin, ray.direction)
        assert (t1 + t2) / 2 == pytest.approx(closest)
        assert closest == pytest.approx(5.0)

    def test_from_inside_one_crossing(self):
        t = list(Sphere(ORIGIN, 2.0).intersect(_ray((0, 0, 0), (0, 0, 1))))
        assert t == [pytest.approx(2.0)]

    def test_tangent_reported_once(self):
        t = list(Sphere(ORIGIN, 2.0).intersect(Ray(Coord(-5.0, 2.0, 0.0), XAXIS)))
        assert t == [pytest.approx(5.0)]

    def test_miss(self):
        assert list(Sphere(ORIGIN, 1.0).intersect(_ray((-5, 3, 0), (1, 0, 0)))) == []

    def test_normal_is_outward(self):
        n = Sphere(Coord(1.0, 1.0, 1.0), 2.0).normal_at(Coord(1.0, 3.0, 1.0))
        assert n == Coord(0.0, 1.0, 0.0)

    @pytest.mark.parametrize("radius", [0.0, -1.0, float('inf'), float('nan')])
    def test_rejects_bad_radius(self, radius):
        with pytest.raises(InvalidParameterError):
            Sphere(ORIGIN, radius)


class TestInfCylinder:
    """Test infinite cylinder surface operations."""

    def test_implicit_ignores_axial_offset(self):
        c = InfCylinder(ORIGIN, ZAXIS, 1.0)
        assert c.implicit(Coord(2.0, 0.0, 7.0)) == pytest.approx(3.0)
        assert c.implicit(Coord(0.0, 0.0, -100.0)) == pytest.approx(-1.0)

    def test_intersect(self):
        t = list(InfCylinder(ORIGIN, ZAXIS, 1.0).intersect(_ray((-5, 0, 3), (1, 0, 0))))
        assert t == [pytest.approx(4.0), pytest.approx(6.0)]

    def test_oblique_axis(self):
        axis = unitize(Coord(1.0, 1.0, 0.0))
        c = InfCylinder(ORIGIN, axis, 1.0)
        # a point one unit off the axis, perpendicular to it
        assert c.implicit(Coord(0.0, 0.0, 1.0)) == pytest.approx(0.0)
        t = list(c.intersect(_ray((0, 0, -5), (0, 0, 1))))
        assert t == [pytest.approx(4.0), pytest.approx(6.0)]

    def test_parallel_ray_never_crosses(self):
        assert list(InfCylinder(ORIGIN, ZAXIS, 1.0).intersect(_ray((0.5, 0, 0), (0, 0, 1)))) == []

    def test_normal(self):
        n = InfCylinder(ORIGIN, ZAXIS, 1.0).normal_at(Coord(1.0, 0.0, 5.0))
        assert n == XAXIS

    def test_rejects_bad_parameters(self):
        with pytest.raises(InvalidParameterError):
            InfCylinder(ORIGIN, ZAXIS, 0.0)
        with pytest.raises(InvalidParameterError):
            InfCylinder(ORIGIN, Coord(1.0, 1.0, 0.0), 1.0)


class TestCone:
    """Test cone surface operations."""

    def test_implicit_positive_inside(self):
        c = Cone(ORIGIN, ZAXIS, pi / 4)
        assert c.implicit(Coord(0.0, 0.0, 1.0)) == pytest.approx(0.5)
        assert c.implicit(Coord(1.0, 0.0, 1.0)) == pytest.approx(0.0)
        assert c.implicit(Coord(2.0, 0.0, 1.0)) < 0

    def test_mirrored_nappe_is_outside(self):
        c = Cone(ORIGIN, ZAXIS, pi / 4)
        # inside the mirrored nappe and on its surface
        assert c.implicit(Coord(0.0, 0.0, -1.0)) < 0
        assert c.implicit(Coord(1.0, 0.0, -1.0)) < 0
        assert halfspace(c, Coord(1.0, 0.0, -1.0)) == -1

    def test_intersect_real_nappe(self):
        t = list(Cone(ORIGIN, ZAXIS, pi / 4).intersect(_ray((-5, 0, 1), (1, 0, 0))))
        assert t == [pytest.approx(4.0), pytest.approx(6.0)]

    def test_mirrored_nappe_excluded(self):
        """A ray crossing only the mirrored nappe reports nothing."""
        t = list(Cone(ORIGIN, ZAXIS, pi / 4).intersect(_ray((-5, 0, -1), (1, 0, 0))))
        assert t == []

    def test_ray_through_both_nappes(self):
        """Only the crossing on the real nappe survives."""
        c = Cone(ORIGIN, ZAXIS, pi / 4)
        # travels along x = 0.5, upward; the quadratic has roots at z = -0.5 and 0.5
        t = list(c.intersect(_ray((0.5, 0, -5), (0, 0, 1))))
        assert t == [pytest.approx(5.5)]

    def test_normal(self):
        n = Cone(ORIGIN, ZAXIS, pi / 4).normal_at(Coord(1.0, 0.0, 1.0))
        assert isunit(n)
        assert n.x == pytest.approx(-1 / sqrt(2))
        assert n.z == pytest.approx(1 / sqrt(2))

    @pytest.mark.parametrize("theta", [0.0, -0.1, pi / 2, 2.0])
    def test_rejects_bad_theta(self, theta):
        with pytest.raises(InvalidParameterError):
            Cone(ORIGIN, ZAXIS, theta)


class TestGenericOperations:
    """Test the surface dispatch functions."""

    surfaces = [
        x_plane(0.5),
        Sphere(Coord(0.2, -0.1, 0.3), 1.5),
        InfCylinder(ORIGIN, YAXIS, 0.7),
        Cone(Coord(0.0, 0.0, -1.0), ZAXIS, pi / 6),
    ]

    def test_is_surface(self):
        for s in self.surfaces:
            assert is_surface(s)
        assert not is_surface("sphere")
        assert not is_surface(None)

    def test_dispatchers_match_methods(self):
        p = Coord(0.3, 0.4, 0.5)
        ray = _ray((-4, 0.1, 0.2), (1, 0, 0))
        for s in self.surfaces:
            assert implicit(s, p) == s.implicit(p)
            assert list(intersect(s, ray)) == list(s.intersect(ray))
            assert normal_at(s, p) == s.normal_at(p)

    def test_dispatchers_reject_non_surfaces(self):
        with pytest.raises(ValueError):
            implicit("plane", ORIGIN)

    def test_sign_consistency(self):
        """Every point falls in exactly one halfspace."""
        rng = random.Random(7)
        for s in self.surfaces:
            for _ in range(200):
                p = Coord(rng.uniform(-3, 3), rng.uniform(-3, 3), rng.uniform(-3, 3))
                f = s.implicit(p)
                assert (f >= 0) != (f < 0)
                assert halfspace(s, p) in (1, -1)

    def test_halfspace_band_belongs_to_positive_side(self):
        plane = x_plane(0.0)
        assert halfspace(plane, Coord(-1e-13, 0.0, 0.0)) == 1
        assert halfspace(plane, Coord(0.0, 0.0, 0.0)) == 1
        assert halfspace(plane, Coord(-1e-6, 0.0, 0.0)) == -1

    def test_intersections_ascending_and_positive(self):
        ray = _ray((-4, 0.1, 0.2), (1, 0.05, 0))
        for s in self.surfaces:
            ts = list(s.intersect(ray))
            assert ts == sorted(ts)
            assert all(t > 0 for t in ts)


class TestReflect:
    """Test reflection off a surface."""

    def test_reflection_law(self):
        plane = z_plane(0.0)
        ray = _ray((-1, 0, 1), (1, 0.3, -1))
        (t,) = list(plane.intersect(ray))
        hit = ray.at(t)
        out = reflect(ray, plane, hit)
        n = plane.normal_at(hit)
        assert out.origin == hit
        assert isunit(out.direction)
        assert dot(out.direction, n) == pytest.approx(-dot(ray.direction, n))
        # equal angles with the normal on either side
        assert abs(dot(out.direction, n)) == pytest.approx(abs(dot(ray.direction, n)))

    def test_reflection_off_sphere(self):
        s = Sphere(ORIGIN, 1.0)
        ray = Ray(Coord(-5.0, 0.0, 0.0), XAXIS)
        out = reflect(ray, s, Coord(-1.0, 0.0, 0.0))
        assert out.direction.x == pytest.approx(-1.0)

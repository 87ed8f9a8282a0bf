"""Tests for regions and cells."""

import random

import pytest

from csgeom.cell import Cell, Region
from csgeom.errors import InvalidParameterError
from csgeom.expression import Leaf, intersection
from csgeom.surfaces import InfCylinder, Sphere, x_plane, z_plane
from csgeom.vec import Coord, ORIGIN, ZAXIS


def _finite_cylinder():
    """Unit-radius cylinder about z between z=0 and z=1."""
    regions = [
        Region(InfCylinder(ORIGIN, ZAXIS, 1.0), -1),
        Region(z_plane(0.0), 1),
        Region(z_plane(1.0), -1),
    ]
    return Cell(regions, intersection(Leaf(0), Leaf(1), Leaf(2)), name="can")


class TestRegion:
    """Test region membership."""

    def test_sphere_inside_outside(self):
        s = Sphere(ORIGIN, 1.0)
        inside = Region(s, -1)
        outside = Region(s, 1)
        assert inside.contains(ORIGIN)
        assert not outside.contains(ORIGIN)
        assert outside.contains(Coord(2.0, 0.0, 0.0))

    @pytest.mark.parametrize("side", [0, 2, -2, True, 1.0, "+"])
    def test_rejects_bad_halfspace(self, side):
        with pytest.raises(InvalidParameterError):
            Region(x_plane(0.0), side)

    def test_rejects_non_surface(self):
        with pytest.raises(InvalidParameterError):
            Region("sphere", 1)

    def test_complement_shares_surface(self):
        r = Region(Sphere(ORIGIN, 1.0), -1)
        c = r.complement()
        assert c.halfspace == 1
        assert c.surface is r.surface

    def test_complementary_regions_partition_space(self):
        """Exactly one of a region and its complement holds, even on the surface."""
        rng = random.Random(3)
        s = Sphere(ORIGIN, 1.0)
        points = [Coord(1.0, 0.0, 0.0), Coord(0.0, -1.0, 0.0)]
        points += [Coord(rng.uniform(-2, 2), rng.uniform(-2, 2), rng.uniform(-2, 2))
                   for _ in range(200)]
        for p in points:
            assert Region(s, 1).contains(p) != Region(s, -1).contains(p)


class TestCell:
    """Test cell membership."""

    def test_finite_cylinder(self):
        can = _finite_cylinder()
        assert can.contains(Coord(0.0, 0.0, 0.5))
        assert can.contains(Coord(0.9, 0.0, 0.1))
        assert not can.contains(Coord(0.0, 0.0, 1.5))
        assert not can.contains(Coord(0.0, 0.0, -0.5))
        assert not can.contains(Coord(1.1, 0.0, 0.5))

    def test_union(self):
        regions = [Region(Sphere(ORIGIN, 2.0), -1),
                   Region(Sphere(Coord(3.0, 0.0, 0.0), 2.0), -1)]
        cell = Cell(regions, Leaf(0) | Leaf(1))
        assert cell.contains(ORIGIN)
        assert cell.contains(Coord(3.0, 0.0, 0.0))
        assert not cell.contains(Coord(6.0, 0.0, 0.0))

    def test_complement(self):
        cell = Cell([Region(Sphere(ORIGIN, 2.0), -1)], ~Leaf(0))
        assert not cell.contains(ORIGIN)
        assert cell.contains(Coord(3.0, 0.0, 0.0))

    def test_difference(self):
        """Slab with a spherical hole."""
        regions = [Region(x_plane(-2.0), 1), Region(x_plane(2.0), -1),
                   Region(Sphere(ORIGIN, 1.0), -1)]
        cell = Cell(regions, Leaf(0) ^ Leaf(1) ^ ~Leaf(2))
        assert not cell.contains(ORIGIN)
        assert cell.contains(Coord(1.5, 0.0, 0.0))
        assert not cell.contains(Coord(3.0, 0.0, 0.0))

    def test_regions_stored_as_tuple(self):
        assert isinstance(_finite_cylinder().regions, tuple)

    def test_rejects_out_of_range_index(self):
        with pytest.raises(InvalidParameterError):
            Cell([Region(x_plane(0.0), 1)], Leaf(0) ^ Leaf(1))

    def test_rejects_bad_definition(self):
        with pytest.raises(InvalidParameterError):
            Cell([Region(x_plane(0.0), 1)], "0")
        with pytest.raises(InvalidParameterError):
            Cell([x_plane(0.0)], Leaf(0))

    def test_surfaces_deduplicated_in_order(self):
        plane = x_plane(0.0)
        sphere = Sphere(ORIGIN, 1.0)
        cell = Cell([Region(plane, 1), Region(sphere, -1), Region(plane, -1)],
                    Leaf(0) ^ Leaf(1) | Leaf(2))
        surfaces = cell.surfaces()
        assert len(surfaces) == 2
        assert surfaces[0] is plane
        assert surfaces[1] is sphere

    def test_label(self):
        assert _finite_cylinder().label == "'can'"
        assert Cell([Region(x_plane(0.0), 1)], Leaf(0)).label == "<0>"

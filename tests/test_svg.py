"""Test module for bezarith.svg

The tests are run using pytest.
These tests ensure that SVG path data is parsed into paths, that paths are
written as path data, and that drawings can be saved.
"""

import gzip

import pytest

from bezarith.arc import Circle
from bezarith.coordinate import Coord2
from bezarith.errors import MalformedPathError
from bezarith.path import SimpleBezierPath, path_from_points
from bezarith.svg import SvgPathData, path_to_svg_d, save_svg, svg_d_to_paths, svg_drawing

###############################################################################
# Parsing Tests
###############################################################################


class TestSvgParsing:
    """Test class for reading SVG path data."""

    def test_lines_and_close(self):
        """Test absolute lines closed with Z."""
        paths = svg_d_to_paths("M0 0 L10 0 L10 10 Z")
        assert len(paths) == 1
        assert len(paths[0]) == 3
        assert paths[0].end_point() == Coord2(0.0, 0.0)

    def test_relative_commands(self):
        """Test relative lines, horizontal and vertical lines."""
        path = svg_d_to_paths("m1 1 l2 0 v2 h-2 z")[0]
        ends = [segment[2] for segment in path.segments]
        assert ends == [Coord2(3.0, 1.0), Coord2(3.0, 3.0), Coord2(1.0, 3.0), Coord2(1.0, 1.0)]

    def test_cubic(self):
        """Test an absolute cubic curve."""
        path = svg_d_to_paths("M0,0 C0,1 1,1 1,0")[0]
        assert path.segments == ((Coord2(0.0, 1.0), Coord2(1.0, 1.0), Coord2(1.0, 0.0)),)

    def test_smooth_cubic(self):
        """Test that S reflects the previous control point."""
        path = svg_d_to_paths("M0 0 C0 1 1 1 1 0 S2 -1 2 0")[0]
        cp1, cp2, end = path.segments[1]
        assert cp1 == Coord2(1.0, -1.0)
        assert cp2 == Coord2(2.0, -1.0)
        assert end == Coord2(2.0, 0.0)

    def test_quadratic(self):
        """Test that quadratic curves are raised to cubic curves."""
        path = svg_d_to_paths("M0 0 Q5 10 10 0")[0]
        cp1, cp2, end = path.segments[0]
        assert cp1.is_near_to(Coord2(10.0 / 3.0, 20.0 / 3.0), 1e-12)
        assert cp2.is_near_to(Coord2(20.0 / 3.0, 20.0 / 3.0), 1e-12)
        assert end == Coord2(10.0, 0.0)

    def test_smooth_quadratic(self):
        """Test that T reflects the previous quadratic control point."""
        path = svg_d_to_paths("M0 0 Q5 10 10 0 T20 0")[0]
        cp1, _, _ = path.segments[1]
        # Reflected control point is (15, -10)
        assert cp1.is_near_to(Coord2(10.0 + 5.0 * 2.0 / 3.0, -20.0 / 3.0), 1e-12)

    def test_implicit_lineto(self):
        """Test extra coordinate pairs after a moveto."""
        path = svg_d_to_paths("M0 0 1 0 1 1")[0]
        assert len(path) == 2
        assert path.end_point() == Coord2(1.0, 1.0)

    def test_several_paths(self):
        """Test that every moveto starts a new path."""
        paths = svg_d_to_paths("M0 0 L1 0 L1 1 Z M5 5 L6 5 L6 6 Z")
        assert len(paths) == 2
        assert paths[1].start == Coord2(5.0, 5.0)

    def test_exponent_numbers(self):
        """Test numbers written with exponents."""
        path = svg_d_to_paths("M1e1 -2.5E-1 L.5 3")[0]
        assert path.start == Coord2(10.0, -0.25)
        assert path.end_point() == Coord2(0.5, 3.0)

    @pytest.mark.parametrize(
        "path_string",
        [
            "M0 0 A5 5 0 0 1 10 0",
            "10 10 L5 5",
            "M0 0 L5",
            "L5 5",
            "M0 0 Z 3",
        ],
    )
    def test_malformed(self, path_string):
        """Test that unsupported or broken path data raises."""
        with pytest.raises(MalformedPathError):
            svg_d_to_paths(path_string)


###############################################################################
# Writing Tests
###############################################################################


class TestSvgWriting:
    """Test class for writing SVG path data and files."""

    def test_path_data(self):
        """Test the path data of a single curve."""
        path = SimpleBezierPath(Coord2(0.0, 0.0), ((Coord2(0.0, 1.0), Coord2(1.0, 1.0), Coord2(1.0, 0.0)),))
        assert path_to_svg_d(path) == "M0 0 C0 1 1 1 1 0 Z"
        assert path_to_svg_d(path, close=False) == "M0 0 C0 1 1 1 1 0"

    def test_round_trip(self):
        """Test that written path data reads back as the same paths."""
        paths = [
            SimpleBezierPath(Coord2(0.0, 0.0), ((Coord2(0.0, 4.0), Coord2(4.0, 4.0), Coord2(4.0, 0.0)),)),
            SimpleBezierPath(Coord2(-1.5, 2.0), ((Coord2(1.0, 1.0), Coord2(2.0, 2.0), Coord2(3.0, 3.0)),)),
        ]
        parsed = svg_d_to_paths(SvgPathData.from_paths(paths, close=False))
        assert parsed == paths

    def test_drawing(self):
        """Test that every layer becomes a group with a path."""
        square = path_from_points([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)])
        circle = Circle(Coord2(5.0, 5.0), 1.0).to_path()
        drawing = svg_drawing([square, [circle]], styles=[{"fill": "red"}])
        svg_text = drawing.tostring()
        assert 'id="layer0"' in svg_text
        assert 'id="layer1"' in svg_text
        assert svg_text.count("<path") == 2
        assert 'fill="red"' in svg_text

    def test_save(self, tmp_path):
        """Test saving plain and compressed files."""
        square = path_from_points([(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)])

        plain = tmp_path / "square.svg"
        save_svg(str(plain), [square], pretty=True)
        assert "<path" in plain.read_text(encoding="utf-8")

        compressed = tmp_path / "square.svgz"
        save_svg(str(compressed), [square], compressed=True)
        assert "<path" in gzip.decompress(compressed.read_bytes()).decode("utf-8")

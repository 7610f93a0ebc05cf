"""Reading and writing Bezier paths as SVG path data, and exporting them as SVG files."""

from __future__ import annotations

import gzip
import io
import logging
import re
from typing import ClassVar, List, Optional, Sequence

import svgwrite
import svgwrite.container

from bezarith.bounds import Bounds
from bezarith.coordinate import Coord2
from bezarith.errors import MalformedPathError
from bezarith.path import BezierPathBuilder, SimpleBezierPath, as_path_list, path_bounding_box

logger = logging.getLogger(__name__)


class SvgPathData:
    """
    Conversion between SVG path data strings and SimpleBezierPaths.

    Supported commands (command : number of values : command-character):
        MoveTo:           2: Mm
        LineTo:           2: Ll   1: Hh(x)   1:Vv(y)
        CubicBezier:      6: Cc   4: Ss
        QuadraticBezier:  4: Qq   2: Tt   (raised to cubic curves)
        ClosePath:        0: Zz
    Arcs (Aa) are not supported.
    """

    # Command letters:
    SVG_CMDS: ClassVar[str] = "MmLlHhVvCcSsQqTtAaZz"
    # Definition of a number:
    SVG_ARGS: ClassVar[str] = r"[-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?"
    # Number of values consumed per repetition of a command
    BATCH_SIZES: ClassVar[dict] = {"M": 2, "L": 2, "T": 2, "H": 1, "V": 1, "S": 4, "Q": 4, "C": 6, "A": 7, "Z": 0}

    @staticmethod
    def format_number(value: float) -> str:
        return f"{value:g}"

    @classmethod
    def from_paths(cls, paths, close: bool = True) -> str:
        """
        SVG path data for the given path(s), one "M ... Z" run per path.

        Args:
            paths: A path or a sequence of paths.
            close (bool, optional): Append "Z" to every path. Defaults to True.
        """
        fmt = cls.format_number
        commands = []
        for path in as_path_list(paths):
            commands.append(f"M{fmt(path.start.x)} {fmt(path.start.y)}")
            for cp1, cp2, end in path.segments:
                commands.append(
                    f"C{fmt(cp1.x)} {fmt(cp1.y)} {fmt(cp2.x)} {fmt(cp2.y)} {fmt(end.x)} {fmt(end.y)}"
                )
            if close:
                commands.append("Z")
        return " ".join(commands)

    @classmethod
    def to_paths(cls, path_string: str) -> List[SimpleBezierPath]:
        """
        Parse SVG path data into paths. Every "M" starts a new path.

        Raises:
            MalformedPathError: For arcs, unknown content or a wrong number of values.
        """
        commands = re.findall(f"[{cls.SVG_CMDS}][^{cls.SVG_CMDS}]*", path_string)
        if re.sub(f"[{cls.SVG_CMDS}][^{cls.SVG_CMDS}]*", "", path_string).strip():
            raise MalformedPathError(f"Path data does not start with a command: {path_string!r}")

        paths: List[SimpleBezierPath] = []
        builder: Optional[BezierPathBuilder] = None
        current = Coord2(0.0, 0.0)
        subpath_start = current
        last_control: Optional[Coord2] = None
        last_quadratic: Optional[Coord2] = None

        for command in commands:
            letter = command[0]
            upper = letter.upper()
            relative = letter.islower()
            args = [float(arg) for arg in re.findall(cls.SVG_ARGS, command[1:])]

            batch_size = cls.BATCH_SIZES[upper]
            if upper == "A":
                raise MalformedPathError("Elliptical arcs are not supported in path data")
            if batch_size == 0:
                if args:
                    raise MalformedPathError(f"Command {letter} takes no values")
                if builder is not None:
                    builder.close()
                current = subpath_start
                last_control = last_quadratic = None
                continue
            if not args or len(args) % batch_size:
                raise MalformedPathError(f"Command {letter} needs multiples of {batch_size} values, got {len(args)}")

            for index in range(0, len(args), batch_size):
                values = args[index : index + batch_size]

                if upper == "M" and index == 0:
                    if builder is not None:
                        paths.append(builder.build())
                    current = subpath_start = _point(values, 0, current, relative)
                    builder = BezierPathBuilder.start(current)
                    last_control = last_quadratic = None
                    continue

                if builder is None:
                    raise MalformedPathError("Path data must start with a moveto command")

                if upper in "ML":
                    end = _point(values, 0, current, relative)
                    builder.line_to(end)
                    last_control = last_quadratic = None
                elif upper == "H":
                    end = Coord2(values[0] + (current.x if relative else 0.0), current.y)
                    builder.line_to(end)
                    last_control = last_quadratic = None
                elif upper == "V":
                    end = Coord2(current.x, values[0] + (current.y if relative else 0.0))
                    builder.line_to(end)
                    last_control = last_quadratic = None
                elif upper == "C":
                    cp1 = _point(values, 0, current, relative)
                    cp2 = _point(values, 2, current, relative)
                    end = _point(values, 4, current, relative)
                    builder.curve_to((cp1, cp2), end)
                    last_control, last_quadratic = cp2, None
                elif upper == "S":
                    cp1 = current * 2.0 - last_control if last_control is not None else current
                    cp2, end = _point(values, 0, current, relative), _point(values, 2, current, relative)
                    builder.curve_to((cp1, cp2), end)
                    last_control, last_quadratic = cp2, None
                else:
                    if upper == "Q":
                        control, end = _point(values, 0, current, relative), _point(values, 2, current, relative)
                    else:
                        control = current * 2.0 - last_quadratic if last_quadratic is not None else current
                        end = _point(values, 0, current, relative)
                    cp1 = current + (control - current) * (2.0 / 3.0)
                    cp2 = end + (control - end) * (2.0 / 3.0)
                    builder.curve_to((cp1, cp2), end)
                    last_control, last_quadratic = None, control
                current = end

        if builder is not None:
            paths.append(builder.build())
        return paths


def path_to_svg_d(paths, close: bool = True) -> str:
    """SVG path data for a path or a sequence of paths."""
    return SvgPathData.from_paths(paths, close)


def svg_d_to_paths(path_string: str) -> List[SimpleBezierPath]:
    """Paths described by SVG path data."""
    return SvgPathData.to_paths(path_string)


###############################################################################
# Export
###############################################################################


def svg_drawing(
    layers: Sequence,
    margin: float = 1.0,
    styles: Optional[Sequence[dict]] = None,
) -> svgwrite.Drawing:
    """
    An SVG drawing showing every layer of paths.

    The y axis is flipped so that the drawing uses the same positive-y-up
    orientation as the paths.

    Args:
        layers: Sequence of shapes (a path or list of paths each); every shape
            becomes one group.
        margin (float, optional): Space around the paths. Defaults to 1.0.
        styles (Optional[Sequence[dict]], optional): svgwrite attributes for
            every layer. Defaults to black outlines without fill.
    """
    shapes = [as_path_list(layer) for layer in layers]
    all_paths = [path for shape in shapes for path in shape if not path.is_empty()]

    bounds = Bounds(0.0, 0.0, 0.0, 0.0)
    if all_paths:
        bounds = path_bounding_box(all_paths[0])
        for path in all_paths[1:]:
            bounds = bounds.union(path_bounding_box(path))

    width = bounds.width + 2.0 * margin
    height = bounds.height + 2.0 * margin

    # profile="full" to support numbers with more than 4 decimal digits
    drawing = svgwrite.Drawing(
        viewBox=f"{bounds.xmin - margin} {-(bounds.ymax + margin)} {width} {height}",
        profile="full",
    )
    root_group: svgwrite.container.Group = drawing.g(id="root", transform="scale(1,-1)")
    drawing.add(root_group)

    for index, shape in enumerate(shapes):
        style = {"fill": "none", "stroke": "black", "stroke_width": 0.05}
        if styles is not None and index < len(styles):
            style = styles[index]
        group = drawing.g(id=f"layer{index}")
        if shape:
            group.add(drawing.path(d=path_to_svg_d(shape), **style))
        root_group.add(group)

    logger.debug("Created drawing with %d layers and %d paths", len(shapes), len(all_paths))
    return drawing


def save_svg(
    filename: str,
    layers: Sequence,
    pretty: bool = False,
    indent: int = 2,
    compressed: bool = False,
    **kwargs,
):
    """
    Save paths as SVG file.

    Args:
        filename (str): path and filename
        layers: Shapes to draw, see svg_drawing()
        pretty (bool, optional): True for easy readable output. Defaults to False.
        indent (int, optional): Indention if pretty is enabled. Defaults to 2 spaces.
        compressed (bool, optional): Save as compressed svgz-file. Defaults to False.
        **kwargs: Passed on to svg_drawing()
    """
    drawing = svg_drawing(layers, **kwargs)

    svg_buffer = io.StringIO()
    drawing.write(svg_buffer, pretty=pretty, indent=indent)
    output_data = svg_buffer.getvalue().encode("utf-8")
    if compressed:
        output_data = gzip.compress(output_data)

    with open(filename, "wb") as svg_file:
        svg_file.write(output_data)


def _point(values: List[float], index: int, current: Coord2, relative: bool) -> Coord2:
    point = Coord2(values[index], values[index + 1])
    return current + point if relative else point

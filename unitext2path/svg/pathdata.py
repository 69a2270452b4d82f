"""Glyph outline recordings to SVG path data."""

from __future__ import annotations

from collections.abc import Iterable

from fontTools.pens.basePen import decomposeQuadraticSegment


def fmt_number(value: float, precision: int = 2) -> str:
    """Fixed-precision number with trailing zeros (and ``-0``) removed."""
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def recording_to_path_data(recording: Iterable[tuple[str, tuple]], precision: int = 2) -> str:
    """Convert a pen recording to SVG path commands.

    Coordinates are emitted unchanged (font units, Y up); placement and the
    Y flip are applied by the caller through a ``transform`` attribute.
    """

    def pt(p) -> str:
        return f"{fmt_number(p[0], precision)} {fmt_number(p[1], precision)}"

    commands: list[str] = []
    for op, args in recording:
        if op == "moveTo":
            commands.append(f"M{pt(args[0])}")
        elif op == "lineTo":
            commands.append(f"L{pt(args[0])}")
        elif op == "qCurveTo":
            points = list(args)
            if points and points[-1] is None:
                # Contour made only of off-curve points: start at the
                # implied on-curve point between the last and first.
                points = points[:-1]
                start = ((points[-1][0] + points[0][0]) / 2, (points[-1][1] + points[0][1]) / 2)
                commands.append(f"M{pt(start)}")
                points.append(start)
            if len(points) == 1:
                commands.append(f"L{pt(points[0])}")
                continue
            # implied on-curve points sit between consecutive controls
            for control, end in decomposeQuadraticSegment(points):
                commands.append(f"Q{pt(control)} {pt(end)}")
        elif op == "curveTo":
            points = list(args)
            for i in range(0, len(points) - 2, 3):
                c1, c2, end = points[i : i + 3]
                commands.append(f"C{pt(c1)} {pt(c2)} {pt(end)}")
        elif op == "closePath":
            commands.append("Z")

    return "".join(commands)

"""
Loading boundary outlines from SVG files.

Reads <polygon>, <polyline> and <path> elements. Path data supports the
M, L, H, V, C, S, Q and Z commands (absolute and relative); curves are
sampled into line segments. Transforms are not applied.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List

import numpy as np

_NUMBER = r'[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?'
_NUMBER_RE = re.compile(_NUMBER)
_PATH_TOKEN_RE = re.compile(rf'([MmLlHhVvCcSsQqZz])|({_NUMBER})')

_ARITY = {'M': 2, 'L': 2, 'H': 1, 'V': 1, 'C': 6, 'S': 4, 'Q': 4, 'Z': 0}


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def parse_points(text: str) -> np.ndarray:
    """Parse a polygon/polyline `points` attribute into an (N, 2) array."""
    values = [float(v) for v in _NUMBER_RE.findall(text)]
    if len(values) % 2:
        raise ValueError("points attribute has an odd number of coordinates")
    return np.array(values, dtype=float).reshape(-1, 2)


def _cubic(p0, p1, p2, p3, samples):
    t = np.linspace(0.0, 1.0, samples + 1)[1:, None]
    return ((1 - t) ** 3) * p0 + 3 * ((1 - t) ** 2) * t * p1 + 3 * (1 - t) * t ** 2 * p2 + t ** 3 * p3


def _quadratic(p0, p1, p2, samples):
    t = np.linspace(0.0, 1.0, samples + 1)[1:, None]
    return ((1 - t) ** 2) * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2


def parse_path(d: str, curve_samples: int = 16) -> List[np.ndarray]:
    """Parse path data into one (N, 2) array per subpath."""
    tokens = _PATH_TOKEN_RE.findall(d)
    subpaths: List[np.ndarray] = []
    points: List[np.ndarray] = []
    current = np.zeros(2)
    start = np.zeros(2)
    last_control = None
    command = None
    i = 0

    def flush():
        if len(points) >= 2:
            subpaths.append(np.vstack(points))
        points.clear()

    while i < len(tokens):
        letter, number = tokens[i]
        if letter:
            command = letter
            i += 1
            if command in 'Zz':
                flush()
                current = start.copy()
                last_control = None
                # closepath takes no arguments and has no implicit repeat
                command = None
                continue
        elif command is None:
            raise ValueError(f"number {number!r} without a path command")

        upper = command.upper()
        arity = _ARITY[upper]
        args = [float(tokens[j][1]) for j in range(i, i + arity) if j < len(tokens) and tokens[j][1]]
        if len(args) < arity:
            raise ValueError(f"incomplete arguments for path command {command!r}")
        i += arity
        relative = command.islower()
        base = current if relative else np.zeros(2)

        if upper == 'M':
            flush()
            current = base + args
            start = current.copy()
            points.append(current.copy())
            # implicit lineto after the first moveto pair
            command = 'l' if relative else 'L'
            last_control = None
        elif upper == 'L':
            current = base + args
            points.append(current.copy())
            last_control = None
        elif upper == 'H':
            current = np.array([args[0] + (current[0] if relative else 0.0), current[1]])
            points.append(current.copy())
            last_control = None
        elif upper == 'V':
            current = np.array([current[0], args[0] + (current[1] if relative else 0.0)])
            points.append(current.copy())
            last_control = None
        elif upper == 'C':
            c1, c2, end = base + args[0:2], base + args[2:4], base + args[4:6]
            points.extend(_cubic(current, c1, c2, end, curve_samples))
            last_control, current = c2, end
        elif upper == 'S':
            c1 = 2 * current - last_control if last_control is not None else current.copy()
            c2, end = base + args[0:2], base + args[2:4]
            points.extend(_cubic(current, c1, c2, end, curve_samples))
            last_control, current = c2, end
        elif upper == 'Q':
            c, end = base + args[0:2], base + args[2:4]
            points.extend(_quadratic(current, c, end, curve_samples))
            last_control, current = None, end

    flush()
    return subpaths


def load_svg_polygons(path: str, curve_samples: int = 16) -> List[np.ndarray]:
    """Every outline in the SVG file, in document order."""
    root = ET.parse(Path(path)).getroot()

    outlines: List[np.ndarray] = []
    for element in root.iter():
        name = _local_name(element.tag)
        if name in ('polygon', 'polyline') and element.get('points'):
            outlines.append(parse_points(element.get('points')))
        elif name == 'path' and element.get('d'):
            outlines.extend(parse_path(element.get('d'), curve_samples))

    outlines = [o for o in outlines if len(o) >= 3]
    if not outlines:
        raise ValueError(f"No polygon outlines found in {path}")
    return outlines


def translate_to_center(points: np.ndarray, cx: float, cy: float, width: float, height: float) -> np.ndarray:
    """Shift a design of size (width, height) so its box is centered on (cx, cy)."""
    return np.asarray(points, dtype=float) + np.array([cx - width / 2, cy - height / 2])

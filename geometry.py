import math

from pose_types import Landmark


def angle_degrees(a: Landmark, b: Landmark, c: Landmark) -> float:
    # Angle at b between rays b->a and b->c, folded into [0, 180].
    # Coincident points give atan2(0, 0) == 0, so the result stays finite.
    radians = math.atan2(c.y - b.y, c.x - b.x) - math.atan2(a.y - b.y, a.x - b.x)
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def distance_3d(a: Landmark, b: Landmark) -> float:
    return math.sqrt((b.x - a.x) ** 2 + (b.y - a.y) ** 2 + (b.z - a.z) ** 2)


def midpoint(a: Landmark, b: Landmark) -> Landmark:
    return Landmark(
        (a.x + b.x) / 2.0,
        (a.y + b.y) / 2.0,
        (a.z + b.z) / 2.0,
        min(a.visibility, b.visibility),
    )


def vertical_delta(a: Landmark, b: Landmark) -> float:
    # Positive when a is lower (greater y) than b in image coordinates.
    return a.y - b.y


def offset_from_line(point: Landmark, start: Landmark, end: Landmark) -> float:
    """Vertical offset of ``point`` from the line through ``start`` and ``end``.

    Positive when the point sits below the line (greater y). Falls back to the
    plain vertical delta against ``start`` when the line is vertical.
    """
    dx = end.x - start.x
    if abs(dx) < 1e-6:
        return point.y - start.y
    t = (point.x - start.x) / dx
    line_y = start.y + t * (end.y - start.y)
    return point.y - line_y

"""Integer point and rectangle types for image and feature space."""

from typing import NamedTuple, Optional


class Point(NamedTuple):
    """Integer point; x is the column, y is the row."""

    x: int
    y: int


class Rectangle(NamedTuple):
    """
    Axis-aligned rectangle with inclusive corners.

    A rectangle whose right < left or bottom < top is empty. Such rectangles
    arise naturally when both corners are mapped independently.
    """

    left: int
    top: int
    right: int
    bottom: int

    @classmethod
    def from_corners(cls, tl: Point, br: Point) -> "Rectangle":
        """Build from top-left and bottom-right corners without reordering them."""
        return cls(tl.x, tl.y, br.x, br.y)

    @classmethod
    def centered_at(cls, center: Point, width: int, height: Optional[int] = None) -> "Rectangle":
        """Rectangle of the given size whose centre pixel is `center`."""
        height = width if height is None else height
        left = center.x - (width - 1) // 2
        top = center.y - (height - 1) // 2
        return cls(left, top, left + width - 1, top + height - 1)

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def area(self) -> int:
        if self.is_empty:
            return 0
        return self.width * self.height

    @property
    def tl_corner(self) -> Point:
        return Point(self.left, self.top)

    @property
    def br_corner(self) -> Point:
        return Point(self.right, self.bottom)

    def contains(self, p: Point) -> bool:
        return self.left <= p.x <= self.right and self.top <= p.y <= self.bottom

    def intersect(self, other: "Rectangle") -> "Rectangle":
        return Rectangle(max(self.left, other.left), max(self.top, other.top),
                         min(self.right, other.right), min(self.bottom, other.bottom))

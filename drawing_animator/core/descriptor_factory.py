"""
Descriptor Factory

Turns one scheduled element into the reveal effects a renderer plays:

- Polygons (rectangle, diamond): stroke for the stroke share of the slot,
  then fill for the remainder, starting exactly when the stroke ends.
- Paths (ellipse, line, arrow): one stroke over the whole slot, with a
  pointer tracing the same geometry over the same span.
- Freehand: point-by-point progression plus pointer, with a progress table.
- Text: one typing effect; the renderer derives revealed characters from
  elapsed time.
- Anything else (images, unknown kinds): an opacity fade.

Missing geometry is replaced by defaults: origin (0, 0), a 100x100 box,
font size 20, and a two-point zero-length path when points are missing.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..models.data_models import (
    AnimationDescriptor,
    DescriptorKind,
    DrawingElement,
    ElementKind,
    ElementSlot,
)
from .timing import progress_table, round_ms


logger = logging.getLogger(__name__)

Point = Tuple[float, float]

DEFAULT_WIDTH = 100.0
DEFAULT_HEIGHT = 100.0
DEFAULT_FONT_SIZE = 20.0

# Average glyph width relative to font size, for typing path length
TEXT_WIDTH_FACTOR = 0.6

# Bezier control distance for a quarter ellipse
ELLIPSE_KAPPA = 0.55

ARROW_HEAD_LENGTH = 20.0
ARROW_HEAD_SPREAD_DEG = 20.0

POLYGON_KINDS = (ElementKind.RECTANGLE, ElementKind.DIAMOND)


def _num(value: float) -> str:
    """Compact, deterministic number formatting for path strings"""
    value = round(float(value), 2)
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _path_through(points: Sequence[Point], closed: bool = False) -> str:
    head, *rest = points
    parts = [f"M {_num(head[0])} {_num(head[1])}"]
    parts.extend(f"L {_num(px)} {_num(py)}" for px, py in rest)
    if closed:
        parts.append("Z")
    return " ".join(parts)


class DescriptorFactory:
    """
    Usage:
        factory = DescriptorFactory(stroke_fill_ratio=0.75)
        descriptors = factory.describe(element, start_ms=1000, duration_ms=500)
    """

    def __init__(self, stroke_fill_ratio: float = 0.75):
        self.stroke_fill_ratio = stroke_fill_ratio
        self._builders: Dict[ElementKind, Callable[..., List[AnimationDescriptor]]] = {
            ElementKind.RECTANGLE: self._describe_polygon,
            ElementKind.DIAMOND: self._describe_polygon,
            ElementKind.ELLIPSE: self._describe_path,
            ElementKind.LINE: self._describe_path,
            ElementKind.ARROW: self._describe_path,
            ElementKind.FREEHAND: self._describe_freehand,
            ElementKind.TEXT: self._describe_text,
        }

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @staticmethod
    def box(element: DrawingElement) -> Tuple[float, float, float, float]:
        x = element.x if element.x is not None else 0.0
        y = element.y if element.y is not None else 0.0
        w = element.width if element.width is not None else DEFAULT_WIDTH
        h = element.height if element.height is not None else DEFAULT_HEIGHT
        return x, y, w, h

    def absolute_points(self, element: DrawingElement) -> List[Point]:
        """
        Points in drawing coordinates, always at least two.

        Lines and arrows without points run along the box diagonal; any other
        kind without points collapses to a zero-length path at its origin.
        """
        x, y, w, h = self.box(element)
        points = [(x + px, y + py) for px, py in element.points]

        if not points:
            if element.kind in (ElementKind.LINE, ElementKind.ARROW):
                return [(x, y), (x + w, y + h)]
            return [(x, y), (x, y)]
        if len(points) == 1:
            return [points[0], points[0]]
        return points

    def polygon_corners(self, element: DrawingElement) -> List[Point]:
        x, y, w, h = self.box(element)
        if element.kind == ElementKind.DIAMOND:
            return [(x + w / 2, y), (x + w, y + h / 2), (x + w / 2, y + h), (x, y + h / 2)]
        return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]

    def ellipse_path(self, element: DrawingElement) -> str:
        """Closed perimeter as four cubic Bezier arcs, clockwise from the right"""
        x, y, w, h = self.box(element)
        rx, ry = w / 2, h / 2
        cx, cy = x + rx, y + ry
        k = ELLIPSE_KAPPA
        arcs = [
            ((cx + rx, cy - ry * k), (cx + rx * k, cy - ry), (cx, cy - ry)),
            ((cx - rx * k, cy - ry), (cx - rx, cy - ry * k), (cx - rx, cy)),
            ((cx - rx, cy + ry * k), (cx - rx * k, cy + ry), (cx, cy + ry)),
            ((cx + rx * k, cy + ry), (cx + rx, cy + ry * k), (cx + rx, cy)),
        ]
        parts = [f"M {_num(cx + rx)} {_num(cy)}"]
        for c1, c2, end in arcs:
            parts.append(
                f"C {_num(c1[0])} {_num(c1[1])} {_num(c2[0])} {_num(c2[1])} {_num(end[0])} {_num(end[1])}"
            )
        return " ".join(parts)

    @staticmethod
    def arrow_head(points: Sequence[Point]) -> str:
        """Two head strokes meeting at the last point, angled against the last segment"""
        end = points[-1]
        previous = end
        for candidate in reversed(points[:-1]):
            if candidate != end:
                previous = candidate
                break

        angle = math.atan2(end[1] - previous[1], end[0] - previous[0])
        spread = math.radians(ARROW_HEAD_SPREAD_DEG)
        wings = [
            (
                end[0] - ARROW_HEAD_LENGTH * math.cos(angle + sign * spread),
                end[1] - ARROW_HEAD_LENGTH * math.sin(angle + sign * spread),
            )
            for sign in (-1, 1)
        ]
        return _path_through([wings[0], end, wings[1]])

    def stroke_path(self, element: DrawingElement) -> str:
        """Drawing path of an element; the pointer follows this same path"""
        kind = element.kind
        if kind in POLYGON_KINDS:
            return _path_through(self.polygon_corners(element), closed=True)
        if kind == ElementKind.ELLIPSE:
            return self.ellipse_path(element)
        if kind in (ElementKind.LINE, ElementKind.ARROW, ElementKind.FREEHAND):
            points = self.absolute_points(element)
            path = _path_through(points)
            if kind == ElementKind.ARROW:
                path = f"{path} {self.arrow_head(points)}"
            return path
        if kind == ElementKind.TEXT:
            x, y, _, _ = self.box(element)
            return f"M {_num(x)} {_num(y)} h {_num(self.text_width(element))}"
        x, y, w, h = self.box(element)
        return f"M {_num(x + w / 2)} {_num(y + h / 2)}"

    @staticmethod
    def text_width(element: DrawingElement) -> float:
        font_size = element.font_size or DEFAULT_FONT_SIZE
        return len(element.text or "") * font_size * TEXT_WIDTH_FACTOR

    def segment_count(self, element: DrawingElement) -> int:
        """Number of drawn segments, a rough measure of drawing effort"""
        kind = element.kind
        if kind in POLYGON_KINDS or kind == ElementKind.ELLIPSE:
            return 4
        if kind in (ElementKind.LINE, ElementKind.FREEHAND):
            return max(1, len(element.points) - 1)
        if kind == ElementKind.ARROW:
            return max(1, len(element.points) - 1) + 2
        if kind == ElementKind.TEXT:
            return max(1, len(element.text or ""))
        return 1

    # ------------------------------------------------------------------
    # Descriptors
    # ------------------------------------------------------------------

    def describe(
        self,
        element: DrawingElement,
        start_ms: int,
        duration_ms: int,
        group_id: Optional[str] = None,
    ) -> List[AnimationDescriptor]:
        """Descriptors for one element over [start_ms, start_ms + duration_ms]."""
        if duration_ms < 0:
            raise ValueError(f"{element.id}: negative duration {duration_ms}ms")
        builder = self._builders.get(element.kind)
        if builder is None:
            logger.debug(f"{element.id}: no drawing effect for kind {element.kind.value}, fading in")
            builder = self._describe_generic
        descriptors = builder(element, start_ms, duration_ms)
        for descriptor in descriptors:
            descriptor.group_id = group_id
        return descriptors

    def describe_slots(self, slots: Sequence[ElementSlot]) -> List[AnimationDescriptor]:
        """Descriptors for a whole schedule, in renderer order"""
        descriptors: List[AnimationDescriptor] = []
        for slot in slots:
            descriptors.extend(self.describe(slot.element, slot.start_ms, slot.duration_ms, slot.group_id))
        ranks = {slot.element_id: slot.rank for slot in slots}
        return sort_descriptors(descriptors, ranks)

    def _base_metadata(self, element: DrawingElement) -> Dict[str, object]:
        metadata: Dict[str, object] = {"element_kind": element.kind.value}
        if element.stroke_color:
            metadata["stroke_color"] = element.stroke_color
        return metadata

    def _pointer(self, element: DrawingElement, path: str, start_ms: int, duration_ms: int,
                 points: Optional[List[Point]] = None) -> AnimationDescriptor:
        return AnimationDescriptor(
            element_id=element.id,
            kind=DescriptorKind.POINTER_MOTION,
            start_ms=start_ms,
            duration_ms=duration_ms,
            path=path,
            points=points,
            metadata={"element_kind": element.kind.value, "method": "motion-path"},
        )

    def _describe_polygon(self, element: DrawingElement, start_ms: int, duration_ms: int) -> List[AnimationDescriptor]:
        stroke_ms = round_ms(duration_ms * self.stroke_fill_ratio)
        fill_ms = duration_ms - stroke_ms
        corners = self.polygon_corners(element)
        path = _path_through(corners, closed=True)

        stroke_meta = self._base_metadata(element)
        stroke_meta["segments"] = self.segment_count(element)
        descriptors = [AnimationDescriptor(
            element_id=element.id,
            kind=DescriptorKind.POLYGON_STROKE,
            start_ms=start_ms,
            duration_ms=stroke_ms,
            path=path,
            points=corners,
            metadata=stroke_meta,
        )]

        if element.has_fill:
            descriptors.append(AnimationDescriptor(
                element_id=element.id,
                kind=DescriptorKind.POLYGON_FILL,
                start_ms=start_ms + stroke_ms,
                duration_ms=fill_ms,
                path=path,
                metadata={
                    "element_kind": element.kind.value,
                    "fill_color": element.fill_color,
                    "fill_fraction": round(1.0 - self.stroke_fill_ratio, 4),
                },
            ))
        return descriptors

    def _describe_path(self, element: DrawingElement, start_ms: int, duration_ms: int) -> List[AnimationDescriptor]:
        path = self.stroke_path(element)
        points = None if element.kind == ElementKind.ELLIPSE else self.absolute_points(element)

        stroke_meta = self._base_metadata(element)
        stroke_meta["segments"] = self.segment_count(element)
        descriptors = [
            AnimationDescriptor(
                element_id=element.id,
                kind=DescriptorKind.PATH_STROKE,
                start_ms=start_ms,
                duration_ms=duration_ms,
                path=path,
                points=points,
                metadata=stroke_meta,
            ),
            self._pointer(element, path, start_ms, duration_ms, points),
        ]

        # Closed paths with a fill pop in once the outline is complete
        if element.kind == ElementKind.ELLIPSE and element.has_fill:
            descriptors.append(AnimationDescriptor(
                element_id=element.id,
                kind=DescriptorKind.PATH_FILL,
                start_ms=start_ms + duration_ms,
                duration_ms=0,
                path=path,
                metadata={
                    "element_kind": element.kind.value,
                    "fill_color": element.fill_color,
                    "fill_fraction": 0.0,
                },
            ))
        return descriptors

    def _describe_freehand(self, element: DrawingElement, start_ms: int, duration_ms: int) -> List[AnimationDescriptor]:
        points = self.absolute_points(element)
        path = _path_through(points)

        recorded = len(element.points)
        table = [
            {"point_index": i, "progress": progress, "point": list(points[i])}
            for i, progress in enumerate(progress_table(recorded))
        ]

        meta = self._base_metadata(element)
        meta["point_count"] = recorded
        meta["progress"] = table
        return [
            AnimationDescriptor(
                element_id=element.id,
                kind=DescriptorKind.FREEHAND_PROGRESSION,
                start_ms=start_ms,
                duration_ms=duration_ms,
                path=path,
                points=points,
                metadata=meta,
            ),
            self._pointer(element, path, start_ms, duration_ms, points),
        ]

    def _describe_text(self, element: DrawingElement, start_ms: int, duration_ms: int) -> List[AnimationDescriptor]:
        text = element.text or ""
        characters = len(text)

        meta = self._base_metadata(element)
        meta.update({
            "text": text,
            "characters": characters,
            "char_slice_ms": round(duration_ms / characters, 3) if characters else 0.0,
            "font_size": element.font_size or DEFAULT_FONT_SIZE,
            "text_width": round(self.text_width(element), 2),
        })
        return [AnimationDescriptor(
            element_id=element.id,
            kind=DescriptorKind.TEXT_TYPING,
            start_ms=start_ms,
            duration_ms=duration_ms,
            path=self.stroke_path(element),
            metadata=meta,
        )]

    def _describe_generic(self, element: DrawingElement, start_ms: int, duration_ms: int) -> List[AnimationDescriptor]:
        meta = self._base_metadata(element)
        meta.update({"from_opacity": 0.0, "to_opacity": 1.0})
        return [AnimationDescriptor(
            element_id=element.id,
            kind=DescriptorKind.GENERIC_OPACITY,
            start_ms=start_ms,
            duration_ms=duration_ms,
            path=self.stroke_path(element),
            metadata=meta,
        )]


def sort_descriptors(descriptors: List[AnimationDescriptor], rank_by_element: Dict[str, int]) -> List[AnimationDescriptor]:
    """
    Order for the renderer: start time, then resolved element order.

    The sort is stable, so descriptors of one element that start together
    keep their emission order (stroke before pointer).
    """
    return sorted(descriptors, key=lambda d: (d.start_ms, rank_by_element.get(d.element_id, 0)))

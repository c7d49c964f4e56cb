"""
Unit tests for DescriptorFactory

Tests cover:
- Per-kind descriptor emission and timing
- Geometry defaults for malformed elements
- Renderer ordering of descriptors
"""

import pytest

from drawing_animator.core.descriptor_factory import DescriptorFactory, sort_descriptors
from drawing_animator.models.data_models import (
    AnimationDescriptor,
    DescriptorKind,
    DrawingElement,
    ElementKind,
    ElementSlot,
)

from conftest import make_element


@pytest.fixture
def factory():
    return DescriptorFactory(stroke_fill_ratio=0.75)


def kinds(descriptors):
    return [d.kind for d in descriptors]


class TestPolygons:
    """Rectangle and diamond: stroke then fill"""

    def test_filled_rectangle(self, factory):
        element = make_element("r", fill_color="#ffec99")
        stroke, fill = factory.describe(element, start_ms=1000, duration_ms=1000)

        assert stroke.kind == DescriptorKind.POLYGON_STROKE
        assert (stroke.start_ms, stroke.duration_ms) == (1000, 750)
        assert stroke.path == "M 10 20 L 110 20 L 110 70 L 10 70 Z"

        assert fill.kind == DescriptorKind.POLYGON_FILL
        assert (fill.start_ms, fill.duration_ms) == (1750, 250)
        assert fill.metadata["fill_color"] == "#ffec99"
        assert fill.metadata["fill_fraction"] == 0.25

    def test_fill_starts_exactly_at_stroke_end(self, factory):
        """Rounded stroke share leaves the exact remainder to the fill"""
        element = make_element("r", fill_color="red")
        stroke, fill = factory.describe(element, start_ms=1000, duration_ms=1667)
        assert stroke.duration_ms == 1250
        assert fill.start_ms == stroke.end_ms
        assert fill.end_ms == 1000 + 1667

    def test_unfilled_rectangle_has_no_fill(self, factory):
        descriptors = factory.describe(make_element("r"), start_ms=0, duration_ms=1000)
        assert kinds(descriptors) == [DescriptorKind.POLYGON_STROKE]

    def test_diamond_corners(self, factory):
        element = make_element("d", ElementKind.DIAMOND)
        (stroke,) = factory.describe(element, start_ms=0, duration_ms=400)
        assert stroke.path == "M 60 20 L 110 45 L 60 70 L 10 45 Z"

    def test_custom_ratio(self):
        factory = DescriptorFactory(stroke_fill_ratio=0.5)
        stroke, fill = factory.describe(make_element("r", fill_color="blue"), start_ms=0, duration_ms=1000)
        assert stroke.duration_ms == fill.duration_ms == 500


class TestPaths:
    """Ellipse, line and arrow: full-span stroke with pointer"""

    def test_ellipse_stroke_and_pointer(self, factory):
        element = make_element("e", ElementKind.ELLIPSE)
        stroke, pointer = factory.describe(element, start_ms=500, duration_ms=1000)

        assert stroke.kind == DescriptorKind.PATH_STROKE
        assert pointer.kind == DescriptorKind.POINTER_MOTION
        assert (stroke.start_ms, stroke.duration_ms) == (pointer.start_ms, pointer.duration_ms) == (500, 1000)
        assert stroke.path == pointer.path
        assert stroke.path.startswith("M 110 45 C")
        assert stroke.path.count("C ") == 4

    def test_filled_ellipse_fills_at_stroke_end(self, factory):
        element = make_element("e", ElementKind.ELLIPSE, fill_color="#b2f2bb")
        descriptors = factory.describe(element, start_ms=500, duration_ms=1000)
        fill = descriptors[-1]
        assert fill.kind == DescriptorKind.PATH_FILL
        assert (fill.start_ms, fill.duration_ms) == (1500, 0)

    def test_line_without_points_uses_diagonal(self, factory):
        element = make_element("l", ElementKind.LINE)
        stroke, pointer = factory.describe(element, start_ms=0, duration_ms=500)
        assert stroke.path == "M 10 20 L 110 70"
        assert stroke.points == [(10.0, 20.0), (110.0, 70.0)]
        assert pointer.points == stroke.points

    def test_bent_line_through_points(self, factory):
        element = make_element("l", ElementKind.LINE, points=((0.0, 0.0), (50.0, 0.0), (50.0, 30.0)))
        (stroke, _) = factory.describe(element, start_ms=0, duration_ms=500)
        assert stroke.path == "M 10 20 L 60 20 L 60 50"

    def test_arrow_includes_head(self, factory):
        element = make_element("a", ElementKind.ARROW, points=((0.0, 0.0), (100.0, 0.0)))
        stroke, pointer = factory.describe(element, start_ms=0, duration_ms=500)
        assert stroke.path == "M 10 20 L 110 20 M 91.21 26.84 L 110 20 L 91.21 13.16"
        assert pointer.path == stroke.path

    def test_degenerate_arrow_head(self, factory):
        """A zero-length arrow still gets a head, pointing right"""
        element = make_element("a", ElementKind.ARROW, points=((0.0, 0.0),))
        (stroke, _) = factory.describe(element, start_ms=0, duration_ms=500)
        assert stroke.path.startswith("M 10 20 L 10 20 M")


class TestFreehand:
    """Freehand progression"""

    def test_progress_table(self, factory):
        element = make_element(
            "f", ElementKind.FREEHAND,
            points=((0.0, 0.0), (1.0, 1.0), (2.0, 4.0), (3.0, 9.0)),
        )
        progression, pointer = factory.describe(element, start_ms=0, duration_ms=800)

        assert progression.kind == DescriptorKind.FREEHAND_PROGRESSION
        assert pointer.kind == DescriptorKind.POINTER_MOTION
        assert pointer.path == progression.path
        table = progression.metadata["progress"]
        assert [row["progress"] for row in table] == [0.25, 0.5, 0.75, 1.0]
        assert table[2]["point"] == [12.0, 24.0]
        assert progression.metadata["point_count"] == 4

    def test_no_points(self, factory):
        element = DrawingElement(id="f", kind=ElementKind.FREEHAND)
        progression, _ = factory.describe(element, start_ms=0, duration_ms=800)
        assert progression.path == "M 0 0 L 0 0"
        assert progression.metadata["progress"] == []


class TestText:
    """Typing descriptors"""

    def test_typing(self, factory):
        element = make_element("t", ElementKind.TEXT, text="Hello")
        (typing,) = factory.describe(element, start_ms=4334, duration_ms=500)

        assert typing.kind == DescriptorKind.TEXT_TYPING
        assert (typing.start_ms, typing.duration_ms) == (4334, 500)
        assert typing.metadata["characters"] == 5
        assert typing.metadata["char_slice_ms"] == 100.0
        assert typing.path == "M 10 20 h 60"

    def test_font_size_scales_width(self, factory):
        element = make_element("t", ElementKind.TEXT, text="ab", font_size=40.0)
        (typing,) = factory.describe(element, start_ms=0, duration_ms=500)
        assert typing.metadata["text_width"] == 48.0

    def test_empty_text_is_noop(self, factory):
        element = make_element("t", ElementKind.TEXT, text="")
        (typing,) = factory.describe(element, start_ms=0, duration_ms=500)
        assert typing.duration_ms == 500
        assert typing.metadata["characters"] == 0
        assert typing.metadata["char_slice_ms"] == 0.0
        assert typing.visible_characters(250) == 0


class TestGeneric:
    """Fallback for images and unknown kinds"""

    @pytest.mark.parametrize("kind", [ElementKind.IMAGE, ElementKind.OTHER])
    def test_opacity_fade(self, factory, kind):
        (fade,) = factory.describe(make_element("x", kind), start_ms=10, duration_ms=500)
        assert fade.kind == DescriptorKind.GENERIC_OPACITY
        assert (fade.start_ms, fade.duration_ms) == (10, 500)
        assert fade.metadata["from_opacity"] == 0.0


class TestDefaults:
    """Malformed geometry"""

    def test_negative_duration_rejected(self, factory):
        with pytest.raises(ValueError, match="negative duration"):
            factory.describe(make_element("r"), start_ms=0, duration_ms=-1)

    def test_missing_box(self, factory):
        (stroke,) = factory.describe(DrawingElement(id="r", kind=ElementKind.RECTANGLE), start_ms=0, duration_ms=100)
        assert stroke.path == "M 0 0 L 100 0 L 100 100 L 0 100 Z"

    def test_zero_duration_allowed(self, factory):
        descriptors = factory.describe(make_element("r", fill_color="red"), start_ms=300, duration_ms=0)
        assert all(d.duration_ms == 0 and d.start_ms == 300 for d in descriptors)

    def test_group_id_propagated(self, factory):
        descriptors = factory.describe(make_element("e", ElementKind.ELLIPSE), 0, 100, group_id="g1")
        assert {d.group_id for d in descriptors} == {"g1"}


class TestSegmentCount:
    """Drawing effort used by complexity-weighted budgets"""

    def test_counts(self, factory):
        assert factory.segment_count(make_element("r")) == 4
        assert factory.segment_count(make_element("t", ElementKind.TEXT, text="abc")) == 3
        assert factory.segment_count(make_element("i", ElementKind.IMAGE)) == 1
        points = tuple((float(i), 0.0) for i in range(10))
        assert factory.segment_count(make_element("f", ElementKind.FREEHAND, points=points)) == 9
        assert factory.segment_count(make_element("a", ElementKind.ARROW, points=points[:2])) == 3


class TestOrdering:
    """Renderer order of descriptors"""

    def test_sort_by_start_then_rank(self):
        descriptors = [
            AnimationDescriptor(element_id="late", kind=DescriptorKind.PATH_STROKE, start_ms=100, duration_ms=0),
            AnimationDescriptor(element_id="b", kind=DescriptorKind.PATH_STROKE, start_ms=0, duration_ms=0),
            AnimationDescriptor(element_id="a", kind=DescriptorKind.PATH_STROKE, start_ms=0, duration_ms=0),
        ]
        ordered = sort_descriptors(descriptors, {"a": 0, "b": 1, "late": 2})
        assert [d.element_id for d in ordered] == ["a", "b", "late"]

    def test_describe_slots_keeps_stroke_before_pointer(self, factory):
        slots = [
            ElementSlot(element=make_element("l", ElementKind.LINE), start_ms=0, duration_ms=100, rank=1),
            ElementSlot(element=make_element("r"), start_ms=100, duration_ms=100, rank=0),
        ]
        descriptors = factory.describe_slots(slots)
        assert kinds(descriptors) == [
            DescriptorKind.PATH_STROKE,
            DescriptorKind.POINTER_MOTION,
            DescriptorKind.POLYGON_STROKE,
        ]

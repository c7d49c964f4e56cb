"""
Pytest Configuration and Shared Fixtures for Drawing Animator Tests
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from drawing_animator.config.settings import AnimationConfig
from drawing_animator.models.data_models import DrawingElement, ElementKind, NarrationSegment


# ============================================
# Configuration Fixtures
# ============================================

@pytest.fixture
def config():
    """Default timing configuration."""
    return AnimationConfig()


# ============================================
# Element Fixtures
# ============================================

def make_element(element_id, kind=ElementKind.RECTANGLE, **kwargs):
    """Build a DrawingElement with a 100x50 box at (10, 20) unless overridden."""
    defaults = {"x": 10.0, "y": 20.0, "width": 100.0, "height": 50.0}
    defaults.update(kwargs)
    return DrawingElement(id=element_id, kind=kind, **defaults)


@pytest.fixture
def grouped_scene():
    """A and B share group g1, C is an ungrouped label; created in that order."""
    return [
        make_element("A", ElementKind.RECTANGLE, group_ids=("g1",), created_at=1),
        make_element("B", ElementKind.ELLIPSE, group_ids=("g1",), created_at=2),
        make_element("C", ElementKind.TEXT, text="Hello", created_at=3),
    ]


@pytest.fixture
def narrated_scene():
    """Group g1 of two rectangles and group g2 with a single arrow."""
    return [
        make_element("r1", ElementKind.RECTANGLE, group_ids=("g1",), created_at=1),
        make_element("r2", ElementKind.RECTANGLE, group_ids=("g1",), created_at=2),
        make_element("a1", ElementKind.ARROW, group_ids=("g2",), created_at=3,
                     points=((0.0, 0.0), (100.0, 0.0))),
    ]


@pytest.fixture
def narration():
    """4000ms over g1, then 2000ms over g2."""
    return [
        NarrationSegment(group_id="g1", text="Two boxes", audio_duration_ms=4000, position=0),
        NarrationSegment(group_id="g2", text="One arrow", audio_duration_ms=2000, position=1),
    ]


@pytest.fixture
def editor_document():
    """Drawing-editor style document as exported by the editor."""
    return {
        "type": "excalidraw",
        "elements": [
            {
                "id": "title",
                "type": "text",
                "x": 40, "y": 10, "width": 200, "height": 25,
                "text": "Important: data flow",
                "fontSize": 20,
                "created": 1700000000003,
                "versionNonce": 9,
                "groupIds": [],
            },
            {
                "id": "box-1",
                "type": "rectangle",
                "x": 0, "y": 50, "width": 120, "height": 60,
                "backgroundColor": "#a5d8ff",
                "strokeColor": "#1e1e1e",
                "created": 1700000000001,
                "groupIds": ["pipeline"],
            },
            {
                "id": "box-2",
                "type": "rectangle",
                "x": 200, "y": 50, "width": 120, "height": 60,
                "backgroundColor": "transparent",
                "created": 1700000000002,
                "groupIds": ["pipeline"],
            },
            {
                "id": "sketch",
                "type": "freedraw",
                "x": 5, "y": 150,
                "points": [[0, 0], [5, 3], [10, 8], [12, 20]],
                "created": 1700000000004,
            },
        ],
    }

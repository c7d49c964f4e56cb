"""
Drawing Animator Data Models

Shapes coming from the drawing editor, the animation groups built from them,
the descriptors handed to the renderer and the timeline that ties it together.
All times are integer milliseconds.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)


class ElementKind(str, Enum):
    """Shape kinds understood by the timing engine"""
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"
    ELLIPSE = "ellipse"
    LINE = "line"
    ARROW = "arrow"
    TEXT = "text"
    FREEHAND = "freehand"
    IMAGE = "image"
    OTHER = "other"


class DescriptorKind(str, Enum):
    """Reveal effects a renderer has to play"""
    PATH_STROKE = "path-stroke"
    PATH_FILL = "path-fill"
    POLYGON_STROKE = "polygon-stroke"
    POLYGON_FILL = "polygon-fill"
    TEXT_TYPING = "text-typing"
    FREEHAND_PROGRESSION = "freehand-progression"
    POINTER_MOTION = "pointer-motion"
    GENERIC_OPACITY = "generic-opacity"


NO_FILL = "none"

# Editor type names that differ from ElementKind values
_KIND_ALIASES = {
    "freedraw": ElementKind.FREEHAND,
}

# Fill values the editor uses for "no fill"
_EMPTY_FILLS = {None, "", "none", "transparent"}

# Legacy ordering encoded in the element id, e.g. "box-1 animateOrder:3"
_LEGACY_ID_PATTERN = r"{key}:(-?\d+)"


def _to_int(value: Any) -> Optional[int]:
    """Best-effort integer conversion, None when the value is unusable"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except ValueError:
            return None
    return None


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_duration(element_id: str, raw: Any) -> int:
    """
    Duration override from an editor record.

    Whole numbers are accepted as ints, floats or numeric strings; anything
    else (fractions, text, booleans) raises ValueError naming the element.
    """
    value = _to_float(raw.strip() if isinstance(raw, str) else raw)
    if value is None or not value.is_integer():
        raise ValueError(f"Element {element_id}: duration override must be a whole number of ms, got {raw!r}")
    return int(value)


def _legacy_id_number(element_id: str, key: str) -> Optional[int]:
    match = re.search(_LEGACY_ID_PATTERN.format(key=key), element_id)
    return int(match.group(1)) if match else None


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class DrawingElement:
    """
    One shape of the drawing.

    Geometry fields are optional: the descriptor stage substitutes defaults
    (origin, 100x100 box, two-point zero-length path) for anything missing.
    Points are relative to (x, y), as the editor stores them.
    """
    id: str
    kind: ElementKind = ElementKind.OTHER
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    points: Tuple[Tuple[float, float], ...] = ()
    text: Optional[str] = None
    font_size: Optional[float] = None
    group_ids: Tuple[str, ...] = ()
    order_hint: Optional[int] = None
    duration_override_ms: Optional[int] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    version_nonce: Optional[int] = None
    stroke_color: Optional[str] = None
    fill_color: str = NO_FILL

    def __post_init__(self):
        duration = self.duration_override_ms
        if duration is None:
            return
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ValueError(
                f"Element {self.id}: duration override must be an integer number of ms, got {duration!r}"
            )
        if duration < 0:
            raise ValueError(f"Element {self.id}: duration override must be >= 0, got {duration}ms")

    @property
    def primary_group_id(self) -> Optional[str]:
        return self.group_ids[0] if self.group_ids else None

    @property
    def has_fill(self) -> bool:
        return (self.fill_color or "").lower() not in _EMPTY_FILLS

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "DrawingElement":
        """
        Build an element from a drawing-editor record.

        Accepts the editor's camelCase keys (groupIds, backgroundColor,
        versionNonce...) as well as snake_case ones. Legacy order and
        duration encoded in the id ("animateOrder:N", "animateDuration:N")
        are read here once, so nothing downstream parses ids.
        """
        element_id = str(data.get("id") or f"element-{index}")

        raw_kind = str(_first_present(data, "type", "kind") or "").lower()
        kind = _KIND_ALIASES.get(raw_kind)
        if kind is None:
            try:
                kind = ElementKind(raw_kind)
            except ValueError:
                kind = ElementKind.OTHER

        points: List[Tuple[float, float]] = []
        for point in data.get("points") or []:
            try:
                px, py = float(point[0]), float(point[1])
            except (TypeError, ValueError, IndexError):
                continue
            points.append((px, py))

        order_hint = _to_int(_first_present(data, "orderHint", "order_hint"))
        if order_hint is None:
            order_hint = _legacy_id_number(element_id, "animateOrder")

        raw_duration = _first_present(data, "durationMs", "duration_override_ms")
        if raw_duration is not None:
            duration = _parse_duration(element_id, raw_duration)
        else:
            duration = _legacy_id_number(element_id, "animateDuration")

        raw_fill = _first_present(data, "backgroundColor", "fill_color", "fillColor")
        fill = NO_FILL if raw_fill is None or str(raw_fill).lower() in _EMPTY_FILLS else str(raw_fill)

        raw_groups = _first_present(data, "groupIds", "group_ids") or []
        group_ids = tuple(str(g) for g in raw_groups if g is not None and str(g))

        text = data.get("text")

        return cls(
            id=element_id,
            kind=kind,
            x=_to_float(data.get("x")),
            y=_to_float(data.get("y")),
            width=_to_float(data.get("width")),
            height=_to_float(data.get("height")),
            points=tuple(points),
            text=str(text) if text is not None else None,
            font_size=_to_float(_first_present(data, "fontSize", "font_size")),
            group_ids=group_ids,
            order_hint=order_hint,
            duration_override_ms=duration,
            created_at=_to_int(_first_present(data, "created", "createdAt", "created_at")),
            updated_at=_to_int(_first_present(data, "updated", "updatedAt", "updated_at")),
            version_nonce=_to_int(_first_present(data, "versionNonce", "version_nonce")),
            stroke_color=_first_present(data, "strokeColor", "stroke_color"),
            fill_color=fill,
        )


def load_elements(raw: Union[Dict[str, Any], List[Any]]) -> List[DrawingElement]:
    """
    Normalize a drawing document (or a bare element list) into DrawingElements.

    Records that are already DrawingElement instances are kept as-is;
    anything that is neither a record nor an element is skipped.
    """
    if isinstance(raw, dict):
        records = raw.get("elements") or []
    else:
        records = raw or []

    elements = []
    for index, record in enumerate(records):
        if isinstance(record, DrawingElement):
            elements.append(record)
        elif isinstance(record, dict):
            elements.append(DrawingElement.from_dict(record, index=index))
        else:
            logger.warning(f"Skipping non-record entry at position {index}: {type(record).__name__}")
    return elements


@dataclass
class AnimationGroup:
    """Elements animated together as one coordinated unit"""
    group_id: str
    member_ids: List[str] = field(default_factory=list)
    kind: Optional[ElementKind] = None  # Set for implicit runs only
    implicit: bool = False

    @property
    def size(self) -> int:
        return len(self.member_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "member_ids": list(self.member_ids),
            "kind": self.kind.value if self.kind else None,
            "implicit": self.implicit,
        }


@dataclass
class AnimationDescriptor:
    """A single reveal effect on the timeline"""
    element_id: str
    kind: DescriptorKind
    start_ms: int
    duration_ms: int
    path: Optional[str] = None
    points: Optional[List[Tuple[float, float]]] = None
    group_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def end_ms(self) -> int:
        return self.start_ms + self.duration_ms

    def reveal_fraction(self, at_ms: float) -> float:
        """Fraction of the effect shown at a given time (0.0 - 1.0)"""
        if at_ms < self.start_ms:
            return 0.0
        if self.duration_ms <= 0 or at_ms >= self.end_ms:
            return 1.0
        return (at_ms - self.start_ms) / self.duration_ms

    def visible_characters(self, at_ms: float) -> int:
        """Characters revealed so far by a text-typing descriptor"""
        characters = int(self.metadata.get("characters", 0))
        return int(characters * self.reveal_fraction(at_ms))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element_id": self.element_id,
            "kind": self.kind.value,
            "start_ms": self.start_ms,
            "duration_ms": self.duration_ms,
            "end_ms": self.end_ms,
            "path": self.path,
            "points": [list(p) for p in self.points] if self.points is not None else None,
            "group_id": self.group_id,
            "metadata": self.metadata,
        }


class NarrationSegment(BaseModel):
    """One narrated passage bound to an animation group"""

    model_config = ConfigDict(strict=True, frozen=True)

    group_id: str = Field(..., description="Group (explicit or implicit run) this passage covers")
    text: str = Field(default="")
    audio_duration_ms: int = Field(..., ge=0, description="Measured audio duration")
    position: int = Field(default=0, ge=0, description="Order in the narration timeline")


@dataclass
class ElementSlot:
    """Where one element sits on the timeline"""
    element: DrawingElement
    start_ms: int
    duration_ms: int
    group_id: Optional[str] = None
    rank: int = 0  # Position in resolved order

    @property
    def element_id(self) -> str:
        return self.element.id

    @property
    def end_ms(self) -> int:
        return self.start_ms + self.duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element_id": self.element.id,
            "kind": self.element.kind.value,
            "start_ms": self.start_ms,
            "duration_ms": self.duration_ms,
            "group_id": self.group_id,
            "rank": self.rank,
        }


@dataclass
class SegmentPlacement:
    """A narration segment positioned on the synchronized timeline"""
    group_id: str
    audio_start_ms: int
    audio_end_ms: int
    start_frame: int
    end_frame: int
    element_ids: List[str] = field(default_factory=list)
    text: str = ""

    @property
    def duration_ms(self) -> int:
        return self.audio_end_ms - self.audio_start_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "audio_start_ms": self.audio_start_ms,
            "audio_end_ms": self.audio_end_ms,
            "duration_ms": self.duration_ms,
            "start_frame": self.start_frame,
            "end_frame": self.end_frame,
            "element_ids": list(self.element_ids),
            "text": self.text,
        }


@dataclass
class Timeline:
    """Result of one allocation pass"""
    cursor_ms: int
    total_duration_ms: int
    slots: List[ElementSlot] = field(default_factory=list)
    groups: Dict[str, AnimationGroup] = field(default_factory=dict)
    sync_method: str = "base"  # "base" or "narration"
    speed_factor: float = 1.0
    segment_placements: List[SegmentPlacement] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def slot_for(self, element_id: str) -> Optional[ElementSlot]:
        for slot in self.slots:
            if slot.element.id == element_id:
                return slot
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cursor_ms": self.cursor_ms,
            "total_duration_ms": self.total_duration_ms,
            "slots": [s.to_dict() for s in self.slots],
            "groups": {gid: g.to_dict() for gid, g in self.groups.items()},
            "sync_method": self.sync_method,
            "speed_factor": round(self.speed_factor, 4),
            "segment_placements": [p.to_dict() for p in self.segment_placements],
            "metadata": self.metadata,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


@dataclass
class AnimationPlan:
    """What the renderer receives: total duration and sorted descriptors"""
    timeline: Timeline
    descriptors: List[AnimationDescriptor]

    @property
    def total_duration_ms(self) -> int:
        return self.timeline.total_duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_duration_ms": self.total_duration_ms,
            "descriptors": [d.to_dict() for d in self.descriptors],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

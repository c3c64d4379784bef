"""Rectangular circuit layout: capacitor on the left, solenoid on the top wire."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from lcresonance.model.geometry_primitives import Point, Vector, Line, Helix
from lcresonance.model.path import CompositePath, SegmentKind, SegmentSpec, build_path


@dataclass(frozen=True)
class CircuitLayout:
    """
    Dimensions of the rectangular loop.

    The capacitor plates stand in the YZ plane left of the rectangle, the
    solenoid is centred on the top wire with its axis along +X.
    """
    solenoid_radius: float = 0.5
    solenoid_length: float = 3.0
    num_turns: int = 8
    wire_radius: float = 0.04
    cap_plate_size: float = 2.0
    cap_separation: float = 0.2

    @property
    def rect_width(self) -> float:
        return self.solenoid_length + 2.0

    @property
    def rect_height(self) -> float:
        return self.cap_plate_size

    @property
    def cap_center_x(self) -> float:
        return -self.rect_width / 2 - 0.5

    @property
    def left_plate_x(self) -> float:
        return self.cap_center_x - self.cap_separation / 2

    @property
    def right_plate_x(self) -> float:
        return self.cap_center_x + self.cap_separation / 2

    @property
    def solenoid_center(self) -> Point:
        return Point(0.0, self.rect_height / 2, 0.0)

    def make_solenoid(self) -> Helix:
        return Helix(
            center=self.solenoid_center,
            axis=Vector(1.0, 0.0, 0.0),
            radius=self.solenoid_radius,
            span=self.solenoid_length,
            turns=self.num_turns,
            reference=Vector(0.0, 1.0, 0.0),
            label="solenoid"
        )

    def get_primitives(self) -> List[SegmentSpec]:
        """
        Generate the loop segments in the direction of conventional current.

        Route: left plate top -> right plate top -> top-left corner -> solenoid
        -> top-right corner -> bottom-right corner -> bottom-left corner
        -> left plate bottom -> up the left plate back to the start.
        """
        half_h = self.rect_height / 2
        half_w = self.rect_width / 2

        cap_l_top = Point(self.left_plate_x, half_h)
        cap_l_bottom = Point(self.left_plate_x, -half_h)
        cap_r_top = Point(self.right_plate_x, half_h)

        solenoid = self.make_solenoid()

        tl_near = Point(cap_r_top.x + 0.1, half_h)
        bl_near = Point(cap_l_bottom.x, -half_h)
        tr_far = Point(half_w, half_h)
        br_far = Point(half_w, -half_h)

        return [
            SegmentSpec(SegmentKind.CAPACITOR_GAP, Line(cap_l_top, cap_r_top, label="gap")),
            SegmentSpec(SegmentKind.WIRE, Line(cap_r_top, tl_near)),
            SegmentSpec(SegmentKind.WIRE, Line(tl_near, solenoid.start)),
            SegmentSpec(SegmentKind.INDUCTOR, solenoid, droppable=False),
            SegmentSpec(SegmentKind.WIRE, Line(solenoid.end, tr_far)),
            SegmentSpec(SegmentKind.WIRE, Line(tr_far, br_far)),
            SegmentSpec(SegmentKind.WIRE, Line(br_far, bl_near)),
            # Zero length: the bottom wire already ends under the left plate
            SegmentSpec(SegmentKind.WIRE, Line(bl_near, cap_l_bottom, label="plate join")),
            SegmentSpec(SegmentKind.CAPACITOR_PLATE, Line(cap_l_bottom, cap_l_top, label="plate")),
        ]

    def build_path(self) -> CompositePath:
        return build_path(self.get_primitives())

"""
Handle constraint engine.

Keeps the two handles of an anchor point in the relationship demanded by its
mirror mode, and synthesizes default handles for newly created smooth points.
"""

import math
from typing import NamedTuple, Optional

from . import geometry
from .cad_types import Point, PointLike, to_point
from .constants import DEFAULT_HANDLE_LENGTH, HANDLE_HIT_THRESHOLD
from .path import AnchorPoint, BezierHandle, HandleMirrorMode


class HandleHit(NamedTuple):
    is_out: bool
    distance: float


class HandleManager:
    @staticmethod
    def update_handle(
        anchor_point: AnchorPoint, is_out_handle: bool, new_handle_position: PointLike
    ) -> None:
        """
        Move one handle to an absolute position and re-derive its sibling.

        Args:
            anchor_point: The anchor owning the handle
            is_out_handle: True for the outgoing handle, False for the incoming one
            new_handle_position: Absolute position of the handle
        """
        relative = geometry.subtract(to_point(new_handle_position), anchor_point.position)
        handle = anchor_point.handle(is_out_handle)
        if handle is None:
            handle = BezierHandle(relative, True)
            if is_out_handle:
                anchor_point.handle_out = handle
            else:
                anchor_point.handle_in = handle
        else:
            handle.position = relative
            handle.visible = True

        HandleManager._mirror_handle(anchor_point, mirror_to_out=not is_out_handle)

    @staticmethod
    def _set_handle(anchor_point: AnchorPoint, is_out: bool, position: Point) -> None:
        target = anchor_point.handle(is_out)
        if target is None:
            target = BezierHandle(position, True)
            if is_out:
                anchor_point.handle_out = target
            else:
                anchor_point.handle_in = target
        else:
            target.position = position
            target.visible = True

    @staticmethod
    def _mirror_handle(anchor_point: AnchorPoint, mirror_to_out: bool) -> None:
        source = anchor_point.handle(not mirror_to_out)
        target = anchor_point.handle(mirror_to_out)

        if source is None or not source.visible:
            return

        mode = anchor_point.mirror_mode
        if mode == HandleMirrorMode.MIRRORED:
            HandleManager._set_handle(
                anchor_point, mirror_to_out, geometry.negate(source.position)
            )
        elif mode == HandleMirrorMode.ANGLE_LOCKED:
            if target is None or not target.visible:
                HandleManager._set_handle(
                    anchor_point, mirror_to_out, geometry.negate(source.position)
                )
                return
            source_length = geometry.length(source.position)
            target_length = geometry.length(target.position)
            # zero-length source has no direction to mirror
            if source_length > 0:
                target.position = geometry.scale(
                    source.position, -target_length / source_length
                )
        # INDEPENDENT: sibling untouched

    @staticmethod
    def set_mirror_mode(anchor_point: AnchorPoint, mode: HandleMirrorMode) -> None:
        """Change the mirror mode, re-applying the constraint from the out-handle first."""
        anchor_point.mirror_mode = HandleMirrorMode(mode)
        if anchor_point.mirror_mode == HandleMirrorMode.INDEPENDENT:
            return
        if anchor_point.has_handle_out:
            HandleManager._mirror_handle(anchor_point, mirror_to_out=False)
        elif anchor_point.has_handle_in:
            HandleManager._mirror_handle(anchor_point, mirror_to_out=True)

    @staticmethod
    def create_default_handles(
        anchor_point: AnchorPoint,
        prev_point: Optional[PointLike],
        next_point: Optional[PointLike],
        handle_length: float = DEFAULT_HANDLE_LENGTH,
    ) -> None:
        """
        Give an anchor smooth handles tangent to its neighbours.

        Each handle is ``handle_length / 3`` long. With both neighbours the
        tangent is the direction prev -> next; with only one neighbour only
        the handle facing it is created. No neighbours: nothing happens.
        """
        if prev_point is None and next_point is None:
            return

        offset = handle_length / 3
        position = anchor_point.position
        if prev_point is not None and next_point is not None:
            tangent = geometry.angle(prev_point, next_point)
            anchor_point.handle_in = BezierHandle(geometry.polar(tangent, -offset))
            anchor_point.handle_out = BezierHandle(geometry.polar(tangent, offset))
        elif prev_point is not None:
            tangent = geometry.angle(prev_point, position)
            anchor_point.handle_in = BezierHandle(geometry.polar(tangent, -offset))
        else:
            tangent = geometry.angle(position, next_point)
            anchor_point.handle_out = BezierHandle(geometry.polar(tangent, offset))

        anchor_point.mirror_mode = HandleMirrorMode.MIRRORED

    @staticmethod
    def infer_mirror_mode(
        handle_in: Optional[Point], handle_out: Optional[Point], tolerance: float = 1e-6
    ) -> HandleMirrorMode:
        """
        Mirror mode that describes an existing pair of relative handles.

        Opposite and equally long -> MIRRORED; opposite with different
        lengths -> ANGLE_LOCKED; anything else -> INDEPENDENT. With fewer than
        two handles the default MIRRORED mode is returned.
        """
        if handle_in is None or handle_out is None:
            return HandleMirrorMode.MIRRORED
        len_in, len_out = geometry.length(handle_in), geometry.length(handle_out)
        if len_in == 0 or len_out == 0:
            return HandleMirrorMode.INDEPENDENT
        # cross product ~ 0 and dot product < 0 => pointing in opposite directions
        cross = handle_in.x * handle_out.y - handle_in.y * handle_out.x
        dot = handle_in.x * handle_out.x + handle_in.y * handle_out.y
        if abs(cross) > tolerance * len_in * len_out or dot >= 0:
            return HandleMirrorMode.INDEPENDENT
        if math.isclose(len_in, len_out, rel_tol=tolerance, abs_tol=tolerance):
            return HandleMirrorMode.MIRRORED
        return HandleMirrorMode.ANGLE_LOCKED

    @staticmethod
    def remove_handles(anchor_point: AnchorPoint) -> None:
        """Turn the anchor into a corner point."""
        anchor_point.handle_in = None
        anchor_point.handle_out = None

    @staticmethod
    def get_absolute_handle_position(
        anchor_point: AnchorPoint, is_out_handle: bool
    ) -> Optional[Point]:
        handle = anchor_point.handle(is_out_handle)
        if handle is None or not handle.visible:
            return None
        return geometry.add(anchor_point.position, handle.position)

    @staticmethod
    def is_near_handle(
        anchor_point: AnchorPoint,
        position: PointLike,
        threshold: float = HANDLE_HIT_THRESHOLD,
    ) -> Optional[HandleHit]:
        """Hit test both handles; the out-handle wins when both are in range."""
        position = to_point(position)
        for is_out in (True, False):
            handle_pos = HandleManager.get_absolute_handle_position(anchor_point, is_out)
            if handle_pos is None:
                continue
            dist = geometry.distance(position, handle_pos)
            if dist <= threshold:
                return HandleHit(is_out=is_out, distance=dist)
        return None

    @staticmethod
    def handle_angle(anchor_point: AnchorPoint, is_out_handle: bool) -> Optional[float]:
        handle = anchor_point.handle(is_out_handle)
        if handle is None or not handle.visible:
            return None
        if geometry.length(handle.position) == 0:
            return None
        return math.atan2(handle.position.y, handle.position.x)

# -*- coding: utf-8 -*-
"""
src/pricesnap/core/coordinate_mapper.py

Maps a box from frame pixel space into the preview widget's space.

The source size is fixed for a capture but the widget can be resized at any
time, so callers map on every paint instead of storing the result.
"""

from .types import Dims, DisplayBox, PixelBox


class CoordinateMapper:
    """Scales each axis independently by target/source."""

    @staticmethod
    def map(box: PixelBox, source_dims: Dims, target_dims: Dims) -> DisplayBox:
        """
        Rescales `box` from `source_dims` to `target_dims`.

        Raises:
            ValueError: If the source dimensions are not positive.
        """
        if source_dims.width <= 0 or source_dims.height <= 0:
            raise ValueError(f"Source dimensions must be positive, got {source_dims}")
        scale_x = target_dims.width / source_dims.width
        scale_y = target_dims.height / source_dims.height
        return DisplayBox(
            x=box.x0 * scale_x,
            y=box.y0 * scale_y,
            width=(box.x1 - box.x0) * scale_x,
            height=(box.y1 - box.y0) * scale_y,
        )


def map_box(box: PixelBox, source_dims: Dims, target_dims: Dims) -> DisplayBox:
    return CoordinateMapper.map(box, source_dims, target_dims)

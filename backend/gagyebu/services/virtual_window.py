import math
from dataclasses import dataclass

DEFAULT_OVERSCAN = 5


@dataclass(frozen=True)
class VirtualWindow:
    start_index: int
    end_index: int
    offset_y: int
    total_height: int

    @property
    def is_empty(self) -> bool:
        return self.end_index < self.start_index

    def slice_bounds(self) -> tuple[int, int]:
        return self.start_index, self.end_index + 1


def compute_virtual_window(
    total_count: int,
    item_height: int,
    viewport_height: int,
    scroll_top: int = 0,
    overscan: int = DEFAULT_OVERSCAN,
) -> VirtualWindow:
    """Fixed row height windowing.

    ``end_index`` is inclusive. An empty list yields ``end_index == -1``.
    """
    if item_height <= 0:
        raise ValueError("item_height must be positive")
    if viewport_height < 0 or scroll_top < 0 or overscan < 0 or total_count < 0:
        raise ValueError("viewport_height, scroll_top, overscan and total_count must be >= 0")

    total_height = total_count * item_height
    if total_count == 0:
        return VirtualWindow(start_index=0, end_index=-1, offset_y=0, total_height=0)

    visible_start = min(scroll_top // item_height, total_count - 1)
    start_index = max(0, visible_start - overscan)
    end_index = min(
        total_count - 1,
        visible_start + math.ceil(viewport_height / item_height) + overscan,
    )
    return VirtualWindow(
        start_index=start_index,
        end_index=end_index,
        offset_y=start_index * item_height,
        total_height=total_height,
    )

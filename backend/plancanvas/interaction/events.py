from dataclasses import dataclass
from typing import Optional, Tuple

LEFT_BUTTON = 0
MIDDLE_BUTTON = 1
RIGHT_BUTTON = 2


@dataclass(frozen=True)
class PointerEvent:
    x: float                            # screen space
    y: float
    button: int = LEFT_BUTTON
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    target: Optional[str] = None        # node under the pointer, None to hit-test
    on_resize_handle: Optional[bool] = None

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Viewport:
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def screen_to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        return ((x - self.offset_x) / self.scale, (y - self.offset_y) / self.scale)

    def canvas_to_screen(self, x: float, y: float) -> Tuple[float, float]:
        return (x * self.scale + self.offset_x, y * self.scale + self.offset_y)

    def to_dict(self) -> dict:
        return {"scale": self.scale, "offset": {"x": self.offset_x, "y": self.offset_y}}

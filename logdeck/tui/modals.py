from __future__ import annotations

from dataclasses import dataclass

from .views import box_lines


@dataclass(frozen=True)
class ConfirmModal:
    title: str
    detail: str
    cancel_label: str = "Cancel"
    confirm_label: str = "Confirm"

    def render(self, width: int = 60) -> str:
        body = [self.detail, "", f"[ {self.cancel_label} ]  [ {self.confirm_label} ]"]
        return "\n".join(box_lines(body, width, self.title, focused=True))

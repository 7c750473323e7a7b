"""Activity bar showing agent status and keyboard shortcut hints."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.timer import Timer
from textual.widgets import Label, Static

_ANIMATION_FRAMES: tuple[str, ...] = (
    "·······",
    "●······",
    "·●·····",
    "··●····",
    "···●···",
    "····●··",
    "·····●·",
    "······●",
)


class ActivityBar(Static):
    """Render "Ready"/"Processing..." with an animation while the agent works."""

    DEFAULT_CSS = """
    ActivityBar {
        layout: horizontal;
        height: 1;
        padding: 0 1;
    }
    ActivityBar #activity_left {
        width: 1fr;
    }
    ActivityBar #activity_right {
        width: auto;
        text-align: right;
    }
    """

    def __init__(self, shortcut_hints: str = "", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._shortcut_hints = shortcut_hints
        self._animation_timer: Timer | None = None
        self._frame_index = 0
        self.processing = False

    def compose(self) -> ComposeResult:
        yield Label("Chat Agent · Ready", id="activity_left")
        yield Label(self._shortcut_hints, id="activity_right")

    @property
    def status_text(self) -> str:
        if not self.processing:
            return "Chat Agent · Ready"
        frame = _ANIMATION_FRAMES[self._frame_index % len(_ANIMATION_FRAMES)]
        return f"{frame}  Chat Agent · Processing..."

    def set_processing(self, processing: bool) -> None:
        """Start or stop the processing animation."""
        self.processing = processing
        self._frame_index = 0
        if processing and self._animation_timer is None and self.is_mounted:
            self._animation_timer = self.set_interval(0.12, self._advance_frame)
        elif not processing and self._animation_timer is not None:
            self._animation_timer.stop()
            self._animation_timer = None
        self._update_left()

    def _advance_frame(self) -> None:
        self._frame_index = (self._frame_index + 1) % len(_ANIMATION_FRAMES)
        self._update_left()

    def _update_left(self) -> None:
        if not self.is_mounted:
            return
        self.query_one("#activity_left", Label).update(self.status_text)

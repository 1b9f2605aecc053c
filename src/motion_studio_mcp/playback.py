"""Playback driver — master clock and transport controls.

The clock only counts frames; each displayed frame is recomputed from the
composition, so seeking backwards or looping needs no cached state.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator

from .compositor import Composition
from .models.frame import CompositeFrame, PlaceholderFrame

logger = logging.getLogger(__name__)


class PlaybackClock:
    """Frame counter with play/pause/seek/loop."""

    def __init__(
        self,
        duration_in_frames: int,
        fps: int = 30,
        *,
        loop: bool = True,
        autoplay: bool = False,
    ) -> None:
        if duration_in_frames < 1:
            raise ValueError("duration_in_frames must be >= 1")
        if fps < 1:
            raise ValueError("fps must be >= 1")
        self.duration_in_frames = duration_in_frames
        self.fps = fps
        self.loop = loop
        self.playing = autoplay
        self._frame = 0
        self._carry = 0.0

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def at_end(self) -> bool:
        return self._frame == self.duration_in_frames - 1

    def play(self) -> None:
        """Start playing; a finished non-looping clock restarts from frame 0."""
        if self.at_end and not self.loop:
            self.seek(0)
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def toggle(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def seek(self, frame: int) -> int:
        """Jump to *frame*, clamped into the composition."""
        self._frame = min(max(int(frame), 0), self.duration_in_frames - 1)
        self._carry = 0.0
        return self._frame

    def tick(self, frames: int = 1) -> int:
        """Advance by whole frames while playing; returns the current frame."""
        if self.playing and frames > 0:
            self._step(frames)
        return self._frame

    def advance(self, seconds: float) -> int:
        """Advance by wall-clock time, keeping sub-frame remainders."""
        if not self.playing or seconds <= 0:
            return self._frame
        total = self._carry + seconds * self.fps
        whole = math.floor(total)
        self._carry = total - whole
        if whole:
            self._step(whole)
        return self._frame

    def _step(self, frames: int) -> None:
        target = self._frame + frames
        if target < self.duration_in_frames:
            self._frame = target
        elif self.loop:
            self._frame = target % self.duration_in_frames
            logger.debug("Playback looped to frame %d", self._frame)
        else:
            self._frame = self.duration_in_frames - 1
            self._carry = 0.0
            self.playing = False


class Player:
    """Pulls one composed frame from a composition per clock step.

    Without an explicit *clock* the player loops and starts playing.
    """

    def __init__(
        self,
        composition: Composition,
        clock: PlaybackClock | None = None,
        *,
        loop: bool = True,
        autoplay: bool = True,
    ) -> None:
        self.composition = composition
        self.clock = clock or PlaybackClock(
            composition.duration_in_frames, composition.fps, loop=loop, autoplay=autoplay,
        )

    def current(self) -> CompositeFrame | PlaceholderFrame:
        return self.composition.frame(self.clock.frame)

    def step(self, seconds: float | None = None) -> CompositeFrame | PlaceholderFrame:
        """Advance one frame (or *seconds* of wall-clock time) and render."""
        if seconds is None:
            self.clock.tick()
        else:
            self.clock.advance(seconds)
        return self.current()

    def frames(self, count: int | None = None) -> Iterator[CompositeFrame | PlaceholderFrame]:
        """Render from the current frame while playing, at most *count* frames."""
        rendered = 0
        while count is None or rendered < count:
            yield self.current()
            rendered += 1
            if not self.clock.playing:
                return
            previous = self.clock.frame
            self.clock.tick()
            if not self.clock.playing and self.clock.frame == previous:
                return

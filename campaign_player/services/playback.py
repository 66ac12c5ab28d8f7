from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from campaign_player.schemas.campaigns import CampaignSettings
from campaign_player.schemas.public import MediaInstruction

logger = logging.getLogger(__name__)


class RemoteMediaElement:
    """
    Server-side stand-in for the browser's <video> element.

    Commands (play, pause, mute, seek, fullscreen) are queued as instructions for the browser to
    execute. Playback state (paused, fullscreen) changes only when the browser reports the matching
    media event, so a play() rejected by an autoplay policy never shows up as playing here.
    """

    def __init__(self, *, fullscreen_supported: bool = True) -> None:
        self.paused = True
        self.duration = 0.0
        self.autoplay = False
        self.loop = False
        self.controls = False
        self.fullscreen_supported = fullscreen_supported
        self.is_fullscreen = False
        self._muted = False
        self._current_time = 0.0
        self._instructions: list[MediaInstruction] = []

    @property
    def muted(self) -> bool:
        return self._muted

    @muted.setter
    def muted(self, value: bool) -> None:
        self._muted = bool(value)
        self._instructions.append(MediaInstruction(action="set_muted", value=self._muted))

    @property
    def current_time(self) -> float:
        return self._current_time

    @current_time.setter
    def current_time(self, value: float) -> None:
        self._current_time = max(0.0, float(value))
        self._instructions.append(MediaInstruction(action="set_current_time", value=self._current_time))

    def play(self) -> None:
        self._instructions.append(MediaInstruction(action="play"))

    def pause(self) -> None:
        self._instructions.append(MediaInstruction(action="pause"))

    def request_fullscreen(self) -> None:
        self._instructions.append(MediaInstruction(action="request_fullscreen"))

    def exit_fullscreen(self) -> None:
        self._instructions.append(MediaInstruction(action="exit_fullscreen"))

    def report(
        self,
        *,
        paused: bool | None = None,
        current_time: float | None = None,
        duration: float | None = None,
        muted: bool | None = None,
        fullscreen: bool | None = None,
    ) -> None:
        """Mirror state reported by the browser without queueing instructions."""
        if paused is not None:
            self.paused = paused
        if current_time is not None:
            self._current_time = current_time
        if duration is not None:
            self.duration = duration
        if muted is not None:
            self._muted = muted
        if fullscreen is not None:
            self.is_fullscreen = fullscreen

    def drain_instructions(self) -> list[MediaInstruction]:
        instructions, self._instructions = self._instructions, []
        return instructions


class PlaybackController:
    """Play/pause/mute/fullscreen/replay over a single media element."""

    def __init__(self, element) -> None:
        self.element = element
        self.is_playing = False
        self.is_muted = bool(element.muted)
        self.is_fullscreen = False
        self.video_ended = False
        self.current_time = 0.0
        self.duration = 0.0
        self._ended_listeners: list[Callable[[], None]] = []
        self._play_listeners: list[Callable[[], None]] = []

    def on_play(self, listener: Callable[[], None]) -> None:
        self._play_listeners.append(listener)

    def on_ended(self, listener: Callable[[], None]) -> None:
        self._ended_listeners.append(listener)

    def apply_settings(self, settings: CampaignSettings) -> None:
        if settings.autoplay:
            self.element.autoplay = True
        if settings.muted:
            self.element.muted = True
            self.is_muted = True
        if settings.loop:
            self.element.loop = True
        self.element.controls = settings.controls

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(100.0, (self.current_time / self.duration) * 100)

    # Commands

    def toggle_play(self) -> None:
        if self.is_playing:
            self.element.pause()
        else:
            self.element.play()

    def toggle_mute(self) -> bool:
        self.element.muted = not self.element.muted
        self.is_muted = bool(self.element.muted)
        return self.is_muted

    def toggle_fullscreen(self) -> None:
        request = getattr(self.element, "request_fullscreen", None)
        exit_ = getattr(self.element, "exit_fullscreen", None)
        if not getattr(self.element, "fullscreen_supported", False) or request is None or exit_ is None:
            logger.debug("Fullscreen API unavailable; ignoring toggle")
            return
        if self.is_fullscreen:
            exit_()
        else:
            request()

    def replay(self) -> None:
        self.element.current_time = 0
        self.current_time = 0.0
        self.video_ended = False
        self.element.play()

    def seek(self, fraction: float) -> float:
        fraction = min(1.0, max(0.0, fraction))
        target = fraction * self.duration
        self.element.current_time = target
        self.current_time = target
        return target

    # Media events

    def handle_loaded_metadata(self, duration: float) -> None:
        self.duration = duration

    def handle_time_update(self, current_time: float) -> None:
        self.current_time = current_time

    def handle_play(self) -> None:
        self.is_playing = True
        self.video_ended = False
        for listener in list(self._play_listeners):
            listener()

    def handle_pause(self) -> None:
        self.is_playing = False

    def handle_ended(self) -> bool:
        """Returns True only for the first ended event of a playback-to-completion."""
        self.is_playing = False
        if self.video_ended:
            return False
        self.video_ended = True
        for listener in list(self._ended_listeners):
            listener()
        return True

    def handle_volume_change(self, muted: bool) -> None:
        self.is_muted = muted

    def handle_fullscreen_change(self, fullscreen: bool) -> None:
        self.is_fullscreen = fullscreen


class CtaRevealTimer:
    """One-shot timer on the running loop; cancel() is safe at any point."""

    def __init__(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self._delay = delay_seconds
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self.fired = False

    @property
    def active(self) -> bool:
        return self._handle is not None and not self.fired

    def start(self) -> None:
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None and not self.fired:
            self._handle.cancel()
        self._handle = None

    def _fire(self) -> None:
        self.fired = True
        self._callback()

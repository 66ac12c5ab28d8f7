from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from uuid import uuid4

from campaign_player.enums import CtaRevealPolicyEnum, PageStatusEnum, VariantEnum
from campaign_player.schemas.analytics import AdditionalValue
from campaign_player.schemas.public import (
    CtaButton,
    CtaOpenResponse,
    MediaEventRequest,
    MediaSource,
    PlayerCommandRequest,
    PlayerCommandResponse,
    PlayerState,
    WatchPage,
)
from campaign_player.services.navigation import NavigationCancelled, NavigationToken
from campaign_player.services.playback import CtaRevealTimer, PlaybackController, RemoteMediaElement
from campaign_player.services.resolver import (
    PageLoadFailed,
    PageNotFound,
    ResolvedVideo,
    media_url,
    poster_url,
)
from campaign_player.services.telemetry import EventTracker, TelemetryDispatcher

logger = logging.getLogger(__name__)

_CTA_CLASSES = {
    VariantEnum.A: "bg-blue-600 hover:bg-blue-700",
    VariantEnum.B: "bg-green-600 hover:bg-green-700",
}
DEFAULT_CTA_TEXT = "Start Choosing"


class MountStateError(Exception):
    """The mount is not in a state that accepts the requested interaction."""


def cta_css_class(variant: VariantEnum | None) -> str:
    return _CTA_CLASSES[variant or VariantEnum.A]


class PlayerMount:
    """
    One public page mount: the resolved video, its playback controller and its event tracker.

    Lifecycle: loading -> ready | not_found | failed, and any state -> unmounted.
    """

    def __init__(
        self,
        *,
        mount_id: str,
        dispatcher: TelemetryDispatcher,
        reveal_policy: CtaRevealPolicyEnum = CtaRevealPolicyEnum.on_end,
        reveal_delay_seconds: float = 5.0,
        tracking_context: dict[str, AdditionalValue] | None = None,
        default_cta_text: str | None = None,
    ) -> None:
        self.mount_id = mount_id
        self.reveal_policy = reveal_policy
        self.status = PageStatusEnum.loading
        self.message: str | None = None
        self.resolved: ResolvedVideo | None = None
        self.token = NavigationToken()
        self.element = RemoteMediaElement()
        self.controller = PlaybackController(self.element)
        self.tracker: EventTracker | None = None
        self.has_started = False
        self._dispatcher = dispatcher
        self._reveal_delay = reveal_delay_seconds
        self._tracking_context = dict(tracking_context or {})
        self._default_cta_text = default_cta_text
        self._reveal_timer: CtaRevealTimer | None = None
        self._cta_revealed_by_timer = False
        self.controller.on_play(self._handle_first_play)
        self.controller.on_ended(self._handle_completion)

    @property
    def show_cta(self) -> bool:
        if self.status != PageStatusEnum.ready:
            return False
        if self.reveal_policy == CtaRevealPolicyEnum.after_delay:
            return self._cta_revealed_by_timer
        return self.controller.video_ended

    async def load(self, loader: Awaitable[ResolvedVideo]) -> None:
        try:
            resolved = await self.token.guard(loader)
        except NavigationCancelled:
            logger.info("Discarding page load for unmounted player", extra={"mount_id": self.mount_id})
            return
        except PageNotFound as exc:
            self.status = PageStatusEnum.not_found
            self.message = exc.message
            return
        except PageLoadFailed as exc:
            self.status = PageStatusEnum.failed
            self.message = exc.message
            return
        self._apply(resolved)

    def _apply(self, resolved: ResolvedVideo) -> None:
        self.resolved = resolved
        self.status = PageStatusEnum.ready
        self.message = None
        self.has_started = False
        self._cta_revealed_by_timer = False
        self.controller.apply_settings(resolved.campaign.settings)
        # Settings are part of the initial render, not instructions for an already mounted element.
        self.element.drain_instructions()
        self.tracker = EventTracker(
            self._dispatcher,
            campaign_id=resolved.video.campaign_id or resolved.campaign.id,
            video_id=resolved.video.id,
            variant=resolved.variant,
            context=self._tracking_context,
        )
        self.tracker.page_view()
        if self.reveal_policy == CtaRevealPolicyEnum.after_delay:
            self._reveal_timer = CtaRevealTimer(self._reveal_delay, self._reveal_cta)
            self._reveal_timer.start()
        logger.info(
            "Player mounted",
            extra={
                "mount_id": self.mount_id,
                "video_id": resolved.video.id,
                "campaign_id": resolved.campaign.id,
            },
        )

    def _reveal_cta(self) -> None:
        self._cta_revealed_by_timer = True

    def _handle_first_play(self) -> None:
        if self.has_started:
            return
        self.has_started = True
        if self.tracker is not None:
            self.tracker.video_play()

    def _handle_completion(self) -> None:
        if self.tracker is not None:
            self.tracker.video_complete(duration_watched=self.controller.duration)

    def unmount(self) -> None:
        self.token.cancel()
        if self._reveal_timer is not None:
            self._reveal_timer.cancel()
            self._reveal_timer = None
        self.status = PageStatusEnum.unmounted
        logger.debug("Player unmounted", extra={"mount_id": self.mount_id})

    def _require_ready(self) -> ResolvedVideo:
        if self.status != PageStatusEnum.ready or self.resolved is None:
            raise MountStateError(f"Player is {self.status.value}")
        return self.resolved

    def handle_media_event(self, event: MediaEventRequest) -> PlayerState:
        self._require_ready()
        controller = self.controller
        self.element.report(
            current_time=event.current_time,
            duration=event.duration,
            muted=event.muted,
            fullscreen=event.fullscreen,
        )
        if event.duration is not None:
            controller.handle_loaded_metadata(event.duration)
        if event.current_time is not None:
            controller.handle_time_update(event.current_time)

        if event.type == "play":
            self.element.report(paused=False)
            controller.handle_play()
        elif event.type == "pause":
            self.element.report(paused=True)
            controller.handle_pause()
        elif event.type == "ended":
            self.element.report(paused=True)
            controller.handle_ended()
        elif event.type == "volumechange" and event.muted is not None:
            controller.handle_volume_change(event.muted)
        elif event.type == "fullscreenchange" and event.fullscreen is not None:
            controller.handle_fullscreen_change(event.fullscreen)
        return self.player_state()

    def run_command(self, request: PlayerCommandRequest) -> PlayerCommandResponse:
        self._require_ready()
        controller = self.controller
        if request.command == "toggle_play":
            controller.toggle_play()
        elif request.command == "toggle_mute":
            controller.toggle_mute()
        elif request.command == "toggle_fullscreen":
            controller.toggle_fullscreen()
        elif request.command == "replay":
            controller.replay()
        elif request.command == "seek":
            if request.fraction is None:
                raise MountStateError("seek requires a fraction between 0 and 1")
            controller.seek(request.fraction)
        return PlayerCommandResponse(
            instructions=self.element.drain_instructions(),
            player=self.player_state(),
        )

    def click_cta(self) -> CtaOpenResponse:
        resolved = self._require_ready()
        cta = self.cta_button()
        if cta is None:
            raise MountStateError("This video has no call to action")
        # Telemetry is emitted, never awaited; opening the target does not depend on it.
        if self.tracker is not None:
            self.tracker.cta_click(
                cta_text=cta.text,
                cta_url=cta.url,
                timestamp=self.controller.current_time,
            )
        logger.info(
            "CTA clicked",
            extra={"mount_id": self.mount_id, "video_id": resolved.video.id, "cta_url": cta.url},
        )
        return CtaOpenResponse(url=cta.url)

    def cta_button(self) -> CtaButton | None:
        if self.resolved is None:
            return None
        video = self.resolved.video
        text = video.cta_text or self._default_cta_text
        if not text or not video.cta_url:
            return None
        return CtaButton(
            text=text,
            url=video.cta_url,
            css_class=cta_css_class(self.resolved.variant),
            visible=self.show_cta,
        )

    def player_state(self) -> PlayerState:
        controller = self.controller
        return PlayerState(
            is_playing=controller.is_playing,
            is_muted=controller.is_muted,
            is_fullscreen=controller.is_fullscreen,
            has_started=self.has_started,
            video_ended=controller.video_ended,
            show_cta=self.show_cta,
            current_time=controller.current_time,
            duration=controller.duration,
            progress=controller.progress,
        )

    def to_page(self) -> WatchPage:
        page = WatchPage(
            mount_id=self.mount_id,
            status=self.status,
            message=self.message,
            reveal_policy=self.reveal_policy,
        )
        if self.status != PageStatusEnum.ready or self.resolved is None:
            return page

        resolved = self.resolved
        video = resolved.video
        src = media_url(video)
        page.title = video.title
        page.description = video.description
        page.campaign_name = resolved.campaign.name
        page.variant = resolved.variant
        page.round_robin = resolved.round_robin
        page.cta = self.cta_button()
        page.player = self.player_state()
        if src:
            page.media = MediaSource(
                src=src,
                poster=poster_url(video),
                mime_type=video.mime_type or "video/mp4",
                autoplay=bool(self.element.autoplay),
                loop=bool(self.element.loop),
                controls=bool(self.element.controls),
                muted=bool(self.element.muted),
            )
        page.meta = _meta_tags(resolved, src=src, poster=poster_url(video))
        return page


def _meta_tags(resolved: ResolvedVideo, *, src: str | None, poster: str | None) -> dict[str, str]:
    video = resolved.video
    description = video.description or ""
    meta = {
        "title": f"{video.title} | {resolved.campaign.name}",
        "description": description,
        "og:title": video.title,
        "og:description": description,
        "og:type": "video.other",
        "twitter:card": "player",
        "twitter:title": video.title,
        "twitter:description": description,
    }
    if src:
        meta["og:video"] = src
    if poster:
        meta["og:image"] = poster
        meta["twitter:image"] = poster
    return meta


class PlayerMountRegistry:
    """
    Live mounts by id, least recently used first.

    A mount nobody has touched for ``idle_ttl_seconds`` is unmounted on the next registry access,
    and the least recently used mount is unmounted once ``max_mounts`` is reached.
    """

    def __init__(
        self,
        *,
        max_mounts: int = 5000,
        idle_ttl_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_mounts = max_mounts
        self._idle_ttl = idle_ttl_seconds
        self._clock = clock
        self._mounts: OrderedDict[str, PlayerMount] = OrderedDict()
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._mounts)

    def create(
        self,
        *,
        dispatcher: TelemetryDispatcher,
        reveal_policy: CtaRevealPolicyEnum,
        reveal_delay_seconds: float,
        tracking_context: dict[str, AdditionalValue] | None = None,
        default_cta_text: str | None = None,
    ) -> PlayerMount:
        self._expire_idle()
        while len(self._mounts) >= self._max_mounts:
            evicted_id = next(iter(self._mounts))
            self._drop(evicted_id)
        mount = PlayerMount(
            mount_id=uuid4().hex,
            dispatcher=dispatcher,
            reveal_policy=reveal_policy,
            reveal_delay_seconds=reveal_delay_seconds,
            tracking_context=tracking_context,
            default_cta_text=default_cta_text,
        )
        self._mounts[mount.mount_id] = mount
        self._last_seen[mount.mount_id] = self._clock()
        return mount

    def get(self, mount_id: str) -> PlayerMount | None:
        self._expire_idle()
        mount = self._mounts.get(mount_id)
        if mount is not None:
            self._mounts.move_to_end(mount_id)
            self._last_seen[mount_id] = self._clock()
        return mount

    def remove(self, mount_id: str) -> PlayerMount | None:
        return self._drop(mount_id)

    def clear(self) -> None:
        for mount in list(self._mounts.values()):
            mount.unmount()
        self._mounts.clear()
        self._last_seen.clear()

    def _drop(self, mount_id: str) -> PlayerMount | None:
        mount = self._mounts.pop(mount_id, None)
        self._last_seen.pop(mount_id, None)
        if mount is not None:
            mount.unmount()
        return mount

    def _expire_idle(self) -> None:
        now = self._clock()
        # Ordered by last access, so the first fresh mount ends the sweep.
        while self._mounts:
            mount_id = next(iter(self._mounts))
            if now - self._last_seen[mount_id] <= self._idle_ttl:
                break
            logger.debug("Player mount expired", extra={"mount_id": mount_id})
            self._drop(mount_id)

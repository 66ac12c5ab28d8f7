from __future__ import annotations

import asyncio
import logging
from typing import Any

from campaign_player.enums import AnalyticsEventTypeEnum, VariantEnum
from campaign_player.schemas.analytics import AdditionalValue, TrackEventPayload

logger = logging.getLogger(__name__)


class TelemetryDispatcher:
    """
    Delivers analytics events to the platform API without ever blocking the caller.

    emit() schedules delivery on the running loop and returns immediately. Delivery failures are
    logged and dropped: there is no retry and nothing is surfaced to the code that emitted.
    """

    def __init__(self, sink: Any) -> None:
        self._sink = sink
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def emit(self, event: TrackEventPayload) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "Dropping analytics event emitted outside an event loop",
                extra={"event_type": event.event_type.value},
            )
            return
        task = loop.create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def _deliver(self, event: TrackEventPayload) -> None:
        payload: dict[str, Any] = {
            "event_type": event.event_type.value,
            "additional_data": dict(event.additional_data),
        }
        if event.campaign_id is not None:
            payload["campaign_id"] = event.campaign_id
        if event.video_id is not None:
            payload["video_id"] = event.video_id
        try:
            await self._sink.track_event(payload=payload)
        except Exception as exc:  # noqa: BLE001 - telemetry is best effort
            logger.warning(
                "Analytics event delivery failed",
                extra={
                    "event_type": event.event_type.value,
                    "video_id": event.video_id,
                    "error": str(exc),
                },
            )
            return
        logger.debug(
            "Analytics event delivered",
            extra={"event_type": event.event_type.value, "video_id": event.video_id},
        )


class EventTracker:
    """Builds analytics events for one page mount and hands them to the dispatcher."""

    def __init__(
        self,
        dispatcher: TelemetryDispatcher,
        *,
        campaign_id: int | None,
        video_id: int | None,
        variant: VariantEnum | None,
        context: dict[str, AdditionalValue] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self.campaign_id = campaign_id
        self.video_id = video_id
        self.variant = variant or VariantEnum.A
        self._context = dict(context or {})

    def track(self, event_type: AnalyticsEventTypeEnum, **additional: AdditionalValue) -> TrackEventPayload:
        data: dict[str, AdditionalValue] = {"variant": self.variant.value}
        data.update(self._context)
        data.update(additional)
        event = TrackEventPayload(
            event_type=event_type,
            campaign_id=self.campaign_id,
            video_id=self.video_id,
            additional_data=data,
        )
        self._dispatcher.emit(event)
        return event

    def page_view(self) -> TrackEventPayload:
        return self.track(AnalyticsEventTypeEnum.page_view)

    def video_play(self) -> TrackEventPayload:
        return self.track(AnalyticsEventTypeEnum.video_play)

    def video_complete(self, *, duration_watched: float) -> TrackEventPayload:
        return self.track(AnalyticsEventTypeEnum.video_complete, duration_watched=duration_watched)

    def cta_click(self, *, cta_text: str, cta_url: str, timestamp: float) -> TrackEventPayload:
        return self.track(
            AnalyticsEventTypeEnum.cta_click,
            cta_text=cta_text,
            cta_url=cta_url,
            timestamp=timestamp,
        )

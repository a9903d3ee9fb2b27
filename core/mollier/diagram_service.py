"""
Mollier Diagram Refresh Service

Refreshes the diagram in two phases:

1. Fetch: temperature and humidity history for every sensor, with a bound
   on concurrent requests. A failing sensor is recorded in the snapshot
   and does not stop the others.
2. Compute: the pure diagram computation over the complete snapshot.

A background loop repeats this at a fixed interval. When refreshes
overlap, the most recently started one wins and results of superseded
refreshes are discarded.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Protocol

from .diagram import compute_diagram
from .models import DataSnapshot, DiagramDescription, HistorySample, SensorHistory, TimeWindow
from .settings import DiagramSettings, SensorSettings

logger = logging.getLogger(__name__)


class HistorySource(Protocol):
    """Anything that can return the numeric history of an entity."""

    def get_history(self, entity_id: str, start_time: datetime, end_time: datetime) -> list[HistorySample]:
        ...


class DiagramService:
    """
    Background service keeping an up-to-date Mollier diagram.

    Holds the latest computed diagram in `latest` for the API to serve.
    """

    def __init__(self, history_source: HistorySource, settings: DiagramSettings):
        self.history_source = history_source
        self.settings = settings

        self.latest: DiagramDescription | None = None
        self.last_refresh: datetime | None = None

        self._generation = 0
        self._task: asyncio.Task | None = None
        self._running = False

    async def start(self):
        """Start the periodic refresh loop."""
        if self._running:
            logger.warning("Diagram service already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Diagram service started for {len(self.settings.sensors)} sensor(s)")
        logger.info(f"   Refresh interval: {self.settings.refresh_interval_seconds} seconds")

    async def stop(self):
        """Stop the periodic refresh loop."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Diagram service stopped")

    async def _run_loop(self):
        while self._running:
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Error in diagram refresh loop: {e}", exc_info=True)

            await asyncio.sleep(self.settings.refresh_interval_seconds)

    async def refresh(self, now: datetime | None = None) -> DiagramDescription | None:
        """Fetch history and recompute the diagram.

        Returns:
            The new diagram, or None if a later refresh started meanwhile
        """
        snapshot, current = await self._fetch_for_refresh(now)
        if not current:
            logger.info("Discarding superseded refresh")
            return None

        return self._store(compute_diagram(snapshot, self.settings))

    async def get_diagram(self, force_refresh: bool = False, now: datetime | None = None) -> DiagramDescription:
        """Latest diagram, refreshing first if forced or none exists yet.

        Never returns None. If this refresh is superseded before any newer
        one has stored its result, the diagram is computed from this
        refresh's own snapshot without storing it.
        """
        if not force_refresh and self.latest is not None:
            return self.latest

        snapshot, current = await self._fetch_for_refresh(now)
        if not current:
            logger.info("Refresh superseded, serving latest available diagram")
            return self.latest or compute_diagram(snapshot, self.settings)

        return self._store(compute_diagram(snapshot, self.settings))

    async def _fetch_for_refresh(self, now: datetime | None = None) -> tuple[DataSnapshot, bool]:
        """Fetch a snapshot and report whether this is still the newest refresh."""
        self._generation += 1
        generation = self._generation

        window = TimeWindow.last(self.settings.history_hours, now)
        snapshot = await self.fetch_snapshot(window)
        return snapshot, generation == self._generation

    def _store(self, diagram: DiagramDescription) -> DiagramDescription:
        self.latest = diagram
        self.last_refresh = datetime.now(timezone.utc)

        points = sum(len(t.points) for t in diagram.traces)
        logger.info(f"Diagram refreshed: {len(diagram.traces)} trace(s), {points} point(s)")
        return diagram

    async def fetch_snapshot(self, window: TimeWindow) -> DataSnapshot:
        """Fetch all sensor history for a window.

        Completes only when every fetch has finished or failed.
        """
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_fetches)
        histories = await asyncio.gather(
            *(self._fetch_sensor(sensor, window, semaphore) for sensor in self.settings.sensors)
        )
        return DataSnapshot(window=window, histories={h.sensor_id: h for h in histories})

    async def _fetch_sensor(
        self,
        sensor: SensorSettings,
        window: TimeWindow,
        semaphore: asyncio.Semaphore,
    ) -> SensorHistory:
        try:
            temperatures, humidities = await asyncio.gather(
                self._fetch_entity(sensor.temperature_entity, window, semaphore),
                self._fetch_entity(sensor.humidity_entity, window, semaphore),
            )
        except Exception as e:
            logger.warning(f"Failed to fetch history for {sensor.id}: {e}")
            return SensorHistory(sensor_id=sensor.id, error=str(e))

        logger.debug(
            f"{sensor.id}: {len(temperatures)} temperature / {len(humidities)} humidity readings"
        )
        return SensorHistory(
            sensor_id=sensor.id,
            temperatures=tuple(temperatures),
            humidities=tuple(humidities),
        )

    async def _fetch_entity(
        self,
        entity_id: str,
        window: TimeWindow,
        semaphore: asyncio.Semaphore,
    ) -> list[HistorySample]:
        async with semaphore:
            # The HA client is blocking (requests)
            return await asyncio.to_thread(
                self.history_source.get_history, entity_id, window.start, window.end
            )

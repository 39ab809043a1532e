"""Periodic local-to-cloud reconciliation of recordings."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from config.settings import Settings
from recordings.models import FileRecord
from recordings.services.error_handling import UploadError, categorize_error, describe_error
from recordings.services.sync_types import (
    SyncSession,
    SyncSnapshot,
    TickReport,
    TickStatus,
    UploadOutcome,
    UploadStatus,
)
from utils.formatting import utc_now


class LocalEnumerator(Protocol):
    def exists(self, path: Path) -> bool:
        ...

    def list_dir(self, path: Path) -> List[FileRecord]:
        ...


class CloudStore(Protocol):
    def list_objects(self, prefix: Optional[str] = None) -> List[FileRecord]:
        ...

    def upload(self, local_path: Path, object_name: str) -> str:
        ...


SnapshotListener = Callable[[SyncSnapshot], None]


class ReconciliationService:
    """
    Mirrors new local recordings to the cloud store.

    A tick lists local files and cloud objects, rebuilds the upload ledger
    from the cloud listing, uploads every local file missing from the ledger
    in listing order, then publishes the refreshed listings. Ticks and
    manual refreshes share one in-progress flag, so an overlapping request
    is skipped instead of queued.

    Collaborator calls are blocking and run through ``asyncio.to_thread``.
    """

    def __init__(
        self,
        local_store: LocalEnumerator,
        cloud_store: CloudStore,
        session: SyncSession,
        recordings_dir: Optional[Path] = None,
        interval_seconds: Optional[float] = None,
        logger_obj: Optional[logging.Logger] = None,
    ):
        self.local_store = local_store
        self.cloud_store = cloud_store
        self.session = session
        self.recordings_dir = Settings.get_recordings_dir(recordings_dir)
        self.interval_seconds = Settings.get_sync_interval(interval_seconds)
        self.logger = logger_obj or logging.getLogger(__name__)

        self._in_progress = False
        self._uploads_in_flight: set[str] = set()
        # Names uploaded after the current cloud listing was requested
        self._uploaded_since_listing: set[str] = set()
        self._listeners: List[SnapshotListener] = []
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self.last_report: Optional[TickReport] = None

    @property
    def is_busy(self) -> bool:
        return self._in_progress

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    async def run_tick(self) -> TickReport:
        """Run one reconciliation cycle, skipping if another is in flight."""
        return await self._guarded(upload=True)

    async def refresh(self) -> TickReport:
        """Re-list local and cloud files and rebuild the ledger without uploading."""
        return await self._guarded(upload=False)

    async def _guarded(self, upload: bool) -> TickReport:
        started_at = utc_now()
        if self._in_progress:
            self.logger.warning("Reconciliation already in progress, skipping")
            return TickReport(
                status=TickStatus.SKIPPED_BUSY,
                started_at=started_at,
                finished_at=utc_now(),
                message="Another reconciliation is in progress",
            )

        self._in_progress = True
        try:
            report = await self._reconcile(started_at, upload)
            self.last_report = report
            return report
        finally:
            self._in_progress = False

    async def _reconcile(self, started_at, upload: bool) -> TickReport:
        report = TickReport(status=TickStatus.COMPLETED, started_at=started_at)

        try:
            local_files = await self._list_local(report)
        except Exception as e:
            self.logger.error(f"Error listing local files in {self.recordings_dir}: {e}", exc_info=True)
            return self._fail(report, f"Local listing failed: {describe_error(e)}")

        self._uploaded_since_listing.clear()
        try:
            cloud_files = await asyncio.to_thread(self.cloud_store.list_objects)
        except Exception as e:
            self.logger.warning(f"Cloud listing failed, skipping this cycle: {e}")
            return self._fail(report, f"Cloud listing failed: {describe_error(e)}")

        self.session.ledger.rebuild(
            {record.name for record in cloud_files} | self._uploaded_since_listing
        )
        report.local_count = len(local_files)
        report.cloud_count = len(cloud_files)

        if upload:
            for record in local_files:
                if record.name in self.session.ledger:
                    self.logger.debug(f"Already in cloud, skipping: {record.name}")
                    continue
                self.logger.info(f"Auto-uploading new file: {record.name}")
                outcome = await self._upload_one(record)
                if outcome.status != UploadStatus.ALREADY_UPLOADED:
                    report.outcomes.append(outcome)
                if outcome.status == UploadStatus.FAILED:
                    self.logger.warning(f"Auto-upload failed for {record.name}: {outcome.message}")

        self.session.local_files = local_files
        self.session.cloud_files = cloud_files
        self.session.last_synced_at = utc_now()
        self._publish()

        report.finished_at = utc_now()
        self.logger.info(
            f"Reconciliation complete: {report.local_count} local, {report.cloud_count} cloud, "
            f"{len(report.uploaded)} uploaded, {len(report.failures)} failed"
        )
        return report

    async def _list_local(self, report: TickReport) -> List[FileRecord]:
        exists = await asyncio.to_thread(self.local_store.exists, self.recordings_dir)
        if not exists:
            self.logger.warning(f"Recordings directory does not exist: {self.recordings_dir}")
            report.local_root_missing = True
            return []
        return await asyncio.to_thread(self.local_store.list_dir, self.recordings_dir)

    def _fail(self, report: TickReport, message: str) -> TickReport:
        report.status = TickStatus.FAILED
        report.message = message
        report.finished_at = utc_now()
        return report

    async def _upload_one(self, record: FileRecord) -> UploadOutcome:
        """Upload one file and record it in the ledger; never raises."""
        if record.name in self.session.ledger:
            return UploadOutcome(record.name, UploadStatus.ALREADY_UPLOADED)
        if record.name in self._uploads_in_flight:
            return UploadOutcome(record.name, UploadStatus.IN_FLIGHT)

        self._uploads_in_flight.add(record.name)
        try:
            url = await asyncio.to_thread(self.cloud_store.upload, Path(record.path), record.name)
        except Exception as e:
            category = categorize_error(e)
            return UploadOutcome(
                record.name,
                UploadStatus.FAILED,
                category=category,
                message=describe_error(e, category),
            )
        finally:
            self._uploads_in_flight.discard(record.name)

        self.session.ledger.add(record.name)
        self._uploaded_since_listing.add(record.name)
        return UploadOutcome(record.name, UploadStatus.UPLOADED, url=url)

    async def upload_file(self, record: FileRecord) -> UploadOutcome:
        """
        Manually upload a single local recording.

        Returns:
            ALREADY_UPLOADED when the name is in the ledger, UPLOADED otherwise

        Raises:
            UploadError: If the upload failed or the same file is uploading already
        """
        outcome = await self._upload_one(record)
        if outcome.status == UploadStatus.FAILED:
            self.logger.error(f"Manual upload failed for {record.name}: {outcome.message}")
            raise UploadError(record.name, outcome.message or "unknown error", outcome.category)
        if outcome.status == UploadStatus.IN_FLIGHT:
            raise UploadError(record.name, "upload already in progress")
        if outcome.status == UploadStatus.UPLOADED:
            self.logger.info(f"Manual upload completed: {record.name}")
            self._publish()
        return outcome

    def find_local(self, name: str) -> Optional[FileRecord]:
        for record in self.session.local_files:
            if record.name == name:
                return record
        return None

    def _publish(self) -> None:
        snapshot = SyncSnapshot(
            local_files=tuple(self.session.local_files),
            cloud_files=tuple(self.session.cloud_files),
            uploaded_names=self.session.ledger.names(),
        )
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                self.logger.error(f"Snapshot listener failed: {e}", exc_info=True)

    async def run_forever(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Run ticks every ``interval_seconds`` until ``stop_event`` is set.

        The interval is the spacing between tick starts; a tick that overruns
        it causes the overlapping start to be skipped.
        """
        stop_event = stop_event or asyncio.Event()
        self._stop_event = stop_event
        self.logger.info(f"Starting reconciliation every {self.interval_seconds}s for {self.recordings_dir}")

        loop = asyncio.get_running_loop()
        in_flight: Optional[asyncio.Task] = None
        while not stop_event.is_set():
            tick_started = loop.time()
            if in_flight is None or in_flight.done():
                in_flight = asyncio.create_task(self.run_tick())
            else:
                self.logger.warning("Previous tick still running, skipping scheduled tick")

            remaining = self.interval_seconds - (loop.time() - tick_started)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=max(remaining, 0))
            except asyncio.TimeoutError:
                pass

        if in_flight is not None and not in_flight.done():
            await in_flight
        self.logger.info("Reconciliation scheduler stopped")

    def start(self) -> asyncio.Task:
        """Start the scheduler as a background task on the running loop."""
        if self.is_running:
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run_forever(self._stop_event))
        return self._task

    async def stop(self) -> None:
        """Stop the scheduler, waiting for an in-flight tick to finish."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None

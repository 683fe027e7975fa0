"""
Side-effect recorder.

Records the device -> plugin instance process mapping and the device's last
report time outside the request's critical path. Jobs are queued on a bounded
queue drained by a fixed pool of worker tasks; a handler never awaits them
and a failing sink is logged without affecting the handler.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..domain.devices import Device
from ..domain.requests import UpstreamRequest
from ..interfaces.lifecycle import IComponent
from ..interfaces.sinks import IPluginMappingSink, IReportTimeSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SideEffectJob:
    device_key: str
    process_id: Optional[str]
    reported_at: datetime


class SideEffectRecorder(IComponent):
    """Bounded worker pool for fire-and-forget device bookkeeping."""

    def __init__(self, plugin_mappings: IPluginMappingSink, report_times: IReportTimeSink,
                 max_workers: int = 4, queue_size: int = 10000) -> None:
        self._plugin_mappings = plugin_mappings
        self._report_times = report_times
        self._max_workers = max_workers
        self._queue: asyncio.Queue[SideEffectJob] = asyncio.Queue(maxsize=queue_size)
        self._workers: List[asyncio.Task[Any]] = []
        self._running = False

        self._metrics = {
            'jobs_submitted': 0,
            'jobs_dropped': 0,
            'jobs_completed': 0,
            'sink_failures': 0
        }

    @property
    def name(self) -> str:
        return "SideEffectRecorder"

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the worker tasks."""
        if self._running:
            return

        logger.info(f"Starting side-effect recorder with {self._max_workers} workers")
        self._running = True
        self._workers = [
            asyncio.create_task(self._worker_process())
            for _ in range(self._max_workers)
        ]

    async def stop(self) -> None:
        """Stop the worker tasks, abandoning jobs still queued."""
        if not self._running:
            return

        logger.info("Stopping side-effect recorder...")
        self._running = False

        for worker in self._workers:
            worker.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()

        pending = self._queue.qsize()
        if pending:
            logger.warning(f"Side-effect recorder stopped with {pending} jobs pending")

    async def check_health(self) -> Dict[str, Any]:
        return {
            'healthy': self._running,
            'status': 'running' if self._running else 'stopped',
            'details': {
                'workers_count': len(self._workers),
                'queue_size': self._queue.qsize(),
                **self._metrics
            }
        }

    def record(self, device: Device, request: UpstreamRequest) -> None:
        """
        Submit bookkeeping for a device that just reported.

        Never blocks and never raises; when the queue is full the job is dropped.
        """
        job = SideEffectJob(
            device_key=device.device_key,
            process_id=request.process_id,
            reported_at=datetime.now(timezone.utc)
        )
        try:
            self._queue.put_nowait(job)
            self._metrics['jobs_submitted'] += 1
        except asyncio.QueueFull:
            self._metrics['jobs_dropped'] += 1
            logger.warning(f"Side-effect queue full, dropping job for device {device.device_key}")

    async def drain(self) -> None:
        """Wait until every queued job has been processed."""
        if self._running:
            await self._queue.join()

    async def get_metrics(self) -> Dict[str, Any]:
        return {**self._metrics, 'queue_size': self._queue.qsize()}

    async def _worker_process(self) -> None:
        while self._running:
            job = await self._queue.get()
            try:
                await self._run_job(job)
            finally:
                self._queue.task_done()

    async def _run_job(self, job: SideEffectJob) -> None:
        # The two sinks are independent; one failing must not skip the other
        if job.process_id:
            try:
                await self._plugin_mappings.record_plugin_mapping(job.device_key, job.process_id)
            except Exception as e:
                self._metrics['sink_failures'] += 1
                logger.error(f"Failed to record plugin mapping for device {job.device_key}: {e}")

        try:
            await self._report_times.record_last_report_time(job.device_key, job.reported_at)
        except Exception as e:
            self._metrics['sink_failures'] += 1
            logger.error(f"Failed to record report time for device {job.device_key}: {e}")

        self._metrics['jobs_completed'] += 1

"""
tracking of long-running server jobs (remote import, processing, clip generation).

a JobHandle polls a status source until the job reaches a terminal state,
then fetches the result once. handles can be driven three ways: poll() by
hand, run() in the calling thread, or start() on a background thread.
"""
import logging
import threading
from enum import Enum
from typing import Any, Callable, Optional

from videoai.client.envelope import ApiResponse
from videoai.client.models import JobStatus
from videoai.client.progress import MonotonicProgress, ProgressCallback
from videoai.core.errors import TransportError

logger = logging.getLogger(__name__)

StatusSource = Callable[[], ApiResponse]


class JobState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED, JobState.CANCELLED)


class JobHandle:
    def __init__(
        self,
        job_id: str,
        fetch_status: StatusSource,
        fetch_result: StatusSource,
        parse: Optional[Callable[[Any], Any]] = None,
        inline_key: Optional[str] = None,
        interval: float = 1.0,
        max_failures: int = 30,
        max_polls: int = 0
    ):
        self.job_id = job_id
        self.state = JobState.SUBMITTED
        self._fetch_status = fetch_status
        self._fetch_result = fetch_result
        self._parse = parse
        self._inline_key = inline_key
        self._interval = interval
        self._max_failures = max_failures
        self._max_polls = max_polls

        self._progress = MonotonicProgress()
        self._lock = threading.RLock()
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._exception: Optional[BaseException] = None
        self._result: Optional[ApiResponse] = None
        self.failures = 0
        self.polls = 0

    @property
    def progress(self) -> int:
        return self._progress.value or 0

    @property
    def done(self) -> bool:
        return self.state.terminal

    @property
    def result(self) -> Optional[ApiResponse]:
        return self._result

    def poll(self) -> bool:
        """one status check; True once the job is in a terminal state"""
        with self._lock:
            if self.state.terminal:
                return True
            if self._cancelled.is_set():
                self._finish(JobState.CANCELLED, ApiResponse.failure(f"Job {self.job_id} was cancelled"))
                return True
            self.state = JobState.POLLING
            self.polls += 1
            if self._check_status():
                return True
            if self._max_polls and self.polls >= self._max_polls:
                self._finish(
                    JobState.FAILED,
                    ApiResponse.failure(f"Job {self.job_id} did not finish after {self.polls} polls")
                )
                return True
            return False

    def _check_status(self) -> bool:
        try:
            response = self._fetch_status()
        except (TransportError, ValueError) as e:
            return self._transient(str(e))
        if not response.ok:
            return self._transient(response.error)
        try:
            status = JobStatus.model_validate(response.data)
        except ValueError as e:
            return self._transient(f"unexpected progress payload {response.data!r}: {e}")
        self.failures = 0

        self._progress(status.progress)

        if status.failed or status.status == "failed":
            reason = status.error or f"Job {self.job_id} failed"
            logger.error(f"job {self.job_id} failed: {reason}")
            self._finish(JobState.FAILED, ApiResponse.failure(reason))
            return True

        if status.completed:
            inline = response.data.get(self._inline_key) if self._inline_key else None
            if inline is not None:
                result = ApiResponse.success(inline)
            else:
                try:
                    result = self._fetch_result()
                except TransportError as e:
                    result = ApiResponse.failure(str(e))
            if self._parse:
                result = result.map(self._parse)
            self._finish(JobState.COMPLETED, result)
            return True
        return False

    def _transient(self, reason: str) -> bool:
        self.failures += 1
        logger.warning(f"polling job {self.job_id} failed ({self.failures} in a row): {reason}")
        if self._max_failures and self.failures >= self._max_failures:
            self._finish(
                JobState.FAILED,
                ApiResponse.failure(f"Lost track of job {self.job_id} after {self.failures} failed polls: {reason}")
            )
            return True
        return False

    def _finish(self, state: JobState, result: ApiResponse):
        self.state = state
        self._result = result
        self._progress.close()
        self._finished.set()
        logger.info(f"job {self.job_id} {state.value}")

    def run(self, on_progress: Optional[ProgressCallback] = None) -> ApiResponse:
        """poll in the calling thread until the job finishes"""
        if on_progress:
            self._progress.callback = on_progress
        while True:
            self._cancelled.wait(self._interval)
            if self.poll():
                return self._result

    def start(self, on_progress: Optional[ProgressCallback] = None) -> "JobHandle":
        """poll on a daemon thread; progress callbacks fire on that thread"""
        if self._thread is not None:
            raise RuntimeError(f"job {self.job_id} is already being polled")
        if on_progress:
            self._progress.callback = on_progress
        self._thread = threading.Thread(target=self._run_in_thread, name=f"job-{self.job_id}", daemon=True)
        self._thread.start()
        return self

    def _run_in_thread(self):
        try:
            self.run()
        except Exception as e:
            logger.exception(f"polling job {self.job_id} crashed")
            self._exception = e
            with self._lock:
                if not self.state.terminal:
                    self._finish(JobState.FAILED, ApiResponse.failure(str(e)))

    def cancel(self):
        """stop tracking the job. the server-side job is not aborted."""
        self._cancelled.set()
        if self._thread is None:
            self.poll()

    def wait(self, timeout: Optional[float] = None) -> Optional[ApiResponse]:
        """
        block until the job is terminal and return its result, or None on timeout.
        a handle that was never started is polled in the calling thread.
        exceptions raised while polling in the background are re-raised here.
        """
        if self._thread is None and not self.done:
            return self.run()
        if not self._finished.wait(timeout):
            return None
        if self._exception is not None:
            raise self._exception
        return self._result


class JobPoller:
    """builds handles that track server jobs through the jobs api"""

    def __init__(self, transport, interval: float = 1.0, max_failures: int = 30, max_polls: int = 0):
        self.transport = transport
        self.interval = interval
        self.max_failures = max_failures
        self.max_polls = max_polls

    def track(
        self,
        job_id: str,
        result_path: Optional[str] = None,
        inline_key: Optional[str] = None,
        parse: Optional[Callable[[Any], Any]] = None
    ) -> JobHandle:
        result_path = result_path or f"/api/jobs/{job_id}/result"
        return JobHandle(
            job_id,
            fetch_status=lambda: self.transport.request("GET", f"/api/jobs/{job_id}/progress"),
            fetch_result=lambda: self.transport.request("GET", result_path),
            parse=parse,
            inline_key=inline_key,
            interval=self.interval,
            max_failures=self.max_failures,
            max_polls=self.max_polls,
        )

    def start(
        self,
        job_id: str,
        result_path: Optional[str] = None,
        inline_key: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        parse: Optional[Callable[[Any], Any]] = None
    ) -> JobHandle:
        return self.track(job_id, result_path, inline_key, parse).start(on_progress)

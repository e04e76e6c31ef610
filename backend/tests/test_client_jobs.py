import pytest

from videoai.client.envelope import ApiResponse
from videoai.client.jobs import JobHandle, JobState
from videoai.client.models import VideoRecord
from videoai.core.errors import TransportError


class StatusScript:
    """hands out scripted status payloads and counts result fetches"""

    def __init__(self, *statuses, result=None):
        self.statuses = list(statuses)
        self.status_calls = 0
        self.result_calls = 0
        self.result = result if result is not None else ApiResponse.success({"id": "v1", "status": "completed"})

    def status(self):
        self.status_calls += 1
        item = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, ApiResponse):
            return item
        return ApiResponse.success(item)

    def fetch_result(self):
        self.result_calls += 1
        return self.result


def make_handle(script, **kwargs):
    kwargs.setdefault("interval", 0)
    return JobHandle("job-1", fetch_status=script.status, fetch_result=script.fetch_result, **kwargs)


def test_progress_never_goes_backwards():
    script = StatusScript(
        {"progress": 10},
        {"progress": 60},
        {"progress": 40},
        {"progress": 100, "completed": True},
    )
    seen = []
    result = make_handle(script).run(seen.append)

    assert seen == [10, 60, 60, 100]
    assert result.ok
    assert script.result_calls == 1


def test_completed_job_is_terminal():
    script = StatusScript({"progress": 100, "completed": True})
    seen = []
    handle = make_handle(script)
    handle.run(seen.append)

    assert handle.poll() is True
    assert handle.poll() is True
    assert script.status_calls == 1
    assert script.result_calls == 1
    assert seen == [100]
    assert handle.state == JobState.COMPLETED


def test_inline_result_skips_result_fetch():
    script = StatusScript({"progress": 100, "completed": True, "videoData": {"id": "yt-1", "name": "Imported"}})
    handle = make_handle(script, inline_key="videoData", parse=VideoRecord.model_validate)

    result = handle.run()

    assert script.result_calls == 0
    assert result.data.name == "Imported"


def test_failed_job_reports_server_reason():
    script = StatusScript({"progress": 20}, {"progress": 20, "failed": True, "error": "video unavailable"})
    handle = make_handle(script)

    result = handle.run()

    assert handle.state == JobState.FAILED
    assert result.error == "video unavailable"
    assert script.result_calls == 0


def test_failed_status_field_also_fails_the_job():
    script = StatusScript({"progress": 50, "status": "failed"})
    result = make_handle(script).run()
    assert result.error == "Job job-1 failed"


def test_transient_errors_are_retried():
    script = StatusScript(
        TransportError("connection reset"),
        ApiResponse.failure("An error occurred"),
        {"progress": 30},
        {"progress": 100, "completed": True},
    )
    handle = make_handle(script, max_failures=3)

    result = handle.run()

    assert result.ok
    assert handle.state == JobState.COMPLETED
    assert script.status_calls == 4


def test_consecutive_failures_are_bounded():
    script = StatusScript(TransportError("connection refused"))
    handle = make_handle(script, max_failures=3)

    result = handle.run()

    assert handle.state == JobState.FAILED
    assert script.status_calls == 3
    assert "after 3 failed polls" in result.error


def test_malformed_payload_counts_as_failure():
    script = StatusScript("<html>oops</html>")
    result = make_handle(script, max_failures=2).run()
    assert "unexpected progress payload" in result.error


def test_poll_budget():
    script = StatusScript({"progress": 5})
    handle = make_handle(script, max_polls=4)

    result = handle.run()

    assert script.status_calls == 4
    assert result.error == "Job job-1 did not finish after 4 polls"


def test_cancel_before_polling():
    script = StatusScript({"progress": 5})
    handle = make_handle(script)

    handle.cancel()

    assert handle.state == JobState.CANCELLED
    assert handle.wait().error == "Job job-1 was cancelled"
    assert script.status_calls == 0


def test_background_polling_and_wait():
    script = StatusScript({"progress": 40}, {"progress": 100, "completed": True})
    seen = []
    handle = make_handle(script).start(seen.append)

    result = handle.wait(timeout=5)

    assert result.ok
    assert seen == [40, 100]
    assert handle.done


def test_cancel_stops_background_polling():
    script = StatusScript({"progress": 10})
    handle = make_handle(script, interval=0.01).start()

    handle.cancel()
    result = handle.wait(timeout=5)

    assert handle.state == JobState.CANCELLED
    assert result.error == "Job job-1 was cancelled"


def test_wait_reraises_unexpected_errors():
    def broken_parse(data):
        raise RuntimeError("unexpected result shape")

    script = StatusScript({"progress": 100, "completed": True})
    handle = make_handle(script, parse=broken_parse).start()

    with pytest.raises(RuntimeError, match="unexpected result shape"):
        handle.wait(timeout=5)


def test_start_twice_is_an_error():
    script = StatusScript({"progress": 100, "completed": True})
    handle = make_handle(script).start()
    with pytest.raises(RuntimeError):
        handle.start()
    handle.wait(timeout=5)

import pytest
import requests

from videoai.client import ApiClient
from videoai.client.jobs import JobState
from videoai.client.models import CaptionRecord
from videoai import worker
from videoai.services import ffmpeg, job_tracker

from conftest import AppAdapter, make_api_client, make_config

PROCESS_SETTINGS = {"platform": "youtube", "aspectRatio": "16:9", "resolution": "1920x1080", "quality": 80}


def test_login_persists_token_and_sends_it(scripted, tmp_path):
    token_path = tmp_path / "session.json"
    api = make_api_client(scripted, token_path=str(token_path))
    scripted.add("POST", "/api/auth/login", (200, {"token": "tok-123", "user": {"id": "u1", "email": "a@b.c"}}))
    scripted.add("GET", "/api/videos", (200, []))

    assert api.login("a@b.c", "secret-pass").ok
    assert api.current_user["id"] == "u1"
    assert token_path.exists()

    api.list_videos()
    assert scripted.calls[-1][3]["Authorization"] == "Bearer tok-123"

    # a new client picks the session up from disk
    again = make_api_client(scripted, token_path=str(token_path))
    assert again.tokens.token == "tok-123"


def test_logout_clears_session_even_when_server_is_down(scripted, tmp_path):
    token_path = tmp_path / "session.json"
    api = make_api_client(scripted, token_path=str(token_path))
    api.tokens.save("tok-123", {"id": "u1"})
    scripted.add("POST", "/api/auth/logout", requests.ConnectionError("down"))

    response = api.logout()

    assert not response.ok
    assert api.tokens.token is None
    assert not token_path.exists()


def test_server_error_message_is_surfaced(scripted, api):
    scripted.add("GET", "/api/videos/v9", (404, {"message": "Video not found"}))
    response = api.get_video("v9")
    assert response.error == "Video not found"


def test_list_videos_parses_records(scripted, api):
    scripted.add("GET", "/api/videos", (200, [{"id": "v1", "name": "a.mp4", "status": "processing", "size": "1.00 MB"}]))
    videos = api.list_videos().data
    assert videos[0].status == "processing"
    assert videos[0].size == "1.00 MB"


def test_process_without_callback_returns_placeholder(scripted, api):
    scripted.add("POST", "/api/videos/v1/process", (200, {"jobId": "job-1"}))

    response = api.process_video("v1", PROCESS_SETTINGS)

    assert response.data.id == "v1"
    assert response.data.status == "processing"
    assert scripted.count("GET", "/api/jobs/job-1/progress") == 0


def test_process_with_callback_polls_until_done(scripted, api):
    scripted.add("POST", "/api/videos/v1/process", (200, {"jobId": "job-1"}))
    scripted.add(
        "GET", "/api/jobs/job-1/progress",
        (200, {"jobId": "job-1", "status": "running", "progress": 35}),
        (200, {"jobId": "job-1", "status": "completed", "progress": 100, "completed": True}),
    )
    scripted.add("GET", "/api/videos/v1", (200, {"id": "v1", "name": "a.mp4", "status": "completed", "platform": "youtube"}))

    seen = []
    response = api.process_video("v1", PROCESS_SETTINGS, on_progress=seen.append)

    assert response.data.status == "completed"
    assert seen == [35, 100]
    assert scripted.count("GET", "/api/videos/v1") == 1
    body = scripted.calls[0][2]
    assert b'"aspectRatio": "16:9"' in body


def test_await_completion_can_be_forced(scripted, api):
    scripted.add("POST", "/api/videos/v1/clips/generate", (200, {"jobId": "job-2"}))
    scripted.add("GET", "/api/jobs/job-2/progress", (200, {"jobId": "job-2", "status": "completed", "progress": 100, "completed": True}))
    scripted.add("GET", "/api/jobs/job-2/result", (200, [{"id": "c1", "title": "Clip 1", "platform": "tiktok", "duration": 20}]))

    response = api.generate_clips("v1", {"platforms": ["tiktok"], "clipCount": 1}, await_completion=True)

    assert [clip.id for clip in response.data] == ["c1"]


def test_clips_without_callback_return_empty_list(scripted, api):
    scripted.add("POST", "/api/videos/v1/clips/generate", (200, {"jobId": "job-2"}))
    response = api.generate_clips("v1", {"platforms": ["tiktok"]})
    assert response.data == []


def test_clip_settings_are_checked_locally(scripted, api):
    response = api.generate_clips("v1", {"platforms": ["tiktok"], "minDuration": 60, "maxDuration": 10})
    assert response.error == "Minimum clip duration cannot exceed the maximum"
    assert scripted.calls == []


def test_remote_import_without_callback_returns_job_placeholder(scripted, api):
    scripted.add("POST", "/api/videos/youtube/download", (200, {"jobId": "job-3"}))

    response = api.upload_remote_video("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    assert response.data.id == "job-3"
    assert response.data.status == "processing"


def test_remote_import_uses_inline_video_data(scripted, api):
    scripted.add("POST", "/api/videos/youtube/download", (200, {"jobId": "job-3"}))
    scripted.add(
        "GET", "/api/jobs/job-3/progress",
        (200, {"jobId": "job-3", "status": "running", "progress": 50}),
        (200, {"jobId": "job-3", "status": "completed", "progress": 100, "completed": True,
               "videoData": {"id": "v7", "name": "Never Gonna Give You Up", "platform": "YouTube"}}),
    )

    seen = []
    response = api.upload_remote_video("https://youtu.be/dQw4w9WgXcQ", on_progress=seen.append, quality="1080p")

    assert response.data.id == "v7"
    assert seen == [5, 10, 50, 100]
    assert scripted.count("GET", "/api/jobs/job-3/result") == 0
    assert b'"quality": "1080p"' in scripted.calls[0][2]


def test_unsupported_quality_is_rejected(scripted, api):
    response = api.upload_remote_video("https://youtu.be/dQw4w9WgXcQ", quality="4k")
    assert response.error.startswith("Unsupported quality: 4k")
    assert scripted.calls == []


def test_start_processing_returns_cancellable_handle(scripted, api):
    scripted.add("POST", "/api/videos/v1/process", (200, {"jobId": "job-4"}))
    scripted.add("GET", "/api/jobs/job-4/progress", (200, {"jobId": "job-4", "status": "running", "progress": 20}))

    handle = api.start_processing("v1", PROCESS_SETTINGS).data
    handle.cancel()
    result = handle.wait(timeout=5)

    assert handle.state == JobState.CANCELLED
    assert not result.ok


def test_save_caption_creates_then_updates(scripted, api):
    stored = {"id": "cap-1", "videoId": "v1", "text": "Hi", "startTime": 1, "endTime": 2}
    scripted.add("POST", "/api/captions", (201, stored))
    scripted.add("PUT", "/api/captions/cap-1", (200, {**stored, "text": "Hello"}))

    created = api.save_caption({"videoId": "v1", "text": "Hi", "startTime": 1, "endTime": 2}).data
    assert created.id == "cap-1"

    created.text = "Hello"
    updated = api.save_caption(created).data
    assert updated.text == "Hello"
    assert [call[:2] for call in scripted.calls] == [("POST", "/api/captions"), ("PUT", "/api/captions/cap-1")]


def test_caption_times_are_validated():
    with pytest.raises(ValueError, match="end time must be after its start time"):
        CaptionRecord(video_id="v1", text="x", start_time=3, end_time=3)


def test_analytics_time_range(scripted, api):
    scripted.add("GET", "/api/analytics/videos", (200, {"timeRange": "30d", "total": 0}))
    assert api.get_video_analytics("30d").data["total"] == 0
    assert api.get_video_analytics("1y").error.startswith("Unsupported time range: 1y")
    assert len(scripted.calls) == 1


def test_end_to_end_against_the_app(client, engine, data_dirs, fake_ffmpeg, fake_queue, tmp_path):
    """the client driving the real routes in-process"""
    session = requests.Session()
    session.mount("http://", AppAdapter(client))
    api = ApiClient(make_config(), session=session)

    assert api.signup("E2E", "e2e@example.com", "long-enough").ok
    assert api.login("e2e@example.com", "long-enough").ok

    path = tmp_path / "trip.webm"
    path.write_bytes(b"\x1a\x45\xdf\xa3" * 1000)
    seen = []
    uploaded = api.upload_video(path, on_progress=seen.append)
    assert uploaded.ok, uploaded.error
    assert uploaded.data.name == "trip.webm"
    assert seen[-1] == 100

    handle = api.start_processing(uploaded.data.id, PROCESS_SETTINGS, start=False).data
    job_tracker.update_job_progress(handle.job_id, 40)
    assert handle.poll() is False
    assert handle.progress == 40

    job_tracker.complete_job(handle.job_id, video_id=None)
    assert handle.poll() is True
    assert handle.result.data.id == uploaded.data.id

    assert api.delete_video(uploaded.data.id).data["deleted"] is True
    assert api.get_video(uploaded.data.id).error == "Video not found"


def test_get_captions_parses_records(scripted, api):
    scripted.add("GET", "/api/videos/v1/captions", (200, [
        {"id": "cap-1", "videoId": "v1", "text": "Hi", "startTime": 0.5, "endTime": 2},
    ]))
    captions = api.get_captions("v1").data
    assert captions[0].start_time == 0.5
    assert captions[0].video_id == "v1"


def test_feature_and_platform_analytics(scripted, api):
    scripted.add("GET", "/api/analytics/features", (200, {"totalJobs": 4}))
    scripted.add("GET", "/api/analytics/platforms", (200, {"platforms": {"tiktok": 2}}))
    assert api.get_feature_analytics().data["totalJobs"] == 4
    assert api.get_platform_analytics().data["platforms"] == {"tiktok": 2}


def test_start_remote_download_polls_in_background(scripted, api):
    scripted.add("POST", "/api/videos/youtube/download", (200, {"jobId": "job-5"}))
    scripted.add("GET", "/api/jobs/job-5/progress", (200, {"jobId": "job-5", "status": "completed", "progress": 100, "completed": True}))
    scripted.add("GET", "/api/jobs/job-5/result", (200, {"id": "v8", "name": "Imported", "status": "completed"}))

    handle = api.start_remote_download("https://youtu.be/dQw4w9WgXcQ").data
    result = handle.wait(timeout=5)

    assert result.data.id == "v8"
    assert scripted.count("GET", "/api/jobs/job-5/result") == 1


def test_start_clip_generation_needs_a_clip(scripted, api):
    response = api.start_clip_generation("v1", {"platforms": ["tiktok"], "clipCount": 0})
    assert response.error == "At least one clip is required"
    assert scripted.calls == []


def test_each_clip_job_returns_only_its_own_clips(client, engine, data_dirs, fake_ffmpeg, fake_queue, tmp_path, monkeypatch):
    monkeypatch.setattr(worker, "engine", engine)
    monkeypatch.setattr(ffmpeg, "cut_clip", lambda src, dst, start, end, resolution=None: dst)
    session = requests.Session()
    session.mount("http://", AppAdapter(client))
    api = ApiClient(make_config(), session=session)
    assert api.signup("Clips", "clips@example.com", "long-enough").ok
    assert api.login("clips@example.com", "long-enough").ok

    path = tmp_path / "talk.mp4"
    path.write_bytes(b"\0" * 4096)
    video_id = api.upload_video(path).data.id

    batches = []
    for _ in range(2):
        handle = api.start_clip_generation(video_id, {"platforms": ["tiktok"], "clipCount": 2}, start=False).data
        func, args, _ = fake_queue.calls[-1]
        func(*args)
        assert handle.poll() is True
        batches.append([clip.id for clip in handle.result.data])

    assert [len(batch) for batch in batches] == [2, 2]
    assert not set(batches[0]) & set(batches[1])


def test_login_and_signup_do_not_send_a_stored_token(scripted, api):
    api.tokens.save("stale-token", {"id": "u0"})
    scripted.add("POST", "/api/auth/signup", (201, {"id": "u1"}))
    scripted.add("POST", "/api/auth/login", (401, {"message": "Invalid email or password"}))
    scripted.add("GET", "/api/videos", (200, []))

    assert api.signup("Ada", "ada@example.com", "long-enough").ok
    assert api.login("ada@example.com", "wrong").error == "Invalid email or password"
    api.list_videos()

    signup_call, login_call, list_call = scripted.calls
    assert b'"name": "Ada"' in signup_call[2]
    assert b'"email": "ada@example.com"' in signup_call[2]
    assert "Authorization" not in signup_call[3]
    assert "Authorization" not in login_call[3]
    assert list_call[3]["Authorization"] == "Bearer stale-token"

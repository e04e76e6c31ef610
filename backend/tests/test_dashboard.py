import pytest

from videoai.client.dashboard import Dashboard, platform_name
from videoai.client.mock import InMemoryVideoStore

from conftest import make_api_client


@pytest.fixture(name="dashboard")
def dashboard_fixture(scripted):
    api = make_api_client(scripted, transfer_mode="mock", store=InMemoryVideoStore())
    return Dashboard(api)


def test_platform_defaults(dashboard):
    assert dashboard.selected_platform == "youtube"
    assert dashboard.settings.aspect_ratio == "16:9"
    assert dashboard.settings.custom_settings == {"endScreen": True, "annotations": False}

    dashboard.change_platform("tiktok")
    assert (dashboard.settings.resolution, dashboard.settings.quality) == ("1080x1920", 75)
    dashboard.change_platform("instagram")
    assert dashboard.settings.optimization_preset == "aesthetic"


def test_unknown_platform_is_rejected(dashboard):
    with pytest.raises(ValueError):
        dashboard.change_platform("myspace")


def test_update_settings_only_touches_selected_platform(dashboard):
    dashboard.update_settings(quality=95, auto_caption=True)
    assert dashboard.settings.quality == 95
    dashboard.change_platform("tiktok")
    assert dashboard.settings.quality == 75


def test_process_requires_a_video(dashboard):
    response = dashboard.process_current()
    assert response.error == "Upload or select a video first"
    assert dashboard.last_error == "Upload or select a video first"


def test_upload_process_and_generate(dashboard, video_file):
    uploaded = dashboard.upload(video_file)
    assert uploaded.ok
    assert dashboard.is_video_uploaded
    assert dashboard.current_video_name == "clip.mp4"
    assert dashboard.upload_progress == 100
    assert not dashboard.is_uploading

    dashboard.change_platform("tiktok")
    processed = dashboard.process_current()
    assert processed.ok
    assert dashboard.current_video.status == "completed"
    assert dashboard.current_video.platform == "tiktok"
    assert dashboard.processing_progress == 100

    generated = dashboard.generate_shorts(clip_count=2, platforms=["tiktok", "youtube"])
    assert generated.ok
    assert [clip.platform for clip in dashboard.generated_clips] == ["tiktok", "youtube"]
    assert dashboard.generation_progress == 100
    assert dashboard.last_error is None


def test_import_remote_selects_the_video(dashboard):
    response = dashboard.import_remote("https://youtu.be/dQw4w9WgXcQ")
    assert response.ok
    assert dashboard.current_video.id == "yt-dQw4w9WgXcQ"
    assert dashboard.current_thumbnail_url == "https://img.youtube.com/vi/dQw4w9WgXcQ/mqdefault.jpg"


def test_processing_settings_carry_platform_extras(dashboard):
    dashboard.change_platform("instagram")
    wire = dashboard.processing_settings().to_wire()
    assert wire["platform"] == "instagram"
    assert wire["aspectRatio"] == "1:1"
    assert wire["customSettings"] == {"filter": "normal", "boomerang": False}


def test_platform_names():
    assert platform_name("YouTube") == "YouTube Short"
    assert platform_name("vimeo") == "vimeo"

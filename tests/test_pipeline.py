"""
Pipeline Tests
==============

End-to-end tests of RecordingPipeline against a fake view, a fake
compression backend and a DirectorySink.
"""

import io
from pathlib import Path
from urllib.parse import urlparse

import pytest
from PIL import Image

from scrollgif.compression import PostCompressor
from scrollgif.config import CompressionConfig
from scrollgif.errors import ActionError, CaptureError, RecordingError, SaveError
from scrollgif.main import (
    RecordingPipeline,
    artifact_base_name,
    normalize_url,
    requested_profiles,
)
from scrollgif.models.profile import ProfileKind
from scrollgif.models.reason_codes import FailurePhase
from scrollgif.sink import DirectorySink


def _pipeline(view, tmp_path, settings, backend, sleep) -> RecordingPipeline:
    return RecordingPipeline(
        view,
        DirectorySink(tmp_path),
        settings=settings,
        compressor=PostCompressor(backend, sleep=sleep),
        sleep=sleep,
    )


def _path(locator: str) -> Path:
    return Path(urlparse(locator).path)


class TestHelpers:
    """Tests for URL and profile helpers."""

    def test_normalize_url(self):
        assert normalize_url("example.com") == "https://example.com"
        assert normalize_url("http://example.com/a") == "http://example.com/a"

    def test_artifact_base_name(self):
        assert artifact_base_name("https://www.apify.com/store?x=1") == "www.apify.com-scroll"
        assert artifact_base_name("github.com") == "github.com-scroll"

    def test_requested_profiles_order(self):
        config = CompressionConfig(lossy=True, lossless=True, ultra_lossy=True)
        kinds = [p.kind for p in requested_profiles(config)]
        assert kinds == [ProfileKind.LOSSY, ProfileKind.LOSSLESS, ProfileKind.ULTRA_LOSSY]

    def test_no_profiles_by_default(self):
        assert requested_profiles(CompressionConfig()) == []


class TestRecordingPipeline:
    """End-to-end recording runs."""

    @pytest.mark.asyncio
    async def test_records_hold_then_scroll(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        view = view_factory(width=100, height=100, document_height=3000)
        pipeline = _pipeline(view, tmp_path, small_settings, backend_factory(), recording_sleep)

        result = await pipeline.run("example.com")

        # 300ms hold at 10 fps, then (2000 - 300) / 100 scroll iterations
        assert result.frame_count == 3 + 17
        assert result.scroll_state.cycle_count == 17
        assert result.scroll_state.elapsed_time_ms == 2000
        kinds = [event[0] for event in view.events]
        assert kinds[:4] == ["capture", "capture", "capture", "capture"]
        assert kinds[4] == "scroll"

        original = _path(result.original_url)
        assert original.name == "example.com-scroll_original.gif"
        image = Image.open(io.BytesIO(original.read_bytes()))
        assert image.n_frames == 20
        assert image.size == (100, 100)
        assert result.artifact_size == original.stat().st_size
        assert result.lossy_url is None and result.lossless_url is None

    @pytest.mark.asyncio
    async def test_scroll_starts_below_viewport(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        """A page already scrolled to its bottom only records the hold."""
        view = view_factory(width=100, height=100, document_height=600, scroll_top=500)
        pipeline = _pipeline(view, tmp_path, small_settings, backend_factory(), recording_sleep)

        result = await pipeline.run("example.com")

        assert result.scroll_state.cycle_count == 0
        assert result.frame_count == 3

    @pytest.mark.asyncio
    async def test_compressed_variants_are_saved(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        small_settings.compression.lossy = True
        small_settings.compression.lossless = True
        view = view_factory(width=100, height=100)
        backend = backend_factory()
        pipeline = _pipeline(view, tmp_path, small_settings, backend, recording_sleep)

        result = await pipeline.run("https://example.com")

        assert _path(result.lossy_url).name == "example.com-scroll_lossy-comp.gif"
        assert _path(result.lossless_url).name == "example.com-scroll_lossless-comp.gif"
        assert _path(result.lossy_url).read_bytes() == b"GIF89a-smalllossy"
        assert result.ultra_lossy_url is None
        assert result.failed_profiles == {}
        assert [p.kind for p in backend.calls] == [ProfileKind.LOSSY, ProfileKind.LOSSLESS]

    @pytest.mark.asyncio
    async def test_failed_profile_keeps_original_and_siblings(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        small_settings.compression.lossy = True
        small_settings.compression.lossless = True
        view = view_factory(width=100, height=100)
        backend = backend_factory(failures=3)  # every lossy attempt fails
        pipeline = _pipeline(view, tmp_path, small_settings, backend, recording_sleep)

        result = await pipeline.run("example.com")

        assert _path(result.original_url).exists()
        assert result.lossy_url is None
        assert result.lossless_url is not None
        assert "lossy" in result.failed_profiles
        assert "COMPRESS" in result.failed_profiles["lossy"]

    @pytest.mark.asyncio
    async def test_click_then_hold(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        small_settings.recording.scroll_down = False
        small_settings.recording.click_selector = "#load-more"
        small_settings.recording.recording_time_after_click = 500
        view = view_factory(width=100, height=100)
        pipeline = _pipeline(view, tmp_path, small_settings, backend_factory(), recording_sleep)

        result = await pipeline.run("example.com")

        assert view.clicks == ["#load-more"]
        assert result.frame_count == 3 + 5
        assert result.scroll_state is None
        kinds = [event[0] for event in view.events]
        assert kinds.index("click") == 3

    @pytest.mark.asyncio
    async def test_click_failure_aborts_without_artifacts(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        small_settings.recording.scroll_down = False
        small_settings.recording.click_selector = "#missing"
        view = view_factory(width=100, height=100, fail_click=True)
        pipeline = _pipeline(view, tmp_path, small_settings, backend_factory(), recording_sleep)

        with pytest.raises(ActionError) as exc_info:
            await pipeline.run("example.com")

        assert exc_info.value.phase is FailurePhase.ACTION
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_capture_failure_reports_phase(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        view = view_factory(width=100, height=100, fail_capture_at=6)
        pipeline = _pipeline(view, tmp_path, small_settings, backend_factory(), recording_sleep)

        with pytest.raises(RecordingError) as exc_info:
            await pipeline.run("example.com")

        assert isinstance(exc_info.value, CaptureError)
        assert exc_info.value.phase is FailurePhase.CAPTURE
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_waits_for_page_load(
        self, view_factory, backend_factory, recording_sleep, small_settings, tmp_path
    ):
        small_settings.recording.wait_to_load_page = 1500
        small_settings.recording.scroll_down = False
        view = view_factory(width=100, height=100)
        pipeline = _pipeline(view, tmp_path, small_settings, backend_factory(), recording_sleep)

        await pipeline.run("example.com")

        assert recording_sleep.delays[0] == 1.5


class TestDirectorySink:
    """Tests for the local artifact sink."""

    @pytest.mark.asyncio
    async def test_save_returns_file_uri(self, tmp_path):
        sink = DirectorySink(tmp_path / "out")

        locator = await sink.save("a.gif", b"GIF89a;")

        assert locator.startswith("file://")
        assert (tmp_path / "out" / "a.gif").read_bytes() == b"GIF89a;"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "../escape.gif", "nested/a.gif"])
    async def test_rejects_path_like_names(self, tmp_path, name):
        with pytest.raises(SaveError) as exc_info:
            await DirectorySink(tmp_path).save(name, b"GIF89a;")

        assert exc_info.value.phase is FailurePhase.SAVE

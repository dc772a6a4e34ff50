"""Tests for OpenCVCapture and SamplingFrameReader over real files."""

from pathlib import Path

import numpy as np
import pytest

from framesampler import OpenFailure, SamplingFrameReader
from framesampler.capture import OpenCVCapture, PyAVCapture, get_capture_class


class TestGetCaptureClass:
    def test_known_backends(self):
        assert get_capture_class("opencv") is OpenCVCapture
        assert get_capture_class("pyav") is PyAVCapture

    def test_unknown_backend_raises_value_error(self):
        with pytest.raises(ValueError, match="Unknown capture backend"):
            get_capture_class("gstreamer")  # type: ignore[arg-type]


@pytest.mark.video
class TestOpenCVCapture:
    """Test the grab/retrieve primitives on a generated clip."""

    def test_grab_and_retrieve_first_frame(self, sample_video_file: tuple[Path, list[float]]):
        video_path, _ = sample_video_file

        with OpenCVCapture(video_path) as capture:
            assert capture.is_opened()
            assert capture.grab()
            ok, image = capture.retrieve()

        assert ok
        assert image.shape == (48, 64, 3)
        assert image.dtype == np.uint8

    def test_missing_file_not_opened(self, tmp_path: Path):
        with OpenCVCapture(tmp_path / "missing.mp4") as capture:
            assert not capture.is_opened()

    def test_release_is_idempotent(self, sample_video_file: tuple[Path, list[float]]):
        video_path, _ = sample_video_file
        capture = OpenCVCapture(video_path)

        capture.release()
        capture.release()

        assert not capture.is_opened()


@pytest.mark.video
class TestReaderWithOpenCV:
    """Test SamplingFrameReader end-to-end with the OpenCV backend."""

    def test_reads_every_frame_without_sampling(self, sample_video_file: tuple[Path, list[float]]):
        video_path, timestamps = sample_video_file

        with SamplingFrameReader(video_path, 0, backend="opencv") as reader:
            frames = list(reader)

        assert len(frames) == len(timestamps)
        assert frames[0].image.shape == (48, 64, 3)

    def test_timestamps_progress(self, sample_video_file: tuple[Path, list[float]]):
        video_path, _ = sample_video_file

        with SamplingFrameReader(video_path, 0, backend="opencv") as reader:
            returned = [frame.timestamp_ms for frame in reader]

        assert returned == sorted(returned)
        assert returned[-1] > returned[0]

    def test_sampling_spacing(self, long_video_file: tuple[Path, list[float]]):
        video_path, timestamps = long_video_file

        with SamplingFrameReader(video_path, 5, backend="opencv") as reader:
            returned = [frame.timestamp_ms for frame in reader]

        assert 1 <= len(returned) < len(timestamps)
        positive = [t for t in returned if t > 0]
        for t1, t2 in zip(positive, positive[1:]):
            assert t2 - t1 >= 200.0

    def test_missing_file_raises_open_failure(self, tmp_path: Path):
        with pytest.raises(OpenFailure):
            SamplingFrameReader(tmp_path / "missing.mp4", 0, backend="opencv")

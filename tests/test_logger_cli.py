import logging

import cv2
import pytest

import demo_cli
from rppg.pipeline import PPGProcessor
from utils.diagnostics import LoggingObserver, RecordingObserver
from utils.logger import get_logger
from utils.synthetic import synthetic_frames


def test_logger_is_cached():
    first = get_logger("tests.cached")
    assert get_logger("tests.cached") is first
    assert len(first.handlers) == 1
    assert not first.propagate


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("RPPG_LOG_LEVEL", "debug")
    assert get_logger("tests.env_level").level == logging.DEBUG


def test_recording_observer():
    observer = RecordingObserver()
    observer.on_event("peaks_detected", count=3)
    observer.on_event("ibi_filtered", kept=2, total=2)
    assert observer.named("peaks_detected") == [{"count": 3}]
    observer.clear()
    assert observer.events == []


def test_logging_observer_accepts_events():
    LoggingObserver("tests.diagnostics").on_event("metric_rejected", metric="hrv", value=120)


def test_demo_cli_synthetic_run(capsys):
    assert demo_cli.main(["--synthetic", "--duration", "12", "--detector", "disabled"]) == 0
    out = capsys.readouterr().out
    assert "RESULTS" in out
    assert "Heart Rate" in out


class FakeCapture:
    """Stands in for cv2.VideoCapture: a 25 FPS recording of a 72 BPM face."""

    FPS = 25.0

    def __init__(self, source):
        self.source = source
        self.released = False
        self._frames = synthetic_frames(600, fs=self.FPS, bpm=72.0, breath_amplitude=0.0)

    def isOpened(self):
        return True

    def get(self, prop):
        return self.FPS if prop == cv2.CAP_PROP_FPS else 0.0

    def read(self):
        frame = next(self._frames, None)
        if frame is None:
            return False, None
        return True, cv2.cvtColor(frame[0].data, cv2.COLOR_RGBA2BGR)

    def release(self):
        self.released = True


def test_demo_cli_uses_video_frame_rate(monkeypatch, capsys):
    sessions = []

    class RecordedProcessor(PPGProcessor):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            sessions.append(self)

    monkeypatch.setattr(demo_cli.cv2, "VideoCapture", FakeCapture)
    monkeypatch.setattr(demo_cli, "PPGProcessor", RecordedProcessor)

    assert demo_cli.main(["--video", "face.avi", "--duration", "20", "--detector", "disabled"]) == 0
    assert "25.0 FPS" in capsys.readouterr().out

    session = sessions[0]
    assert session.sampling_rate == 25.0
    assert session.get_buffer_size() == 500
    assert session.get_heart_rate() == pytest.approx(72.0, abs=5.0)


def test_demo_cli_reports_unopenable_source(monkeypatch, capsys):
    class ClosedCapture(FakeCapture):
        def isOpened(self):
            return False

    monkeypatch.setattr(demo_cli.cv2, "VideoCapture", ClosedCapture)
    assert demo_cli.main(["--video", "missing.avi"]) == 1
    assert "Could not open" in capsys.readouterr().out

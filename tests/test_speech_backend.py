import sys
import threading
import time
import types
from dataclasses import dataclass

import numpy as np
import pytest
from PyQt6.QtCore import QThread

from ui.handlers.speech_handler import SpeechHandler
from utils import speech_backend
from utils.speech_backend import WhisperSpeechBackend, detect_speech_backend

SAMPLE_RATE = 1600
CHUNK_SAMPLES = 400


class FakePortAudioError(Exception):
    pass


class FakeInputStream:
    """別スレッドから一定間隔で無音のチャンクをコールバックに渡す入力ストリーム。"""
    fail_with = None

    def __init__(self, samplerate, channels, dtype, callback):
        self.callback = callback
        self._running = threading.Event()
        self._feeder = threading.Thread(target=self._feed, daemon=True)

    def _feed(self):
        while self._running.is_set():
            self.callback(np.zeros((CHUNK_SAMPLES, 1), dtype=np.float32), CHUNK_SAMPLES, None, None)
            time.sleep(0.01)

    def __enter__(self):
        if FakeInputStream.fail_with is not None:
            raise FakeInputStream.fail_with
        self._running.set()
        self._feeder.start()
        return self

    def __exit__(self, *exc):
        self._running.clear()
        self._feeder.join()
        return False


@dataclass
class FakeSegment:
    text: str


class FakeModel:
    """呼び出し時点のラベルを付けて文字起こし結果を返す、処理に時間のかかるモデル。"""

    def __init__(self, delay=0.3):
        self.delay = delay
        self.label = "Q1"
        self.calls = 0

    def transcribe(self, audio, **kwargs):
        label = self.label
        self.calls += 1
        time.sleep(self.delay)
        return [FakeSegment(f"{label}-audio-{self.calls}")], None


@pytest.fixture
def fake_sounddevice(monkeypatch):
    module = types.ModuleType("sounddevice")
    module.InputStream = FakeInputStream
    module.PortAudioError = FakePortAudioError
    module.query_devices = lambda kind=None: {"name": "fake microphone"}
    FakeInputStream.fail_with = None
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    return module


@pytest.fixture
def model(monkeypatch):
    fake = FakeModel()
    monkeypatch.setitem(speech_backend._MODEL_CACHE, "fake-model", fake)
    return fake


@pytest.fixture
def backend(qapp, fake_sounddevice, model):
    created = WhisperSpeechBackend(model_name="fake-model", sample_rate=SAMPLE_RATE, window_seconds=1)
    yield created
    created.stop()
    _wait_until(qapp, lambda: not any(t.isRunning() for t in created.findChildren(QThread)))


def _wait_until(qapp, predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)
    qapp.processEvents()
    return predicate()


def test_segments_are_delivered_while_capturing(qapp, backend):
    results = []
    backend.result_received.connect(lambda text, final: results.append((text, final)))

    backend.start()
    assert _wait_until(qapp, lambda: results)
    assert results[0] == ("Q1-audio-1", True)


def test_restart_after_stop_drops_previous_question_audio(qapp, backend, model):
    speech = SpeechHandler(backend)
    finalized = []
    speech.transcript_finalized.connect(finalized.append)

    speech.start_listening()
    assert _wait_until(qapp, lambda: model.calls >= 1)

    # 文字起こしの途中で次の質問に移り、すぐに音声入力を再開する
    speech.stop_listening()
    model.label = "Q2"
    speech.start_listening()

    assert _wait_until(qapp, lambda: finalized)
    time.sleep(model.delay)
    qapp.processEvents()
    assert finalized
    assert all(text.startswith("Q2") for text in finalized)
    speech.stop_listening()


def test_capture_error_is_reported_and_ends(qapp, backend, fake_sounddevice):
    FakeInputStream.fail_with = FakePortAudioError("device unavailable")
    errors, ended = [], []
    backend.error_occurred.connect(errors.append)
    backend.ended.connect(lambda: ended.append(True))

    backend.start()
    assert _wait_until(qapp, lambda: ended)
    assert errors == ["device unavailable"]


def test_thread_finishing_emits_ended(qapp, backend, model):
    ended = []
    backend.ended.connect(lambda: ended.append(True))

    backend.start()
    assert backend.is_capturing
    backend.stop()
    assert not backend.is_capturing
    assert _wait_until(qapp, lambda: ended)
    assert ended == [True]


def test_start_while_capturing_keeps_one_thread(qapp, backend):
    backend.start()
    first = backend._thread
    backend.start()
    assert backend._thread is first


def test_detect_returns_none_when_module_missing(qapp, fake_sounddevice, monkeypatch):
    real_find_spec = speech_backend.importlib.util.find_spec

    def find_spec(name, *args):
        if name == "faster_whisper":
            return None
        return object() if name == "sounddevice" else real_find_spec(name, *args)

    monkeypatch.setattr(speech_backend.importlib.util, "find_spec", find_spec)
    assert detect_speech_backend() is None


def test_detect_returns_none_without_input_device(qapp, fake_sounddevice, monkeypatch):
    def no_device(kind=None):
        raise FakePortAudioError("no default input device")

    fake_sounddevice.query_devices = no_device
    monkeypatch.setattr(speech_backend.importlib.util, "find_spec", lambda name, *args: object())
    assert detect_speech_backend() is None


def test_detect_returns_whisper_backend(qapp, fake_sounddevice, monkeypatch):
    monkeypatch.setattr(speech_backend.importlib.util, "find_spec", lambda name, *args: object())
    assert isinstance(detect_speech_backend(), WhisperSpeechBackend)

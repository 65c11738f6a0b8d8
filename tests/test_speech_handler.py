import pytest

from ui.handlers.speech_handler import SpeechHandler
from utils.exceptions import CapabilityUnavailable, SpeechCaptureError


def test_unavailable_capability_raises(qapp):
    handler = SpeechHandler(None)
    assert not handler.is_available
    with pytest.raises(CapabilityUnavailable):
        handler.toggle_listening()
    assert not handler.listening


def test_toggle_starts_and_stops_capture(qapp, speech_backend):
    handler = SpeechHandler(speech_backend)
    changes = []
    handler.listening_changed.connect(changes.append)

    assert handler.toggle_listening() is True
    assert handler.toggle_listening() is False

    assert speech_backend.start_calls == 1
    assert speech_backend.stop_calls == 1
    assert changes == [True, False]


def test_start_and_stop_are_idempotent(qapp, speech_backend):
    handler = SpeechHandler(speech_backend)
    handler.stop_listening()
    assert not handler.listening

    handler.start_listening()
    handler.start_listening()
    assert handler.listening
    assert speech_backend.start_calls == 1

    handler.stop_listening()
    handler.stop_listening()
    assert not handler.listening
    assert speech_backend.stop_calls == 1


def test_only_final_segments_are_forwarded(qapp, speech_backend):
    handler = SpeechHandler(speech_backend)
    received = []
    handler.transcript_finalized.connect(received.append)
    handler.start_listening()

    speech_backend.emit_interim("I thi")
    speech_backend.emit_final("  I think so  ")
    speech_backend.emit_final("   ")

    assert received == ["I think so"]


def test_results_after_stop_are_dropped(qapp, speech_backend):
    handler = SpeechHandler(speech_backend)
    received = []
    handler.transcript_finalized.connect(received.append)
    handler.start_listening()
    handler.stop_listening()

    speech_backend.emit_final("late words")

    assert received == []


def test_capture_error_stops_listening(qapp, speech_backend):
    handler = SpeechHandler(speech_backend)
    errors = []
    handler.capture_failed.connect(errors.append)
    handler.start_listening()

    speech_backend.fail("microphone disconnected")

    assert not handler.listening
    assert len(errors) == 1
    assert isinstance(errors[0], SpeechCaptureError)
    assert "microphone disconnected" in str(errors[0])


def test_platform_end_resets_listening(qapp, speech_backend):
    handler = SpeechHandler(speech_backend)
    handler.start_listening()
    speech_backend.end()
    assert not handler.listening

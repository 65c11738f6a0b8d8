import time

import pytest

from utils.loading_state import LoadingState
from utils.request_worker import RequestRunner


def _wait_until_idle(qapp, loading, timeout=5.0):
    deadline = time.monotonic() + timeout
    while loading.is_loading and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)


def test_runner_delivers_result_and_releases_loading(qapp):
    loading = LoadingState()
    runner = RequestRunner(loading)
    results, errors, changes = [], [], []
    loading.loading_changed.connect(lambda busy, message: changes.append((busy, message)))

    runner.submit(lambda: 21 * 2, results.append, errors.append, "計算中")
    assert loading.is_loading
    _wait_until_idle(qapp, loading)
    runner.wait_all()

    assert results == [42]
    assert errors == []
    assert changes[0] == (True, "計算中")
    assert changes[-1][0] is False


def test_runner_delivers_errors(qapp):
    loading = LoadingState()
    runner = RequestRunner(loading)
    results, errors = [], []

    def failing():
        raise RuntimeError("network down")

    runner.submit(failing, results.append, errors.append)
    _wait_until_idle(qapp, loading)
    runner.wait_all()

    assert results == []
    assert isinstance(errors[0], RuntimeError)
    assert not loading.is_loading


def test_loading_state_nests_and_resets_message(qapp):
    loading = LoadingState()
    loading.start("一つ目")
    loading.start("二つ目")
    loading.stop()
    assert loading.is_loading
    assert loading.message == "二つ目"
    loading.stop()
    assert not loading.is_loading
    assert loading.message == "読み込み中..."
    loading.stop()
    assert not loading.is_loading


def test_loading_hold_releases_on_exception(qapp):
    loading = LoadingState()
    with pytest.raises(ValueError):
        with loading.hold("保存中"):
            assert loading.is_loading
            raise ValueError("boom")
    assert not loading.is_loading

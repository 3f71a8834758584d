import threading

import pytest

from src.eventflow.eventflow.attendance.writer import BackgroundWriter


def test_writes_run_in_submission_order():
    writer = BackgroundWriter(name="test-writer")
    seen = []
    for i in range(20):
        writer.submit(lambda i=i: seen.append(i))
    assert writer.flush(timeout=5)
    writer.close(timeout=5)
    assert seen == list(range(20))


def test_failed_write_goes_to_handler_and_later_writes_still_run():
    writer = BackgroundWriter(name="test-writer")
    errors = []
    seen = []

    def boom():
        raise ConnectionError("down")

    writer.submit(boom, on_error=errors.append)
    writer.submit(lambda: seen.append("after"))
    writer.close(timeout=5)

    assert len(errors) == 1 and isinstance(errors[0], ConnectionError)
    assert seen == ["after"]


def test_close_drains_queue_then_refuses_new_work():
    writer = BackgroundWriter(name="test-writer")
    release = threading.Event()
    done = []
    writer.submit(lambda: release.wait(5))
    writer.submit(lambda: done.append(True))
    release.set()
    writer.close(timeout=5)

    assert done == [True]
    assert writer.flush(timeout=1)
    with pytest.raises(RuntimeError):
        writer.submit(lambda: None)

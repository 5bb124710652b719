import threading

import pytest

from conftest import FakeWordSource, run_now
from unscrambler.anagram import is_anagram
from unscrambler.errors import NetworkError
from unscrambler.word_buffer import WordBuffer


@pytest.mark.unit
def test_empty_buffer_starts_single_refill(held_runner):
    source = FakeWordSource({4: ["stop", "lead", "mint"]})
    buffer = WordBuffer(source, target_length=4, batch_size=3, runner=held_runner)

    assert buffer.try_take_word() is None
    assert buffer.fetch_in_flight
    assert buffer.try_take_word() is None
    assert buffer.try_take_word() is None
    assert buffer.refills_started == 1
    assert len(held_runner.tasks) == 1

    held_runner.run_all()
    assert not buffer.fetch_in_flight
    assert buffer.pending_count == 3
    assert source.fetch_calls == [(3, 4)]


@pytest.mark.unit
def test_refill_of_n_words_yields_exactly_n(held_runner):
    source = FakeWordSource({4: ["stop", "lead", "mint", "wave"]})
    buffer = WordBuffer(source, target_length=4, batch_size=4, runner=held_runner)
    buffer.try_take_word()
    held_runner.run_all()

    taken = []
    for _ in range(4):
        pair = buffer.try_take_word()
        assert pair is not None
        assert is_anagram(pair.scrambled, pair.original)
        taken.append(pair.original)

    assert sorted(taken) == sorted(["stop", "lead", "mint", "wave"])
    assert buffer.try_take_word() is None
    assert buffer.refills_started == 2


@pytest.mark.unit
def test_most_recent_word_taken_first():
    source = FakeWordSource({4: ["stop", "lead"]})
    buffer = WordBuffer(source, target_length=4, runner=run_now)
    buffer.try_take_word()
    assert buffer.try_take_word().original == "lead"
    assert buffer.try_take_word().original == "stop"


@pytest.mark.unit
def test_failed_refill_clears_flag_and_allows_retry():
    source = FakeWordSource({4: ["stop", "lead"]}, outcomes=[NetworkError("down")])
    buffer = WordBuffer(source, target_length=4, runner=run_now)

    assert buffer.try_take_word() is None
    assert not buffer.fetch_in_flight
    assert buffer.pending_count == 0

    # Retry on the next take fills the buffer
    assert buffer.try_take_word() is None
    assert buffer.pending_count == 2
    assert buffer.try_take_word() is not None
    assert len(source.fetch_calls) == 2


@pytest.mark.unit
def test_unexpected_refill_error_clears_flag():
    source = FakeWordSource(outcomes=[RuntimeError("boom")])
    buffer = WordBuffer(source, target_length=4, runner=run_now)
    assert buffer.try_take_word() is None
    assert not buffer.fetch_in_flight


@pytest.mark.unit
def test_retry_waits_for_cooldown():
    now = [100.0]
    source = FakeWordSource({4: ["stop"]}, outcomes=[NetworkError("down")])
    buffer = WordBuffer(source, target_length=4, retry_cooldown_secs=1.0,
                        runner=run_now, clock=lambda: now[0])

    buffer.try_take_word()
    now[0] += 0.5
    buffer.try_take_word()
    assert len(source.fetch_calls) == 1

    now[0] += 0.6
    buffer.try_take_word()
    assert len(source.fetch_calls) == 2
    assert buffer.pending_count == 1


@pytest.mark.unit
def test_set_target_length_drops_other_lengths():
    source = FakeWordSource({4: ["stop", "lead"], 5: ["stone"]})
    buffer = WordBuffer(source, target_length=4, runner=run_now)
    buffer.try_take_word()
    assert buffer.pending_count == 2

    buffer.set_target_length(5)
    assert buffer.pending_count == 0
    buffer.try_take_word()
    assert buffer.try_take_word().original == "stone"
    assert source.fetch_calls[-1] == (10, 5)


@pytest.mark.unit
def test_stale_length_refill_is_dropped(held_runner):
    source = FakeWordSource({4: ["stop", "lead"]})
    buffer = WordBuffer(source, target_length=4, runner=held_runner)
    buffer.try_take_word()
    buffer.set_target_length(5)
    held_runner.run_all()
    assert buffer.pending_count == 0
    assert not buffer.fetch_in_flight


@pytest.mark.unit
def test_close_discards_late_refill(held_runner):
    source = FakeWordSource({4: ["stop"]})
    buffer = WordBuffer(source, target_length=4, runner=held_runner)
    buffer.try_take_word()
    buffer.close()
    held_runner.run_all()
    assert buffer.pending_count == 0
    assert buffer.try_take_word() is None
    assert buffer.refills_started == 1
    assert buffer.wait_for_words(timeout=0.01) is False


@pytest.mark.integration
def test_concurrent_takes_launch_one_fetch():
    gate = threading.Event()
    source = FakeWordSource({4: ["stop", "lead", "mint"]}, gate=gate)
    buffer = WordBuffer(source, target_length=4, batch_size=3)

    start = threading.Barrier(16)
    results = []

    def take():
        start.wait()
        results.append(buffer.try_take_word())

    threads = [threading.Thread(target=take) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert results == [None] * 16
    assert buffer.refills_started == 1
    assert buffer.fetch_in_flight

    gate.set()
    assert buffer.wait_for_words(timeout=5)
    assert buffer.wait_for_refill(timeout=5)
    assert len(source.fetch_calls) == 1
    assert buffer.pending_count == 3

from datetime import datetime, timezone

from lot_kernel.domain.clock import DeterministicClock, SystemClock


def test_deterministic_clock_is_stable():
    clock = DeterministicClock()

    assert clock.now() == clock.now()
    assert clock.now() == datetime(2024, 7, 1, 9, 0, tzinfo=timezone.utc)


def test_tick_advances_one_second():
    clock = DeterministicClock()
    start = clock.now()

    assert (clock.tick() - start).total_seconds() == 1


def test_epoch_millis():
    clock = DeterministicClock(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))

    assert clock.epoch_millis() == 1000


def test_set_time_resets_advance():
    clock = DeterministicClock()
    clock.advance(30)
    target = datetime(2025, 1, 1, tzinfo=timezone.utc)

    clock.set_time(target)

    assert clock.now() == target


def test_system_clock_is_aware():
    assert SystemClock().now().tzinfo is not None

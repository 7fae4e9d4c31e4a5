import pytest

from nfsping.statistics import pingStatistics


@pytest.mark.parametrize("samples", [
    [1500],
    [1000, 2000, 3000],
    [870, 12, 99999, 4321, 4321, 5],
    list(range(1, 500, 7)),
])
def test_running_average_matches_batch_mean(samples):
    stats = pingStatistics()
    for us in samples:
        stats.sent += 1
        stats.add(us)

    assert stats.received == len(samples)
    assert stats.avg == pytest.approx(sum(samples) / len(samples))
    assert stats.min == min(samples)
    assert stats.max == max(samples)


def test_first_sample_sets_all_aggregates():
    stats = pingStatistics()
    assert stats.min is None and stats.avg is None and stats.max is None
    stats.sent += 1
    stats.add(2500)
    assert (stats.min, stats.avg, stats.max) == (2500, 2500, 2500)


def test_loss_from_counters():
    stats = pingStatistics()
    assert stats.loss == 0
    for us in (100, None, None, 300):
        stats.sent += 1
        if us is None:
            stats.miss()
        else:
            stats.add(us)
    assert stats.received <= stats.sent
    assert stats.loss == 50.0


def test_history_disabled_by_default():
    stats = pingStatistics()
    stats.sent += 1
    stats.miss()
    assert stats.history is None


def test_history_records_every_attempt():
    stats = pingStatistics(history=True)
    # failures before the first reply are kept too
    for us in (None, 1200, None, 800):
        stats.sent += 1
        if us is None:
            stats.miss()
        else:
            stats.add(us)
    assert stats.history == [None, 1200, None, 800]
    assert len(stats.history) == stats.sent

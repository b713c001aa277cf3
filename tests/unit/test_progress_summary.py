from coursecore.components.progress import bucket_labels, summarize_completion

EDGES = [25, 50, 75, 100]


def test_bucket_labels():
    assert bucket_labels(EDGES) == ["0-24", "25-49", "50-74", "75-99", "100"]


def test_summary_buckets_and_mean():
    summary = summarize_completion([0, 24.9, 25, 60, 99.5, 100], EDGES)
    assert summary.count == 6
    assert summary.mean == round((0 + 24.9 + 25 + 60 + 99.5 + 100) / 6, 2)
    assert summary.distribution == {
        "0-24": 2,
        "25-49": 1,
        "50-74": 1,
        "75-99": 1,
        "100": 1,
    }


def test_empty_summary():
    summary = summarize_completion([], EDGES)
    assert summary.count == 0
    assert summary.mean is None
    assert sum(summary.distribution.values()) == 0

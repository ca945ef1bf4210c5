from appsec_gym.services.progress import ProgressRecorder


def test_record_and_reload(tmp_path) -> None:
    recorder = ProgressRecorder(tmp_path / "nested" / "progress.json")

    recorder.record("xss-stored", passed=True, score=87.5, grade="A-")
    recorder.record("sql-injection-basic", passed=False, score=40.0, grade="F")

    reloaded = ProgressRecorder(tmp_path / "nested" / "progress.json")
    assert reloaded.get("xss-stored").score == 87.5
    assert reloaded.completed_ids() == ["xss-stored"]


def test_latest_verdict_wins(tmp_path) -> None:
    recorder = ProgressRecorder(tmp_path / "progress.json")
    recorder.record("xss-stored", passed=False, score=50.0, grade="F")
    recorder.record("xss-stored", passed=True, score=90.0, grade="A")
    assert recorder.get("xss-stored").grade == "A"


def test_corrupt_file_reads_as_empty(tmp_path) -> None:
    path = tmp_path / "progress.json"
    path.write_text("{not json")

    recorder = ProgressRecorder(path)

    assert recorder.load().challenges == {}
    assert recorder.get("xss-stored") is None

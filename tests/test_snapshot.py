# tests/test_snapshot.py
from app.core.errors import FetchError
from app.sources.snapshot import SNAPSHOT_ENDPOINTS, download_snapshot


class StubHttpSource:
    def __init__(self, failing=()):
        self.failing = set(failing)

    def fetch_raw(self, endpoint):
        if endpoint in self.failing:
            raise FetchError(endpoint, "timed out")
        return '{"results": []}'


def test_download_continues_past_failures(tmp_path):
    result = download_snapshot(StubHttpSource(failing={"probing"}), str(tmp_path))
    assert result.failed == {"probing": "failed to fetch probing: timed out"}
    assert set(result.written) == set(SNAPSHOT_ENDPOINTS) - {"probing"}
    assert (tmp_path / "denial.json").read_text() == '{"results": []}'
    assert not (tmp_path / "probing.json").exists()

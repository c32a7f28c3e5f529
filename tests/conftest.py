from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's .env out of Settings() built by tests."""
    monkeypatch.chdir(tmp_path)

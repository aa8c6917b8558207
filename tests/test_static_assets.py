from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from rentals.config import Settings
from rentals.errors import ConfigurationError
from rentals.service import create_app
from rentals.storage import MemoryStorage


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    dist = tmp_path / "public"
    dist.mkdir()
    (dist / "index.html").write_text("<html><body>rentals</body></html>", encoding="utf-8")
    (dist / "app.js").write_text("console.log('hi');", encoding="utf-8")
    return dist


def test_static_assets_are_served(dist_dir: Path) -> None:
    app = create_app(storage=MemoryStorage(), settings=Settings(static_dir=str(dist_dir)))

    with TestClient(app) as client:
        index = client.get("/")
        script = client.get("/app.js")
        fallback = client.get("/inquiries/new")
        api = client.get("/api/rental-inquiries")

    assert index.status_code == 200
    assert "rentals" in index.text
    assert "console.log" in script.text
    assert fallback.status_code == 200
    assert "rentals" in fallback.text
    assert api.json() == []


def test_missing_build_directory_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Could not find the build directory"):
        create_app(storage=MemoryStorage(), settings=Settings(static_dir=str(tmp_path / "absent")))

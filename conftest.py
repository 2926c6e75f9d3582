from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from buyan_studio.storage import Storage


def make_svg(label: str = "x") -> str:
    """Small valid SVG whose content identifies it by `label`."""
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
        f'<text x="10" y="50">{label}</text></svg>'
    )


@pytest.fixture
def storage(tmp_path: Path) -> Storage:
    """Fresh durable storage under a per-test directory."""
    return Storage(tmp_path / "data")


@pytest.fixture
def client(tmp_path: Path):
    """API client over an app with its own data directory (startup runs)."""
    from buyan_studio.app import create_app

    with TestClient(create_app(tmp_path / "data")) as c:
        yield c

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeServiceManager:
    """Records enable_and_start calls instead of running systemctl."""

    def __init__(self, fail: Optional[set[str]] = None) -> None:
        self.calls: list[str] = []
        self.fail = fail or set()

    def enable_and_start(self, service_name: str) -> tuple[bool, Optional[str]]:
        self.calls.append(service_name)
        if service_name in self.fail:
            return False, f"Unit {service_name} failed to start"
        return True, None


@pytest.fixture
def service_manager() -> FakeServiceManager:
    return FakeServiceManager()


@pytest.fixture
def descriptor_dir(tmp_path: Path) -> Path:
    """A directory with two valid descriptor files."""
    path = tmp_path / "services"
    path.mkdir()
    (path / "web.yaml").write_text(
        "web:\n"
        "  unit:\n"
        "    Description: Web frontend\n"
        "  service:\n"
        "    ExecStart: /usr/bin/web\n"
        "    User: www\n"
        "  install:\n"
        "    WantedBy: multi-user.target\n"
    )
    (path / "worker.yml").write_text(
        "worker:\n"
        "  service:\n"
        "    ExecStart: /usr/bin/worker --queue default\n"
        "    Nice: 5\n"
        "  environment:\n"
        "    QUEUE: default\n"
    )
    return path


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    return tmp_path / "units"

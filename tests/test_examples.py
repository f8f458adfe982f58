"""Tests for the edge-detection example task."""

import importlib.util
from pathlib import Path
from types import ModuleType
from unittest.mock import patch

import cv2
import numpy as np
import pytest

TASK_PATH = Path(__file__).parent.parent / "examples" / "edge-detection" / "tasks" / "edge_map.py"


@pytest.fixture
def edge_map_task() -> ModuleType:
    """Import the task script as a module."""
    spec = importlib.util.spec_from_file_location("edge_map_task", TASK_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def photo(tmp_path: Path) -> Path:
    img = np.full((20, 24, 3), 40, dtype=np.uint8)
    img[5:15, 6:18] = 210
    path = tmp_path / "photo.png"
    cv2.imwrite(str(path), img)
    return path


class TestEdgeMapTask:
    """Tests for examples/edge-detection/tasks/edge_map.py."""

    @pytest.mark.parametrize("method", ["sobel", "canny"])
    def test_task_writes_edge_map(
        self,
        edge_map_task: ModuleType,
        photo: Path,
        tmp_path: Path,
        method: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        output = tmp_path / "data" / f"{method}.png"
        with patch(
            "sys.argv",
            ["edge_map.py", str(photo), "-o", str(output), "--method", method],
        ):
            edge_map_task.main()

        saved = cv2.imread(str(output), cv2.IMREAD_UNCHANGED)
        assert saved.shape == (20, 24)
        assert saved.max() == 255
        assert f"Edge map ({method})" in capsys.readouterr().out

    def test_task_reports_blank_image(
        self,
        edge_map_task: ModuleType,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        blank = tmp_path / "blank.png"
        cv2.imwrite(str(blank), np.full((8, 8), 42, dtype=np.uint8))

        with patch("sys.argv", ["edge_map.py", str(blank), "-o", str(tmp_path / "out.png")]):
            edge_map_task.main()

        assert "No edges found" in capsys.readouterr().out

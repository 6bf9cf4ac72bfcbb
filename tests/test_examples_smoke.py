import os
import subprocess
import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]


def run_command(args):
    env = os.environ.copy()
    env["PYTHONPATH"] = str(REPO_ROOT / "src")
    env["MPLBACKEND"] = "Agg"
    command = [sys.executable, *args]
    return subprocess.run(
        command,
        cwd=REPO_ROOT,
        env=env,
        check=True,
        text=True,
        capture_output=True,
    )


@pytest.mark.slow
@pytest.mark.examples_smoke
def test_examples_smoke(tmp_path):
    csv_path = tmp_path / "rings.csv"
    result = run_command([
        "examples/k_field_rings.py",
        "--n", "12",
        "--rings", "1", "2",
        "--csv", str(csv_path),
    ])
    assert "[interaction]" in result.stdout
    assert csv_path.exists()

    result = run_command(["examples/k_field_rings.py", "--n", "12", "--q", "topology", "--rings", "2", "3"])
    assert "topology" in result.stdout

    run_command(["examples/straight_front_3d.py", "--n", "8", "--nz", "2"])

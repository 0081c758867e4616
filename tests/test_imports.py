"""Each top-level package imports cleanly in a fresh interpreter."""

import subprocess
import sys

import pytest


@pytest.mark.parametrize(
    "module",
    [
        "assessor.model",
        "assessor.auth",
        "assessor.core",
        "assessor.storage.submission",
        "assessor.llm.evaluation",
        "assessor.web.assessor.main",
        "assessor.cli.__main__",
    ],
)
def test_import_on_its_own(module: str) -> None:
    proc = subprocess.run([sys.executable, "-c", f"import {module}"], capture_output=True, text=True, timeout=60)
    assert proc.returncode == 0, proc.stderr


def test_model_with_timestamps_resolves() -> None:
    from assessor.model import Assessment, Submission, User
    from assessor.model.base import WithCtime, WithTimestamps

    assert issubclass(Assessment, WithCtime)
    assert issubclass(Submission, WithTimestamps)
    assert issubclass(User, WithTimestamps)

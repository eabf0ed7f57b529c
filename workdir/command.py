"""External command execution pinned to an explicit working directory."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    cwd: Path | str,
    *args: str,
    check: bool = False,
    timeout: float | None = None,
    input_text: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run ``args`` with ``cwd`` as working directory and capture its output.

    The process working directory of the caller is left untouched. A missing
    executable raises ``FileNotFoundError``; with ``check`` a non-zero exit
    raises ``subprocess.CalledProcessError``.
    """
    if not args:
        raise ValueError("run_command needs a program to run")
    logger.debug("running %s in %s", args, cwd)
    return subprocess.run(
        list(args),
        cwd=str(cwd),
        input=input_text,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=check,
        timeout=timeout,
    )


__all__ = ["run_command"]

"""Child process execution with inherited or captured output."""

from __future__ import annotations

import contextlib
import logging
import shlex
import subprocess
from collections.abc import Generator, Sequence

logger = logging.getLogger(__name__)


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def _feed_input(proc: subprocess.Popen, input_text: str) -> None:
    try:
        proc.stdin.write(input_text)
    except BrokenPipeError:
        logger.debug("Command exited before reading its input")
    finally:
        # close() still releases the pipe when its final flush fails.
        with contextlib.suppress(BrokenPipeError):
            proc.stdin.close()


def stream_command(
    argv: Sequence[str],
    *,
    inherit_stdio: bool = False,
    input_text: str | None = None,
) -> Generator[str, None, int]:
    """Run a command to completion.

    When ``inherit_stdio`` is set the command writes straight to this
    process's stdout/stderr and nothing is yielded. Otherwise its stdout
    and stderr are merged and yielded line by line.

    Args:
        argv: Command and arguments.
        inherit_stdio: Share the parent's output streams.
        input_text: Text written to the command's stdin before reading output.

    Yields:
        Output lines without trailing newlines.

    Returns:
        The command's exit code.

    Raises:
        OSError: If the command cannot be started.
    """
    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if inherit_stdio:
        completed = subprocess.run(
            argv_list, input=input_text, text=True, errors="replace", check=False
        )
        logger.debug("Exit code %d", completed.returncode)
        return completed.returncode

    with subprocess.Popen(
        argv_list,
        stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
        bufsize=1,
    ) as proc:
        if input_text is not None:
            _feed_input(proc, input_text)
        for line in proc.stdout:
            yield line.rstrip("\r\n")
        returncode = proc.wait()

    logger.debug("Exit code %d", returncode)
    return returncode

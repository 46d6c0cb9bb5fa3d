"""Demonstration of starting, pausing, resuming and stopping a ping process."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from collections.abc import Sequence

from processctrl.process import Context, OutputStream, Process, ProcessError, new_with_buffer

BUFFER_SIZE = 10
RUN_TIMEOUT = 15.0
PAUSE_AFTER = 3.0
RESUME_AFTER = 5.0
TERMINATE_AFTER = 5.0

__all__ = ["build_ping_process", "main"]


def build_ping_process(platform: str | None = None) -> Process:
    """Return a continuous ping of localhost with buffered output streams.

    ``platform`` defaults to the current one; Windows needs ``-t`` to keep
    pinging, elsewhere ``-i 1`` sets a one-second interval.
    """
    name = sys.platform if platform is None else platform
    if name.lower().startswith("win"):
        return new_with_buffer(BUFFER_SIZE, "ping", "-t", "localhost")
    return new_with_buffer(BUFFER_SIZE, "ping", "-i", "1", "localhost")


def _echo(stream: OutputStream, label: str) -> threading.Thread:
    def pump() -> None:
        for line in stream:
            print(f"{label}: {line}", flush=True)

    thread = threading.Thread(target=pump, daemon=True)
    thread.start()
    return thread


def _parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="processctrl-example",
        description=(
            "Run ping against localhost, pause and resume it, "
            "then terminate it gracefully."
        ),
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the demonstration; return the exit status for the command."""
    _parser().parse_args(argv)

    proc = build_ping_process()
    ctx = Context.with_timeout(RUN_TIMEOUT)
    try:
        stdout, stderr = proc.run_with_context(ctx)
        print(f"Process running: {proc.is_running()}, PID: {proc.pid()}", flush=True)

        _echo(stdout, "STDOUT")
        _echo(stderr, "STDERR")

        time.sleep(PAUSE_AFTER)
        print("Pausing...", flush=True)
        try:
            proc.pause()
        except ProcessError as exc:
            print(f"Failed to pause: {exc}", flush=True)
        else:
            print(f"Process paused: {proc.is_paused()}", flush=True)

        time.sleep(RESUME_AFTER)
        print("Resuming...", flush=True)
        try:
            proc.resume()
        except ProcessError as exc:
            print(f"Failed to resume: {exc}", flush=True)
        else:
            print(f"Process paused: {proc.is_paused()}", flush=True)

        time.sleep(TERMINATE_AFTER)
        print("Terminating gracefully...", flush=True)
        try:
            proc.terminate()
        except ProcessError as exc:
            print(f"Failed to terminate gracefully: {exc}", flush=True)
            print("Force killing...", flush=True)
            try:
                proc.kill()
            except ProcessError:
                pass

        try:
            code = proc.wait()
        except ProcessError:
            pass
        else:
            print(f"Process exited with code: {code}", flush=True)
    finally:
        ctx.cancel()
    return 0


if __name__ == "__main__":
    sys.exit(main())
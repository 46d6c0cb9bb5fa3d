"""Start, stream, control and stop external processes."""

from __future__ import annotations

import subprocess
import threading
from collections import deque
from collections.abc import Callable, Iterator
from typing import IO

import psutil

DEFAULT_KILL_TIMEOUT = 5.0

__all__ = [
    "DEFAULT_KILL_TIMEOUT",
    "Context",
    "OutputStream",
    "Process",
    "ProcessError",
    "new",
    "new_with_buffer",
]


class ProcessError(Exception):
    """Raised when a process cannot be started or controlled."""


class Context:
    """A cancellation signal shared between a caller and running processes."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._timer: threading.Timer | None = None

    @classmethod
    def with_timeout(cls, timeout: float) -> Context:
        """Return a context that cancels itself after ``timeout`` seconds."""
        ctx = cls()
        timer = threading.Timer(timeout, ctx.cancel)
        timer.daemon = True
        ctx._timer = timer
        timer.start()
        return ctx

    def cancel(self) -> None:
        """Cancel the context; later calls do nothing."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
            timer = self._timer
        if timer is not None:
            timer.cancel()
        for callback in callbacks:
            callback()

    def cancelled(self) -> bool:
        """Return True once the context has been cancelled."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or until ``timeout``; return whether cancelled."""
        return self._event.wait(timeout)

    def _on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancellation; return a function that unregisters it."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def remove() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return remove
        callback()
        return lambda: None


class OutputStream:
    """A closable line channel; iterating it yields lines until it is closed.

    With a buffer size of zero a producer waits until each line is taken.
    """

    def __init__(self, buffer_size: int = 0) -> None:
        if buffer_size < 0:
            raise ValueError("buffer size must not be negative")
        self._capacity = buffer_size
        self._items: deque[str] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def __iter__(self) -> Iterator[str]:
        while True:
            with self._cond:
                while not self._items and not self._closed:
                    self._cond.wait()
                if not self._items:
                    return
                item = self._items.popleft()
                self._cond.notify_all()
            yield item

    def closed(self) -> bool:
        """Return True once no more lines will be produced."""
        with self._cond:
            return self._closed

    def _put(self, line: str) -> None:
        with self._cond:
            self._items.append(line)
            self._cond.notify_all()
            while len(self._items) > self._capacity and not self._closed:
                self._cond.wait()

    def _close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()


def _stream_output(pipe: IO[bytes], stream: OutputStream) -> None:
    try:
        for raw in pipe:
            if raw.endswith(b"\n"):
                raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            stream._put(raw.decode("utf-8", errors="replace"))
    except (OSError, ValueError):
        pass
    finally:
        try:
            pipe.close()
        except OSError:
            pass


def _kill_quietly(popen: subprocess.Popen) -> None:
    try:
        popen.kill()
    except OSError:
        pass


class Process:
    """An external process whose output is streamed line by line."""

    def __init__(self, program: str, *args: str, buffer_size: int = 0) -> None:
        if buffer_size < 0:
            raise ValueError("buffer size must not be negative")
        self.program = program
        self.args = tuple(args)
        self.buffer_size = buffer_size
        self._stdout = OutputStream(buffer_size)
        self._stderr = OutputStream(buffer_size)
        self._lock = threading.Lock()
        self._popen: subprocess.Popen | None = None
        self._stdin: IO[bytes] | None = None
        self._running = False
        self._paused = False

    def run(self) -> tuple[OutputStream, OutputStream]:
        """Start the process; return its stdout and stderr streams."""
        return self.run_with_context(Context())

    def run_with_context(self, ctx: Context) -> tuple[OutputStream, OutputStream]:
        """Start the process; it is killed when ``ctx`` is cancelled."""
        with self._lock:
            if self._running:
                raise ProcessError("process already running")
            if ctx.cancelled():
                raise ProcessError("failed to start process: context canceled")
            try:
                popen = subprocess.Popen(
                    [self.program, *self.args],
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except (OSError, ValueError) as exc:
                raise ProcessError(f"failed to start process: {exc}") from exc

            if self._stdout.closed() or self._stderr.closed():
                self._stdout = OutputStream(self.buffer_size)
                self._stderr = OutputStream(self.buffer_size)
            stdout, stderr = self._stdout, self._stderr

            self._popen = popen
            self._stdin = popen.stdin
            self._running = True
            self._paused = False

            readers = [
                threading.Thread(target=_stream_output, args=(popen.stdout, stdout), daemon=True),
                threading.Thread(target=_stream_output, args=(popen.stderr, stderr), daemon=True),
            ]
            for reader in readers:
                reader.start()
            threading.Thread(
                target=self._supervise,
                args=(ctx, popen, readers, stdout, stderr),
                daemon=True,
            ).start()
            return stdout, stderr

    def _supervise(
        self,
        ctx: Context,
        popen: subprocess.Popen,
        readers: list[threading.Thread],
        stdout: OutputStream,
        stderr: OutputStream,
    ) -> None:
        remove = ctx._on_cancel(lambda: _kill_quietly(popen))
        try:
            for reader in readers:
                reader.join()
        finally:
            remove()
            with self._lock:
                if self._popen is popen:
                    self._running = False
                    self._paused = False
                    self._close_stdin_locked()
                stdout._close()
                stderr._close()

    def kill(self) -> None:
        """Stop the process, forcing it after the default timeout."""
        self._kill_with_signal(DEFAULT_KILL_TIMEOUT, graceful=True)

    def kill_with_timeout(self, timeout: float) -> None:
        """Force-kill the process immediately."""
        self._kill_with_signal(timeout, graceful=False)

    def terminate(self) -> None:
        """Ask the process to stop, forcing it after the default timeout."""
        self._kill_with_signal(DEFAULT_KILL_TIMEOUT, graceful=True)

    def _kill_with_signal(self, timeout: float, graceful: bool) -> None:
        with self._lock:
            if not self._running or self._popen is None:
                raise ProcessError("process is not running")
            popen = self._popen
            if graceful:
                try:
                    popen.terminate()
                except OSError as exc:
                    raise ProcessError(f"failed to send SIGTERM: {exc}") from exc
                try:
                    popen.wait(timeout)
                except subprocess.TimeoutExpired:
                    self._force_kill(popen)
            else:
                self._force_kill(popen)
            self._running = False
            self._paused = False

    @staticmethod
    def _force_kill(popen: subprocess.Popen) -> None:
        try:
            popen.kill()
        except OSError as exc:
            raise ProcessError(f"failed to kill process: {exc}") from exc

    def wait(self) -> int:
        """Block until the process exits; return its exit code."""
        with self._lock:
            popen = self._popen
            running = self._running
        if not running or popen is None:
            raise ProcessError("process is not running")
        return popen.wait()

    def is_running(self) -> bool:
        """Return True while the process is started and its output is open."""
        with self._lock:
            return self._running

    def is_paused(self) -> bool:
        """Return True while the process is suspended."""
        with self._lock:
            return self._paused

    def pid(self) -> int:
        """Return the process id, or -1 if the process was never started."""
        with self._lock:
            return self._popen.pid if self._popen is not None else -1

    def write(self, data: bytes) -> None:
        """Send ``data`` to the process's standard input."""
        with self._lock:
            stdin = self._stdin
            running = self._running
        if not running:
            raise ProcessError("process is not running")
        if stdin is None or stdin.closed:
            raise ProcessError("stdin not available")
        try:
            stdin.write(data)
            stdin.flush()
        except (OSError, ValueError) as exc:
            raise ProcessError(f"failed to write to stdin: {exc}") from exc

    def write_string(self, s: str) -> None:
        """Send ``s`` encoded as UTF-8 to the process's standard input."""
        self.write(s.encode("utf-8"))

    def close_stdin(self) -> None:
        """Close the process's standard input, signalling end of input."""
        with self._lock:
            self._close_stdin_locked()

    def _close_stdin_locked(self) -> None:
        if self._stdin is not None:
            try:
                self._stdin.close()
            except OSError:
                pass
            self._stdin = None

    def pause(self) -> None:
        """Suspend the running process."""
        with self._lock:
            if not self._running or self._paused or self._popen is None:
                raise ProcessError("process not running or already paused")
            try:
                psutil.Process(self._popen.pid).suspend()
            except (psutil.Error, OSError) as exc:
                raise ProcessError(f"failed to pause process: {exc}") from exc
            self._paused = True

    def resume(self) -> None:
        """Continue a suspended process."""
        with self._lock:
            if not self._running or not self._paused or self._popen is None:
                raise ProcessError("process not running or not paused")
            try:
                psutil.Process(self._popen.pid).resume()
            except (psutil.Error, OSError) as exc:
                raise ProcessError(f"failed to resume process: {exc}") from exc
            self._paused = False


def new(program: str, *args: str) -> Process:
    """Create a process whose output streams are unbuffered."""
    return Process(program, *args)


def new_with_buffer(buffer_size: int, program: str, *args: str) -> Process:
    """Create a process whose output streams hold ``buffer_size`` lines."""
    return Process(program, *args, buffer_size=buffer_size)
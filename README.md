# processctrl

Manage external processes from Python. You can start a program and read its
standard output and standard error line by line as the lines arrive. You can
also send it input, pause and resume it, and stop it either gracefully or by
force.

- Line-by-line streaming of stdout and stderr through iterable output streams
- Pause and resume, built on `psutil` process suspension (SIGSTOP/SIGCONT on
  Linux and macOS, process suspension on Windows)
- Graceful termination that falls back to a forced kill after a timeout
- Cancellation and timeouts through a `Context`
- Writing to the process's standard input
- Thread-safe state queries

## Installation

```
pip install processctrl
```

`psutil` is the only dependency.

## Usage

Everything lives in the `processctrl.process` module.

```python
import threading
import time

from processctrl import process

proc = process.new("ping", "localhost")
stdout, stderr = proc.run()

def show(stream, label):
    for line in stream:
        print(label, line)

threading.Thread(target=show, args=(stdout, "OUT:"), daemon=True).start()
threading.Thread(target=show, args=(stderr, "ERR:"), daemon=True).start()

print("running:", proc.is_running(), "pid:", proc.pid())

time.sleep(3)
proc.pause()
print("paused:", proc.is_paused())

time.sleep(2)
proc.resume()

time.sleep(2)
proc.terminate()
```

`run()` and `run_with_context()` return two `OutputStream` objects, one for
stdout and one for stderr. Iterating a stream yields each line as text, with
the trailing line ending removed and invalid UTF-8 replaced.

A stream is closed once the process's output ends, so a `for` loop over it
stops by itself. `OutputStream.closed()` reports whether that has happened.

### Buffered output

By default the streams are unbuffered. The reader thread for a pipe waits
until each line has been taken, so read both streams, or the process may block
on a full pipe.

`process.new_with_buffer(10, "ping", "localhost")` creates a process whose
reader can fall behind by up to that many lines before output is held back.
`process.Process("ping", "localhost", buffer_size=10)` does the same. A
negative buffer size raises `ValueError`.

### Timeouts and cancellation

```python
from processctrl import process

ctx = process.Context.with_timeout(15.0)
proc = process.new("sleep", "60")
stdout, stderr = proc.run_with_context(ctx)
# The process is killed when the timeout expires or ctx.cancel() is called.
```

A `Context` can be cancelled with `cancel()`, and repeated calls have no
effect. It can be checked with `cancelled()`. `wait(timeout)` blocks on it and
returns whether it was cancelled. Starting a process with a context that is
already cancelled raises `ProcessError`.

### Standard input

```python
proc = process.new("grep", "hello")
stdout, stderr = proc.run()
proc.write_string("hello world\n")
proc.write(b"goodbye\n")
proc.close_stdin()
print(list(stdout))  # ['hello world']
```

- `write(data)` sends bytes and flushes them.
- `write_string(s)` sends `s` encoded as UTF-8.
- `close_stdin()` signals end of input.

Writing after stdin has been closed raises `ProcessError`
("stdin not available").

### Stopping and waiting

- `terminate()` asks the process to exit (SIGTERM on POSIX). If the process is
  still alive after five seconds, it is killed.
- `kill()` behaves exactly like `terminate()`.
- `kill_with_timeout(seconds)` kills the process at once.
- `wait()` blocks until the process exits and returns its exit code.

### State

- `is_running()` is true from a successful start until the process's output
  has ended or the process has been stopped through this object.
- `is_paused()` is true between `pause()` and `resume()`.
- `pid()` returns the process id. It returns `-1` if the process was never
  started.

A `Process` can be run again once it is no longer running. Each new run gets
new output streams.

### Errors

Some operations need a running process: `pause`, `resume`, `kill`,
`kill_with_timeout`, `terminate`, `wait`, `write` and `write_string`. Each of
them raises `process.ProcessError` when the process is not running.

Other cases that raise `ProcessError`:

- `wait()` after the process's output has already closed.
- `pause()` on a process that is already paused.
- `resume()` on a process that is not paused.
- `run` when the process is already running or cannot be started.

## Example program

The package installs a demonstration command:

```
processctrl-example
```

It runs `ping` against localhost with buffered streams and prints each line
prefixed with `STDOUT:` or `STDERR:`. It then:

1. pauses the ping after three seconds;
2. resumes it five seconds later;
3. terminates it after another five seconds;
4. prints the exit code when it can.

A 15-second timeout context guards the whole run. The same routine is
available as `processctrl.example.main()`. `processctrl.example.build_ping_process()`
returns the ping `Process` the command uses.

## Limitations

The package does not capture a process's output into files or logs.

It does not run processes through a shell.

It offers no way to send arbitrary signals. Only suspend, resume, terminate
and kill are available.
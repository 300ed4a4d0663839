"""JSON-RPC 2.0 over a child process's stdin/stdout.

One transport owns exactly one child process. Requests are written as one
JSON object per line; replies are matched to pending requests by id, so
they may arrive in any order. Non-JSON lines, notifications and replies for
unknown ids are discarded. stderr is drained continuously into the log and
never parsed.

Usage
-----
>>> async with await StdioRpcTransport.start("domain-kb-server") as transport:
...     info = await transport.send("initialize", {...}, timeout=10)
"""

from __future__ import annotations

import asyncio
import itertools
import json
import os
import signal
from collections import deque
from typing import Any, Mapping, Optional, Sequence

from domain_kb_common import (
    RpcError,
    RpcTimeoutError,
    TransportClosedError,
    TransportError,
    TransportStartError,
    get_logger,
)

from domain_kb_client.models import RpcEnvelope

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_GRACE_PERIOD = 2.0

# Whole-KB payloads travel on a single line
STREAM_LIMIT = 64 * 1024 * 1024

STDERR_TAIL_LINES = 50


def _id_key(request_id: Any) -> str:
    return str(request_id)


class StdioRpcTransport:
    """Line-delimited JSON-RPC channel to a child process.

    Create with :meth:`start`; always :meth:`close` (or use ``async with``).

    Parameters
    ----------
    process : asyncio.subprocess.Process
        Child launched with piped stdin/stdout/stderr
    name : str
        Label used in log events
    default_timeout : float
        Per-request timeout when the caller passes none (seconds)
    grace_period : float
        Time allowed for the child to exit after stdin is closed
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        name: str = "kb-server",
        default_timeout: float = DEFAULT_TIMEOUT,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ) -> None:
        self._process = process
        self.name = name
        self.default_timeout = default_timeout
        self.grace_period = grace_period

        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}
        self._ids = itertools.count(1)
        self._write_lock = asyncio.Lock()
        self._closed = False
        self.stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)

        self._stdout_task = asyncio.create_task(self._read_stdout(), name=f"{name}-stdout")
        self._stderr_task = asyncio.create_task(self._drain_stderr(), name=f"{name}-stderr")

    @classmethod
    async def start(
        cls,
        command: str,
        args: Sequence[str] = (),
        *,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
        name: str = "kb-server",
        default_timeout: float = DEFAULT_TIMEOUT,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ) -> "StdioRpcTransport":
        """Launch ``command args...`` and attach a transport to it.

        Raises:
            TransportStartError: If the process cannot be launched
        """
        extra: dict[str, Any] = {}
        if os.name == "posix":
            # Own process group so close() can kill the whole tree
            extra["start_new_session"] = True

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(env) if env is not None else None,
                cwd=cwd,
                limit=STREAM_LIMIT,
                **extra,
            )
        except (OSError, ValueError) as e:
            logger.warning("transport_start_failed", command=command, error=str(e))
            raise TransportStartError(f"Failed to start {command}: {e}") from e

        logger.info("transport_started", name=name, command=command, pid=process.pid)
        return cls(process, name=name, default_timeout=default_timeout, grace_period=grace_period)

    async def __aenter__(self) -> "StdioRpcTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode

    @property
    def pending_count(self) -> int:
        """Number of requests currently awaiting a reply."""
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def _allocate_id(self) -> int:
        return next(self._ids)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def _write(self, payload: Mapping[str, Any]) -> None:
        # json.dumps escapes newlines inside strings, so this is one line
        line = json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n"
        stdin = self._process.stdin
        if stdin is None or stdin.is_closing():
            raise TransportClosedError(f"{self.name} stdin is closed")

        async with self._write_lock:
            try:
                stdin.write(line.encode("utf-8"))
                await stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as e:
                raise TransportClosedError(f"{self.name} closed its input: {e}") from e

    async def request(
        self,
        message: RpcEnvelope | Mapping[str, Any],
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Send a request and return the raw reply envelope.

        An id is assigned when ``message`` has none.

        Raises:
            RpcTimeoutError: No matching reply before the deadline
            TransportClosedError: Child exited or transport was closed
        """
        if self._closed:
            raise TransportClosedError(f"{self.name} transport is closed")
        if self._stdout_task.done():
            raise TransportClosedError(f"{self.name} output already closed")

        payload = message.to_wire() if isinstance(message, RpcEnvelope) else dict(message)
        payload.setdefault("jsonrpc", "2.0")
        if payload.get("id") is None:
            payload["id"] = self._allocate_id()
        request_id = payload["id"]
        key = _id_key(request_id)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[dict[str, Any]] = loop.create_future()
        self._pending[key] = future

        timeout = self.default_timeout if timeout is None else timeout
        deadline = loop.time() + timeout

        try:
            await asyncio.wait_for(self._write(payload), timeout)
            remaining = max(0.0, deadline - loop.time())
            # Shielded: a timeout abandons the wait, not the reader
            return await asyncio.wait_for(asyncio.shield(future), remaining)
        except asyncio.TimeoutError:
            logger.warning(
                "rpc_timeout",
                name=self.name,
                method=payload.get("method"),
                id=request_id,
                timeout=timeout,
            )
            raise RpcTimeoutError(request_id, timeout) from None
        finally:
            if self._pending.get(key) is future:
                del self._pending[key]
            if not future.done():
                future.cancel()

    async def send(
        self,
        method: str,
        params: Optional[dict[str, Any]] = None,
        *,
        request_id: Optional[int | str] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Call ``method`` and return the reply's ``result``.

        Raises:
            RpcError: Reply carried an error object
            RpcTimeoutError: No matching reply before the deadline
            TransportClosedError: Child exited or transport was closed
        """
        envelope = RpcEnvelope(
            id=request_id if request_id is not None else self._allocate_id(),
            method=method,
            params=params if params is not None else {},
        )
        reply = await self.request(envelope, timeout=timeout)

        error = reply.get("error")
        if error:
            if isinstance(error, dict):
                raise RpcError(
                    int(error.get("code", 0)),
                    str(error.get("message", error)),
                    error.get("data"),
                )
            raise RpcError(0, str(error))
        return reply.get("result")

    async def notify(self, method: str, params: Optional[dict[str, Any]] = None) -> None:
        """Send a notification (no id, no reply)."""
        if self._closed:
            raise TransportClosedError(f"{self.name} transport is closed")
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            payload["params"] = params
        await self._write(payload)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _dispatch_line(self, raw: bytes) -> None:
        text = raw.decode("utf-8", errors="replace").strip()
        if not text:
            return

        try:
            message = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("rpc_non_json_line", name=self.name, line=text[:200])
            return

        if not isinstance(message, dict):
            return

        # Server-initiated requests and notifications carry a method
        if "method" in message or message.get("id") is None:
            logger.debug("rpc_message_discarded", name=self.name, method=message.get("method"))
            return

        future = self._pending.pop(_id_key(message["id"]), None)
        if future is None:
            logger.debug("rpc_unmatched_reply", name=self.name, id=message["id"])
            return
        if not future.done():
            future.set_result(message)

    async def _read_stdout(self) -> None:
        stdout = self._process.stdout
        assert stdout is not None
        try:
            while True:
                try:
                    line = await stdout.readline()
                except ValueError as e:
                    # Line exceeded STREAM_LIMIT; the reader skips past it
                    logger.warning("rpc_line_too_long", name=self.name, error=str(e))
                    continue
                if not line:
                    break
                self._dispatch_line(line)
        finally:
            self._fail_pending(TransportClosedError(f"{self.name} closed its output"))

    async def _drain_stderr(self) -> None:
        stderr = self._process.stderr
        assert stderr is not None
        while True:
            try:
                line = await stderr.readline()
            except ValueError:
                continue
            if not line:
                break
            text = line.decode("utf-8", errors="replace").rstrip()
            self.stderr_tail.append(text)
            logger.debug("child_stderr", name=self.name, line=text)

    def _fail_pending(self, error: TransportError) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _kill_tree(self) -> None:
        process = self._process
        if process.returncode is not None:
            return
        try:
            if os.name == "posix":
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            pass

    async def close(self) -> None:
        """Close stdin, wait for a graceful exit, then kill the process tree.

        Idempotent. Secondary errors are logged and swallowed.
        """
        if self._closed:
            return
        self._closed = True
        process = self._process

        try:
            if process.stdin is not None and not process.stdin.is_closing():
                process.stdin.close()
            try:
                await asyncio.wait_for(process.wait(), self.grace_period)
            except asyncio.TimeoutError:
                logger.warning("transport_kill", name=self.name, pid=process.pid)
                self._kill_tree()
                await process.wait()
        except Exception as e:
            logger.debug("transport_close_error", name=self.name, error=str(e))
        finally:
            for task in (self._stdout_task, self._stderr_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(self._stdout_task, self._stderr_task, return_exceptions=True)
            self._fail_pending(TransportClosedError(f"{self.name} transport is closed"))
            logger.info("transport_closed", name=self.name, returncode=process.returncode)

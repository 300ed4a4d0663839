"""Scripted line-delimited JSON-RPC server used by transport tests.

Methods:
    echo       reply with params, preceded by noise (banner-like text, a
               notification and a reply for a foreign id)
    delayed    reply with params after params["delay"] seconds
    never      never reply
    fail       reply with a JSON-RPC error
    notified   reply with the notification methods received so far
    big        reply with a string of params["size"] characters

Flags:
    --ignore-eof   keep running after stdin closes (tests forced kill)
"""

import json
import sys
import threading
import time

_write_lock = threading.Lock()
_notifications = []


def emit(obj):
    text = obj if isinstance(obj, str) else json.dumps(obj)
    with _write_lock:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()


def reply(request_id, result):
    emit({"jsonrpc": "2.0", "id": request_id, "result": result})


def handle(message):
    method = message.get("method")
    request_id = message.get("id")
    params = message.get("params") or {}

    if request_id is None:
        _notifications.append(method)
        return

    if method == "echo":
        emit("this line is not json")
        emit({"jsonrpc": "2.0", "method": "notifications/message", "params": {"level": "info"}})
        emit({"jsonrpc": "2.0", "id": "foreign-999", "result": {"foreign": True}})
        reply(request_id, params)
    elif method == "delayed":
        delay = float(params.get("delay", 0.2))
        threading.Timer(delay, reply, args=(request_id, params)).start()
    elif method == "never":
        pass
    elif method == "fail":
        emit(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "error": {"code": -32601, "message": "Method not found: fail", "data": {"x": 1}},
            }
        )
    elif method == "notified":
        reply(request_id, {"notifications": list(_notifications)})
    elif method == "big":
        reply(request_id, {"text": "x" * int(params.get("size", 100000))})
    else:
        emit({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32601, "message": "unknown"}})


def main():
    sys.stderr.write("scripted server starting\n")
    sys.stderr.flush()
    emit("scripted-rpc-server ready")

    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            continue
        handle(message)

    if "--ignore-eof" in sys.argv:
        while True:
            time.sleep(1)


if __name__ == "__main__":
    main()

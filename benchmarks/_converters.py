"""
MessagePack to JSON converters compared in the benchmarks.

The baselines unpack into Python objects with msgpack and serialize them
with a JSON library; mpjson renders the text directly.
"""

import base64
import json
from collections.abc import Callable
from typing import Any

import msgpack
import orjson
import ujson  # type: ignore[import-untyped]

import mpjson


def _bytes_default(obj: Any) -> str:
    if isinstance(obj, bytes):
        return base64.b64encode(obj).decode("ascii")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _unpack(buffer: bytes) -> Any:
    return msgpack.unpackb(buffer, raw=False, strict_map_key=False)


def via_stdlib_json(buffer: bytes) -> str:
    return json.dumps(_unpack(buffer), separators=(",", ":"), default=_bytes_default)


def via_orjson(buffer: bytes) -> str:
    return orjson.dumps(_unpack(buffer), default=_bytes_default).decode("utf-8")


def via_ujson(buffer: bytes) -> str:
    return ujson.dumps(_unpack(buffer), default=_bytes_default)


CONVERTERS: list[tuple[str, Callable[[bytes], str]]] = [
    ("msgpack+stdlib_json", via_stdlib_json),
    ("msgpack+orjson", via_orjson),
    ("msgpack+ujson", via_ujson),
    ("mpjson", mpjson.decode),
]

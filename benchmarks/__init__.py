"""
Benchmark suite for mpjson MessagePack to JSON text conversion.

Compares mpjson's single-pass decoder against unpacking with msgpack and
serializing with:
- Python standard library json
- orjson (Rust-optimized)
- ujson (ultra-fast JSON)

Measures conversion speed and memory usage across different data types.
"""

"""
Benchmark suite for easyjson.

Measures tree decoding, tree encoding and raw streaming reads against the
standard library json module, orjson and ujson.
"""

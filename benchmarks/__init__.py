"""Performance benchmarks for the correlators.

Run: python -m benchmarks.throughput
"""

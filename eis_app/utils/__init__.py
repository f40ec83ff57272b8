"""
Utility functions module.

Timestamp handling shared by the validator, the CSV loader and the wire
serialization:
- Every measurement carries the acquisition timestamp of its first sample
- The zero/epoch timestamp is a sentinel for "missing" and never valid
- Wire timestamps are RFC-3339 with nanosecond precision
"""

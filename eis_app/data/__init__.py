"""
Measurement data module.

Defines the signal, spectrum and impedance models, their validation, their
wire encoding, and CSV ingestion of recorded measurements.
"""

"""
EIS App - Electrochemical Impedance Spectroscopy processor

Turns paired voltage/current sample sequences into impedance spectra
Z(f) = U(f) / I(f) and delivers them to downstream consumers.
"""

__version__ = "0.1.0"
__author__ = "EIS Team"

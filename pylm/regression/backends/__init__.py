"""
Regression backends.

Available backends:
    CPUQRBackend: CPU reference implementation using pivoted QR
"""

from pylm.regression.backends.cpu import CPUQRBackend

__all__ = [
    "CPUQRBackend",
]

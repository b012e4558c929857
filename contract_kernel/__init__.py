"""
Contract Kernel

Pure foundation for the contract event scheduling engine:
- Currency and Money value objects with Decimal-only arithmetic
- Calendar-aware duration arithmetic (month-end clamping)
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"

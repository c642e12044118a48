"""
Payroll Kernel

Shared foundation for the attendance-to-payroll calculation engine:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with context propagation
- Immutable attendance and result value objects
"""

__version__ = "0.1.0"

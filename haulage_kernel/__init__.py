"""
Haulage Kernel

Shared primitives for the construction-logistics back office:
- Immutable voucher value objects and work-week bucketing
- Typed reconciliation errors with machine-readable codes
- Structured JSON logging
- SQLAlchemy engine/session plumbing
"""

__version__ = "0.1.0"

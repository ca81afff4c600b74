"""
Statement Kernel

Immutable value types and documents for bank statement interchange:
- Positional-text statements (MT940, MT941, MT942)
- Structured-elemental reports (camt.052, camt.053, camt.054)
- Fixed-width ledger rows for accounting back-ends
- Typed errors and structured logging shared by engines and converters
"""

__version__ = "0.1.0"

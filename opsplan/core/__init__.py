"""
Numeric primitives shared by every calculator.
"""

from .numeric import safe_divide, split_csv_ids

__all__ = ["safe_divide", "split_csv_ids"]

"""
Extractor package for payment text parsing.
Exports main functions for global import.
"""

from .amount_parser import extract_amount, extract_amount_match
from .currency import enhance
from .direction import classify_direction
from .local_parser import parse_local
from .merchant_parser import extract_merchant
from .pipeline import ExpensePipeline, process_observation
from .remote_parser import RemoteParser
from .sms_timestamp import parse_sms_timestamp

__all__ = [
    "extract_amount",
    "extract_amount_match",
    "enhance",
    "classify_direction",
    "parse_local",
    "extract_merchant",
    "ExpensePipeline",
    "process_observation",
    "RemoteParser",
    "parse_sms_timestamp",
]

"""
Expense Parser - payment text to structured expense.
Makes the pipeline available for global imports.
"""

# Re-export pipeline functions for convenience
from .extractor import ExpensePipeline, parse_local, process_observation

__all__ = [
    "ExpensePipeline",
    "parse_local",
    "process_observation",
]

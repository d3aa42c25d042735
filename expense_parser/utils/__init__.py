"""
Utils package for text normalization and OCR operations.
"""

from .text_utils import normalize, order_text_blocks

__all__ = ["normalize", "order_text_blocks"]

"""
Input Handler Module for the Document Date Annotator.

This module provides functionality for:
    - Loading uploaded images from bytes, files or data URIs
    - Normalizing images (orientation, RGB) for OCR
    - Encoding images as data URIs for screenshots

Author: ML Engineering Team
"""

from .image_loader import ImageLoader, decode_data_uri

__all__ = ['ImageLoader', 'decode_data_uri']

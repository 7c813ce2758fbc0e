"""
Module: paper_builder.images

Purpose:
    Image normalization for question papers. Turns image references into
    embeddable raster bytes with known dimensions, and resolves all of a
    paper's images ahead of layout.

Key Classes:
    - NormalizedImage: Embeddable bytes plus intrinsic size
    - ImageDecodeError: Non-fatal image failure

Key Functions:
    - resolve_image(): Resolve a single ImageBlock
    - resolve_document_images(): Resolve every image in a Document
    - scale_image(): Aspect-preserving fit into a width/height cap

Dependencies:
    - PIL: Decoding and re-encoding
    - requests: Remote fetch
"""

from .normalizer import ImageDecodeError, NormalizedImage, resolve_image, scale_image
from .resolver import ImageMap, ResolvedImage, resolve_document_images

__all__ = [
    "ImageDecodeError",
    "NormalizedImage",
    "resolve_image",
    "scale_image",
    "ImageMap",
    "ResolvedImage",
    "resolve_document_images",
]

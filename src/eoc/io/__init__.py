"""
IO helpers for loading field/object images and writing match outputs.
"""

from .image_loader import as_intensity, load_grayscale
from .writers import write_heatmap, write_hits_csv

__all__ = ["as_intensity", "load_grayscale", "write_heatmap", "write_hits_csv"]

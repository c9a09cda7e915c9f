"""
Detector adapter boundary: model contexts and class labels.
"""

from .backend import ModelContext
from .factory import create_model_context
from .labels import COCO_CLASSES, LabelTable, load_label_table

__all__ = [
    "ModelContext",
    "create_model_context",
    "COCO_CLASSES",
    "LabelTable",
    "load_label_table",
]

"""
Class id to label lookup.

Names come from a labels file (one name per line), else from the loaded model,
else the 80 COCO class names. Per-id overrides from config replace entries.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from video_annotator.errors import ConfigError

COCO_CLASSES: List[str] = [
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck",
    "boat", "traffic light", "fire hydrant", "stop sign", "parking meter", "bench",
    "bird", "cat", "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra",
    "giraffe", "backpack", "umbrella", "handbag", "tie", "suitcase", "frisbee",
    "skis", "snowboard", "sports ball", "kite", "baseball bat", "baseball glove",
    "skateboard", "surfboard", "tennis racket", "bottle", "wine glass", "cup",
    "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich", "orange",
    "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink",
    "refrigerator", "book", "clock", "vase", "scissors", "teddy bear",
    "hair drier", "toothbrush",
]


class LabelTable:
    """Immutable class-name table."""

    def __init__(
        self,
        names: Union[Sequence[str], Mapping[int, str]],
        overrides: Optional[Dict[int, str]] = None,
    ):
        if isinstance(names, Mapping):
            self._names = {int(k): str(v) for k, v in names.items()}
        else:
            self._names = dict(enumerate(names))
        self._overrides = dict(overrides or {})

    def __len__(self) -> int:
        return len(self._names)

    def label_for(self, class_id: int) -> str:
        """Name for a class id; ids outside the table render as the number itself."""
        override = self._overrides.get(class_id)
        if override is not None:
            return override
        return self._names.get(class_id, str(class_id))

    @classmethod
    def coco(cls, overrides: Optional[Dict[int, str]] = None) -> "LabelTable":
        return cls(COCO_CLASSES, overrides)

    @classmethod
    def from_file(cls, path: str, overrides: Optional[Dict[int, str]] = None) -> "LabelTable":
        """Load one label per line; blank trailing lines are ignored."""
        try:
            lines = Path(path).read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise ConfigError(f"Failed to read labels file {path}: {e}") from e

        names = [line.strip() for line in lines]
        while names and not names[-1]:
            names.pop()
        if not names:
            raise ConfigError(f"Labels file {path} is empty")
        logging.info(f"Loaded {len(names)} class labels from {path}")
        return cls(names, overrides)


def load_label_table(
    labels_path: Optional[str] = None,
    overrides: Optional[Dict[int, str]] = None,
    model_names: Optional[Mapping[int, str]] = None,
) -> LabelTable:
    """Labels file when configured, then the model's own class names, then COCO."""
    if labels_path:
        return LabelTable.from_file(labels_path, overrides)
    if model_names:
        return LabelTable(model_names, overrides)
    return LabelTable.coco(overrides)

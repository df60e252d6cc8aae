"""Extension-based media classification and hidden entry detection."""

from enum import Enum
from pathlib import PurePath
from typing import FrozenSet, Optional, Tuple, Union


class MediaCategory(Enum):
    """Kinds of media files reported to clients."""
    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    PROJECT = "project"


VIDEO_EXTENSIONS: FrozenSet[str] = frozenset({
    "mp4", "mov", "avi", "mkv", "wmv", "flv", "webm", "m4v", "mpg", "mpeg", "mxf", "r3d", "braw",
    "ari",
})

AUDIO_EXTENSIONS: FrozenSet[str] = frozenset({
    "mp3", "wav", "aac", "flac", "ogg", "m4a", "aiff", "aif", "wma",
})

IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({
    "jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "psd", "ai", "eps", "webp", "exr", "dpx",
    "tga", "raw", "cr2",
})

PROJECT_EXTENSIONS: FrozenSet[str] = frozenset({"prproj", "mogrt", "xml", "aaf", "edl"})

# Checked in order, first match wins.
CATEGORY_TABLES: Tuple[Tuple[MediaCategory, FrozenSet[str]], ...] = (
    (MediaCategory.VIDEO, VIDEO_EXTENSIONS),
    (MediaCategory.AUDIO, AUDIO_EXTENSIONS),
    (MediaCategory.IMAGE, IMAGE_EXTENSIONS),
    (MediaCategory.PROJECT, PROJECT_EXTENSIONS),
)


def classify(path: Union[str, PurePath]) -> Optional[MediaCategory]:
    """
    Classify a path by its extension.
    
    Args:
        path: File path to classify (only the final segment is inspected)
        
    Returns:
        The media category, or None for paths without a known media extension
    """
    suffix = PurePath(path).suffix
    if not suffix:
        return None
    
    ext = suffix[1:].lower()
    for category, extensions in CATEGORY_TABLES:
        if ext in extensions:
            return category
    return None


def is_media_file(path: Union[str, PurePath]) -> bool:
    """Check if a path has a media extension."""
    return classify(path) is not None


def is_hidden(path: Union[str, PurePath]) -> bool:
    """Check if the final segment of a path is a dotfile or dot-directory."""
    return PurePath(path).name.startswith(".")

"""
=========================================
Video collection operations package.
=========================================

Modules:
    video_collections: Set/list/map operations and reads on the videos table

Example:
    >>> from videos import VideoCollectionsRepository
    >>> repo = VideoCollectionsRepository()
"""

__version__ = "0.1.0"
__all__ = ['VideoCollectionsRepository', 'VideoCollectionsError', 'FrameIndexError']

from .video_collections import FrameIndexError, VideoCollectionsError, VideoCollectionsRepository

"""
========================================
Models for the Video Collections Sample
========================================

SQLAlchemy model and value-type definitions, kept apart from setup and
statement-building code so both can import them without cycles.

Modules:
    video_models: videos table, video_format type, codec and DTO

Example:
    >>> from models import Base, Video
    >>> Base.metadata.create_all(engine, tables=[Video.__table__])
"""

__version__ = "0.1.0"
__all__ = [
    'Base',
    'Video',
    'VideoDto',
    'VideoFormat',
    'VideoFormatMap',
    'VideoFormatType',
    'VIDEO_TABLENAME',
    'UDT_VIDEO_FORMAT_NAME',
    'VIDEO_FORMAT_FIELDS',
]

from .video_models import (
    UDT_VIDEO_FORMAT_NAME,
    VIDEO_FORMAT_FIELDS,
    VIDEO_TABLENAME,
    Base,
    Video,
    VideoDto,
    VideoFormat,
    VideoFormatMap,
    VideoFormatType,
)

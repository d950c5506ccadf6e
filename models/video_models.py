"""
===========================================================
Models for the videos table and the video_format type
===========================================================

SQLAlchemy declarative model and value types for the single-table schema
exercised by the sample:

    CREATE TYPE video_format AS (width integer, height integer);

    CREATE TABLE videos (
        videoid  uuid PRIMARY KEY,
        title    text,
        upload   timestamptz,
        email    text,
        url      text,
        tags     text[],      -- set<text>, kept duplicate-free
        frames   integer[],   -- list<int>
        formats  jsonb        -- map<text, video_format>
    );

Models:
    VideoFormat: Value object for the video_format structured type
    VideoFormatType: SQL type rendering as the video_format composite type
    VideoFormatMap: Codec between dict[str, VideoFormat] and the jsonb column
    Video: ORM mapping of the videos table
    VideoDto: Plain carrier for a full row, used by create_video()

Example:
    >>> from models.video_models import VideoDto, VideoFormat
    >>>
    >>> dto = VideoDto(title='Accelerate 2020', email='clun@sample.com')
    >>> dto.tags.add('cassandra')
    >>> dto.frames.extend([2, 3, 5, 8, 13, 21])
    >>> dto.formats['mp4'] = VideoFormat(640, 480)
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Set

from sqlalchemy import Column, DateTime, Integer, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator, UserDefinedType

VIDEO_TABLENAME = 'videos'
UDT_VIDEO_FORMAT_NAME = 'video_format'
UDT_VIDEO_FORMAT_WIDTH = 'width'
UDT_VIDEO_FORMAT_HEIGHT = 'height'

# Field order matters: it is the composite type's row constructor order
VIDEO_FORMAT_FIELDS = [
    {'name': UDT_VIDEO_FORMAT_WIDTH, 'type': 'INTEGER'},
    {'name': UDT_VIDEO_FORMAT_HEIGHT, 'type': 'INTEGER'},
]

Base = declarative_base()

INT4_MIN = -2 ** 31
INT4_MAX = 2 ** 31 - 1


def _as_int4(name: str, value: Any) -> int:
    """Convert one video_format field the way an INTEGER column would accept it.

    Raises:
        ValueError: If the value is not an integer (or integer string) in int4 range
    """
    if isinstance(value, bool):
        raise ValueError(f"video_format.{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"video_format.{name} must be an integer, got {value!r}")
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValueError(f"video_format.{name} must be an integer, got {value!r}") from None
    elif not isinstance(value, int):
        raise ValueError(f"video_format.{name} must be an integer, got {value!r}")

    if not INT4_MIN <= value <= INT4_MAX:
        raise ValueError(f"video_format.{name} out of integer range: {value}")
    return value


@dataclass(frozen=True)
class VideoFormat:
    """Value of the video_format structured type.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
    """

    width: int
    height: int

    def to_dict(self) -> Dict[str, int]:
        return {UDT_VIDEO_FORMAT_WIDTH: self.width, UDT_VIDEO_FORMAT_HEIGHT: self.height}

    @classmethod
    def from_dict(cls, value: Mapping[str, Any]) -> 'VideoFormat':
        """Build from a mapping; both fields are required and must be int4 integers.

        Raises:
            KeyError: If a field is missing
            ValueError: If a field is not an integer in int4 range
        """
        return cls(
            width=_as_int4(UDT_VIDEO_FORMAT_WIDTH, value[UDT_VIDEO_FORMAT_WIDTH]),
            height=_as_int4(UDT_VIDEO_FORMAT_HEIGHT, value[UDT_VIDEO_FORMAT_HEIGHT])
        )


class VideoFormatType(UserDefinedType):
    """SQL type for the video_format composite, used in CAST(... AS video_format)."""

    cache_ok = True

    def get_col_spec(self, **kw):
        return UDT_VIDEO_FORMAT_NAME


class VideoFormatMap(TypeDecorator):
    """Codec for the formats column.

    Binds ``dict[str, VideoFormat]`` (plain ``{'width', 'height'}`` mappings are
    accepted too) as a jsonb object and decodes result rows back into
    ``dict[str, VideoFormat]``. A NULL column decodes to an empty dict.

    Every bound value is checked against the video_format field types, so a
    bad value fails the statement (wrapped in StatementError) and nothing is stored.
    """

    impl = JSONB
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return {
            key: VideoFormat.from_dict(fmt.to_dict() if isinstance(fmt, VideoFormat) else fmt).to_dict()
            for key, fmt in value.items()
        }

    def process_result_value(self, value, dialect):
        if value is None:
            return {}
        return {key: VideoFormat.from_dict(fmt) for key, fmt in value.items()}


class Video(Base):
    """The videos table.

    Collection columns default to empty containers server-side; rows written
    by other clients may still hold NULL, which readers treat as empty.
    """
    __tablename__ = VIDEO_TABLENAME

    videoid = Column(UUID(as_uuid=True), primary_key=True,
                     comment='Unique identifier of the video')
    title = Column(Text, comment='Video title')
    upload = Column(DateTime(timezone=True), comment='Upload timestamp')
    email = Column(Text, comment='Email of the uploading user')
    url = Column(Text, comment='Video URL')
    tags = Column(ARRAY(Text), server_default=text("'{}'::text[]"),
                  comment='set<text>: unordered, unique tags')
    frames = Column(ARRAY(Integer, zero_indexes=True), server_default=text("'{}'::integer[]"),
                    comment='list<int>: ordered frames, zero-based in Python')
    formats = Column(VideoFormatMap, server_default=text("'{}'::jsonb"),
                     comment='map<text, video_format>: format name to dimensions')


@dataclass
class VideoDto:
    """Full row carrier for the videos table.

    No object mapping happens through it; the repository binds each field
    to the prepared insert.
    """

    videoid: uuid.UUID = field(default_factory=uuid.uuid4)
    title: Optional[str] = None
    upload: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    email: Optional[str] = None
    url: Optional[str] = None
    tags: Set[str] = field(default_factory=set)
    frames: List[int] = field(default_factory=list)
    formats: Dict[str, VideoFormat] = field(default_factory=dict)

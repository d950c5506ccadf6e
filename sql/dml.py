"""
===========================================
Data Manipulation Language (DML) Builders.
===========================================

SQLAlchemy Core statement factories for the videos table, one per
collection operation. Each factory returns an executable statement; none
of them touch a connection.

The two statements the sample executes repeatedly (insert and collection
read) use named ``bindparam()`` placeholders so they are built once and
executed with different parameters. The update factories take concrete
values and are built per call.

Functions:
- insert_video_statement: INSERT of a full row, overwriting an existing key
- select_collections_statement: SELECT tags, formats, frames by :videoid
- add_tag_statement / remove_tag_statement: set<text> add/remove
- replace_frames_statement / append_frame_statement / set_frame_statement:
  list<int> replace-all/append/replace-at-index
- put_format_statement / remove_format_statement: map<text, video_format>
  put/remove

Usage:
    from sql.dml import add_tag_statement, select_collections_statement

    conn.execute(add_tag_statement(videoid, 'OK'))
    row = conn.execute(select_collections_statement(), {'videoid': videoid}).first()
"""

import uuid
from typing import Iterable

from sqlalchemy import Integer, Text, bindparam, cast, func, literal, literal_column, select, tuple_, type_coerce, update
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.sql import Select, Update

from models.video_models import Video, VideoFormat, VideoFormatType

videos = Video.__table__

# Empty containers for collections that are still NULL
EMPTY_TEXT_ARRAY = literal_column("'{}'::text[]", type_=ARRAY(Text))
EMPTY_INT_ARRAY = literal_column("'{}'::integer[]", type_=ARRAY(Integer))
EMPTY_JSONB = literal_column("'{}'::jsonb", type_=JSONB)


def _update_video(videoid: uuid.UUID) -> Update:
    return update(videos).where(videos.c.videoid == videoid)


def insert_video_statement():
    """
    Build the INSERT of a full videos row.

    Every column is bound by name (``:videoid``, ``:title``, ``:upload``,
    ``:email``, ``:url``, ``:tags``, ``:frames``, ``:formats``). An existing
    row with the same videoid is overwritten.

    Returns:
        INSERT ... ON CONFLICT (videoid) DO UPDATE statement
    """
    params = {col.name: bindparam(col.name, type_=col.type) for col in videos.columns}
    stmt = pg_insert(videos).values(params)
    return stmt.on_conflict_do_update(
        index_elements=[videos.c.videoid],
        set_={col.name: stmt.excluded[col.name] for col in videos.columns if not col.primary_key}
    )


def select_collections_statement(raw_formats: bool = False) -> Select:
    """
    Build the SELECT of the three collection columns for ``:videoid``.

    Args:
        raw_formats: If True, formats comes back as the stored JSON object
            instead of going through the VideoFormatMap codec

    Returns:
        SELECT tags, formats, frames FROM videos WHERE videoid = :videoid
    """
    formats = videos.c.formats
    if raw_formats:
        formats = type_coerce(videos.c.formats, JSONB).label('formats')

    return (
        select(videos.c.tags, formats, videos.c.frames)
        .where(videos.c.videoid == bindparam('videoid'))
    )


# SET

def add_tag_statement(videoid: uuid.UUID, tag: str) -> Update:
    """Add one tag; removing it first keeps the array duplicate-free."""
    tags = func.array_append(
        func.array_remove(func.coalesce(videos.c.tags, EMPTY_TEXT_ARRAY), tag),
        tag
    )
    return _update_video(videoid).values(tags=tags)


def remove_tag_statement(videoid: uuid.UUID, tag: str) -> Update:
    return _update_video(videoid).values(tags=func.array_remove(videos.c.tags, tag))


# LIST

def replace_frames_statement(videoid: uuid.UUID, frames: Iterable[int]) -> Update:
    return _update_video(videoid).values(frames=list(frames))


def append_frame_statement(videoid: uuid.UUID, frame: int) -> Update:
    frames = func.array_append(func.coalesce(videos.c.frames, EMPTY_INT_ARRAY), frame)
    return _update_video(videoid).values(frames=frames)


def set_frame_statement(videoid: uuid.UUID, index: int, frame: int) -> Update:
    """
    Replace the frame at zero-based ``index``.

    The update only matches when the row exists and its list is longer
    than ``index``, so a zero rowcount means the index was out of bounds.

    Raises:
        ValueError: If index is negative
    """
    if index < 0:
        raise ValueError(f"Frame index must be >= 0, got {index}")

    return (
        _update_video(videoid)
        .where(func.cardinality(videos.c.frames) > index)
        .values({videos.c.frames[index]: frame})
    )


# MAP of UDT

def put_format_statement(videoid: uuid.UUID, key: str, video_format: VideoFormat) -> Update:
    """
    Insert or overwrite one key of the formats map.

    The value is built as a video_format row and converted with to_jsonb,
    so its shape always follows the composite type.
    """
    udt_value = cast(
        tuple_(literal(video_format.width, Integer), literal(video_format.height, Integer)),
        VideoFormatType()
    )
    entry = func.jsonb_build_object(cast(literal(key), Text), func.to_jsonb(udt_value))
    formats = func.coalesce(type_coerce(videos.c.formats, JSONB), EMPTY_JSONB).op('||')(entry)
    return _update_video(videoid).values({videos.c.formats: formats})


def remove_format_statement(videoid: uuid.UUID, key: str) -> Update:
    formats = type_coerce(videos.c.formats, JSONB).op('-')(cast(literal(key), Text))
    return _update_video(videoid).values({videos.c.formats: formats})

"""
=================================================
Collection operations on the videos table
=================================================

Working on the advanced column types: SET (tags), LIST (frames) and
MAP of a user-defined type (formats -> video_format).

Every operation builds a statement with sql.dml, executes it and logs.
The insert and the collection read are prepared once by
prepare_statements() and executed with bound parameters afterwards; the
update statements are built per call.

Operations:
    create_video: Insert a full row (overwrites an existing key)
    add_tag / remove_tag: Set add/remove
    update_all_frames / append_frame / update_frame: List replace/append/set-at-index
    add_format / remove_format: Map put/remove
    list_tags / list_frames / list_formats / list_formats_with_codec: Reads

Database errors (sqlalchemy.exc.SQLAlchemyError) are logged and re-raised
unchanged. The only error raised here is FrameIndexError.

Example:
    >>> from videos.video_collections import VideoCollectionsRepository
    >>> from models.video_models import VideoDto, VideoFormat
    >>>
    >>> repo = VideoCollectionsRepository()
    >>> repo.prepare_statements()
    >>> dto = VideoDto(title='Accelerate 2020', tags={'cassandra'})
    >>> repo.create_video(dto)
    >>> repo.add_tag(dto.videoid, 'OK')
    >>> repo.list_tags(dto.videoid)
    {'OK', 'cassandra'}
    >>> repo.close()
"""

import uuid
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from core.logger import get_logger
from models.video_models import VideoDto, VideoFormat
from sql.dml import (
    add_tag_statement,
    append_frame_statement,
    insert_video_statement,
    put_format_statement,
    remove_format_statement,
    remove_tag_statement,
    replace_frames_statement,
    select_collections_statement,
    set_frame_statement,
)
from utils.database_utils import create_sqlalchemy_engine

logger = get_logger(__name__)


class VideoCollectionsError(Exception):
    """Base exception for collection operations on the videos table."""
    pass


class FrameIndexError(VideoCollectionsError, IndexError):
    """Raised when a frame index is outside the current frames list."""
    pass


class VideoCollectionsRepository:
    """
    Collection operations on the videos table.

    Attributes:
        engine: SQLAlchemy engine bound to the keyspace database
        stmt_create_video: Prepared full-row insert (None until prepared)
        stmt_read_collections: Prepared read of tags/formats/frames through the codec
        stmt_read_collections_raw: Same read with formats as raw JSON

    Example:
        >>> repo = VideoCollectionsRepository(engine)
        >>> repo.prepare_statements()
        >>> repo.append_frame(videoid, 4)
    """

    def __init__(self, engine: Optional[Engine] = None):
        """
        Args:
            engine: Engine to use; when None, one is created for the keyspace
                database and disposed by close()
        """
        self._owns_engine = engine is None
        self.engine = engine if engine is not None else create_sqlalchemy_engine(use_keyspace=True)

        self.stmt_create_video = None
        self.stmt_read_collections = None
        self.stmt_read_collections_raw = None

    def prepare_statements(self) -> None:
        """Build the reusable insert and read statements once."""
        self.stmt_create_video = insert_video_statement()
        self.stmt_read_collections = select_collections_statement()
        self.stmt_read_collections_raw = select_collections_statement(raw_formats=True)
        logger.debug("Prepared insert and collection read statements")

    def _ensure_prepared(self) -> None:
        if self.stmt_create_video is None:
            self.prepare_statements()

    def _execute(self, statement, parameters: Optional[Dict[str, Any]] = None) -> int:
        """Execute a write statement in its own transaction and return its rowcount."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, parameters or {})
                return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"❌ Statement failed: {e}")
            raise

    def _fetch_collections(self, videoid: uuid.UUID, raw_formats: bool = False) -> Optional[Row]:
        self._ensure_prepared()
        statement = self.stmt_read_collections_raw if raw_formats else self.stmt_read_collections
        try:
            with self.engine.connect() as conn:
                return conn.execute(statement, {'videoid': videoid}).first()
        except SQLAlchemyError as e:
            logger.error(f"❌ Read of video {videoid} failed: {e}")
            raise

    # CREATE

    def create_video(self, dto: VideoDto) -> None:
        """Insert every column of ``dto``; an existing row with its videoid is replaced."""
        self._ensure_prepared()
        self._execute(self.stmt_create_video, {
            'videoid': dto.videoid,
            'title': dto.title,
            'upload': dto.upload,
            'email': dto.email,
            'url': dto.url,
            'tags': sorted(dto.tags or ()),
            'frames': list(dto.frames or ()),
            'formats': dict(dto.formats or {}),
        })
        logger.debug(f"Created video {dto.videoid}")

    # SET

    def add_tag(self, videoid: uuid.UUID, tag: str) -> None:
        self._execute(add_tag_statement(videoid, tag))
        logger.debug(f"Added tag '{tag}' to video {videoid}")

    def remove_tag(self, videoid: uuid.UUID, tag: str) -> None:
        self._execute(remove_tag_statement(videoid, tag))
        logger.debug(f"Removed tag '{tag}' from video {videoid}")

    # LIST

    def update_all_frames(self, videoid: uuid.UUID, frames: Iterable[int]) -> None:
        frames = list(frames)
        self._execute(replace_frames_statement(videoid, frames))
        logger.debug(f"Replaced frames of video {videoid} with {frames}")

    def append_frame(self, videoid: uuid.UUID, frame: int) -> None:
        self._execute(append_frame_statement(videoid, frame))
        logger.debug(f"Appended frame {frame} to video {videoid}")

    def update_frame(self, videoid: uuid.UUID, index: int, frame: int) -> None:
        """
        Replace the frame at zero-based ``index``.

        Raises:
            FrameIndexError: If index is negative, beyond the end of the list,
                or the video has no frames list
        """
        if index < 0:
            raise FrameIndexError(f"Frame index must be >= 0, got {index}")

        updated = self._execute(set_frame_statement(videoid, index, frame))
        if updated == 0:
            raise FrameIndexError(f"Frame index {index} out of bounds for video {videoid}")
        logger.debug(f"Set frame {index} of video {videoid} to {frame}")

    # MAP of UDT

    def add_format(self, videoid: uuid.UUID, key: str, video_format: VideoFormat) -> None:
        self._execute(put_format_statement(videoid, key, video_format))
        logger.debug(f"Put format '{key}' = {video_format} on video {videoid}")

    def remove_format(self, videoid: uuid.UUID, key: str) -> None:
        self._execute(remove_format_statement(videoid, key))
        logger.debug(f"Removed format '{key}' from video {videoid}")

    # READ

    def list_tags(self, videoid: uuid.UUID) -> Set[str]:
        """Tags of the video; empty when the row does not exist."""
        row = self._fetch_collections(videoid)
        return set() if row is None else set(row.tags or ())

    def list_frames(self, videoid: uuid.UUID) -> List[int]:
        """Frames of the video in stored order; empty when the row does not exist."""
        row = self._fetch_collections(videoid)
        return [] if row is None else list(row.frames or ())

    def list_formats(self, videoid: uuid.UUID) -> Dict[str, VideoFormat]:
        """
        Formats of the video, reading the raw jsonb and building each value by hand.

        Returns:
            Format name to VideoFormat; empty when the row does not exist
        """
        formats: Dict[str, VideoFormat] = {}
        row = self._fetch_collections(videoid, raw_formats=True)
        if row is not None:
            for key, value in (row.formats or {}).items():
                formats[key] = VideoFormat.from_dict(value)
        return formats

    def list_formats_with_codec(self, videoid: uuid.UUID) -> Dict[str, VideoFormat]:
        """Formats of the video, decoded by the VideoFormatMap column type."""
        row = self._fetch_collections(videoid)
        return {} if row is None else dict(row.formats)

    def close(self) -> None:
        """Dispose of the engine if this repository created it."""
        if self._owns_engine and self.engine is not None:
            self.engine.dispose()
            logger.debug("Disposed keyspace engine")

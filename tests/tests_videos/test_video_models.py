"""
================================================
Pytest suite for models/video_models.py
================================================

Sections:
---------
1. Unit tests - VideoFormat, codec, table mapping, DTO
2. Edge case tests - NULL and malformed stored values

How to Execute:
---------------
All tests:          python -m pytest tests/tests_videos/test_video_models.py -v
"""

import dataclasses
import uuid

import pytest
from sqlalchemy import Integer, Text
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from models.video_models import (
    UDT_VIDEO_FORMAT_NAME,
    VIDEO_FORMAT_FIELDS,
    VIDEO_TABLENAME,
    Video,
    VideoDto,
    VideoFormat,
    VideoFormatMap,
    VideoFormatType,
)

PG = postgresql.dialect()


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_video_format_dict_conversion():
    fmt = VideoFormat(1920, 1080)
    assert fmt.to_dict() == {'width': 1920, 'height': 1080}
    assert VideoFormat.from_dict({'width': 1920, 'height': 1080}) == fmt


@pytest.mark.unit
def test_video_format_is_immutable():
    fmt = VideoFormat(640, 480)
    with pytest.raises(dataclasses.FrozenInstanceError):
        fmt.width = 1


@pytest.mark.unit
def test_video_format_type_renders_composite_name():
    assert VideoFormatType().compile(dialect=PG) == UDT_VIDEO_FORMAT_NAME


@pytest.mark.unit
def test_video_format_fields_order():
    """Field order is the row constructor order used when building values."""
    assert [f['name'] for f in VIDEO_FORMAT_FIELDS] == ['width', 'height']


@pytest.mark.unit
def test_codec_binds_video_formats_as_json_objects():
    codec = VideoFormatMap()
    bound = codec.process_bind_param({'mp4': VideoFormat(640, 480)}, PG)
    assert bound == {'mp4': {'width': 640, 'height': 480}}


@pytest.mark.unit
def test_codec_accepts_plain_mappings():
    codec = VideoFormatMap()
    bound = codec.process_bind_param({'ogg': {'width': '640', 'height': 480}}, PG)
    assert bound == {'ogg': {'width': 640, 'height': 480}}


@pytest.mark.unit
def test_codec_decodes_rows():
    codec = VideoFormatMap()
    decoded = codec.process_result_value({'hd': {'width': 1920, 'height': 1080}}, PG)
    assert decoded == {'hd': VideoFormat(1920, 1080)}


@pytest.mark.unit
def test_video_table_columns():
    table = Video.__table__
    assert table.name == VIDEO_TABLENAME
    assert [c.name for c in table.primary_key.columns] == ['videoid']
    assert isinstance(table.c.videoid.type, UUID)
    assert isinstance(table.c.tags.type, ARRAY)
    assert isinstance(table.c.tags.type.item_type, Text)
    assert isinstance(table.c.frames.type.item_type, Integer)
    assert table.c.frames.type.zero_indexes is True
    assert isinstance(table.c.formats.type, VideoFormatMap)


@pytest.mark.unit
def test_collection_columns_default_to_empty():
    table = Video.__table__
    assert "'{}'::text[]" in str(table.c.tags.server_default.arg)
    assert "'{}'::integer[]" in str(table.c.frames.server_default.arg)
    assert "'{}'::jsonb" in str(table.c.formats.server_default.arg)


@pytest.mark.unit
def test_video_dto_defaults():
    """Each DTO gets its own id, an aware upload time and fresh containers."""
    first, second = VideoDto(), VideoDto()

    assert isinstance(first.videoid, uuid.UUID)
    assert first.videoid != second.videoid
    assert first.upload.tzinfo is not None
    first.tags.add('cassandra')
    assert second.tags == set()
    assert first.frames == [] and first.formats == {}


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_codec_null_column():
    codec = VideoFormatMap()
    assert codec.process_result_value(None, PG) == {}
    assert codec.process_bind_param(None, PG) is None


@pytest.mark.edge_case
def test_codec_empty_map():
    codec = VideoFormatMap()
    assert codec.process_bind_param({}, PG) == {}
    assert codec.process_result_value({}, PG) == {}


@pytest.mark.edge_case
def test_from_dict_missing_field():
    with pytest.raises(KeyError):
        VideoFormat.from_dict({'width': 640})


@pytest.mark.edge_case
@pytest.mark.parametrize('fmt', [
    VideoFormat('wide', 480),
    VideoFormat(640.7, 480),
    VideoFormat(640, True),
    VideoFormat(640, None),
    VideoFormat(2 ** 31, 480),
])
def test_codec_rejects_values_the_composite_type_would(fmt):
    codec = VideoFormatMap()
    with pytest.raises(ValueError, match='video_format'):
        codec.process_bind_param({'a': fmt}, PG)


@pytest.mark.edge_case
def test_codec_rejects_bad_plain_mapping():
    codec = VideoFormatMap()
    with pytest.raises(ValueError, match='video_format.width'):
        codec.process_bind_param({'ogg': {'width': 'wide', 'height': 480}}, PG)


@pytest.mark.edge_case
def test_from_dict_integer_forms():
    assert VideoFormat.from_dict({'width': 640.0, 'height': ' 480 '}) == VideoFormat(640, 480)
    assert VideoFormat.from_dict({'width': -2 ** 31, 'height': 2 ** 31 - 1}).height == 2 ** 31 - 1
    with pytest.raises(ValueError, match='out of integer range'):
        VideoFormat.from_dict({'width': -2 ** 31 - 1, 'height': 1})

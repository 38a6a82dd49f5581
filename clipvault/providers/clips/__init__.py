"""Clip metadata persistence providers.

SQLiteClipRepository stores one row per clip in data/clips.db, with the
ordered tag list serialized by tag_codec.
"""

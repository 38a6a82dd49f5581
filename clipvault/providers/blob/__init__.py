"""Blob storage providers.

LocalBlobStore keeps uploaded file bytes under data/uploads/ and exposes
them at /uploads/<key>.
"""

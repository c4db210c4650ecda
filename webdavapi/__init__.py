"""WebDAV Python API 客户端与 PROPFIND 列表解析。"""

from webdavapi.client import DAVClient
from webdavapi.errors import ListingParseError, MalformedListingError, SizeParseError
from webdavapi.listing import parse_listing
from webdavapi.models import (
    DEPTH_CHILDREN,
    DEPTH_INFINITY,
    DEPTH_RESOURCE,
    FileInfo,
)

__all__ = [
    "DAVClient",
    "FileInfo",
    "parse_listing",
    "ListingParseError",
    "MalformedListingError",
    "SizeParseError",
    "DEPTH_RESOURCE",
    "DEPTH_CHILDREN",
    "DEPTH_INFINITY",
]

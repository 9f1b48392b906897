"""Common Content-Type header values."""

from enum import StrEnum


class ContentType(StrEnum):
    """Content types usable as ``TestRequestSpec.content_type``."""

    JSON = "application/json"
    XML = "application/xml"
    FORM = "application/x-www-form-urlencoded"
    TEXT = "text/plain"
    HTML = "text/html"
    PDF = "application/pdf"
    ZIP = "application/zip"
    PNG = "image/png"
    JPG = "image/jpeg"
    GIF = "image/gif"
    SVG = "image/svg+xml"
    BMP = "image/bmp"
    TIFF = "image/tiff"
    PPT = "application/vnd.ms-powerpoint"
    DOC = "application/msword"
    XLS = "application/vnd.ms-excel"
    CSV = "text/csv"
    XML_UTF8 = "application/xml; charset=utf-8"
    HTML_UTF8 = "text/html; charset=utf-8"

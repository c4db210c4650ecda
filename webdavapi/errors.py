"""列表解析错误。两类错误都意味着「列表不可用」，不返回部分结果。"""

from __future__ import annotations


class ListingParseError(ValueError):
    """PROPFIND 响应解析失败。kind 区分错误类别。"""

    kind = "parse"


class MalformedListingError(ListingParseError):
    """XML 格式错误（或在 on_truncated="error" 时文档被截断）。"""

    kind = "malformed"


class SizeParseError(ListingParseError):
    """getcontentlength 不是合法的无符号 64 位整数。"""

    kind = "size"

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"failed to parse size: {text!r}")

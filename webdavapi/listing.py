"""
PROPFIND 多状态（multistatus）响应解析。

tokenize() 基于 xml.etree.ElementTree.XMLPullParser 逐块产出记号：
OpenTag / CloseTag / Text / EndOfDocument。标签名为解析命名空间后的 Clark 形式
（如 "{DAV:}response"），因此 D:、d:、lp1: 等任意绑定到 DAV: 的前缀都能识别。

parse_listing() 是拉取式状态机：在 <response> 之外只找下一个 <response>；
在 <response> 内按标签名查表调用字段设置函数，遇到 </response> 时把记录追加到结果。
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Iterator, Union

from webdavapi.errors import MalformedListingError, SizeParseError
from webdavapi.models import FileInfo

logger = logging.getLogger(__name__)

DAV_NS = "DAV:"
RESPONSE = f"{{{DAV_NS}}}response"
HREF = f"{{{DAV_NS}}}href"
GETCONTENTLENGTH = f"{{{DAV_NS}}}getcontentlength"
CREATIONDATE = f"{{{DAV_NS}}}creationdate"
GETLASTMODIFIED = f"{{{DAV_NS}}}getlastmodified"

# 文档在 <response> 内结束（被截断）时的处理方式
TRUNCATED_DROP = "drop"  # 丢弃未闭合的那一项，返回之前的结果（兼容旧行为）
TRUNCATED_KEEP = "keep"  # 保留未闭合的那一项
TRUNCATED_ERROR = "error"  # 抛出 MalformedListingError
TRUNCATED_MODES = (TRUNCATED_DROP, TRUNCATED_KEEP, TRUNCATED_ERROR)

FEED_CHUNK_SIZE = 64 * 1024
U64_MAX = 2**64 - 1
# 与常见整数解析一致，允许前导 +
_UNSIGNED = re.compile(r"\+?[0-9]+")


# ------------------------- 记号 -------------------------


@dataclass(frozen=True)
class OpenTag:
    name: str


@dataclass(frozen=True)
class CloseTag:
    name: str


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class EndOfDocument:
    pass


Token = Union[OpenTag, CloseTag, Text, EndOfDocument]


def _own_text(elem: ET.Element) -> str:
    """元素自身的文本：开头文本加上各子元素之后的尾部文本，不含子元素内部文本。"""
    return (elem.text or "") + "".join(child.tail or "" for child in elem)


def tokenize(document: str | bytes) -> Iterator[Token]:
    """
    将 XML 文档转换为记号序列（单次、只进）。

    元素自身的文本（含子元素之间的尾部文本）在其 CloseTag 之前以一个 Text 记号给出，
    没有文本的元素不产出 Text。
    输入在元素未闭合时结束视为 EndOfDocument，而非格式错误；
    没有任何元素的输入（空白、仅 XML 声明、BOM 或注释）同样只产出 EndOfDocument；
    其余 XML 错误抛出 MalformedListingError。
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    depth = 0
    seen_root = False
    try:
        for offset in range(0, len(document), FEED_CHUNK_SIZE):
            parser.feed(document[offset:offset + FEED_CHUNK_SIZE])
            for event, elem in parser.read_events():
                if event == "start":
                    depth += 1
                    seen_root = True
                    yield OpenTag(elem.tag)
                else:
                    depth -= 1
                    text = _own_text(elem)
                    if text:
                        yield Text(text)
                    yield CloseTag(elem.tag)
                    # 只丢弃子元素；自身的 tail 仍要留给父元素
                    del elem[:]
        # 未闭合或没有根元素时不调用 close()，否则 expat 会把截断或空文档当作错误
        if depth == 0 and seen_root:
            parser.close()
    except ET.ParseError as e:
        raise MalformedListingError(f"malformed listing document: {e}") from e
    yield EndOfDocument()


# ------------------------- 字段设置 -------------------------


def _set_path(info: FileInfo, text: str) -> None:
    info.set_path(text)


def _set_size(info: FileInfo, text: str) -> None:
    value = text.strip()
    if not _UNSIGNED.fullmatch(value) or int(value) > U64_MAX:
        raise SizeParseError(text)
    info.size = int(value)
    info.is_dir = False


def _set_create_date(info: FileInfo, text: str) -> None:
    info.create_date = text


def _set_modified_date(info: FileInfo, text: str) -> None:
    info.modified_date = text


# 标签名 -> 字段设置函数；同一项内重复出现时后者覆盖前者
PROPERTY_SETTERS: dict[str, Callable[[FileInfo, str], None]] = {
    HREF: _set_path,
    GETCONTENTLENGTH: _set_size,
    CREATIONDATE: _set_create_date,
    GETLASTMODIFIED: _set_modified_date,
}


def _read_text(tokens: Iterator[Token], name: str) -> str:
    """读取元素 name 自身的文本，直到与之匹配的 CloseTag；嵌套子元素内部的文本被跳过。"""
    parts: list[str] = []
    nested = 0
    for token in tokens:
        if isinstance(token, OpenTag):
            nested += 1
        elif isinstance(token, Text):
            if nested == 0:
                parts.append(token.content)
        elif isinstance(token, CloseTag):
            if nested == 0 and token.name == name:
                return "".join(parts)
            nested -= 1
        elif isinstance(token, EndOfDocument):
            break
    raise MalformedListingError(f"unexpected end of document inside {name}")


# ------------------------- 解析 -------------------------


def parse_listing(document: str | bytes, *, on_truncated: str = TRUNCATED_DROP) -> list[FileInfo]:
    """
    解析 PROPFIND 响应体，按文档顺序返回每个 <response> 的 FileInfo。

    :param document: 响应体（str 或 bytes；bytes 时按 XML 声明的编码解码）
    :param on_truncated: 文档在 <response> 内结束时的处理："drop" | "keep" | "error"
    :return: FileInfo 列表；无 <response> 时为空列表
    :raises MalformedListingError: XML 格式错误
    :raises SizeParseError: getcontentlength 无法解析为无符号整数（整个解析失败）
    """
    if on_truncated not in TRUNCATED_MODES:
        raise ValueError(f"on_truncated must be one of {TRUNCATED_MODES}, got {on_truncated!r}")
    files: list[FileInfo] = []
    current: FileInfo | None = None
    tokens = tokenize(document)
    for token in tokens:
        if isinstance(token, OpenTag):
            if current is None:
                if token.name == RESPONSE:
                    current = FileInfo()
                continue
            setter = PROPERTY_SETTERS.get(token.name)
            if setter is not None:
                setter(current, _read_text(tokens, token.name))
        elif isinstance(token, CloseTag):
            if current is not None and token.name == RESPONSE:
                files.append(current)
                current = None
        elif isinstance(token, EndOfDocument):
            break

    if current is not None:
        logger.debug("listing truncated inside <response> (on_truncated=%s)", on_truncated)
        if on_truncated == TRUNCATED_ERROR:
            raise MalformedListingError("listing document ended inside <response>")
        if on_truncated == TRUNCATED_KEEP:
            files.append(current)
    logger.debug("parsed %d listing entries", len(files))
    return files

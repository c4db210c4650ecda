"""
WebDAV 列表数据模型。

PROPFIND 多状态响应中每个 <D:response> 对应一个 FileInfo：
- path: href 原文（服务端返回的 URL 路径形式，不做解码）
- name / file_type: 由 path 推导
- size / is_dir: 有 getcontentlength 即为文件，否则视为目录
- create_date / modified_date: 服务端原始时间字符串，不做解析
"""

from __future__ import annotations

from dataclasses import dataclass

# PROPFIND 的 Depth 头取值：0=仅资源本身，1=资源及直接子项，infinity=整棵子树
DEPTH_RESOURCE = "0"
DEPTH_CHILDREN = "1"
DEPTH_INFINITY = "infinity"
DEPTHS = (DEPTH_RESOURCE, DEPTH_CHILDREN, DEPTH_INFINITY)


def name_from_path(path: str) -> str:
    """最后一个 / 之后的部分；path 为空或以 / 结尾时为空串。"""
    return path.rsplit("/", 1)[-1]


def file_type_from_name(name: str) -> str:
    """最后一个 . 之后的部分（扩展名）；name 不含 . 时为空串。"""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1]


@dataclass
class FileInfo:
    """目录列表中的一项（文件或目录）。"""

    path: str = ""
    name: str = ""
    file_type: str = ""
    size: int = 0
    is_dir: bool = True
    create_date: str = ""
    modified_date: str = ""

    def set_path(self, path: str) -> None:
        """设置 href，并同步推导 name 与 file_type。"""
        self.path = path
        self.name = name_from_path(path)
        self.file_type = file_type_from_name(self.name)

    @property
    def display_name(self) -> str:
        """用于展示的名称：name 为空（目录 href 以 / 结尾）时退回 path。"""
        return self.name or self.path

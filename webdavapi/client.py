"""
WebDAV Python API 客户端。

基于 httpx 实现 GET / PUT / DELETE / MOVE / MKCOL / PROPFIND 以及 POST method=UNZIP，
list_files() 在 PROPFIND 之后用 webdavapi.listing 解析多状态响应。
所有路径既可以是相对 base_url 的路径，也可以是完整 URL。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator
from urllib.parse import quote

import httpx

from webdavapi.listing import TRUNCATED_DROP, parse_listing
from webdavapi.models import DEPTH_CHILDREN, DEPTHS, FileInfo

logger = logging.getLogger(__name__)

# PROPFIND 请求体：请求全部属性
PROPFIND_ALLPROP_BODY = """<?xml version="1.0" encoding="utf-8" ?>
<D:propfind xmlns:D="DAV:">
    <D:allprop/>
</D:propfind>
"""


def _is_absolute_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def _path_for_url(path: str) -> str:
    """将路径按段做 UTF-8 百分号编码，保留末尾 /（集合资源）。"""
    segments = path.strip("/").split("/") if path.strip("/") else []
    if not segments:
        return "/"
    encoded = "/" + "/".join(quote(seg, safe="") for seg in segments)
    return encoded + "/" if path.endswith("/") else encoded


class DAVClient:
    """
    WebDAV 服务器 API 客户端。

    认证方式：同时提供 username 与 password 时使用 Basic HTTP 认证。
    每个动词方法原样返回 httpx.Response，不检查状态码；传输错误（httpx.HTTPError）直接抛出。
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 30.0,
        verify: bool = True,
    ):
        """
        :param base_url: 服务器根地址，如 https://dav.example.com/remote.php/webdav
        :param username: 用户名
        :param password: 密码
        :param timeout: 请求超时秒数
        :param verify: 是否验证 HTTPS 证书
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.timeout = timeout
        self.verify = verify
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            auth = (self.username, self.password) if self.username is not None and self.password is not None else None
            self._client = httpx.Client(
                auth=auth,
                timeout=self.timeout,
                verify=self.verify,
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """关闭底层 HTTP 客户端。"""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> DAVClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def get_resource_url(self, path: str) -> str:
        """
        返回路径对应的完整 URL；path 已是完整 URL 时原样返回。

        :param path: 相对路径，如 "docs"、"docs/a.txt"、"docs/"（末尾 / 会保留）
        """
        if _is_absolute_url(path):
            return path
        return self.base_url + _path_for_url(path)

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self.get_resource_url(path)
        logger.debug("%s %s", method, url)
        r = self._get_client().request(method, url, **kwargs)
        logger.debug("%s %s -> %s", method, url, r.status_code)
        return r

    # ------------------------- 下载 -------------------------

    def get(self, path: str) -> httpx.Response:
        """GET 指定资源。"""
        return self._request("GET", path)

    def download_file(self, path: str, save_to: str | Path | None = None) -> bytes:
        """
        下载文件，返回内容；若提供 save_to 则同时写入本地。

        :param path: 远程路径或完整 URL，如 "docs/a.txt"
        :param save_to: 本地保存路径
        :return: 文件内容（bytes）
        """
        r = self.get(path)
        r.raise_for_status()
        content = r.content
        if save_to:
            Path(save_to).parent.mkdir(parents=True, exist_ok=True)
            Path(save_to).write_bytes(content)
        return content

    # ------------------------- 上传 -------------------------

    UPLOAD_CHUNK_SIZE = 1024 * 1024  # 1 MiB，大文件流式上传块大小，避免整文件读入内存

    def put(self, path: str, body: bytes | Iterator[bytes], headers: dict[str, str] | None = None) -> httpx.Response:
        """PUT 上传内容（Content-Type: application/octet-stream）。"""
        return self._request(
            "PUT",
            path,
            content=body,
            headers={"Content-Type": "application/octet-stream", **(headers or {})},
        )

    def _upload_body_and_headers(
        self,
        file_content: BinaryIO | bytes,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> tuple[bytes | Iterator[bytes], dict[str, str]]:
        """生成 PUT body 与 headers；可 seek 的文件对象按块流式上传，on_progress(sent, total) 每块后调用。"""
        headers: dict[str, str] = {}
        if isinstance(file_content, bytes):
            headers["Content-Length"] = str(len(file_content))
            return file_content, headers
        try:
            file_content.seek(0, 2)
            size = file_content.tell()
            file_content.seek(0)
        except (AttributeError, OSError):
            body = file_content.read()
            headers["Content-Length"] = str(len(body))
            return body, headers

        def stream_chunks() -> Iterator[bytes]:
            sent = 0
            if on_progress:
                on_progress(0, size)
            while True:
                chunk = file_content.read(self.UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                sent += len(chunk)
                if on_progress:
                    on_progress(sent, size)
                yield chunk

        headers["Content-Length"] = str(size)
        return stream_chunks(), headers

    def upload_file(
        self,
        path: str,
        file_content: BinaryIO | bytes,
        *,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> httpx.Response:
        """
        上传文件到指定路径。文件对象支持 seek 时流式上传，不整文件读入内存。

        :param path: 远程文件路径，如 "docs/report.pdf"
        :param file_content: 文件内容（文件对象或 bytes）
        :param on_progress: 可选，流式上传时每块后调用 on_progress(sent_bytes, total_bytes)
        :return: 响应对象，可检查 .status_code（201/204 表示成功）
        """
        body, headers = self._upload_body_and_headers(file_content, on_progress)
        return self.put(path, body, headers=headers)

    # ------------------------- 删除 / 移动 / 目录 / 解压 -------------------------

    def delete(self, path: str) -> httpx.Response:
        """删除文件或集合（目录）。"""
        return self._request("DELETE", path)

    def move(self, src: str, dst: str, *, overwrite: bool | None = None) -> httpx.Response:
        """
        移动或重命名。仅文件名不同即为重命名。

        :param src: 源路径
        :param dst: 目标路径（Destination 头中使用完整 URL）
        :param overwrite: None 时不发送 Overwrite 头，交由服务端默认（通常为 T）
        """
        headers = {"Destination": self.get_resource_url(dst)}
        if overwrite is not None:
            headers["Overwrite"] = "T" if overwrite else "F"
        return self._request("MOVE", src, headers=headers)

    def mkcol(self, path: str) -> httpx.Response:
        """创建目录（集合）。父目录必须已存在，否则服务端返回 409。"""
        return self._request("MKCOL", path)

    def unzip(self, path: str) -> httpx.Response:
        """在服务端解压 .zip 归档（POST 表单 method=UNZIP）。"""
        return self._request("POST", path, data={"method": "UNZIP"})

    # ------------------------- 列表 -------------------------

    def propfind(self, path: str = "/", depth: str = DEPTH_CHILDREN) -> httpx.Response:
        """
        PROPFIND 请求全部属性，返回多状态 XML 响应。

        :param path: 远程目录路径，如 "docs/"
        :param depth: "0" 仅资源本身，"1" 资源及直接子项，"infinity" 递归全部子项
        """
        if depth not in DEPTHS:
            raise ValueError(f"depth must be one of {DEPTHS}, got {depth!r}")
        return self._request(
            "PROPFIND",
            path,
            content=PROPFIND_ALLPROP_BODY.encode("utf-8"),
            headers={"Depth": depth, "Content-Type": "application/xml; charset=utf-8"},
        )

    def list_files(
        self,
        path: str = "/",
        depth: str = DEPTH_CHILDREN,
        *,
        on_truncated: str = TRUNCATED_DROP,
    ) -> list[FileInfo]:
        """
        列出目录内容（含目录本身那一项，按服务端返回顺序）。

        :param path: 远程目录路径
        :param depth: 同 propfind
        :param on_truncated: 响应体被截断时的处理，见 webdavapi.listing.parse_listing
        :raises httpx.HTTPStatusError: 非 2xx 响应
        :raises webdavapi.errors.ListingParseError: 响应体无法解析
        """
        r = self.propfind(path, depth)
        r.raise_for_status()
        return parse_listing(r.content, on_truncated=on_truncated)

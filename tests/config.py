"""
测试用配置：服务器地址、账号、示例 PROPFIND 响应。

仅在此处维护，conftest、main.py 及各 test_*.py 均从此导入。
- 集成测试：对 DAV_TEST_ACCOUNTS 中每个账号各执行一次，服务器不可达时跳过。
- 单元测试：用本配置中的 URL/路径/XML 做 mock 或断言。
"""

from pathlib import Path

# ---------- 服务器与路径 ----------
DAV_BASE_URL = "http://127.0.0.1:8080/webdav"
DAV_SHARE_PATH = "share/"

DAV_SAMPLE_REMOTE_FILE = "share/sample.txt"
DAV_FULL_URL_LIST = "http://127.0.0.1:8080/webdav/share/"
DAV_FULL_URL_FILE = "http://127.0.0.1:8080/webdav/share/sample.txt"

# ---------- 账号 ----------
DAV_TEST_ACCOUNTS = [
    {"username": "abct", "password": "abc123"},
    {"username": "你好", "password": "abc123"},
]
DAV_USERNAME = DAV_TEST_ACCOUNTS[0]["username"]
DAV_PASSWORD = DAV_TEST_ACCOUNTS[0]["password"]

# ---------- 本地目录 ----------
_TESTS_DIR = Path(__file__).resolve().parent
RUNS_DIR = _TESTS_DIR.parent / "runs"

# ---------- 示例 PROPFIND 响应（Apache mod_dav 风格，lp1 绑定到 DAV:） ----------
LISTING_XML = """<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:">
<D:response xmlns:lp1="DAV:" xmlns:lp2="http://apache.org/dav/props/">
<D:href>/webdav/share/</D:href>
<D:propstat>
<D:prop>
<lp1:resourcetype><D:collection/></lp1:resourcetype>
<lp1:creationdate>2024-01-01T10:00:00Z</lp1:creationdate>
<lp1:getlastmodified>Mon, 01 Jan 2024 10:00:00 GMT</lp1:getlastmodified>
</D:prop>
<D:status>HTTP/1.1 200 OK</D:status>
</D:propstat>
</D:response>
<D:response xmlns:lp1="DAV:" xmlns:lp2="http://apache.org/dav/props/">
<D:href>/webdav/share/report.final.pdf</D:href>
<D:propstat>
<D:prop>
<lp1:resourcetype/>
<lp1:creationdate>2024-02-03T04:05:06Z</lp1:creationdate>
<lp1:getcontentlength>4096</lp1:getcontentlength>
<lp1:getlastmodified>Sat, 03 Feb 2024 04:05:06 GMT</lp1:getlastmodified>
<lp2:executable>F</lp2:executable>
</D:prop>
<D:status>HTTP/1.1 200 OK</D:status>
</D:propstat>
</D:response>
<D:response xmlns:lp1="DAV:">
<D:href>/webdav/share/README</D:href>
<D:propstat>
<D:prop>
<lp1:getcontentlength>0</lp1:getcontentlength>
</D:prop>
<D:status>HTTP/1.1 200 OK</D:status>
</D:propstat>
</D:response>
</D:multistatus>
"""

EMPTY_LISTING_XML = """<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:"></D:multistatus>
"""

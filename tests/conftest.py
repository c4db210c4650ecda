"""
pytest 配置与共享 fixture。

测试目标与账号见 tests.config。
集成测试会对 DAV_TEST_ACCOUNTS 中每个账号各执行一次（client 参数化）。
"""

from __future__ import annotations

import pytest

from webdavapi import DAVClient
from webdavapi.cli_config import ENV_OVERRIDES

from tests.config import DAV_BASE_URL, DAV_SHARE_PATH, DAV_TEST_ACCOUNTS


@pytest.fixture(autouse=True)
def _patch_config_path(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """将配置路径指向临时目录并清除 DAV_* 环境变量，避免污染或读取用户配置。"""
    config_dir = tmp_path / "webdavapi"
    config_dir.mkdir(parents=True, exist_ok=True)

    def _config_dir():
        return config_dir

    monkeypatch.setattr("webdavapi.cli_config._config_dir", _config_dir)
    for var in ENV_OVERRIDES.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(scope="module", params=[pytest.param(acc, id=acc["username"]) for acc in DAV_TEST_ACCOUNTS])
def client(request: pytest.FixtureRequest) -> DAVClient:
    """使用测试账号的 WebDAV 客户端；每个 DAV_TEST_ACCOUNTS 账号各跑一遍。"""
    acc = request.param
    return DAVClient(
        base_url=DAV_BASE_URL,
        username=acc["username"],
        password=acc["password"],
        timeout=10.0,
    )


@pytest.fixture(scope="module")
def share_path() -> str:
    """集成测试使用的远程目录（如 share/）。"""
    return DAV_SHARE_PATH


@pytest.fixture(scope="module")
def share_listing(client: DAVClient, share_path: str):
    """列出测试目录；若服务器不可达则跳过整个模块。"""
    try:
        return client.list_files(share_path)
    except Exception as e:
        usernames = [acc["username"] for acc in DAV_TEST_ACCOUNTS]
        pytest.skip(
            f"WebDAV 测试服务器不可用 ({DAV_BASE_URL}): {e}. "
            f"请确保服务器运行且测试账号 {usernames} 有效。"
        )

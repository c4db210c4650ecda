"""
CLI 连接配置：本地保存 base_url、username、password、verify，并可被环境变量覆盖。

优先级：环境变量 DAV_BASE_URL / DAV_USERNAME / DAV_PASSWORD / DAV_VERIFY > 本地配置文件。
自建 WebDAV 服务常用自签名证书，verify=False 时跳过 HTTPS 证书校验。
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# 配置键 -> 覆盖它的环境变量
ENV_OVERRIDES = {
    "base_url": "DAV_BASE_URL",
    "username": "DAV_USERNAME",
    "password": "DAV_PASSWORD",
    "verify": "DAV_VERIFY",
}
_FALSE_VALUES = ("0", "false", "no", "off")


def _config_dir() -> Path:
    """配置目录：~/.config/webdavapi（所有平台统一）。"""
    return Path.home() / ".config" / "webdavapi"


def _config_path() -> Path:
    return _config_dir() / "config.json"


def _load_file() -> dict[str, Any]:
    p = _config_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("ignoring unreadable config %s: %s", p, e)
        return {}
    return data if isinstance(data, dict) else {}


def _env_overrides() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, var in ENV_OVERRIDES.items():
        raw = os.environ.get(var)
        if raw is None or raw == "":
            continue
        if key == "verify":
            values[key] = raw.strip().lower() not in _FALSE_VALUES
        elif key == "base_url":
            values[key] = raw.rstrip("/")
        else:
            values[key] = raw
    return values


def load_config() -> dict[str, Any] | None:
    """
    读取配置（文件 + 环境变量覆盖）。

    :return: 含 base_url 的字典；文件不存在/无效且环境变量未提供 base_url 时返回 None
    """
    data = {**_load_file(), **_env_overrides()}
    if not data.get("base_url"):
        return None
    return data


def save_config(
    base_url: str,
    username: str | None = None,
    password: str | None = None,
    *,
    verify: bool = True,
) -> None:
    """保存连接信息到本地（base_url 去掉末尾 /；verify 仅在关闭时写入）。"""
    p = _config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {"base_url": base_url.rstrip("/")}
    if username is not None:
        data["username"] = username
    if password is not None:
        data["password"] = password
    if not verify:
        data["verify"] = False
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    if password is not None:
        # 明文密码，仅当前用户可读
        p.chmod(0o600)


def clear_config() -> bool:
    """清除本地配置文件；存在则删除并返回 True（环境变量不受影响）。"""
    p = _config_path()
    if p.exists():
        p.unlink()
        return True
    return False

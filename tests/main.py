"""
WebDAV API 示例：连接测试服务器，列出测试目录；可选将文件下载到 runs/。

测试地址与账号见 tests.config。

用法:
  uv run python -m tests.main             # 列出测试目录
  uv run python -m tests.main --download  # 列出并将文件下载到 runs/
"""

import argparse
from urllib.parse import unquote

from tests.config import DAV_BASE_URL, DAV_PASSWORD, DAV_SHARE_PATH, DAV_USERNAME, RUNS_DIR

from webdavapi import DAVClient, FileInfo


def download_share_to_runs(client: DAVClient, files: list[FileInfo]) -> int:
    """将列表中的文件（非目录）下载到 runs/，返回成功下载数量。"""
    RUNS_DIR.mkdir(parents=True, exist_ok=True)
    count = 0
    for f in files:
        if f.is_dir or not f.name:
            continue
        # href 中的 name 是百分号编码形式，download_file 会再编码一次
        name = unquote(f.name)
        try:
            client.download_file(f"{DAV_SHARE_PATH}{name}", save_to=RUNS_DIR / name)
            print(f"  已下载: {name} ({f.size} B) -> runs/{name}")
            count += 1
        except Exception as err:
            print(f"  跳过 {f.name}: {err}")
    return count


def main() -> None:
    parser = argparse.ArgumentParser(description="WebDAV 列表示例，可选下载到 runs/")
    parser.add_argument("--download", action="store_true", help="将测试目录下文件下载到 runs/")
    args = parser.parse_args()

    with DAVClient(DAV_BASE_URL, username=DAV_USERNAME, password=DAV_PASSWORD) as client:
        files = client.list_files(DAV_SHARE_PATH)
        print(f"目录 {DAV_SHARE_PATH} 共 {len(files)} 项")
        print()

        for f in files[:20]:
            kind = "目录" if f.is_dir else f"{f.size} B"
            print(f"  {f.display_name}  {kind}  创建: {f.create_date or '-'}  修改: {f.modified_date or '-'}")

        if len(files) > 20:
            print(f"  ... 其余 {len(files) - 20} 项省略")

        if args.download:
            print()
            print(f"下载到 {RUNS_DIR} ...")
            n = download_share_to_runs(client, files)
            print(f"共下载 {n} 个文件到 runs/")


if __name__ == "__main__":
    main()

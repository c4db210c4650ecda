"""
webdavapi CLI：认证一次保存到本地，有则用认证、无则无认证。
"""

from __future__ import annotations

import getpass
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional
from urllib.parse import urlparse

import httpx
import typer


def _format_size(n: int) -> str:
    """将字节数格式化为人类可读（KiB/MiB/GiB）。"""
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.1f} KiB"
    if n < 1024 * 1024 * 1024:
        return f"{n / (1024 * 1024):.1f} MiB"
    return f"{n / (1024 * 1024 * 1024):.1f} GiB"


def _make_progress_callback(filename: str) -> tuple[object, object]:
    """返回 (on_progress(sent, total) 回调, finish 回调)。进度条输出到 stderr。"""
    last_pct: list[int] = [-1]
    bar_width = 24

    def on_progress(sent: int, total_bytes: int) -> None:
        if total_bytes <= 0:
            return
        pct = min(100, int(100 * sent / total_bytes))
        if pct != last_pct[0] and (pct % 5 == 0 or pct == 100 or sent == total_bytes):
            last_pct[0] = pct
            filled = int(bar_width * pct / 100) if pct < 100 else bar_width
            head = ">" if filled < bar_width else ""
            bar = "=" * filled + head + " " * (bar_width - filled - len(head))
            sys.stderr.write(f"\r  {filename} [{bar}] {pct}% {_format_size(sent)}/{_format_size(total_bytes)}   ")
            sys.stderr.flush()

    def finish() -> None:
        sys.stderr.write("\n")
        sys.stderr.flush()

    return on_progress, finish

from webdavapi import DAVClient, FileInfo
from webdavapi.cli_config import clear_config, load_config, save_config
from webdavapi.models import DEPTH_CHILDREN, DEPTHS

app = typer.Typer(
    name="dav",
    help="WebDAV CLI. Auth once and save; use saved auth for all commands.",
)

# 可选参数：覆盖或补充 base_url（未登录时必填）
_base_url_option: type = Annotated[
    Optional[str],
    typer.Option("--base-url", "-b", help="Override saved base URL (or required if not logged in)"),
]


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log HTTP requests to stderr")] = False,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _parse_path_or_url(path_or_url: str) -> tuple[str, str | None]:
    """
    解析「路径」或「完整链接」，兼容直接粘贴浏览器地址。
    返回 (path, base_url_override)。
    - 若输入为 http(s)://host[:port]/path → path 为 path 部分（去掉前导 /，保留末尾 /），base_url 为 scheme://netloc
    - 否则视为路径，返回 (去掉前导 / 的路径, None)
    """
    raw = (path_or_url or "").strip()
    if not raw:
        return "", None
    parsed = urlparse(raw)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        path = (parsed.path or "/").lstrip("/")
        base = f"{parsed.scheme}://{parsed.netloc}"
        return path, base
    return raw.lstrip("/"), None


def _get_client(base_url: str | None) -> DAVClient | None:
    cfg = load_config()
    url = base_url or (cfg and cfg.get("base_url"))
    if not url:
        return None
    username = cfg.get("username") if cfg else None
    password = cfg.get("password") if cfg else None
    verify = cfg.get("verify", True) if cfg else True
    return DAVClient(base_url=url, username=username, password=password, timeout=30.0, verify=verify)


def _require_client(base_url: str | None) -> DAVClient:
    client = _get_client(base_url)
    if client is None:
        typer.echo("error: no saved credentials. run 'dav login' or pass --base-url", err=True)
        raise typer.Exit(1)
    return client


def _check_status(action: str, r: httpx.Response) -> None:
    if not r.is_success:
        typer.echo(f"error: {action} {r.status_code} {r.text}", err=True)
        raise typer.Exit(1)


# ------------------------- login / logout / auth -------------------------


@app.command("login", help="Save credentials to local config")
def login(
    base_url: Annotated[Optional[str], typer.Option("--base-url", "-b", help="WebDAV base URL")] = None,
    username: Annotated[Optional[str], typer.Option("--username", "-u", help="Username")] = None,
    password: Annotated[Optional[str], typer.Option("--password", "-p", help="Password (unsafe in shell)")] = None,
    insecure: Annotated[bool, typer.Option("--insecure", "-k", help="Skip HTTPS certificate verification")] = False,
) -> None:
    base_url = base_url or input("Base URL (e.g. https://dav.example.com/webdav): ").strip()
    if not base_url:
        typer.echo("error: base URL required", err=True)
        raise typer.Exit(1)
    username = username or input("Username: ").strip() or None
    if username and password is None:
        password = getpass.getpass("Password: ")
    save_config(base_url, username, password, verify=not insecure)
    typer.echo("Saved.")


@app.command("logout", help="Clear saved credentials")
def logout() -> None:
    if clear_config():
        typer.echo("Cleared.")
    else:
        typer.echo("No saved credentials.")


auth_app = typer.Typer(help="Auth subcommands")
app.add_typer(auth_app, name="auth")


def _print_auth_status() -> None:
    cfg = load_config()
    if not cfg:
        typer.echo("Not logged in. Run 'dav login' or pass --base-url for commands.")
        return
    typer.echo(f"base_url: {cfg.get('base_url', '')}")
    typer.echo(f"auth: {'yes' if (cfg.get('username') and cfg.get('password')) else 'no'}")
    if cfg.get("verify") is False:
        typer.echo("verify: no")


@auth_app.command("status", help="Show whether credentials are saved")
def auth_status() -> None:
    _print_auth_status()


@app.command("info", help="Show saved base_url and auth status")
def info_cmd() -> None:
    _print_auth_status()


# ------------------------- list / ls -------------------------


def _format_entry(f: FileInfo) -> str:
    kind = "d" if f.is_dir else "-"
    size = "-" if f.is_dir else _format_size(f.size)
    modified = f.modified_date or "-"
    return f"  {kind}  {size:>10}  {modified}  {f.display_name}"


def _cmd_list_impl(path_or_url: str, depth: str, base_url: str | None) -> None:
    if depth not in DEPTHS:
        typer.echo(f"error: depth must be one of {', '.join(DEPTHS)}", err=True)
        raise typer.Exit(1)
    path, url_override = _parse_path_or_url(path_or_url or "/")
    base_url = url_override or base_url
    client = _require_client(base_url)
    try:
        files = client.list_files(path or "/", depth)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()
    for f in files:
        typer.echo(_format_entry(f))


@app.command("list", help="List directory (PROPFIND)")
def list_cmd(
    path: Annotated[str, typer.Argument(help="Directory path or full URL (default: /)")] = "/",
    depth: Annotated[str, typer.Option("--depth", "-d", help="0, 1 or infinity")] = DEPTH_CHILDREN,
    base_url: _base_url_option = None,
) -> None:
    _cmd_list_impl(path, depth, base_url)


@app.command("ls", help="Alias for list")
def ls_cmd(
    path: Annotated[str, typer.Argument(help="Directory path or full URL (default: /)")] = "/",
    depth: Annotated[str, typer.Option("--depth", "-d", help="0, 1 or infinity")] = DEPTH_CHILDREN,
    base_url: _base_url_option = None,
) -> None:
    _cmd_list_impl(path, depth, base_url)


# ------------------------- upload -------------------------


@app.command("upload", help="Upload a file (PUT)")
def upload_cmd(
    path: Annotated[Path, typer.Argument(help="Local file path")],
    to: Annotated[str, typer.Option("--to", "-t", help="Remote file path or full URL (default: local name)")] = "",
    progress: Annotated[bool, typer.Option("--progress", "-p", help="Show upload progress")] = False,
    base_url: _base_url_option = None,
) -> None:
    if not path.is_file():
        typer.echo(f"error: not a file: {path}", err=True)
        raise typer.Exit(1)
    remote, url_override = _parse_path_or_url(to or "")
    base_url = url_override or base_url
    if not remote or remote.endswith("/"):
        remote = f"{remote}{path.name}"
    client = _require_client(base_url)
    on_progress, progress_finish = _make_progress_callback(path.name) if progress else (None, lambda: None)
    try:
        with path.open("rb") as f:
            r = client.upload_file(remote, f, on_progress=on_progress)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        if progress:
            progress_finish()
        client.close()
    _check_status("upload", r)
    typer.echo("Uploaded.")


# ------------------------- download -------------------------


@app.command("download", help="Download a file (GET)")
def download_cmd(
    remote_path: Annotated[str, typer.Argument(help="Remote path or full URL (e.g. docs/a.txt)")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Local path (default: same name)")] = None,
    base_url: _base_url_option = None,
) -> None:
    remote, url_override = _parse_path_or_url(remote_path or "")
    base_url = url_override or base_url
    name = remote.rstrip("/").rsplit("/", 1)[-1]
    if not name:
        typer.echo("error: remote file path required", err=True)
        raise typer.Exit(1)
    client = _require_client(base_url)
    out = str(output) if output is not None else name
    try:
        client.download_file(remote, save_to=out)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()
    typer.echo(f"Saved to {out}.")


# ------------------------- delete / move / mkdir / unzip -------------------------


def _simple_request(action: str, path_or_url: str, base_url: str | None, done: str) -> None:
    path, url_override = _parse_path_or_url(path_or_url or "")
    if not path:
        typer.echo("error: remote path required", err=True)
        raise typer.Exit(1)
    base_url = url_override or base_url
    client = _require_client(base_url)
    try:
        r = getattr(client, action)(path)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()
    _check_status(action, r)
    typer.echo(done)


@app.command("delete", help="Delete a file or directory (DELETE)")
def delete_cmd(
    path: Annotated[str, typer.Argument(help="Remote path or full URL")],
    base_url: _base_url_option = None,
) -> None:
    _simple_request("delete", path, base_url, "Deleted.")


@app.command("mkdir", help="Create a directory (MKCOL)")
def mkdir_cmd(
    path: Annotated[str, typer.Argument(help="Remote path or full URL (e.g. docs/new)")],
    base_url: _base_url_option = None,
) -> None:
    _simple_request("mkcol", path, base_url, "Created.")


@app.command("unzip", help="Extract a .zip archive on the server")
def unzip_cmd(
    path: Annotated[str, typer.Argument(help="Remote .zip path or full URL")],
    base_url: _base_url_option = None,
) -> None:
    _simple_request("unzip", path, base_url, "Extracted.")


@app.command("move", help="Move or rename (MOVE)")
def move_cmd(
    src: Annotated[str, typer.Argument(help="Source path or full URL")],
    dst: Annotated[str, typer.Argument(help="Destination path (same server)")],
    overwrite: Annotated[
        Optional[bool], typer.Option("--overwrite/--no-overwrite", help="Send Overwrite: T/F (default: server decides)")
    ] = None,
    base_url: _base_url_option = None,
) -> None:
    src_path, url_override = _parse_path_or_url(src or "")
    dst_path, _ = _parse_path_or_url(dst or "")
    if not src_path or not dst_path:
        typer.echo("error: source and destination required", err=True)
        raise typer.Exit(1)
    base_url = url_override or base_url
    client = _require_client(base_url)
    try:
        r = client.move(src_path, dst_path, overwrite=overwrite)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()
    _check_status("move", r)
    typer.echo("Moved.")


# ------------------------- main -------------------------


def main() -> None:
    app()


if __name__ == "__main__":
    main()

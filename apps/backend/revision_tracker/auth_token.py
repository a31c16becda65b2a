"""OAuth token bootstrap for the spreadsheet API.

クライアントシークレット（installed / web）から認可フローを実行し、
取得した認可済みユーザートークンを token.json として保存する。
サーバ起動時は `store.credentials.load_credentials` がこのファイルを読む。
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .logging import configure_logging, logger
from .store.credentials import (
    DEFAULT_CLIENT_SECRET_PATH,
    DEFAULT_TOKEN_PATH,
    SCOPES,
    read_client_config,
)


def _build_flow(client_secret_path: Path, scopes: list[str]) -> InstalledAppFlow:
    read_client_config(client_secret_path)
    return InstalledAppFlow.from_client_secrets_file(str(client_secret_path), scopes)


def authorize_manually(
    flow: InstalledAppFlow,
    redirect_uri: str,
    prompt: Callable[[str], str] = input,
    emit: Callable[[str], None] = print,
) -> Credentials:
    """Print the consent URL and exchange the pasted authorization code."""

    flow.redirect_uri = redirect_uri
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")
    emit(f"Authorize this app by visiting this URL:\n{auth_url}")
    code = prompt("\nEnter the code from that page here: ").strip()
    if not code:
        raise ValueError("authorization code is required")
    flow.fetch_token(code=code)
    return flow.credentials


def save_token(creds: Credentials, token_path: Path) -> Path:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json(), encoding="utf-8")
    return token_path


def obtain_token(
    client_secret_path: Path,
    token_path: Path,
    *,
    manual: bool = False,
    port: int = 0,
    open_browser: bool = True,
    scopes: list[str] | None = None,
    prompt: Callable[[str], str] = input,
    emit: Callable[[str], None] = print,
) -> Path:
    """Run the consent flow and store the resulting token.

    - manual=True: URL を表示し、貼り付けられた認可コードを交換する
    - manual=False: ローカルサーバでリダイレクトを受け取る
    """

    resolved_scopes = scopes or SCOPES
    flow = _build_flow(client_secret_path, resolved_scopes)
    if manual:
        client = read_client_config(client_secret_path)
        redirect_uris = client.get("redirect_uris") or ["http://localhost"]
        creds = authorize_manually(flow, redirect_uris[0], prompt=prompt, emit=emit)
    else:
        creds = flow.run_local_server(port=port, open_browser=open_browser, access_type="offline")
    saved = save_token(creds, token_path)
    logger.info("oauth_token_stored", path=str(saved), scopes=resolved_scopes)
    emit(f"Token stored to {saved}")
    return saved


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Google Sheets 用の OAuth トークンを取得して保存する。")
    parser.add_argument(
        "--client-secret",
        default=Path(DEFAULT_CLIENT_SECRET_PATH),
        type=Path,
        help=f"OAuth クライアントシークレット JSON のパス（既定: {DEFAULT_CLIENT_SECRET_PATH}）",
    )
    parser.add_argument(
        "--token",
        default=Path(DEFAULT_TOKEN_PATH),
        type=Path,
        help=f"トークンの保存先（既定: {DEFAULT_TOKEN_PATH}）",
    )
    parser.add_argument(
        "--manual",
        action="store_true",
        help="認可 URL を表示し、認可コードを手入力する場合に指定。",
    )
    parser.add_argument(
        "--port",
        default=0,
        type=int,
        help="ローカルサーバフローの待ち受けポート（既定: 0 = 空きポート）",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="ブラウザを自動で開かない場合に指定。",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    configure_logging()
    obtain_token(
        args.client_secret,
        args.token,
        manual=args.manual,
        port=args.port,
        open_browser=not args.no_browser,
    )


if __name__ == "__main__":
    main()

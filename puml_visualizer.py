import argparse
import logging
import os
import sys
from typing import Optional

import requests
from dotenv import load_dotenv

from puml_encoder import encode_plantuml

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "https://plantuml.mcdole.org/png/"
DEFAULT_TIMEOUT = 30.0
CHUNK_SIZE = 8192


class VisualizeError(Exception):
    pass


class InputMissingError(VisualizeError):
    pass


class FetchStatusError(VisualizeError):
    def __init__(self, status_code: int, url: str):
        super().__init__(f"Failed to fetch image: {status_code}")
        self.status_code = status_code
        self.url = url


class TransportError(VisualizeError):
    pass


def server_url(server: Optional[str] = None) -> str:
    """서버 prefix 결정: 인자 > PLANTUML_SERVER 환경변수 > 기본값"""
    prefix = server or os.getenv("PLANTUML_SERVER") or DEFAULT_SERVER
    if not prefix.endswith("/"):
        prefix += "/"
    return prefix


def request_timeout() -> float:
    value = os.getenv("PLANTUML_TIMEOUT")
    return float(value) if value else DEFAULT_TIMEOUT


def _remove_partial(path: str):
    if os.path.exists(path):
        os.remove(path)


def fetch(token: str, output_path: Optional[str] = None, server: Optional[str] = None) -> str:
    """
    토큰으로 렌더링 URL 생성
    - output_path가 없으면 네트워크 호출 없이 URL만 반환
    - 있으면 이미지를 스트리밍으로 저장 (기존 파일 덮어씀)
    """
    url = server_url(server) + token
    logger.debug("URL: %s", url)

    if not output_path:
        return url

    try:
        with requests.get(url, stream=True, timeout=request_timeout()) as response:
            if response.status_code != 200:
                _remove_partial(output_path)
                logger.error("Server returned %s for %s", response.status_code, url)
                raise FetchStatusError(response.status_code, url)
            with open(output_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        _remove_partial(output_path)
        logger.error("Request to %s failed: %s", url, e)
        raise TransportError(f"Failed to reach server: {e}") from e

    logger.debug("Saved %s", output_path)
    return url


def visualize(text: str, output_path: Optional[str] = None, server: Optional[str] = None) -> str:
    return fetch(encode_plantuml(text), output_path, server)


def resolve_input(value: Optional[str]) -> str:
    # 파일 경로면 파일 내용, 아니면 문자열 그대로
    if value and os.path.isfile(value):
        with open(value, "r", encoding="utf-8") as f:
            value = f.read()
    if not value:
        raise InputMissingError("No PlantUML text or file given")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puml-visualize",
        description="Encode PlantUML text into a server URL and optionally download the image.",
    )
    parser.add_argument("source", nargs="?", help="PlantUML text or path to a .puml file")
    parser.add_argument("output", nargs="?", help="where to save the rendered image")
    parser.add_argument("--server", help="server prefix (default: $PLANTUML_SERVER or %s)" % DEFAULT_SERVER)
    return parser


def main(argv=None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("PLANTUML_LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        text = resolve_input(args.source)
        url = visualize(text, args.output, args.server)
    except InputMissingError:
        parser.print_usage(sys.stderr)
        return 1
    except VisualizeError as e:
        logger.error("Visualization failed: %s", e)
        return 1

    print(f"URL: {url}")
    if args.output:
        print(f"Saved to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import base64
import sys
import zlib

# URL-safe base64 알파벳 -> PlantUML 서버 알파벳 (위치 i <-> 위치 i)
B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
PUML_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"

# 테이블에 없는 문자는 translate가 그대로 통과시킨다
_TO_PUML = str.maketrans(B64_ALPHABET, PUML_ALPHABET)
_FROM_PUML = str.maketrans(PUML_ALPHABET, B64_ALPHABET)


def deflate_raw(data: bytes) -> bytes:
    # wbits=-15: zlib 헤더/푸터 없는 raw deflate, 최대 압축
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    return compressor.compress(data) + compressor.flush()


def inflate_raw(data: bytes) -> bytes:
    return zlib.decompress(data, -15)


# PlantUML 전용 인코딩 함수
def encode_plantuml(text: str) -> str:
    """
    PlantUML 텍스트 -> 서버 URL용 토큰
    - UTF-8 -> raw deflate(9) -> base64url(패딩 제거) -> PlantUML 알파벳
    """
    compressed = deflate_raw(text.encode("utf-8"))
    b64url = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")
    return b64url.translate(_TO_PUML)


def decode_plantuml(token: str) -> str:
    """encode_plantuml의 역변환. 잘못된 토큰이면 ValueError 또는 zlib.error"""
    b64url = token.translate(_FROM_PUML)
    b64url += "=" * (-len(b64url) % 4)
    compressed = base64.urlsafe_b64decode(b64url)
    return inflate_raw(compressed).decode("utf-8")


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args or not args[0]:
        print("Usage: puml-encode <plantuml-text>", file=sys.stderr)
        return 1
    print(encode_plantuml(args[0]))
    return 0


if __name__ == "__main__":
    sys.exit(main())

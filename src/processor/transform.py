"""
업로드 이미지 변환 단계.
디코드 → 최대 폭으로 축소(확대는 하지 않음) → 지정 포맷으로 재인코딩.
입력 bytes만 받아 bytes를 돌려주는 순수 함수로 유지한다.
"""

import io
from typing import NamedTuple

from PIL import Image, UnidentifiedImageError

from core.exceptions import DecodeError

MAX_WIDTH = 1920
QUALITY = 80


class OutputFormat(NamedTuple):
    pil_format: str
    mime_type: str
    extension: str


WEBP = OutputFormat("WEBP", "image/webp", "webp")
PNG = OutputFormat("PNG", "image/png", "png")
JPEG = OutputFormat("JPEG", "image/jpeg", "jpg")

FORMATS = {
    "webp": WEBP,
    "png": PNG,
    "jpeg": JPEG,
    "jpg": JPEG,
}
DEFAULT_FORMAT = WEBP


class TransformResult(NamedTuple):
    data: bytes
    mime_type: str
    extension: str
    width: int
    height: int


def resolve_format(name: str | None) -> OutputFormat:
    """요청 포맷 문자열 → 출력 포맷. 없거나 모르는 값이면 webp."""
    return FORMATS.get(name or "", DEFAULT_FORMAT)


def decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise DecodeError(details=str(e)) from e
    return image


def to_rgb(image: Image.Image) -> Image.Image:
    """RGB/RGBA로 맞춘다. 팔레트("P")나 "1" 모드는 resize가 NEAREST로 떨어진다."""
    if image.mode in ("RGB", "RGBA"):
        return image
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def fit_width(image: Image.Image, max_width: int = MAX_WIDTH) -> Image.Image:
    """폭이 max_width보다 크면 비율을 유지하며 축소한다. 작은 이미지는 그대로."""
    if image.width <= max_width:
        return image
    height = max(1, round(image.height * max_width / image.width))
    return image.resize((max_width, height), Image.LANCZOS)


def quantize(image: Image.Image) -> Image.Image:
    """256색 팔레트로 줄인다 (손실 PNG). RGBA는 MEDIANCUT이 안 돼서 FASTOCTREE."""
    method = Image.Quantize.FASTOCTREE if image.mode == "RGBA" else Image.Quantize.MEDIANCUT
    return image.quantize(colors=256, method=method, dither=Image.Dither.FLOYDSTEINBERG)


def encode(image: Image.Image, fmt: OutputFormat) -> bytes:
    buf = io.BytesIO()
    if fmt is JPEG:
        # JPEG는 알파 채널을 지원하지 않는다
        image.convert("RGB").save(buf, fmt.pil_format, quality=QUALITY, optimize=True)
    elif fmt is PNG:
        quantize(image).save(buf, fmt.pil_format, optimize=True)
    else:
        image.save(buf, fmt.pil_format, quality=QUALITY)
    return buf.getvalue()


def transform_image(data: bytes, fmt: str | None = None) -> TransformResult:
    output = resolve_format(fmt)
    image = fit_width(to_rgb(decode(data)))
    return TransformResult(
        data=encode(image, output),
        mime_type=output.mime_type,
        extension=output.extension,
        width=image.width,
        height=image.height,
    )

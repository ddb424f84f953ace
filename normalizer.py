import base64
import io
import os

from PIL import Image, UnidentifiedImageError

from errors import FileReadError, RenderError, UnsupportedImage

MAX_WIDTH = 1200
JPEG_QUALITY = 75


def _read_source(source) -> bytes:
    """경로, bytes, 파일 객체 중 무엇이든 bytes로 읽기."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        if isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as f:
                return f.read()
        return source.read()
    except (OSError, AttributeError) as e:
        raise FileReadError(f"Failed to read file: {e}") from e


def _decode(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise UnsupportedImage("Unsupported image file.") from e
    return img


def scaled_size(width: int, height: int, max_width: int = MAX_WIDTH) -> tuple[int, int]:
    # 확대는 하지 않는다
    scale = min(1, max_width / width)
    return max(1, round(width * scale)), max(1, round(height * scale))


def normalize_image(source) -> str:
    """업로드 이미지를 MAX_WIDTH 이하로 줄이고 JPEG data URL로 변환."""
    data = _read_source(source)
    img = _decode(data)
    del data

    try:
        if img.mode != "RGB":
            img = img.convert("RGB")

        size = scaled_size(img.width, img.height)
        if size != img.size:
            img = img.resize(size, Image.LANCZOS)

        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=JPEG_QUALITY)
    except (OSError, ValueError) as e:
        raise RenderError("Could not read image.") from e
    finally:
        img.close()

    b64 = base64.standard_b64encode(buf.getvalue()).decode("utf-8")
    return f"data:image/jpeg;base64,{b64}"

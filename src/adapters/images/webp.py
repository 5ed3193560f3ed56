"""
WebP variant generation for uploaded images.

Each configured variant is rendered from the decoded original:
    - fit "inside": shrink to fit within width x height, aspect preserved, no upscaling
    - fit "cover":  scale and centre-crop to exactly width x height
and encoded as WebP at the variant's quality.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from src.rules.models import ImageVariant


@dataclass(frozen=True)
class ProcessedVariant:
    """One encoded variant."""

    name: str
    filename: str
    data: bytes
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)


class WebPVariantProcessor:
    """Renders the configured variants of an image as WebP."""

    def __init__(self, variants: list[ImageVariant]):
        self.variants = variants

    def process(self, raw_bytes: bytes, base_name: str) -> list[ProcessedVariant]:
        """
        Decode raw_bytes and produce one WebP per variant.

        Filenames are `{base_name}{suffix}.webp`.
        Raises ValueError if the bytes are not a decodable image.
        """
        original = self._open(raw_bytes)
        results: list[ProcessedVariant] = []
        for variant in self.variants:
            img = self._resize(original, variant)
            results.append(
                ProcessedVariant(
                    name=variant.name,
                    filename=f"{base_name}{variant.suffix}.webp",
                    data=self._to_webp(img, variant.quality),
                    width=img.width,
                    height=img.height,
                )
            )
        return results

    # --- Pipeline stages ---

    def _open(self, raw_bytes: bytes) -> Image.Image:
        try:
            img = Image.open(BytesIO(raw_bytes))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ValueError(f"Not a valid image: {e}") from e

        # Animated GIF/WebP: first frame only
        if getattr(img, "is_animated", False):
            img.seek(0)
            img = img.copy()

        if img.mode in ("RGBA", "LA") or "transparency" in img.info:
            return img.convert("RGBA")
        return img.convert("RGB")

    def _resize(self, img: Image.Image, variant: ImageVariant) -> Image.Image:
        if variant.fit == "cover":
            return ImageOps.fit(
                img,
                (variant.width, variant.height),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )

        if img.width <= variant.width and img.height <= variant.height:
            return img

        ratio = min(variant.width / img.width, variant.height / img.height)
        new_w = max(1, round(img.width * ratio))
        new_h = max(1, round(img.height * ratio))
        return img.resize((new_w, new_h), Image.Resampling.LANCZOS)

    def _to_webp(self, img: Image.Image, quality: int) -> bytes:
        buf = BytesIO()
        img.save(buf, format="WEBP", quality=quality)
        return buf.getvalue()

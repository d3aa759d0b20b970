"""Image export utilities for rendered framebuffers.

Framebuffer values are clamped to [0, 1] and scaled by 255 before being
written; no tone mapping or gamma correction is applied.

Supported formats:
    - PPM (binary P6, written directly)
    - PNG and any other format Pillow recognises by suffix

Example:
    >>> from whitted.core.renderer import render_scene
    >>> from whitted.preview.export import save_image
    >>>
    >>> framebuffer = render_scene()
    >>> save_image(framebuffer, "out.ppm")
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def _check_image_shape(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")


def framebuffer_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image does not have three channels.
    """
    _check_image_shape(image)
    clamped = np.clip(image.astype(np.float32), 0.0, 1.0)
    return (clamped * 255).astype(np.uint8)


def encode_ppm(image: npt.NDArray[np.floating]) -> bytes:
    """Encode a float image as binary PPM (P6).

    Args:
        image: Image array of shape (H, W, 3), row 0 at the top.

    Returns:
        The complete PPM file contents.
    """
    pixels = framebuffer_to_uint8(image)
    height, width = pixels.shape[:2]
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    return header + pixels.tobytes()


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a float image as a binary PPM file.

    Args:
        image: Image array of shape (H, W, 3).
        filepath: Output file path.
    """
    Path(filepath).write_bytes(encode_ppm(image))
    logger.info("Wrote %s", filepath)


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a float image through Pillow (PNG or any suffix it supports).

    Args:
        image: Image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(framebuffer_to_uint8(image), mode="RGB")
    pil_image.save(filepath)
    logger.info("Wrote %s", filepath)


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a float image, choosing the format from the file suffix.

    Args:
        image: Image array of shape (H, W, 3).
        filepath: Output file path; ".ppm" selects binary PPM.
    """
    if Path(filepath).suffix.lower() == ".ppm":
        save_ppm(image, filepath)
    else:
        save_png(image, filepath)

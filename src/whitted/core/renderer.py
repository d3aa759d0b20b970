"""Image renderer: shades every pixel of the framebuffer.

This module provides a convenient wrapper around the Whitted integrator
that supports:
- Rendering the current scene into a preallocated framebuffer
- Row-batched rendering with progress callbacks for UI updates
- Access to the result as float or 8-bit NumPy arrays

Every pixel is shaded independently: the primary ray through its center is
passed to cast_ray() at depth 0 and the result stored at
framebuffer[j, i], with row j = 0 at the top of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.renderer import Renderer
    >>> from whitted.scene.default_scene import create_default_scene
    >>>
    >>> scene, options = create_default_scene()
    >>> renderer = Renderer(options)
    >>> renderer.render()
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti

from whitted.camera.pinhole import get_primary_ray, setup_camera
from whitted.core.integrator import cast_ray, setup_render_options
from whitted.core.options import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, RenderOptions

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Framebuffer
# =============================================================================

# Indexed [row, column]; only the top-left height x width region is used
_framebuffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


@ti.kernel
def _render_rows(row_start: ti.i32, row_end: ti.i32, width: ti.i32, height: ti.i32):
    # Serialized: the shading stack is shared
    ti.loop_config(serialize=True)
    for j, i in ti.ndrange((row_start, row_end), width):
        ray = get_primary_ray(i, j, width, height)
        _framebuffer[j, i] = cast_ray(ray.origin, ray.direction, 0)


class Renderer:
    """Renders the current scene with fixed render options.

    The renderer copies its options into the integrator and camera fields
    on construction, so scene objects and lights may be added before or
    after creating it, as long as they are in place when render() runs.

    Attributes:
        options: The render options in use.
    """

    def __init__(self, options: RenderOptions | None = None) -> None:
        """Initialize the renderer.

        Args:
            options: Render options. Defaults to RenderOptions().

        Raises:
            ValueError: If the options are invalid.
        """
        self._options = options if options is not None else RenderOptions()
        self._rendered = False
        self.configure(self._options)

    @property
    def options(self) -> RenderOptions:
        """Get the render options."""
        return self._options

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._options.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._options.height

    def configure(self, options: RenderOptions) -> None:
        """Apply new render options and discard any previous result.

        Args:
            options: The render options to use.

        Raises:
            ValueError: If the options are invalid.
        """
        setup_render_options(options)
        setup_camera(options)
        self._options = options
        self._rendered = False

    def render(
        self,
        batch_rows: int = 0,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Shade every pixel of the image.

        Args:
            batch_rows: Number of rows to shade per kernel launch. Zero
                renders the whole image in one launch.
            callback: Optional callback function called after each batch.
                Receives (rows_done, total_rows).

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(batch_rows=64, callback=progress)
        """
        width, height = self.width, self.height
        step = batch_rows if batch_rows > 0 else height

        # Options may have been replaced by another renderer since configure()
        setup_render_options(self._options)
        setup_camera(self._options)

        logger.info("Rendering %dx%d, max depth %d", width, height, self._options.max_depth)
        start = time.perf_counter()

        row = 0
        while row < height:
            row_end = min(row + step, height)
            _render_rows(row, row_end, width, height)
            row = row_end
            if callback is not None:
                callback(row, height)

        ti.sync()
        elapsed = time.perf_counter() - start
        self._rendered = True
        logger.info("Render complete in %.3fs", elapsed)

    def get_framebuffer(self) -> npt.NDArray[np.float32]:
        """Get the raw framebuffer of the last render.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
            Values are not clamped.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if not self._rendered:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return _framebuffer.to_numpy()[: self.height, : self.width, :].astype(np.float32)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image with values clamped to [0, 1].

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        return np.clip(self.get_framebuffer(), 0.0, 1.0)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        from whitted.preview.export import framebuffer_to_uint8

        return framebuffer_to_uint8(self.get_framebuffer())

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image to a file.

        The format is chosen by suffix: ".ppm" writes binary PPM, anything
        else is written through Pillow.

        Args:
            filepath: Path to save the image (e.g., "out.ppm").
        """
        from whitted.preview.export import save_image

        save_image(self.get_framebuffer(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self._options.max_depth}, rendered={self._rendered})"
        )


def render_scene(options: RenderOptions | None = None) -> npt.NDArray[np.float32]:
    """Render the current scene and return its framebuffer.

    Args:
        options: Render options. Defaults to RenderOptions().

    Returns:
        NumPy array of shape (height, width, 3) with dtype float32.
    """
    renderer = Renderer(options)
    renderer.render()
    return renderer.get_framebuffer()

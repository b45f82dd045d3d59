"""
Background preparation of coloring pages.

Generation is CPU-bound and runs off the interactive thread; results come
back through concurrent.futures.Future objects.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..coloring_page import ColoringPageGenerator, ColoringPageResult, load_photo
from ..config.engine_config import EngineConfig

logger = logging.getLogger(__name__)

PhotoSource = Union[np.ndarray, str, Path]


class ColoringPageWorker:
    """
    Runs ColoringPageGenerator on a thread pool.

    There is no cancellation; a submitted job runs to completion.

    Example:
        >>> with ColoringPageWorker() as worker:
        ...     future = worker.submit("dog.jpg")
        ...     page = future.result()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        max_workers: int = 1,
    ):
        """
        Initialize worker.

        Args:
            config: Engine configuration (page and mask settings are used)
            max_workers: Number of worker threads
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.config = config or EngineConfig.default()
        self.generator = ColoringPageGenerator(self.config.coloring_page, self.config.edge_mask)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="colorpage",
        )

    def prepare(
        self,
        photo: PhotoSource,
        max_dimension: Optional[int] = None,
        orientation: int = 1,
    ) -> ColoringPageResult:
        """
        Generate a coloring page on the calling thread.

        Args:
            photo: Decoded image or path to an image file
            max_dimension: Longest side of the output
            orientation: EXIF orientation of an in-memory photo

        Returns:
            ColoringPageResult (empty when the photo cannot be decoded)
        """
        start_time = time.time()

        image = load_photo(str(photo)) if isinstance(photo, (str, Path)) else photo
        try:
            result = self.generator.generate(image, max_dimension, orientation)
        except Exception as e:
            logger.error(f"Coloring page generation failed: {e}")
            raise

        elapsed_ms = (time.time() - start_time) * 1000
        logger.debug(f"Prepared {result.display_image.width}x{result.display_image.height} page in {elapsed_ms:.1f}ms")
        return result

    def submit(
        self,
        photo: PhotoSource,
        max_dimension: Optional[int] = None,
        orientation: int = 1,
    ) -> "Future[ColoringPageResult]":
        """
        Queue a photo for background preparation.

        Returns:
            Future resolving to the ColoringPageResult; generation errors
            are raised from Future.result()
        """
        return self._executor.submit(self.prepare, photo, max_dimension, orientation)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ColoringPageWorker":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

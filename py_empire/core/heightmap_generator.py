"""
Height field synthesis.

Every cell starts with an independent uniform random height. Smoothing passes
then average each cell with its eight neighbours, which makes high and low
ground clump together; the more passes, the larger and rounder the eventual
continents. The terrain classifier later cuts this field at a water line.
"""

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .grid import DIRECTIONS, GridConfig

logger = structlog.get_logger()

MAX_HEIGHT = 999


class HeightmapGenerator:
    """
    Generates smoothed random height fields.

    Heights are integers in [0, MAX_HEIGHT] stored as a (height, width)
    array. All randomness comes from the supplied PRNG, one draw per cell in
    scan order, so a seed reproduces the field exactly.
    """

    def __init__(self, config: GridConfig, prng: AleaPRNG):
        """
        Initialize the heightmap generator.

        Args:
            config: Grid dimensions
            prng: Random source shared with the rest of the generation run
        """
        self.config = config
        self._prng = prng
        self.heights = np.zeros((config.height, config.width), dtype=np.int32)

    def random_heights(self) -> np.ndarray:
        """Fill the grid with uniform random heights."""
        values = [self._prng.randint(MAX_HEIGHT + 1) for _ in range(self.config.size)]
        self.heights = np.array(values, dtype=np.int32).reshape(
            self.config.height, self.config.width
        )
        return self.heights

    @staticmethod
    def _shifted(source: np.ndarray, dr: int, dc: int) -> np.ndarray:
        """
        Return the (dr, dc) neighbour of every cell.

        Where the neighbour would fall outside the grid the cell's own value
        is used instead, so edges are smoothed against themselves rather
        than wrapped or padded.
        """
        out = source.copy()
        rows, cols = source.shape
        r0, r1 = max(0, -dr), rows - max(0, dr)
        c0, c1 = max(0, -dc), cols - max(0, dc)
        if r0 < r1 and c0 < c1:
            out[r0:r1, c0:c1] = source[r0 + dr:r1 + dr, c0 + dc:c1 + dc]
        return out

    def smooth(self, passes: int) -> np.ndarray:
        """
        Replace each height with the floor of the mean of its 3x3 block.

        Args:
            passes: Number of smoothing passes (0 leaves the noise untouched)
        """
        if passes < 0:
            raise ValueError(f"Smoothing passes must be >= 0, got {passes}")

        # Two buffers alternate between read and write roles
        buffers = [self.heights.copy(), np.empty_like(self.heights)]
        current = 0
        for _ in range(passes):
            source = buffers[current]
            total = source.copy()
            for dr, dc in DIRECTIONS:
                total += self._shifted(source, dr, dc)
            buffers[1 - current][...] = total // 9
            current = 1 - current

        self.heights = buffers[current]
        return self.heights

    def generate(self, smooth: int) -> np.ndarray:
        """
        Produce a height field ready for classification.

        Args:
            smooth: Number of smoothing passes

        Returns:
            Array of shape (height, width)
        """
        self.random_heights()
        self.smooth(smooth)
        logger.debug(
            "Height field synthesized",
            width=self.config.width,
            height=self.config.height,
            smooth=smooth,
            min_height=int(self.heights.min()),
            max_height=int(self.heights.max()),
        )
        return self.heights

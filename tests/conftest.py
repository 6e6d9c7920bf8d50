from __future__ import annotations

import numpy as np
import pytest

from lfdreader import Delt, Pltt


@pytest.fixture
def ramp_palette() -> Pltt:
    """PLTT defining 0x20-0x3F as a grey ramp."""
    return Pltt("ramp", 0x20, 0x3F, colors=[(i * 8, i * 8, i * 8) for i in range(32)])


@pytest.fixture
def checker_delt() -> Delt:
    pixels = np.array(
        [
            [0x20, 0x21, 0x20, 0x21],
            [0x21, 0x20, 0x21, 0x20],
            [0x22, 0x22, 0x22, 0x22],
            [0x3F, 0x3F, 0x20, 0x21],
        ],
        dtype=np.uint8,
    )
    return Delt("checker", pixels, left=10, top=20)

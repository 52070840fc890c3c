from __future__ import annotations

from rlehuff.layers.plain import LayerPlain
from rlehuff.layers.rle import LayerRLE


def layer_for(rle: bool, run_width: int | None) -> LayerPlain | LayerRLE:
    """Pick the pre-pass layer from a profile or a parsed header."""
    if rle:
        return LayerRLE(run_width=int(run_width or 8))
    return LayerPlain()

# dispbdt/training/schema.py
"""
Column contract of the per-telescope-type training trees (dispTree_<type>).
Fixed for every telescope type; all floating columns are single precision.
"""

from __future__ import annotations

import pyarrow as pa

_FLOAT_COLUMNS = [
    # image parameters
    "cen_x",
    "cen_y",
    "sinphi",
    "cosphi",
    "size",  # log10(size)
    "ntubes",
    "loss",
    "asym",
    "width",
    "length",
    "wol",  # width / length
    "dist",
    "fui",
    "tgrad_x",
    "meanPedvar_Image",
    # Monte Carlo truth
    "MCe0",
    "MCxoff",
    "MCyoff",
    "MCxcore",
    "MCycore",
    "MCrcore",
    # reconstruction (selected method)
    "Xcore",
    "Ycore",
    "Rcore",
    "Xoff",
    "Yoff",
    "LTrig",
    "NImages",
    "EHeight",
    "MCaz",
    "MCze",
    "Ze",
    "Az",
    # labels
    "disp",
    "dispError",
    "cross",
    "dispPhi",
    "dispEnergy",
    "dispCore",
]

DISP_TREE_SCHEMA = pa.schema(
    [
        pa.field("runNumber", pa.int32()),
        pa.field("eventNumber", pa.int32()),
        pa.field("tel", pa.uint32()),
    ]
    + [pa.field(name, pa.float32()) for name in _FLOAT_COLUMNS]
)

DISP_TREE_COLUMNS = DISP_TREE_SCHEMA.names

# image-parameter stream columns read from Tel_<n>/tpars
TPARS_COLUMNS = [
    "cen_x",
    "cen_y",
    "sinphi",
    "cosphi",
    "size",
    "ntubes",
    "loss",
    "asymmetry",
    "width",
    "length",
    "tgrad_x",
    "dist",
    "fui",
    "meanPedvar_Image",
]

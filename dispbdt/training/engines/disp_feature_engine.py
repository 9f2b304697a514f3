# dispbdt/training/engines/disp_feature_engine.py
from __future__ import annotations

import math
from typing import Any, Dict, Mapping

import numpy as np

from dispbdt.training.engines.array_config_engine import TelescopeRecord
from dispbdt.utils.errors import ConfigurationError
from dispbdt.utils.geometry import line_point_distance


def _f32(value: float) -> float:
    return float(np.float32(value))


def _ratio(numerator: float, denominator: float) -> float:
    """
    IEEE division (inf / nan instead of ZeroDivisionError).
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


def _log10(value: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log10(np.float64(value)))


def disp_error(
    cen_x: float,
    cen_y: float,
    cosphi: float,
    sinphi: float,
    disp: float,
    mc_xoff: float,
    mc_yoff: float,
) -> float:
    """
    Distance to the true direction of the closer of the two disp candidates
    along the image major axis (head / tail ambiguity).

    Sign convention: the true direction in camera coordinates is (MCxoff, -MCyoff).
    """
    x1 = cen_x - disp * cosphi
    x2 = cen_x + disp * cosphi
    y1 = cen_y - disp * sinphi
    y2 = cen_y + disp * sinphi

    d1 = math.hypot(x1 - mc_xoff, y1 + mc_yoff)
    d2 = math.hypot(x2 - mc_xoff, y2 + mc_yoff)

    return min(d1, d2)


class DispFeatureEngine:
    """
    DispFeatureEngine

    Responsibility:
      - derive ONE training record from
          (array-level event, image parameters, telescope static record)
      - own ALL derived quantities: disp, cross, dispPhi, dispError,
        dispEnergy, dispCore, Rcore, MCrcore, wol, log10(size)

    Contract:
      - pure: inputs are never modified, no IO
      - the pair is pre-selected (image exists, size > 0)
      - output keys == DISP_TREE_SCHEMA names, floats rounded to float32

    Sign conventions:
      - camera y is flipped against MC / reconstructed offsets
      - ground x is flipped for the shower-axis distance
    """

    METHOD_FIELDS = ("Xcore", "Ycore", "Xoff", "Yoff", "NImages")

    def __init__(self, rec_id: int):
        if rec_id < 0:
            raise ConfigurationError(f"invalid reconstruction ID {rec_id}")
        self.rec_id = rec_id

    # ------------------------------------------------------------------
    def _method_value(self, shower: Mapping[str, Any], name: str) -> float:
        values = shower[name]
        if self.rec_id >= len(values):
            raise ConfigurationError(
                f"invalid reconstruction ID {self.rec_id}; "
                f"maximum allowed value is {len(values) - 1}"
            )
        return float(values[self.rec_id])

    # ------------------------------------------------------------------
    def derive(
        self,
        shower: Mapping[str, Any],
        image: Mapping[str, Any],
        telescope: TelescopeRecord,
    ) -> Dict[str, Any]:
        i = telescope.index

        cen_x = float(image["cen_x"])
        cen_y = float(image["cen_y"])
        sinphi = float(image["sinphi"])
        cosphi = float(image["cosphi"])
        raw_size = float(image["size"])
        width = float(image["width"])
        length = float(image["length"])

        wol = width / length if length > 0.0 else 0.0

        ze = 90.0 - float(shower["TelElevation"][i])
        az = float(shower["TelAzimuth"][i])

        mc_e0 = float(shower["MCe0"])
        mc_xoff = float(shower["MCxoff"])
        mc_yoff = float(shower["MCyoff"])
        mc_xcore = float(shower["MCxcore"])
        mc_ycore = float(shower["MCycore"])
        mc_ze = float(shower["MCze"])
        mc_az = float(shower["MCaz"])

        xcore = self._method_value(shower, "Xcore")
        ycore = self._method_value(shower, "Ycore")
        xoff = self._method_value(shower, "Xoff")
        yoff = self._method_value(shower, "Yoff")
        n_images = self._method_value(shower, "NImages")

        # --------------------------------------------------------------
        # shower axis -> telescope distance (x flipped)
        # --------------------------------------------------------------
        rcore = line_point_distance(
            ycore, -xcore, 0.0, ze, az,
            telescope.y, -telescope.x, telescope.z,
        )
        mc_rcore = line_point_distance(
            mc_ycore, -mc_xcore, 0.0, mc_ze, mc_az,
            telescope.y, -telescope.x, telescope.z,
        )

        # --------------------------------------------------------------
        # disp (camera y flipped against offsets)
        # --------------------------------------------------------------
        disp = math.hypot(cen_y + mc_yoff, cen_x - mc_xoff)
        cross = math.hypot(cen_y + yoff, cen_x - xoff)
        disp_phi = math.atan2(sinphi, cosphi) - math.atan2(cen_y + mc_yoff, cen_x - mc_xoff)

        error = disp_error(cen_x, cen_y, cosphi, sinphi, disp, mc_xoff, mc_yoff)

        # energy target in ratio to size
        disp_energy = _ratio(_log10(mc_e0), _log10(raw_size))

        record: Dict[str, Any] = {
            "runNumber": int(shower["runNumber"]),
            "eventNumber": int(shower["eventNumber"]),
            "tel": i + 1,
            "cen_x": cen_x,
            "cen_y": cen_y,
            "sinphi": sinphi,
            "cosphi": cosphi,
            "size": _log10(raw_size),
            "ntubes": float(image["ntubes"]),
            "loss": float(image["loss"]),
            "asym": float(image["asymmetry"]),
            "width": width,
            "length": length,
            "wol": wol,
            "dist": float(image["dist"]),
            "fui": float(image["fui"]),
            "tgrad_x": float(image["tgrad_x"]),
            "meanPedvar_Image": float(image["meanPedvar_Image"]),
            "MCe0": mc_e0,
            "MCxoff": mc_xoff,
            "MCyoff": mc_yoff,
            "MCxcore": mc_xcore,
            "MCycore": mc_ycore,
            "MCrcore": mc_rcore,
            "Xcore": xcore,
            "Ycore": ycore,
            "Rcore": rcore,
            "Xoff": xoff,
            "Yoff": yoff,
            "LTrig": float(shower.get("LTrig") or 0.0),
            "NImages": n_images,
            "EHeight": -1.0,
            "MCaz": mc_az,
            "MCze": mc_ze,
            "Ze": ze,
            "Az": az,
            "disp": disp,
            "dispError": error,
            "cross": cross,
            "dispPhi": disp_phi,
            "dispEnergy": disp_energy,
            "dispCore": rcore,
        }

        for key, value in record.items():
            if isinstance(value, float):
                record[key] = _f32(value)

        return record

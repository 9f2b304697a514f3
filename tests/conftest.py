# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


# ============================================================
# Synthetic event store
# ============================================================
LST = 138704810
MST = 10408618
ASTRI = 201511619

N_METHODS = 2


def telescope(tel_type: int, hyper_id: int, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Dict:
    return dict(tel_type=tel_type, hyper_id=hyper_id, x=x, y=y, z=z)


def _write_source(
    src: Path,
    telescopes: Sequence[Dict],
    *,
    n_events: int,
    first_event: int,
    rng: np.random.Generator,
    zero_size: Dict[int, Iterable[int]],
    missing_tail: Dict[int, int],
    event_shift: Dict[int, int],
) -> None:
    src.mkdir(parents=True, exist_ok=True)
    n_tel = len(telescopes)

    # --------------------------------------------------
    # telconfig
    # --------------------------------------------------
    pq.write_table(
        pa.table(
            {
                "TelID": pa.array([i + 1 for i in range(n_tel)], pa.int32()),
                "TelID_hyperArray": pa.array([t["hyper_id"] for t in telescopes], pa.int32()),
                "TelType": pa.array([t["tel_type"] for t in telescopes], pa.int64()),
                "TelX": pa.array([t["x"] for t in telescopes], pa.float32()),
                "TelY": pa.array([t["y"] for t in telescopes], pa.float32()),
                "TelZ": pa.array([t["z"] for t in telescopes], pa.float32()),
                "FOV": pa.array([8.0] * n_tel, pa.float32()),
            }
        ),
        src / "telconfig.parquet",
    )

    # --------------------------------------------------
    # showerpars
    # --------------------------------------------------
    n = n_events
    events = np.arange(first_event, first_event + n, dtype=np.int32)
    mc_xoff = rng.uniform(-2.0, 2.0, n)
    mc_yoff = rng.uniform(-2.0, 2.0, n)
    mc_xcore = rng.uniform(-300.0, 300.0, n)
    mc_ycore = rng.uniform(-300.0, 300.0, n)

    def per_method(values: np.ndarray, noise: float) -> List[List[float]]:
        return [[float(v + rng.normal(0.0, noise)) for _ in range(N_METHODS)] for v in values]

    pq.write_table(
        pa.table(
            {
                "runNumber": pa.array(np.full(n, 100), pa.int32()),
                "eventNumber": pa.array(events, pa.int32()),
                "LTrig": pa.array(np.full(n, 2 ** n_tel - 1), pa.int64()),
                "MCe0": rng.uniform(0.1, 100.0, n),
                "MCxoff": mc_xoff,
                "MCyoff": mc_yoff,
                "MCxcore": mc_xcore,
                "MCycore": mc_ycore,
                "MCze": np.full(n, 20.0),
                "MCaz": np.full(n, 180.0),
                "NImages": pa.array([[n_tel] * N_METHODS] * n, pa.list_(pa.int32())),
                "Chi2": pa.array([[0.0] * N_METHODS] * n, pa.list_(pa.float64())),
                "Xcore": pa.array(per_method(mc_xcore, 5.0), pa.list_(pa.float64())),
                "Ycore": pa.array(per_method(mc_ycore, 5.0), pa.list_(pa.float64())),
                "Xoff": pa.array(per_method(mc_xoff, 0.05), pa.list_(pa.float64())),
                "Yoff": pa.array(per_method(mc_yoff, 0.05), pa.list_(pa.float64())),
                "TelElevation": pa.array([[70.0] * n_tel] * n, pa.list_(pa.float64())),
                "TelAzimuth": pa.array([[180.0] * n_tel] * n, pa.list_(pa.float64())),
            }
        ),
        src / "showerpars.parquet",
    )

    # --------------------------------------------------
    # Tel_<n>/tpars
    # --------------------------------------------------
    for i in range(n_tel):
        n_i = n - missing_tail.get(i, 0)
        phi = rng.uniform(-np.pi, np.pi, n_i)
        cen_x = rng.uniform(-1.5, 1.5, n_i)
        cen_y = rng.uniform(-1.5, 1.5, n_i)

        size = rng.uniform(100.0, 5000.0, n_i)
        for k in zero_size.get(i, ()):
            if k < n_i:
                size[k] = 0.0

        tel_dir = src / f"Tel_{i + 1}"
        tel_dir.mkdir(exist_ok=True)
        pq.write_table(
            pa.table(
                {
                    "eventNumber": pa.array(events[:n_i] + event_shift.get(i, 0), pa.int32()),
                    "cen_x": cen_x,
                    "cen_y": cen_y,
                    "sinphi": np.sin(phi),
                    "cosphi": np.cos(phi),
                    "size": size,
                    "ntubes": rng.integers(5, 200, n_i).astype(np.float64),
                    "loss": rng.uniform(0.0, 0.1, n_i),
                    "asymmetry": rng.normal(0.0, 0.3, n_i),
                    "width": rng.uniform(0.05, 0.3, n_i),
                    "length": rng.uniform(0.1, 0.8, n_i),
                    "tgrad_x": rng.normal(0.0, 5.0, n_i),
                    "dist": np.hypot(cen_x, cen_y),
                    "fui": rng.uniform(0.0, 1.0, n_i),
                    "meanPedvar_Image": rng.uniform(5.0, 8.0, n_i),
                }
            ),
            tel_dir / "tpars.parquet",
        )


@pytest.fixture
def write_event_store(tmp_path: Path):
    """
    Factory fixture: synthetic sources + input list.

    Usage:
        input_list = write_event_store([telescope(LST, 1), telescope(MST, 5)], n_events=50)

    Options:
        n_sources      : number of source directories (events numbered continuously)
        zero_size      : {telescope index: [event index, ...]} with size == 0
        missing_tail   : {telescope index: k} -> last k image rows absent
        event_shift    : {telescope index: d} -> image eventNumber shifted by d
    """

    def _write(
        telescopes: Sequence[Dict],
        *,
        n_events: int = 20,
        n_sources: int = 1,
        seed: int = 1,
        zero_size: Optional[Dict[int, Iterable[int]]] = None,
        missing_tail: Optional[Dict[int, int]] = None,
        event_shift: Optional[Dict[int, int]] = None,
    ) -> Path:
        rng = np.random.default_rng(seed)
        root = tmp_path / "store"

        sources = []
        for s in range(n_sources):
            src = root / f"source_{s}"
            _write_source(
                src,
                telescopes,
                n_events=n_events,
                first_event=s * n_events,
                rng=rng,
                zero_size=zero_size or {},
                missing_tail=missing_tail or {},
                event_shift=event_shift or {},
            )
            sources.append(src)

        input_list = tmp_path / "inputs.list"
        input_list.write_text("\n".join(str(s) for s in sources) + "\n\n", encoding="utf-8")
        return input_list

    return _write

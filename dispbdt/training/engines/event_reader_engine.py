# dispbdt/training/engines/event_reader_engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence

import pyarrow.parquet as pq

from dispbdt import logs
from dispbdt.event_store.parquet_chain import ParquetChain, SHOWERPARS, tpars_path
from dispbdt.observability.instrumentation import Instrumentation, NoOpInstrumentation
from dispbdt.training.engines.array_config_engine import ArrayConfiguration, TelescopeRecord
from dispbdt.training.schema import TPARS_COLUMNS
from dispbdt.utils.errors import ConfigurationError, EventAlignmentError

AlignmentCheck = Literal["off", "warn", "strict"]


@dataclass(frozen=True)
class SurvivingPair:
    """
    One (event, telescope) pair that passed selection.
    """
    ordinal: int
    shower: Dict[str, Any]
    telescope: TelescopeRecord
    image: Dict[str, Any]


@dataclass
class ReaderStats:
    n_events: int = 0
    n_pairs: int = 0
    n_absent: int = 0
    n_non_positive_size: int = 0
    n_misaligned: int = 0
    misaligned_telescopes: set = field(default_factory=set)


class SynchronizedEventReader:
    """
    SynchronizedEventReader

    Responsibility:
      - one array-level cursor (showerpars, all sources concatenated)
      - one image-parameter cursor per type-matching telescope
        (Tel_<n>/tpars over the SAME source list), None otherwise
      - advance every cursor in lock-step, one event ordinal at a time

    Precondition (alignment):
      entry n of showerpars and entry n of every Tel_<n>/tpars stream
      describe the same physical event.
      Cross-check: when an image row carries `eventNumber`, it is compared
      with the array-level `eventNumber` (policy: off | warn | strict).

    Selection per ordinal / telescope:
      - inactive telescope (mask)              -> skipped
      - no image row (stream exhausted / null) -> skipped
      - size <= 0                              -> skipped
      - otherwise                              -> SurvivingPair
    """

    def __init__(
        self,
        sources: Sequence[Path],
        config: ArrayConfiguration,
        tel_type_filter: int,
        *,
        batch_size: int = 65536,
        alignment_check: AlignmentCheck = "warn",
        progress_every: int = 0,
        inst: Instrumentation | None = None,
    ):
        self.config = config
        self.tel_type_filter = tel_type_filter
        self.alignment_check = alignment_check
        self.progress_every = progress_every
        self.inst = inst if inst is not None else NoOpInstrumentation()
        self.stats = ReaderStats()

        self._shower_chain = ParquetChain(sources, SHOWERPARS, batch_size=batch_size)

        self._tpars_chains: List[Optional[ParquetChain]] = []
        for telescope in config.telescopes:
            if not config.type_matches(telescope, tel_type_filter):
                self._tpars_chains.append(None)
                logs.debug(f"[EventReader] ignore tree for telescope type {telescope.tel_type}")
                continue

            chain = ParquetChain(
                sources,
                tpars_path(telescope.index),
                batch_size=batch_size,
                columns=self._tpars_columns(sources, telescope.index),
            )
            self._tpars_chains.append(chain)

            logs.info(
                f"[EventReader] found tree {tpars_path(telescope.index)} "
                f"(teltype {telescope.tel_type}), entries: {chain.num_entries}"
            )
            if chain.num_entries != self._shower_chain.num_entries:
                logs.warning(
                    f"[EventReader] {tpars_path(telescope.index)} has {chain.num_entries} entries, "
                    f"showerpars has {self._shower_chain.num_entries}"
                )

    # ------------------------------------------------------------------
    @staticmethod
    def _tpars_columns(sources: Sequence[Path], index: int) -> Optional[List[str]]:
        """
        Image columns plus the redundant eventNumber when every file of the chain has it.
        """
        files = [Path(source) / tpars_path(index) for source in sources]
        schemas = [(f, pq.read_schema(f).names) for f in files if f.exists()]
        if not schemas:
            return None

        for f, names in schemas:
            missing = [c for c in TPARS_COLUMNS if c not in names]
            if missing:
                raise ConfigurationError(f"{f} lacks image columns {missing}")

        columns = list(TPARS_COLUMNS)
        if all("eventNumber" in names for _, names in schemas):
            columns.append("eventNumber")
        return columns

    @property
    def num_entries(self) -> int:
        return self._shower_chain.num_entries

    # ------------------------------------------------------------------
    def iter_pairs(self) -> Iterator[SurvivingPair]:
        total = self.num_entries
        logs.info(f"[EventReader] Loop over {total} entries in source files")
        self.inst.progress.start("EventReader", total)

        cursors = [iter(chain) if chain is not None else None for chain in self._tpars_chains]

        for ordinal, shower in enumerate(self._shower_chain):
            self.stats.n_events += 1

            for i, cursor in enumerate(cursors):
                if cursor is None:
                    continue

                # every cursor advances, selected or not
                image = next(cursor, None)

                if not self.config.active[i]:
                    continue

                if image is None:
                    self.stats.n_absent += 1
                    continue

                self._check_alignment(i, shower, image)

                size = image.get("size")
                if size is None or size <= 0:
                    self.stats.n_non_positive_size += 1
                    continue

                self.stats.n_pairs += 1
                yield SurvivingPair(
                    ordinal=ordinal,
                    shower=shower,
                    telescope=self.config.telescopes[i],
                    image=image,
                )

            if self.progress_every and (ordinal + 1) % self.progress_every == 0:
                self.inst.progress.update(
                    "EventReader",
                    ordinal + 1,
                    total,
                    pairs=self.stats.n_pairs,
                    skipped=self.stats.n_absent + self.stats.n_non_positive_size,
                )

        self.inst.progress.done("EventReader", events=self.stats.n_events, pairs=self.stats.n_pairs)
        logs.info(
            f"[EventReader] events={self.stats.n_events} pairs={self.stats.n_pairs} "
            f"absent={self.stats.n_absent} size<=0={self.stats.n_non_positive_size} "
            f"misaligned={self.stats.n_misaligned}"
        )

    # ------------------------------------------------------------------
    def _check_alignment(self, index: int, shower: Dict[str, Any], image: Dict[str, Any]) -> None:
        if self.alignment_check == "off":
            return

        image_event = image.get("eventNumber")
        shower_event = shower.get("eventNumber")
        if image_event is None or shower_event is None or image_event == shower_event:
            return

        self.stats.n_misaligned += 1
        message = (
            f"[EventReader] {tpars_path(index)} eventNumber={image_event} "
            f"!= showerpars eventNumber={shower_event}"
        )

        if self.alignment_check == "strict":
            raise EventAlignmentError(message)

        if index not in self.stats.misaligned_telescopes:
            self.stats.misaligned_telescopes.add(index)
            logs.warning(message)

    # ------------------------------------------------------------------
    def close(self) -> None:
        self._shower_chain.close()
        for chain in self._tpars_chains:
            if chain is not None:
                chain.close()

    def __enter__(self) -> "SynchronizedEventReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

from __future__ import annotations

import pytest
from builders import make_spectrum

from vibespectrum.errors import NotFoundError
from vibespectrum.history_db import HistoryDB
from vibespectrum.spectrum_store import InMemorySpectrumStore, SpectrumStore


class TestInMemorySpectrumStore:
    def test_satisfies_protocol(self, memory_store: InMemorySpectrumStore) -> None:
        assert isinstance(memory_store, SpectrumStore)

    def test_store_and_retrieve(self, memory_store: InMemorySpectrumStore) -> None:
        spectrum = make_spectrum([0.0, 1.0, 2.0])
        memory_store.store("2026-01-01", spectrum)
        assert memory_store.retrieve("2026-01-01") == spectrum
        assert len(memory_store) == 1

    def test_retrieve_missing(self, memory_store: InMemorySpectrumStore) -> None:
        with pytest.raises(NotFoundError, match="2026-01-01"):
            memory_store.retrieve("2026-01-01")

    def test_missing_is_also_key_error(self, memory_store: InMemorySpectrumStore) -> None:
        with pytest.raises(KeyError):
            memory_store.retrieve("nope")

    def test_overwrite_replaces_result(self, memory_store: InMemorySpectrumStore) -> None:
        memory_store.store("t", make_spectrum([0.0, 1.0]))
        memory_store.store("t", make_spectrum([0.0, 5.0]))
        assert memory_store.retrieve("t").magnitudes[1] == 5.0
        assert len(memory_store) == 1

    def test_band_peak_cache_isolated(self, memory_store: InMemorySpectrumStore) -> None:
        spectrum = make_spectrum([0.0, 1.0, 2.0])
        memory_store.store("t", spectrum)
        spectrum.band_peaks[(0, 1)] = 1.0
        retrieved = memory_store.retrieve("t")
        assert retrieved.band_peaks == {}
        retrieved.band_peaks[(1, 2)] = 2.0
        assert memory_store.retrieve("t").band_peaks == {}

    def test_timestamps_sorted_and_filtered(self, memory_store: InMemorySpectrumStore) -> None:
        for stamp in ("2026-03-01", "2026-01-01", "2026-02-01"):
            memory_store.store(stamp, make_spectrum([0.0, 1.0]))
        assert memory_store.timestamps() == ["2026-01-01", "2026-02-01", "2026-03-01"]
        assert memory_store.timestamps("2026-01-15", "2026-03-01") == [
            "2026-02-01",
            "2026-03-01",
        ]
        assert memory_store.timestamps(end="2026-01-01") == ["2026-01-01"]

    def test_delete(self, memory_store: InMemorySpectrumStore) -> None:
        memory_store.store("t", make_spectrum([0.0, 1.0]))
        assert memory_store.delete("t") is True
        assert memory_store.delete("t") is False
        assert len(memory_store) == 0


class TestProtocolConformance:
    def test_history_db_satisfies_protocol(self, tmp_path) -> None:
        with HistoryDB(tmp_path / "spectra.db") as db:
            assert isinstance(db, SpectrumStore)

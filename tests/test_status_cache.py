from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable
from unittest import mock

import pytest

from pdnslic.common.exceptions import StoreError
from pdnslic.common.models import IntegrityCode, ReasonCode
from pdnslic.engine.service import LicenseService
from pdnslic.store.persistence import InMemorySettingsStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FlakyStore(InMemorySettingsStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_next = False

    def get(self, key: str) -> str | None:
        if self.fail_next and key == "license_key":
            self.fail_next = False
            msg = "database is locked"
            raise StoreError(msg)
        return super().get(key)


@pytest.fixture
def clock(service: LicenseService) -> FakeClock:
    fake = FakeClock()
    service.cache.clock = fake
    return fake


def test_empty_store_gives_free_baseline(service: LicenseService) -> None:
    status = service.cache.get_status()
    assert status.valid is True
    assert status.license_type == "free"
    assert status.unlimited is False
    assert status.max_domains == 5  # noqa: PLR2004
    assert status.reason is None
    assert status.integrity is True


def test_baseline_reports_missing_public_key(tmp_path: Path) -> None:
    service = LicenseService(
        InMemorySettingsStore(), public_key_path=tmp_path / "absent.pem"
    )
    status = service.cache.get_status()
    assert status.valid is True
    assert status.max_domains == 5  # noqa: PLR2004
    assert status.integrity is False
    assert status.integrity_error is IntegrityCode.PK_MISSING


def test_status_cached_within_ttl(
    service: LicenseService,
    store: InMemorySettingsStore,
    issue: Callable[..., str],
    clock: FakeClock,
) -> None:
    assert service.cache.get_status().license_type == "free"
    store.set("license_key", issue("commercial", 0))
    clock.now += service.config.STATUS_CACHE_TTL - 1
    assert service.cache.get_status().license_type == "free"
    assert service.cache.is_fresh


def test_status_recomputed_after_ttl(
    service: LicenseService,
    store: InMemorySettingsStore,
    issue: Callable[..., str],
    clock: FakeClock,
) -> None:
    service.cache.get_status()
    store.set("license_key", issue("commercial", 0))
    clock.now += service.config.STATUS_CACHE_TTL
    assert not service.cache.is_fresh
    assert service.cache.get_status().unlimited is True


def test_invalidate_forces_reverification(
    service: LicenseService,
    store: InMemorySettingsStore,
    issue: Callable[..., str],
    clock: FakeClock,  # noqa: ARG001
) -> None:
    store.set("license_key", issue("commercial", 3))
    with mock.patch.object(
        service.verifier, "verify", wraps=service.verifier.verify
    ) as verify:
        assert service.cache.get_status().max_domains == 3  # noqa: PLR2004
        assert service.cache.get_status().max_domains == 3  # noqa: PLR2004
        assert verify.call_count == 1

        store.set("license_key", issue("commercial", 0))
        service.cache.invalidate()
        assert service.cache.get_status().unlimited is True
        assert verify.call_count == 2  # noqa: PLR2004


def test_invalid_verdict_is_cached(
    service: LicenseService, store: InMemorySettingsStore, clock: FakeClock  # noqa: ARG001
) -> None:
    store.set("license_key", "garbage")
    with mock.patch.object(
        service.verifier, "verify", wraps=service.verifier.verify
    ) as verify:
        assert service.cache.get_status().reason is ReasonCode.LX_FMT
        assert service.cache.get_status().reason is ReasonCode.LX_FMT
        assert verify.call_count == 1


def test_invalidate_resets_integrity_flags(
    service: LicenseService, store: InMemorySettingsStore
) -> None:
    store.set("license_key", "PDNS-COMMERCIAL-eyJhIjoxfQ==-00")
    assert service.cache.get_status().integrity_error is IntegrityCode.PK_MISMATCH
    store.delete("license_key")
    service.cache.invalidate()
    status = service.cache.get_status()
    assert status.integrity is True
    assert status.integrity_error is None


def test_store_failure_is_not_cached(public_key_path: Path) -> None:
    store = FlakyStore()
    service = LicenseService(store, public_key_path=public_key_path)
    store.fail_next = True
    with pytest.raises(StoreError):
        service.cache.get_status()
    assert not service.cache.is_fresh
    assert service.cache.get_status().valid is True


def test_concurrent_callers_share_one_verification(
    service: LicenseService,
    store: InMemorySettingsStore,
    issue: Callable[..., str],
    clock: FakeClock,  # noqa: ARG001
) -> None:
    store.set("license_key", issue("commercial", 7))
    with mock.patch.object(
        service.verifier, "verify", wraps=service.verifier.verify
    ) as verify, ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: service.cache.get_status(), range(16)))
    assert {status.max_domains for status in results} == {7}
    assert verify.call_count == 1

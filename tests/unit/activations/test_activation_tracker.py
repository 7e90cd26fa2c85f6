"""
Unit tests for ActivationTracker and the in-memory activation store.
"""

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from activations.domain.activation import ActivationOutcome, DeviceActivation
from activations.domain.services import ActivationTracker
from activations.ports.activation_repository import ActivationRepository
from core.domain.value_objects import LicenseStatus

BOUND_AT = datetime(2026, 2, 2, 12, 0, tzinfo=timezone.utc)


class UnreachableActivationRepository(ActivationRepository):
    async def compare_and_bind(self, license_id, device_fingerprint, at):
        raise ConnectionError("database is gone")

    async def list_by_license(self, license_id):
        return []


class TestDeviceActivation:
    def test_create(self):
        activation = DeviceActivation.create(
            license_id=uuid.uuid4(), device_fingerprint="device-A"
        )

        assert activation.device_fingerprint == "device-A"
        assert activation.activated_at.tzinfo is not None

    def test_empty_fingerprint(self):
        with pytest.raises(ValueError):
            DeviceActivation.create(license_id=uuid.uuid4(), device_fingerprint="")

    @pytest.mark.parametrize("fingerprint", ["   ", " device-A ", "x" * 300])
    def test_fingerprint_is_opaque(self, fingerprint):
        activation = DeviceActivation.create(
            license_id=uuid.uuid4(), device_fingerprint=fingerprint
        )

        assert activation.device_fingerprint == fingerprint

    def test_outcome_is_bound(self):
        assert ActivationOutcome.ACCEPTED.is_bound
        assert ActivationOutcome.ALREADY_BOUND.is_bound
        assert not ActivationOutcome.REJECTED.is_bound
        assert not ActivationOutcome.FAILED.is_bound


@pytest.mark.asyncio
class TestActivationTracker:
    """Tests for ActivationTracker."""

    async def test_accepts_first_device(
        self, activation_repository, stored_license, license_key_repository
    ):
        tracker = ActivationTracker(activation_repository, clock=lambda: BOUND_AT)
        _, license_key = await stored_license(max_activations=2)

        result = await tracker.compare_and_bind(license_key, "device-A")

        assert result.outcome == ActivationOutcome.ACCEPTED
        assert result.activation_count == 1
        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.is_bound("device-A")
        assert stored.last_accessed_at == BOUND_AT
        activations = await activation_repository.list_by_license(license_key.id)
        assert [a.device_fingerprint for a in activations] == ["device-A"]
        assert activations[0].activated_at == BOUND_AT

    async def test_whitespace_and_long_fingerprints_are_distinct_devices(
        self, activation_tracker, activation_repository, stored_license, license_key_repository
    ):
        _, license_key = await stored_license(max_activations=3)
        fingerprints = ["   ", "x" * 300, " x" * 150]

        results = [
            await activation_tracker.compare_and_bind(license_key, fingerprint)
            for fingerprint in fingerprints
        ]

        assert [r.outcome for r in results] == [ActivationOutcome.ACCEPTED] * 3
        assert [r.activation_count for r in results] == [1, 2, 3]
        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.bound_device_fingerprints == frozenset(fingerprints)
        activations = await activation_repository.list_by_license(license_key.id)
        assert sorted(a.device_fingerprint for a in activations) == sorted(fingerprints)

    async def test_bound_device_short_circuits(self, activation_tracker, stored_license):
        _, license_key = await stored_license(max_activations=1)
        license_key = license_key.with_fingerprints(["device-A"])

        result = await activation_tracker.compare_and_bind(license_key, "device-A")

        assert result.outcome == ActivationOutcome.ALREADY_BOUND
        assert result.activation_count == 1

    async def test_stale_read_is_resolved_at_the_store(
        self, activation_tracker, stored_license
    ):
        _, license_key = await stored_license(max_activations=1)
        await activation_tracker.compare_and_bind(license_key, "device-A")

        # license_key still shows no bound devices
        again = await activation_tracker.compare_and_bind(license_key, "device-A")
        other = await activation_tracker.compare_and_bind(license_key, "device-B")

        assert again.outcome == ActivationOutcome.ALREADY_BOUND
        assert other.outcome == ActivationOutcome.REJECTED
        assert other.activation_count == 1

    async def test_inactive_license_is_rejected(
        self, activation_tracker, product_factory, license_factory, license_key_repository
    ):
        license_key = await license_key_repository.insert(
            replace(license_factory(product_factory()), status=LicenseStatus.REVOKED)
        )

        result = await activation_tracker.compare_and_bind(license_key, "device-A")

        assert result.outcome == ActivationOutcome.REJECTED

    async def test_concurrent_binds_respect_quota(
        self, activation_tracker, stored_license, license_key_repository
    ):
        _, license_key = await stored_license(max_activations=3)

        results = await asyncio.gather(
            *[
                activation_tracker.compare_and_bind(license_key, f"device-{i}")
                for i in range(10)
            ]
        )

        outcomes = [r.outcome for r in results]
        assert outcomes.count(ActivationOutcome.ACCEPTED) == 3
        assert outcomes.count(ActivationOutcome.REJECTED) == 7
        stored = await license_key_repository.find_by_id(license_key.id)
        assert stored.activation_count == 3

    async def test_store_failure_is_failed(self, stored_license):
        tracker = ActivationTracker(UnreachableActivationRepository())
        _, license_key = await stored_license()

        result = await tracker.compare_and_bind(license_key, "device-A")

        assert result.outcome == ActivationOutcome.FAILED
        assert result.activation_count is None

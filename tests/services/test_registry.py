"""Tests for the InvoiceRegistry state machine."""

from __future__ import annotations

import threading
from collections.abc import Callable

import pytest

from invoicectl.domain.lifecycle import InvoiceStatus
from invoicectl.infrastructure.clock import BlockClock
from invoicectl.services.registry import InvoiceRegistry
from invoicectl.services.result import ErrorCode, ServiceResult
from tests.conftest import BUYER, OWNER, SUPPLIER, THIRD_PARTY, create_invoice


class TestCreateInvoice:
    def test_supplier_creates_pending_invoice(self, registry: InvoiceRegistry) -> None:
        result = registry.create_invoice("INV-001", SUPPLIER, BUYER, 1000, 200, caller=SUPPLIER)
        assert result.ok is True
        assert result.op == "create_invoice"
        assert result.data == {}

        inv = registry.get_invoice("INV-001")
        assert inv is not None
        assert inv.supplier == SUPPLIER
        assert inv.buyer == BUYER
        assert inv.amount == 1000
        assert inv.due_date == 200
        assert inv.status is InvoiceStatus.PENDING

    def test_owner_creates_on_behalf_of_supplier(self, registry: InvoiceRegistry) -> None:
        result = registry.create_invoice("INV-001", SUPPLIER, BUYER, 1000, 200, caller=OWNER)
        assert result.ok is True
        assert registry.get_invoice("INV-001") is not None

    @pytest.mark.parametrize("caller", [BUYER, THIRD_PARTY])
    def test_other_callers_unauthorized(self, registry: InvoiceRegistry, caller: str) -> None:
        result = registry.create_invoice("INV-001", SUPPLIER, BUYER, 1000, 200, caller=caller)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code is ErrorCode.UNAUTHORIZED
        assert registry.get_invoice("INV-001") is None

    def test_duplicate_id_rejected(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        result = registry.create_invoice("INV-001", SUPPLIER, BUYER, 2000, 300, caller=SUPPLIER)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code is ErrorCode.ALREADY_EXISTS

    def test_duplicate_leaves_original_untouched(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        registry.create_invoice("INV-001", SUPPLIER, BUYER, 2000, 300, caller=OWNER)
        inv = registry.get_invoice("INV-001")
        assert inv is not None
        assert inv.amount == 1000
        assert inv.due_date == 200

    def test_duplicate_by_other_supplier(self, registry: InvoiceRegistry) -> None:
        """A different supplier reusing an existing ID still hits ALREADY_EXISTS."""
        create_invoice(registry)
        result = registry.create_invoice(
            "INV-001", THIRD_PARTY, BUYER, 5, 5, caller=THIRD_PARTY
        )
        assert result.error is not None
        assert result.error.code is ErrorCode.ALREADY_EXISTS

    def test_created_at_is_clock_value(self, registry: InvoiceRegistry, clock: BlockClock) -> None:
        create_invoice(registry)
        clock.advance(5)
        create_invoice(registry, "INV-002")
        first = registry.get_invoice("INV-001")
        second = registry.get_invoice("INV-002")
        assert first is not None and second is not None
        assert first.created_at == 100
        assert second.created_at == 105

    def test_amount_and_due_date_accepted_as_supplied(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry, amount=0, due_date=0)
        inv = registry.get_invoice("INV-001")
        assert inv is not None
        assert inv.amount == 0
        assert inv.due_date == 0


class TestCertifyInvoice:
    def test_buyer_certifies(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        result = registry.certify_invoice("INV-001", caller=BUYER)
        assert result.ok is True
        assert result.op == "certify_invoice"
        assert registry.is_certified("INV-001") is True

    def test_owner_certifies(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        assert registry.certify_invoice("INV-001", caller=OWNER).ok is True

    @pytest.mark.parametrize("caller", [OWNER, BUYER, SUPPLIER, THIRD_PARTY])
    def test_missing_is_not_found_for_everyone(
        self, registry: InvoiceRegistry, caller: str
    ) -> None:
        result = registry.certify_invoice("INV-404", caller=caller)
        assert result.error is not None
        assert result.error.code is ErrorCode.NOT_FOUND

    @pytest.mark.parametrize("caller", [SUPPLIER, THIRD_PARTY])
    def test_non_buyer_unauthorized(self, registry: InvoiceRegistry, caller: str) -> None:
        create_invoice(registry)
        result = registry.certify_invoice("INV-001", caller=caller)
        assert result.error is not None
        assert result.error.code is ErrorCode.UNAUTHORIZED
        assert registry.is_certified("INV-001") is False

    def test_second_certification_invalid_status(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        registry.certify_invoice("INV-001", caller=BUYER)
        result = registry.certify_invoice("INV-001", caller=BUYER)
        assert result.error is not None
        assert result.error.code is ErrorCode.INVALID_STATUS
        assert registry.is_certified("INV-001") is True

    def test_unauthorized_checked_before_status(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        registry.certify_invoice("INV-001", caller=BUYER)
        result = registry.certify_invoice("INV-001", caller=THIRD_PARTY)
        assert result.error is not None
        assert result.error.code is ErrorCode.UNAUTHORIZED

    def test_certification_keeps_created_at(
        self, registry: InvoiceRegistry, clock: BlockClock
    ) -> None:
        create_invoice(registry)
        clock.advance(50)
        registry.certify_invoice("INV-001", caller=BUYER)
        inv = registry.get_invoice("INV-001")
        assert inv is not None
        assert inv.created_at == 100
        assert inv.amount == 1000


class TestReads:
    def test_get_missing_returns_none(self, registry: InvoiceRegistry) -> None:
        assert registry.get_invoice("INV-001") is None

    def test_is_certified_lifecycle(self, registry: InvoiceRegistry) -> None:
        assert registry.is_certified("INV-001") is False
        create_invoice(registry)
        assert registry.is_certified("INV-001") is False
        registry.certify_invoice("INV-001", caller=BUYER)
        assert registry.is_certified("INV-001") is True

    def test_list_in_creation_order(self, registry: InvoiceRegistry, clock: BlockClock) -> None:
        create_invoice(registry, "INV-B")
        create_invoice(registry, "INV-A")
        clock.advance()
        create_invoice(registry, "INV-0")
        ids = [inv.invoice_id for inv in registry.list_invoices()]
        # Same height sorts by ID.
        assert ids == ["INV-A", "INV-B", "INV-0"]

    def test_list_filtered_by_status(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry, "INV-001")
        create_invoice(registry, "INV-002")
        registry.certify_invoice("INV-002", caller=BUYER)
        pending = registry.list_invoices(status=InvoiceStatus.PENDING)
        certified = registry.list_invoices(status=InvoiceStatus.CERTIFIED)
        assert [inv.invoice_id for inv in pending] == ["INV-001"]
        assert [inv.invoice_id for inv in certified] == ["INV-002"]

    def test_len_and_contains(self, registry: InvoiceRegistry) -> None:
        assert len(registry) == 0
        create_invoice(registry)
        assert len(registry) == 1
        assert "INV-001" in registry
        assert "INV-002" not in registry


class TestTransferOwnership:
    def test_owner_transfers(self, registry: InvoiceRegistry) -> None:
        result = registry.transfer_ownership(THIRD_PARTY, caller=OWNER)
        assert result.ok is True
        assert registry.owner == THIRD_PARTY
        assert registry.is_owner(THIRD_PARTY)
        assert not registry.is_owner(OWNER)

    @pytest.mark.parametrize("caller", [SUPPLIER, BUYER, THIRD_PARTY])
    def test_non_owner_unauthorized(self, registry: InvoiceRegistry, caller: str) -> None:
        result = registry.transfer_ownership(caller, caller=caller)
        assert result.error is not None
        assert result.error.code is ErrorCode.UNAUTHORIZED
        assert registry.owner == OWNER

    def test_transfer_to_self_allowed(self, registry: InvoiceRegistry) -> None:
        assert registry.transfer_ownership(OWNER, caller=OWNER).ok is True
        assert registry.owner == OWNER

    def test_new_owner_gains_privileges(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        registry.transfer_ownership(THIRD_PARTY, caller=OWNER)

        assert registry.certify_invoice("INV-001", caller=THIRD_PARTY).ok is True
        created = registry.create_invoice("INV-002", SUPPLIER, BUYER, 1, 1, caller=THIRD_PARTY)
        assert created.ok is True

    def test_old_owner_loses_privileges(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        registry.transfer_ownership(THIRD_PARTY, caller=OWNER)

        result = registry.certify_invoice("INV-001", caller=OWNER)
        assert result.error is not None
        assert result.error.code is ErrorCode.UNAUTHORIZED
        again = registry.transfer_ownership(OWNER, caller=OWNER)
        assert again.error is not None
        assert again.error.code is ErrorCode.UNAUTHORIZED


class TestScenario:
    def test_full_lifecycle(self, registry: InvoiceRegistry) -> None:
        assert registry.create_invoice(
            "INV-001", SUPPLIER, BUYER, 1000, 200, caller=SUPPLIER
        ).ok

        inv = registry.get_invoice("INV-001")
        assert inv is not None
        assert (inv.supplier, inv.buyer, inv.amount, inv.due_date, inv.status) == (
            SUPPLIER,
            BUYER,
            1000,
            200,
            InvoiceStatus.PENDING,
        )

        assert registry.certify_invoice("INV-001", caller=BUYER).ok
        assert registry.is_certified("INV-001") is True

        again = registry.certify_invoice("INV-001", caller=BUYER)
        assert again.error is not None
        assert again.error.code is ErrorCode.INVALID_STATUS

        missing = registry.certify_invoice("INV-002", caller=THIRD_PARTY)
        assert missing.error is not None
        assert missing.error.code is ErrorCode.NOT_FOUND

    def test_preloaded_invoices(self) -> None:
        seed = InvoiceRegistry(OWNER, clock=BlockClock(7))
        create_invoice(seed)
        copy = InvoiceRegistry(OWNER, clock=BlockClock(9), invoices=seed.list_invoices())
        assert copy.get_invoice("INV-001") == seed.get_invoice("INV-001")


def _race(workers: int, target: Callable[[int], ServiceResult]) -> list[ServiceResult]:
    """Start *workers* threads together on *target*; return their results."""
    barrier = threading.Barrier(workers)
    results: list[ServiceResult] = []

    def run(index: int) -> None:
        barrier.wait()
        results.append(target(index))

    threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    assert len(results) == workers
    return results


def _codes(results: list[ServiceResult]) -> list[ErrorCode | None]:
    return sorted(
        (r.error.code if r.error else None for r in results),
        key=lambda code: code or "",
    )


class TestSharedBetweenThreads:
    def test_one_create_per_id(self, registry: InvoiceRegistry) -> None:
        results = _race(
            8,
            lambda _: registry.create_invoice("INV-001", SUPPLIER, BUYER, 1, 1, caller=SUPPLIER),
        )
        assert _codes(results) == [None] + [ErrorCode.ALREADY_EXISTS] * 7
        assert len(registry) == 1

    def test_distinct_ids_all_land(self, registry: InvoiceRegistry) -> None:
        def create_batch(worker: int) -> ServiceResult:
            for n in range(25):
                result = registry.create_invoice(
                    f"INV-{worker}-{n}", SUPPLIER, BUYER, n, n, caller=SUPPLIER
                )
                assert result.ok
            return result

        _race(8, create_batch)
        assert len(registry) == 200
        assert "INV-7-24" in registry

    def test_one_certification_per_invoice(self, registry: InvoiceRegistry) -> None:
        create_invoice(registry)
        results = _race(
            8, lambda i: registry.certify_invoice("INV-001", caller=(BUYER, OWNER)[i % 2])
        )
        assert _codes(results) == [None] + [ErrorCode.INVALID_STATUS] * 7
        assert registry.is_certified("INV-001") is True

    def test_one_ownership_transfer(self, registry: InvoiceRegistry) -> None:
        results = _race(8, lambda i: registry.transfer_ownership(f"NEW-{i}", caller=OWNER))
        assert _codes(results) == [None] + [ErrorCode.UNAUTHORIZED] * 7
        assert registry.owner.startswith("NEW-")

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from nocturna.errors import NotFoundError, ValidationFailed
from nocturna.models.api.payment_request import PaymentCreateRequest
from nocturna.models.domain.member_domain import Member
from nocturna.models.domain.payment_domain import PaymentKind, PaymentMethod
from nocturna.models.domain.vigil_domain import Vigil
from nocturna.repositories.member_repository import MemberRepository
from nocturna.repositories.vigil_repository import VigilRepository
from nocturna.services import payment_service


async def _member() -> Member:
    return await MemberRepository.create(Member(full_name="Ana Ruiz"))


async def test_ledger_lists_newest_first_with_balance(fake_store):
    member = await _member()
    await payment_service.record_payment(
        member.id, PaymentCreateRequest(kind=PaymentKind.DEBT, amount=Decimal("20"), concept="March fee")
    )
    payment = await payment_service.record_payment(
        member.id,
        PaymentCreateRequest(
            kind=PaymentKind.PAYMENT,
            amount=Decimal("15"),
            method=PaymentMethod.TRANSFER,
            reference="SPEI 0042",
            paid_on=date(2026, 3, 9),
        ),
    )

    payments, balance = await payment_service.list_payments(member.id)

    assert [p.id for p in payments][0] == payment.id
    assert payment.concept == "Monthly fee"
    assert payment.method == PaymentMethod.TRANSFER
    assert balance.outstanding == Decimal("5")


async def test_payment_can_point_at_a_vigil(fake_store):
    member = await _member()
    vigil = await VigilRepository.create(
        Vigil(
            section_id="section-1",
            turn_number=1,
            start_at=datetime(2026, 3, 7, 22, 0, tzinfo=UTC),
            end_at=datetime(2026, 3, 8, 6, 0, tzinfo=UTC),
            officiant="Fr. Tomás",
        )
    )

    payment = await payment_service.record_payment(
        member.id, PaymentCreateRequest(kind=PaymentKind.PAYMENT, amount=Decimal("10"), vigil_id=vigil.id)
    )

    assert payment.vigil_id == vigil.id


async def test_unknown_vigil_is_rejected(fake_store):
    member = await _member()

    with pytest.raises(ValidationFailed) as excinfo:
        await payment_service.record_payment(
            member.id, PaymentCreateRequest(kind=PaymentKind.PAYMENT, amount=Decimal("10"), vigil_id="nope")
        )

    assert excinfo.value.errors[0]["field"] == "vigil_id"
    assert fake_store.collections["payments"] == {}


async def test_debt_with_payment_method_is_rejected(fake_store):
    member = await _member()

    with pytest.raises(ValidationFailed):
        await payment_service.record_payment(
            member.id,
            PaymentCreateRequest(kind=PaymentKind.DEBT, amount=Decimal("10"), method=PaymentMethod.CASH),
        )

    assert fake_store.writes == 1


async def test_unknown_member_is_not_found(fake_store):
    with pytest.raises(NotFoundError):
        await payment_service.record_payment(
            "ghost", PaymentCreateRequest(kind=PaymentKind.PAYMENT, amount=Decimal("10"))
        )
    with pytest.raises(NotFoundError):
        await payment_service.list_payments("ghost")

"""Tests for partner registration, search, update and cascading delete."""

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, select

from components.core.errors import NotFoundError
from components.loan.models import Installment, Loan
from components.partner.repository import PartnerRepository
from components.partner.schemas import PartnerCreate, PartnerUpdate


@pytest.mark.asyncio
async def test_create_and_get(session, make_partner):
    partner = await make_partner("  Ana ", "Torres ")
    repo = PartnerRepository(session)

    fetched = await repo.get_by_id(partner.id)
    assert fetched.first_name == "Ana"
    assert fetched.full_name == "Ana Torres"


def test_names_need_two_characters():
    with pytest.raises(SchemaValidationError):
        PartnerCreate(first_name="A", last_name="Torres")


@pytest.mark.asyncio
async def test_search_matches_name_alias_and_identification(session, make_partner):
    await make_partner("Ana", "Torres", "0911111111", "Anita")
    await make_partner("Luis", "Mendoza", "0922222222", "")
    repo = PartnerRepository(session)

    assert [p.first_name for p in await repo.get_all("torr")] == ["Ana"]
    assert [p.first_name for p in await repo.get_all("anita")] == ["Ana"]
    assert [p.first_name for p in await repo.get_all("092222")] == ["Luis"]
    assert len(await repo.get_all()) == 2


@pytest.mark.asyncio
async def test_find_by_full_name_is_exact(session, make_partner):
    await make_partner("Ana", "Torres")
    repo = PartnerRepository(session)

    assert (await repo.find_by_full_name("Ana Torres")) is not None
    assert (await repo.find_by_full_name("ana torres")) is None


@pytest.mark.asyncio
async def test_update_changes_only_given_fields(session, make_partner):
    partner = await make_partner("Ana", "Torres", "0911111111")
    repo = PartnerRepository(session)

    updated = await repo.update(partner.id, PartnerUpdate(alias="Anita"))
    assert updated.alias == "Anita"
    assert updated.identification_number == "0911111111"


@pytest.mark.asyncio
async def test_update_missing_partner(session):
    with pytest.raises(NotFoundError):
        await PartnerRepository(session).update("missing", PartnerUpdate(alias="x"))


@pytest.mark.asyncio
async def test_delete_cascades_to_loans_and_installments(session, make_partner, make_loan):
    partner = await make_partner()
    other = await make_partner("Luis", "Mendoza")
    await make_loan(partner, installments=12)
    await make_loan(partner, amount="300", installments=3)
    await make_loan(other, installments=6)

    result = await PartnerRepository(session).delete(partner.id)

    assert result.loans_deleted == 2
    assert result.installments_deleted == 15
    remaining_loans = (await session.execute(select(func.count(Loan.id)))).scalar()
    remaining_installments = (await session.execute(select(func.count(Installment.id)))).scalar()
    assert remaining_loans == 1
    assert remaining_installments == 6
    assert await PartnerRepository(session).get_by_id(partner.id) is None


@pytest.mark.asyncio
async def test_delete_missing_partner(session):
    with pytest.raises(NotFoundError):
        await PartnerRepository(session).delete("missing")

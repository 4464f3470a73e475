"""Typed accessors: cases, clients, juniors, transactions and the profile."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from courtbell.db.schemas import (
    CaseCreate,
    CasePatch,
    ClientCreate,
    ClientPatch,
    Expense,
    Hearing,
    JuniorCreate,
    JuniorPatch,
    RelatedTo,
    TransactionCreate,
    UserProfile,
)
from courtbell.services.case_service import CaseStore
from courtbell.services.client_service import ClientStore, JuniorStore
from courtbell.services.profile_service import ProfileStore
from courtbell.services.transaction_service import TransactionStore
from courtbell.utils.exceptions import EntityNotFoundError

OWNER = "user-1"
NOW = datetime(2030, 6, 15, 12, 0)


def _case(**overrides) -> CaseCreate:
    fields = {
        "title": "Rent dispute",
        "client_id": "c1",
        "case_number": "OS 12/2030",
        "court": "Munsiff Court, Kochi",
        "date": "2030-06-16",
        "time": "10:30",
    }
    fields.update(overrides)
    return CaseCreate(**fields)


# =============================================================================
# Entity store
# =============================================================================


def test_add_then_get_by_id_is_input_plus_id(sql_store):
    clients = ClientStore(sql_store, OWNER)

    created = clients.add(ClientCreate(name="Ravi Kumar", phone="9876543210"))

    fetched = clients.get_by_id(created.id)
    assert fetched == created
    assert fetched.model_dump(exclude={"id"}) == {"name": "Ravi Kumar", "address": None, "phone": "9876543210"}


def test_get_by_id_is_none_for_missing_or_empty_id(sql_store):
    clients = ClientStore(sql_store, OWNER)

    assert clients.get_by_id("nope") is None
    assert clients.get_by_id("") is None
    assert clients.get_by_id(None) is None


def test_update_changes_only_sent_fields(sql_store):
    clients = ClientStore(sql_store, OWNER)
    created = clients.add(ClientCreate(name="Ravi Kumar", address="Kochi", phone="1"))

    updated = clients.update(created.id, ClientPatch(address="Thrissur"))

    assert updated.name == "Ravi Kumar"
    assert updated.phone == "1"
    assert updated.address == "Thrissur"


def test_update_unknown_id_raises_not_found(sql_store):
    with pytest.raises(EntityNotFoundError) as excinfo:
        ClientStore(sql_store, OWNER).update("ghost", ClientPatch(name="Nobody"))

    assert excinfo.value.status_code == 404
    assert excinfo.value.detail == "Client ghost not found"


def test_delete_unknown_id_is_a_no_op(sql_store):
    assert JuniorStore(sql_store, OWNER).delete("ghost") is False


def test_patch_can_clear_an_optional_reference(sql_store):
    cases = CaseStore(sql_store, OWNER)
    created = cases.add(_case(junior_id="j1"))

    updated = cases.update(created.id, CasePatch(junior_id=None))

    assert updated.junior_id is None
    assert updated.title == "Rent dispute"


@pytest.mark.parametrize("field", ["title", "client_id", "case_number", "court", "date", "time", "history"])
def test_case_patch_rejects_null_for_required_fields(field):
    with pytest.raises(ValidationError):
        CasePatch(**{field: None})


def test_client_and_junior_names_cannot_be_nulled():
    with pytest.raises(ValidationError):
        ClientPatch(name=None)
    with pytest.raises(ValidationError):
        JuniorPatch(name=None)
    assert ClientPatch(phone=None).model_dump(exclude_unset=True) == {"phone": None}


def test_invalid_merge_is_not_written(sql_store):
    cases = CaseStore(sql_store, OWNER)
    created = cases.add(_case())
    events = []
    cases.subscribe(events.append)

    with pytest.raises(ValidationError):
        cases.update(created.id, CasePatch.model_construct(title=None))

    assert cases.require(created.id).title == "Rent dispute"
    assert events == []


# =============================================================================
# Cases
# =============================================================================


def test_upcoming_and_past_split(sql_store):
    cases = CaseStore(sql_store, OWNER)
    later = cases.add(_case(title="Later", date="2030-07-01"))
    soon = cases.add(_case(title="Soon", date="2030-06-15", time="13:00"))
    old = cases.add(_case(title="Old", date="2030-01-01"))
    older = cases.add(_case(title="Older", date="2029-01-01"))

    assert [c.id for c in cases.upcoming(NOW)] == [soon.id, later.id]
    assert [c.id for c in cases.past(NOW)] == [old.id, older.id]
    assert cases.is_past(old, NOW)
    assert not cases.is_past(soon, NOW)


def test_cases_for_client_and_junior(sql_store):
    cases = CaseStore(sql_store, OWNER)
    mine = cases.add(_case(client_id="c1", junior_id="j1"))
    cases.add(_case(client_id="c2"))

    assert [c.id for c in cases.cases_for_client("c1")] == [mine.id]
    assert [c.id for c in cases.cases_for_junior("j1")] == [mine.id]


def test_hearing_history_append_and_remove(sql_store):
    cases = CaseStore(sql_store, OWNER)
    case = cases.add(_case())

    cases.add_hearing(case.id, Hearing(date="2030-05-01", notes="Adjourned"))
    case = cases.add_hearing(case.id, Hearing(date="2030-05-20", notes="Evidence"))
    assert [h.notes for h in case.history] == ["Adjourned", "Evidence"]

    case = cases.remove_hearing(case.id, 0)
    assert [h.notes for h in case.history] == ["Evidence"]

    with pytest.raises(IndexError):
        cases.remove_hearing(case.id, 5)


def test_expenses_total(sql_store):
    cases = CaseStore(sql_store, OWNER)
    case = cases.add(_case())

    cases.add_expense(case.id, Expense(description="Court fee", amount=250))
    case = cases.add_expense(case.id, Expense(description="Typing", amount=100.5))
    assert CaseStore.total_expenses(case) == 350.5

    case = cases.remove_expense(case.id, 1)
    assert CaseStore.total_expenses(case) == 250


def test_case_validation_rejects_short_title_and_bad_time():
    with pytest.raises(ValueError):
        _case(title="R")
    with pytest.raises(ValueError):
        _case(time="24:00")
    with pytest.raises(ValueError):
        _case(date="16/06/2030")


def test_deleting_client_leaves_cases_intact(sql_store):
    clients = ClientStore(sql_store, OWNER)
    cases = CaseStore(sql_store, OWNER)
    client = clients.add(ClientCreate(name="Ravi Kumar"))
    case = cases.add(_case(client_id=client.id))

    clients.delete(client.id)

    assert cases.get_by_id(case.id).client_id == client.id
    assert clients.get_by_id(case.client_id) is None


# =============================================================================
# Transactions
# =============================================================================


def _payment(direction: str, amount: float, related: RelatedTo) -> TransactionCreate:
    return TransactionCreate(type=direction, description="Fee", amount=amount, related_to=related)


def test_summary_tracks_adds_and_deletes(sql_store):
    transactions = TransactionStore(sql_store, OWNER)

    transactions.add(_payment("in", 5000, RelatedTo(type="client", id="c1")))
    out = transactions.add(_payment("out", 2000, RelatedTo(type="junior", id="j1")))

    summary = transactions.summary()
    assert (summary.total_income, summary.total_outcome, summary.net_balance) == (5000, 2000, 3000)

    transactions.delete(out.id)
    assert transactions.summary().net_balance == 5000


def test_add_stamps_date_and_resolves_related_name(sql_store):
    clients = ClientStore(sql_store, OWNER)
    juniors = JuniorStore(sql_store, OWNER)
    transactions = TransactionStore(sql_store, OWNER, clients, juniors)
    client = clients.add(ClientCreate(name="Ravi Kumar"))

    paid = transactions.add(_payment("in", 1000, RelatedTo(type="client", id=client.id)))
    dangling = transactions.add(_payment("out", 300, RelatedTo(type="junior", id="gone")))
    other = transactions.add(_payment("out", 50, RelatedTo(type="other", id="misc")))

    assert paid.related_to.name == "Ravi Kumar"
    assert dangling.related_to.name == "Unknown Junior"
    assert other.related_to.name == "Other"
    assert datetime.fromisoformat(paid.date).tzinfo is not None


def test_list_is_newest_first_and_filterable(sql_store):
    transactions = TransactionStore(sql_store, OWNER)
    first = transactions.add(_payment("in", 10, RelatedTo(type="other", id="x")))
    second = transactions.add(_payment("out", 20, RelatedTo(type="other", id="x")))

    assert [t.id for t in transactions.list()] == [second.id, first.id]
    assert [t.id for t in transactions.filter("in")] == [first.id]
    assert len(transactions.filter(None)) == 2


def test_amount_must_be_positive():
    with pytest.raises(ValueError):
        _payment("in", 0, RelatedTo(type="client", id="c1"))


# =============================================================================
# Profile
# =============================================================================


def test_profile_defaults_then_merges(sql_store):
    profiles = ProfileStore(sql_store, OWNER, email="advocate@example.com", display_name="A. Menon")

    assert profiles.get() == UserProfile(name="A. Menon", email="advocate@example.com")

    profiles.save(UserProfile(upi_id="menon@okaxis"))
    saved = profiles.save(UserProfile(ifsc_code="sbin0001234"))

    assert saved.name == "A. Menon"
    assert saved.upi_id == "menon@okaxis"
    assert saved.ifsc_code == "SBIN0001234"
    assert profiles.get() == saved


def test_profile_rejects_non_image_photo():
    with pytest.raises(ValueError):
        UserProfile(photo_data_url="https://example.com/me.png")


def test_junior_roundtrip(sql_store):
    juniors = JuniorStore(sql_store, OWNER)
    junior = juniors.add(JuniorCreate(name="Anu", qualification="LLB", whatsapp="9876543210"))

    assert juniors.list() == [junior]

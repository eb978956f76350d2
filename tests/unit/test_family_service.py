"""Tests for the family directory: units, families, members and dashboard stats."""

from datetime import date

import pytest

from parish_ledger.errors import ConflictError, NotFoundError, ValidationError
from parish_ledger.models import Family, FamilyMember, FamilyPayment
from parish_ledger.services.family_service import FamilyService, normalize_card_no, normalize_email
from parish_ledger.services.member_service import MemberService
from parish_ledger.services.notification_service import FamilyRegistered
from parish_ledger.services.payment_service import PaymentService
from parish_ledger.services.unit_service import UnitService, normalize_unit_name


@pytest.fixture
def units(db_session):
    return UnitService(db_session)


@pytest.fixture
def families(db_session, outbox):
    return FamilyService(db_session, outbox=outbox)


@pytest.fixture
def members(db_session):
    return MemberService(db_session)


class TestUnitService:
    def test_name_normalized(self) -> None:
        assert normalize_unit_name("  st. joseph ") == "ST. JOSEPH"

    def test_create_and_list_by_name(self, units) -> None:
        units.create_unit("st. mary")
        units.create_unit("Holy Family", "East ward")

        listed = units.list_units()
        assert [unit.name for unit in listed] == ["HOLY FAMILY", "ST. MARY"]
        assert listed[0].description == "East ward"
        assert listed[0].family_count == 0

    def test_blank_name(self, units) -> None:
        with pytest.raises(ValidationError, match="Unit name is required"):
            units.create_unit("   ")

    def test_duplicate_name_case_insensitive(self, units) -> None:
        units.create_unit("St. Mary")
        with pytest.raises(ConflictError, match="already exists"):
            units.create_unit("ST. MARY")

    def test_update(self, units, unit) -> None:
        updated = units.update_unit(unit.id, "St. Joseph North", "Renamed")
        assert updated.name == "ST. JOSEPH NORTH"
        assert updated.description == "Renamed"

    def test_update_unknown(self, units) -> None:
        with pytest.raises(NotFoundError):
            units.update_unit(999, "X")

    def test_delete_empty_unit(self, units, other_unit) -> None:
        units.delete_unit(other_unit.id)
        assert [u.name for u in units.list_units()] == []

    def test_cannot_delete_unit_with_families(self, units, unit, family) -> None:
        with pytest.raises(ValidationError, match="existing families"):
            units.delete_unit(unit.id)


class TestFamilyService:
    def test_normalizers(self) -> None:
        assert normalize_card_no(" hc-9 ") == "HC-9"
        assert normalize_email(" Thomas@Example.COM ") == "thomas@example.com"
        assert normalize_email("") is None
        with pytest.raises(ValidationError, match="valid email"):
            normalize_email("not-an-email")
        with pytest.raises(ValidationError, match="card number is required"):
            normalize_card_no("  ")

    def test_create_family(self, families, unit, db_session) -> None:
        family = families.create_family(
            unit.id, " hc-100 ", " John Varghese ", email="John@Example.com", phone=" 98470 "
        )

        assert family.card_no == "HC-100"
        assert family.head_name == "John Varghese"
        assert family.email == "john@example.com"
        assert family.phone == "98470"
        assert family.member_count == 0
        assert family.unit_name == "ST. JOSEPH"
        db_session.refresh(unit)
        assert unit.family_count == 1

    def test_create_publishes_welcome(self, families, unit, outbox) -> None:
        families.create_family(unit.id, "HC-100", "John Varghese", email="john@example.com")

        assert outbox.drain() == [
            FamilyRegistered(
                email="john@example.com",
                head_name="John Varghese",
                card_no="HC-100",
                unit_name="ST. JOSEPH",
            )
        ]

    def test_no_welcome_without_email(self, families, unit, outbox) -> None:
        families.create_family(unit.id, "HC-100", "John Varghese")
        assert len(outbox) == 0

    def test_unknown_unit(self, families) -> None:
        with pytest.raises(ValidationError, match="Invalid unit selected"):
            families.create_family(999, "HC-100", "John Varghese")

    def test_blank_head_name(self, families, unit) -> None:
        with pytest.raises(ValidationError, match="Head of family name is required"):
            families.create_family(unit.id, "HC-100", "  ")

    def test_duplicate_card_number(self, families, unit, family) -> None:
        with pytest.raises(ConflictError, match="card number already exists"):
            families.create_family(unit.id, "hc-001", "Someone Else")

    def test_get_unknown(self, families) -> None:
        with pytest.raises(NotFoundError, match="Family not found"):
            families.get_family(999)

    def test_update_moves_family_between_units(self, families, family, unit, other_unit, db_session) -> None:
        updated = families.update_family(family.id, other_unit.id, "HC-001", "Thomas Mathew")

        assert updated.unit_id == other_unit.id
        db_session.refresh(unit)
        db_session.refresh(other_unit)
        assert unit.family_count == 0
        assert other_unit.family_count == 1

    def test_update_card_number_taken(self, families, family, family_without_email) -> None:
        with pytest.raises(ConflictError):
            families.update_family(
                family_without_email.id, family_without_email.unit_id, "HC-001", "Anna George"
            )

    def test_update_keeps_own_card_number(self, families, family) -> None:
        updated = families.update_family(
            family.id, family.unit_id, "HC-001", "Thomas K. Mathew", email=None
        )
        assert updated.head_name == "Thomas K. Mathew"
        assert updated.email is None

    def test_delete_cascades(self, families, family, unit, db_session, policy) -> None:
        MemberService(db_session).add_member(family.id, "Thomas Mathew", gender="Male", relation="Head")
        PaymentService(db_session, policy).record_payment(family.id, "2025-08", 25, "2025-08-10")

        deleted = families.delete_family(family.id)

        assert deleted.card_no == "HC-001"
        assert deleted.unit_name == "ST. JOSEPH"
        assert db_session.get(Family, family.id) is None
        assert db_session.query(FamilyMember).count() == 0
        assert db_session.query(FamilyPayment).count() == 0
        db_session.refresh(unit)
        assert unit.family_count == 0

    def test_list_newest_first(self, families, family, family_without_email) -> None:
        listed, pagination = families.list_families()
        assert [f.card_no for f in listed] == ["HC-002", "HC-001"]
        assert pagination.total == 2

    def test_list_search(self, families, family, family_without_email) -> None:
        by_name, _ = families.list_families(search="anna")
        by_card, _ = families.list_families(search="hc-001")
        by_address, _ = families.list_families(search="church road")

        assert [f.head_name for f in by_name] == ["Anna George"]
        assert [f.head_name for f in by_card] == ["Thomas Mathew"]
        assert [f.head_name for f in by_address] == ["Thomas Mathew"]

    def test_list_unit_filter_and_paging(self, families, family, family_without_email, other_unit) -> None:
        families.create_family(other_unit.id, "HC-003", "Mary Thomas")

        in_unit, _ = families.list_families(unit_id=other_unit.id)
        assert [f.card_no for f in in_unit] == ["HC-003"]

        page, pagination = families.list_families(page=2, limit=2)
        assert len(page) == 1
        assert pagination.pages == 2


class TestMemberService:
    def test_add_updates_member_count(self, members, family, db_session) -> None:
        members.add_member(family.id, "Thomas Mathew", gender="Male", relation="Head")
        members.add_member(
            family.id, "Sara Thomas", gender="Female", relation="Daughter", dob=date(2010, 4, 2)
        )

        db_session.refresh(family)
        assert family.member_count == 2
        assert [m.name for m in members.list_members(family.id)] == ["Thomas Mathew", "Sara Thomas"]

    def test_duplicate_name_case_insensitive(self, members, family) -> None:
        members.add_member(family.id, "Sara Thomas", gender="Female", relation="Daughter")
        with pytest.raises(ConflictError, match="already exists in this family"):
            members.add_member(family.id, "sara thomas", gender="Female", relation="Daughter")

    def test_same_name_in_other_family(self, members, family, family_without_email) -> None:
        members.add_member(family.id, "Sara Thomas", gender="Female", relation="Daughter")
        member = members.add_member(
            family_without_email.id, "Sara Thomas", gender="Female", relation="Other"
        )
        assert member.family_id == family_without_email.id

    def test_blank_name(self, members, family) -> None:
        with pytest.raises(ValidationError, match="Member name is required"):
            members.add_member(family.id, " ", gender="Male", relation="Son")

    def test_unknown_family(self, members) -> None:
        with pytest.raises(NotFoundError):
            members.list_members(999)

    def test_update(self, members, family) -> None:
        member = members.add_member(family.id, "Sara Thomas", gender="Female", relation="Daughter")
        updated = members.update_member(
            family.id, member.id, "Sara Mathew", gender="Female", relation="Daughter", occupation="Nurse"
        )
        assert updated.name == "Sara Mathew"
        assert updated.occupation == "Nurse"

    def test_update_to_existing_name(self, members, family) -> None:
        members.add_member(family.id, "Sara Thomas", gender="Female", relation="Daughter")
        other = members.add_member(family.id, "Ben Thomas", gender="Male", relation="Son")
        with pytest.raises(ConflictError):
            members.update_member(family.id, other.id, "SARA THOMAS", gender="Male", relation="Son")

    def test_delete_updates_member_count(self, members, family, db_session) -> None:
        member = members.add_member(family.id, "Sara Thomas", gender="Female", relation="Daughter")
        members.add_member(family.id, "Ben Thomas", gender="Male", relation="Son")

        members.delete_member(family.id, member.id)

        db_session.refresh(family)
        assert family.member_count == 1

    def test_delete_member_of_other_family(self, members, family, family_without_email) -> None:
        member = members.add_member(family.id, "Sara Thomas", gender="Female", relation="Daughter")
        with pytest.raises(NotFoundError, match="Member not found"):
            members.delete_member(family_without_email.id, member.id)


class TestDashboardStats:
    def test_totals_and_recent(self, families, members, family, family_without_email) -> None:
        members.add_member(family.id, "Thomas Mathew", gender="Male", relation="Head")

        stats = families.dashboard_stats()

        assert stats.total_units == 1
        assert stats.total_families == 2
        assert stats.total_members == 1
        assert [f.name for f in stats.recent_families] == ["Anna George Family", "Thomas Mathew Family"]
        assert stats.recent_families[1].members == 1

    def test_recent_limited_to_five(self, families, unit) -> None:
        for number in range(7):
            families.create_family(unit.id, f"HC-{number:03d}", f"Head {number}")
        assert len(families.dashboard_stats().recent_families) == 5

"""Budget link reconciliation and BudgetLinker tests."""
from business.budget_link import BudgetLinker, Linked, Unlinked, link_of
from business.partner_actions import SpeakerActions
from database.models import BudgetItem, Speaker

SPEAKER = {
    "first_name": "Marco",
    "last_name": "Rossi",
    "email": "marco@acme.com",
    "fee": "800",
}


def _linked_speaker(temp_db, event, category):
    return SpeakerActions(temp_db).create(
        event.id, dict(SPEAKER, budget_category_id=category.id)
    ).data


class TestLinkOf:

    def test_states(self):
        assert link_of(Speaker(budget_item_id=None)) == Unlinked()
        assert link_of(Speaker(budget_item_id=4)) == Linked(4)
        assert Unlinked().item_id is None


class TestReconcile:

    def test_clean_links(self, temp_db, event, make_category):
        _linked_speaker(temp_db, event, make_category(event.id))

        report = BudgetLinker(temp_db).reconcile_links()

        assert report == {"checked": 1, "orphaned": [], "repaired": 0}

    def test_reports_orphaned_reference(self, temp_db, event, make_category):
        speaker = _linked_speaker(temp_db, event, make_category(event.id))
        temp_db.budget_items.delete_by_id(BudgetItem, speaker["budget_item_id"])

        report = BudgetLinker(temp_db).reconcile_links(event_id=event.id)

        assert report["orphaned"] == [{
            "entity": "speaker",
            "id": speaker["id"],
            "event_id": event.id,
            "budget_item_id": speaker["budget_item_id"],
        }]
        assert report["repaired"] == 0
        stored = temp_db.speakers.get_by_id(Speaker, speaker["id"])
        assert stored.budget_item_id == speaker["budget_item_id"]

    def test_repair_clears_reference(self, temp_db, event, make_category):
        speaker = _linked_speaker(temp_db, event, make_category(event.id))
        temp_db.budget_items.delete_by_id(BudgetItem, speaker["budget_item_id"])

        report = BudgetLinker(temp_db).reconcile_links(repair=True)

        assert report["repaired"] == 1
        stored = temp_db.speakers.get_by_id(Speaker, speaker["id"])
        assert link_of(stored) == Unlinked()

    def test_other_event_not_checked(self, temp_db, make_event, make_category):
        event = make_event()
        other = make_event("Other Summit")
        _linked_speaker(temp_db, other, make_category(other.id))

        report = BudgetLinker(temp_db).reconcile_links(event_id=event.id)

        assert report["checked"] == 0


class TestLinker:

    def test_update_missing_item(self, temp_db):
        assert BudgetLinker(temp_db).update_item(
            77, {"estimated_cost": 10}, "speaker 1"
        ) is False

    def test_delete_missing_item_counts_as_gone(self, temp_db):
        assert BudgetLinker(temp_db).delete_item(77, "speaker 1") is True

    def test_create_item_in_missing_category(self, temp_db, event):
        assert BudgetLinker(temp_db).create_item(
            55, event.id, {"description": "Fee", "estimated_cost": 10},
            "speaker 1"
        ) is None

    def test_write_failure_is_swallowed(self, temp_db, event, make_category,
                                        monkeypatch):
        category = make_category(event.id)

        def boom(*args, **kwargs):
            raise RuntimeError("locked")

        monkeypatch.setattr(temp_db.budget_items, "create", boom)
        assert BudgetLinker(temp_db).create_item(
            category.id, event.id, {"description": "Fee", "estimated_cost": 10},
            "speaker 1"
        ) is None

"""Sponsor income linkage tests."""
from datetime import date

from business.budget_aggregation import BudgetAggregator
from business.partner_actions import SponsorActions
from database.models import BudgetCategory, BudgetItem, Sponsor

SPONSOR = {
    "company_name": "Acme",
    "sponsorship_level": "gold",
    "sponsorship_amount": "5000",
}


def test_income_category_created_on_demand(temp_db, event):
    result = SponsorActions(temp_db).create(event.id, SPONSOR)

    assert result.success
    categories = temp_db.budget_categories.list_by_event(event.id)
    assert [c.name for c in categories] == ["Entrate Sponsor"]
    assert categories[0].kind == "revenue"
    item = temp_db.budget_items.get_by_id(BudgetItem, result.data["budget_item_id"])
    assert item.category_id == categories[0].id
    assert item.description == "Sponsor: Acme"
    assert float(item.estimated_cost) == 5000
    assert float(item.actual_cost) == 0


def test_existing_income_category_is_reused(temp_db, event, make_category):
    income = make_category(event.id, "Ricavi", allocated=0)

    result = SponsorActions(temp_db).create(event.id, SPONSOR)

    item = temp_db.budget_items.get_by_id(BudgetItem, result.data["budget_item_id"])
    assert item.category_id == income.id
    assert len(temp_db.budget_categories.list_by_event(event.id)) == 1


def test_zero_amount_has_no_item(temp_db, event):
    result = SponsorActions(temp_db).create(
        event.id, dict(SPONSOR, sponsorship_amount="")
    )

    assert result.success
    assert result.data["budget_item_id"] is None
    assert temp_db.budget_categories.list_by_event(event.id) == []


def test_paid_sponsor_counts_as_revenue(temp_db, event, make_category,
                                        make_item):
    costs = make_category(event.id, "Venue", allocated=2500)
    make_item(costs, "Hall", estimated=2000, actual=2000)

    SponsorActions(temp_db).create(event.id, dict(
        SPONSOR, payment_status="paid", payment_date="2025-05-30"
    ))

    financials = BudgetAggregator(temp_db).get_global_financials()
    assert financials["revenue"] == 5000
    assert financials["costs"] == 2000
    assert financials["net_profit"] == 3000
    assert financials["profit_margin"] == 60.0


def test_partial_payment_updates_item(temp_db, event):
    actions = SponsorActions(temp_db)
    sponsor = actions.create(event.id, SPONSOR).data

    actions.update(sponsor["id"], dict(SPONSOR, payment_status="partial"))

    item = temp_db.budget_items.get_by_id(BudgetItem, sponsor["budget_item_id"])
    assert float(item.actual_cost) == 2500
    assert item.status == "planned"


def test_partial_update_keeps_other_fields(temp_db, event):
    actions = SponsorActions(temp_db)
    sponsor = actions.create(event.id, dict(
        SPONSOR, contract_signed=True, notes="Logo on badges",
        payment_date="2025-05-30",
    )).data

    result = actions.update(sponsor["id"], {"payment_status": "paid"})

    assert result.success
    assert result.data["payment_status"] == "paid"
    assert result.data["company_name"] == "Acme"
    assert result.data["sponsorship_level"] == "gold"
    assert result.data["contract_signed"] is True
    assert result.data["notes"] == "Logo on badges"
    assert result.data["payment_date"] == date(2025, 5, 30)
    item = temp_db.budget_items.get_by_id(BudgetItem, sponsor["budget_item_id"])
    assert item.status == "paid"
    assert float(item.actual_cost) == 5000
    assert item.payment_date == date(2025, 5, 30)


def test_update_rejects_bad_values(temp_db, event):
    actions = SponsorActions(temp_db)
    sponsor = actions.create(event.id, SPONSOR).data

    result = actions.update(sponsor["id"], {"sponsorship_level": "diamond"})

    assert result.message == "Validation errors"
    assert "sponsorship_level" in result.errors

def test_delete_sponsor_removes_item(temp_db, event):
    actions = SponsorActions(temp_db)
    sponsor = actions.create(event.id, SPONSOR).data

    actions.delete(sponsor["id"])

    assert temp_db.sponsors.get_by_id(Sponsor, sponsor["id"]) is None
    assert temp_db.budget_items.list_by_event(event.id) == []
    income = temp_db.budget_categories.list_by_event(event.id)[0]
    stored = temp_db.budget_categories.get_by_id(BudgetCategory, income.id)
    assert float(stored.spent_amount) == 0

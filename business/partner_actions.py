"""Linkage-aware mutations for speakers, services, sponsors and staff assignments.

The partner row is always the primary write and decides the result. The
budget item mirroring its cost is maintained afterwards through
``BudgetLinker`` on a best-effort basis:

- create: when a budget item is wanted, create it and store its ID on the row
- update: refresh the mirrored columns of the linked item (description,
  costs, vendor), or create the item if none exists yet
- delete: delete the linked item, then the row even if that failed
"""
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from loguru import logger

from config.budget_config import BudgetConfig
from database import DatabaseManager
from database.models import (
    Event, Speaker, Service, Sponsor, Staff, StaffAssignment
)
from validation import Form, validate
from validation.partners import (
    SpeakerForm, ServiceForm, ServiceStatusUpdate, SponsorForm,
    SponsorUpdate, StaffAssignmentForm, StaffAssignmentMarkPaid
)
from .budget_aggregation import money, sponsor_received_amount
from .budget_link import BudgetLinker, Linked, link_of
from .payments import calculate_payment_due_date, calculate_payment_status
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]

# Item columns rewritten when the partner is edited. Status, notes and payment
# date belong to the budget workflow once the item exists.
SYNCED_FIELDS: Tuple[str, ...] = (
    "description", "estimated_cost", "actual_cost", "vendor"
)


class LinkedEntityActions:
    """Create / update / delete flow shared by every linked partner.

    Subclasses set ``label``, ``model``, ``form`` and ``repo_name`` and
    implement ``_item_fields``; they override ``_columns``, ``_wants_item``
    and ``_target_category`` when the defaults do not fit. ``update_form``
    replaces ``form`` on update, and ``synced_fields`` picks the item
    columns kept in step on update.
    """

    label: str = ""
    model: Type = None
    form: Type[Form] = None
    update_form: Optional[Type[Form]] = None
    synced_fields: Tuple[str, ...] = SYNCED_FIELDS
    repo_name: str = ""

    def __init__(self, db: DatabaseManager,
                 config: Optional[BudgetConfig] = None) -> None:
        self.db = db
        self.linker = BudgetLinker(db, config)

    @property
    def repo(self):
        return getattr(self.db, self.repo_name)

    def _owner(self, entity: Any) -> str:
        return f"{self.label.lower()} {entity.id}"

    # ---------------- hooks ----------------

    def _columns(self, data: Form,
                 current: Optional[Any] = None) -> Dict[str, Any]:
        """Model columns from the validated form.

        ``current`` is the stored row on update, None on create.
        """
        return data.model_dump(exclude={"budget_category_id"})

    def _wants_item(self, entity: Any, data: Form) -> bool:
        """Whether an unlinked entity should get a budget item."""
        return data.budget_category_id is not None

    def _target_category(self, entity: Any, data: Form) -> Optional[int]:
        return data.budget_category_id

    def _item_fields(self, entity: Any) -> Dict[str, Any]:
        """Budget item columns mirroring the entity."""
        raise NotImplementedError

    def _validate_refs(self, data: Form) -> Optional[str]:
        """Message when a referenced row is missing, None when all exist."""
        return None

    # ---------------- linkage ----------------

    def _create_link(self, entity: Any, data: Form) -> Any:
        """Best-effort creation of the budget item for an unlinked entity.

        Returns:
            The entity as stored after linking (unchanged when no item was
            created).
        """
        if not self._wants_item(entity, data):
            return entity
        category_id = self._target_category(entity, data)
        if category_id is None:
            return entity

        owner = self._owner(entity)
        item_id = self.linker.create_item(
            category_id, entity.event_id, self._item_fields(entity), owner
        )
        if item_id is None:
            return entity
        if self.linker.attach(self.repo, entity.id, item_id, owner):
            return self.repo.get_by_id(self.model, entity.id)
        return entity

    def _sync_link(self, entity: Any, data: Optional[Form],
                   fields: Optional[Tuple[str, ...]] = None) -> Any:
        """Update the linked item, or create one for an unlinked entity.

        Only ``fields`` (``synced_fields`` by default) of an existing item are
        rewritten.
        """
        link = link_of(entity)
        if isinstance(link, Linked):
            item_fields = self._item_fields(entity)
            keys = fields or self.synced_fields
            self.linker.update_item(
                link.item_id,
                {key: item_fields[key] for key in keys if key in item_fields},
                self._owner(entity)
            )
            return entity
        if data is None:
            return entity
        return self._create_link(entity, data)

    # ---------------- entry points ----------------

    def create(self, event_id: int, payload: Payload) -> ActionResult:
        """Create the entity for an event, then its budget item.

        Args:
            event_id: Owning event.
            payload: Raw form fields.

        Returns:
            ActionResult with the stored row in ``data``; a budget linkage
            failure does not change ``success``.
        """
        result = validate(self.form, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            missing = self._validate_refs(data)
            if missing:
                return ActionResult.fail(missing)
            entity = self.repo.create(
                self.model, event_id=event_id, **self._columns(data)
            )
        except Exception as e:
            logger.error(f"Failed to create {self.label.lower()}: {e}")
            return ActionResult.fail(f"Could not create the {self.label.lower()}")

        logger.info(f"{self.label} {entity.id} created for event {event_id}")
        entity = self._create_link(entity, data)
        return ActionResult.ok(f"{self.label} created", row_to_dict(entity))

    def update(self, entity_id: int, payload: Payload) -> ActionResult:
        """Update the entity, then bring its budget item in line."""
        result = validate(self.update_form or self.form, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            current = self.repo.get_by_id(self.model, entity_id)
            if current is None:
                return ActionResult.fail(f"{self.label} not found")
            missing = self._validate_refs(data)
            if missing:
                return ActionResult.fail(missing)
            entity = self.repo.update_by_id(
                self.model, entity_id, **self._columns(data, current)
            )
        except Exception as e:
            logger.error(f"Failed to update {self.label.lower()} {entity_id}: {e}")
            return ActionResult.fail(f"Could not update the {self.label.lower()}")

        entity = self._sync_link(entity, data)
        return ActionResult.ok(f"{self.label} updated", row_to_dict(entity))

    def delete(self, entity_id: int) -> ActionResult:
        """Delete the linked budget item (best effort), then the entity."""
        try:
            entity = self.repo.get_by_id(self.model, entity_id)
        except Exception as e:
            logger.error(f"Failed to load {self.label.lower()} {entity_id}: {e}")
            return ActionResult.fail(f"Could not delete the {self.label.lower()}")
        if entity is None:
            return ActionResult.fail(f"{self.label} not found")

        link = link_of(entity)
        if isinstance(link, Linked):
            self.linker.delete_item(link.item_id, self._owner(entity))

        try:
            self.repo.delete_by_id(self.model, entity_id)
        except Exception as e:
            logger.error(f"Failed to delete {self.label.lower()} {entity_id}: {e}")
            return ActionResult.fail(f"Could not delete the {self.label.lower()}")

        logger.info(f"{self.label} {entity_id} deleted")
        return ActionResult.ok(f"{self.label} deleted")

    def _patch(self, entity_id: int, fields: Dict[str, Any], message: str,
               synced: Optional[Tuple[str, ...]] = None) -> ActionResult:
        """Update some columns and re-sync an existing link."""
        try:
            entity = self.repo.update_by_id(self.model, entity_id, **fields)
        except Exception as e:
            logger.error(f"Failed to update {self.label.lower()} {entity_id}: {e}")
            return ActionResult.fail(f"Could not update the {self.label.lower()}")

        if entity is None:
            return ActionResult.fail(f"{self.label} not found")
        entity = self._sync_link(entity, None, synced)
        return ActionResult.ok(message, row_to_dict(entity))


class SpeakerActions(LinkedEntityActions):
    """Speakers; the fee is mirrored as a budget item."""

    label = "Speaker"
    model = Speaker
    form = SpeakerForm
    repo_name = "speakers"

    def _item_fields(self, speaker: Speaker) -> Dict[str, Any]:
        full_name = f"{speaker.first_name} {speaker.last_name}"
        fee = money(speaker.fee)
        return {
            "description": f"Speaker fee: {speaker.last_name} {speaker.first_name}",
            "estimated_cost": fee,
            "actual_cost": fee,
            "status": "planned",
            "vendor": speaker.company or full_name,
            "notes": f"Created automatically for speaker {full_name}",
        }


class ServiceActions(LinkedEntityActions):
    """External services; the agreed price is mirrored as a budget item."""

    label = "Service"
    model = Service
    form = ServiceForm
    repo_name = "services"

    def _item_fields(self, service: Service) -> Dict[str, Any]:
        final_price = (
            money(service.final_price)
            if service.final_price is not None else None
        )
        return {
            "description": service.service_name,
            "estimated_cost": final_price or money(service.quoted_price),
            "actual_cost": final_price,
            "status": (
                "invoiced" if service.contract_status == "delivered"
                else "planned"
            ),
            "vendor": service.provider_name or service.service_name,
            "notes": f"Created automatically for service {service.service_name}",
        }

    def update_status(self, service_id: int, payload: Payload) -> ActionResult:
        """Change the contract and/or payment status of a service."""
        result = validate(ServiceStatusUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        fields = {k: v for k, v in result.data.provided().items() if v is not None}
        synced = None
        if fields.get("contract_status") == "delivered":
            synced = self.synced_fields + ("status",)
        return self._patch(service_id, fields, "Service status updated", synced)


class SponsorActions(LinkedEntityActions):
    """Sponsors; the sponsorship is recorded as income.

    The budget item goes to the event's income category, created on demand,
    and only exists for a positive sponsorship amount.
    """

    label = "Sponsor"
    model = Sponsor
    form = SponsorForm
    update_form = SponsorUpdate
    synced_fields = SYNCED_FIELDS + ("status", "payment_date")
    repo_name = "sponsors"

    def _columns(self, data: Form,
                 current: Optional[Any] = None) -> Dict[str, Any]:
        if current is None:
            return data.model_dump()
        # omitted or null fields keep the stored value
        return {k: v for k, v in data.provided().items() if v is not None}

    def _wants_item(self, sponsor: Sponsor, data: Form) -> bool:
        return money(sponsor.sponsorship_amount) > 0

    def _target_category(self, sponsor: Sponsor, data: Form) -> Optional[int]:
        return self.linker.ensure_income_category(sponsor.event_id)

    def _item_fields(self, sponsor: Sponsor) -> Dict[str, Any]:
        return {
            "description": f"Sponsor: {sponsor.company_name}",
            "estimated_cost": money(sponsor.sponsorship_amount),
            "actual_cost": sponsor_received_amount(sponsor),
            "status": "paid" if sponsor.payment_status == "paid" else "planned",
            "vendor": sponsor.company_name,
            "payment_date": sponsor.payment_date,
            "notes": f"Created automatically for sponsor {sponsor.company_name}",
        }


class StaffAssignmentActions(LinkedEntityActions):
    """Staff assignments; the agreed payment is mirrored as a budget item.

    Due date and payment status are derived from the payment terms.
    """

    label = "Staff assignment"
    model = StaffAssignment
    form = StaffAssignmentForm
    repo_name = "staff_assignments"

    def _validate_refs(self, data: Form) -> Optional[str]:
        if self.db.staff.get_by_id(Staff, data.staff_id) is None:
            return "Staff member not found"
        return None

    def _columns(self, data: Form,
                 current: Optional[Any] = None) -> Dict[str, Any]:
        columns = data.model_dump(exclude={"budget_category_id"})
        if data.payment_terms != "custom":
            columns["payment_due_date"] = calculate_payment_due_date(
                data.end_time, data.payment_terms
            )
        columns["payment_status"] = calculate_payment_status(
            columns["payment_due_date"],
            current.payment_date if current is not None else None,
            data.assignment_status
        )
        return columns

    def _wants_item(self, assignment: StaffAssignment, data: Form) -> bool:
        return (
            data.budget_category_id is not None
            and money(assignment.payment_amount) > 0
        )

    def _item_fields(self, assignment: StaffAssignment) -> Dict[str, Any]:
        staff = self.db.staff.get_by_id(Staff, assignment.staff_id)
        amount = money(assignment.payment_amount)
        if staff is not None:
            description = f"Staff payment: {staff.last_name} {staff.first_name}"
            vendor = staff.full_name
        else:
            description = f"Staff payment: assignment {assignment.id}"
            vendor = None
        return {
            "description": description,
            "estimated_cost": amount,
            "actual_cost": amount,
            "status": (
                "paid" if assignment.payment_status == "paid" else "approved"
            ),
            "vendor": vendor,
            "payment_date": (
                assignment.payment_date or assignment.payment_due_date
            ),
        }

    def mark_paid(self, assignment_id: int, payload: Payload) -> ActionResult:
        """Record the payment of an assignment."""
        result = validate(StaffAssignmentMarkPaid, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        fields: Dict[str, Any] = {
            "payment_date": result.data.payment_date,
            "payment_status": "paid",
        }
        if result.data.notes:
            fields["notes"] = result.data.notes
        return self._patch(
            assignment_id, fields, "Payment recorded",
            self.synced_fields + ("status", "payment_date")
        )

    def refresh_payment_statuses(self, event_id: int,
                                 today: Optional[date] = None) -> int:
        """Recompute the payment status of an event's assignments.

        Returns:
            Number of assignments whose status changed.
        """
        changed = 0
        for assignment in self.repo.list_by_event(event_id):
            status = calculate_payment_status(
                assignment.payment_due_date, assignment.payment_date,
                assignment.assignment_status, today
            )
            if status != assignment.payment_status:
                self.repo.update_by_id(
                    StaffAssignment, assignment.id, payment_status=status
                )
                changed += 1
        return changed

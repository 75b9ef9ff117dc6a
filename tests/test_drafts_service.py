from datetime import timedelta

import pytest

from app.core.exceptions import InvalidTabError, NotFoundError, ValidationError
from app.core.utils import utcnow
from app.modules.compliance.scoring import evaluate_compliance
from app.modules.drafts.models import ComplianceStatus, RouteOptimizationStatus
from app.modules.drafts.service import DraftsService
from tests.factories import chosen_route, ready_form


def assert_status_invariants(draft):
    assert (draft.compliance_data is None) == (draft.compliance_status == ComplianceStatus.NOT_DONE)
    assert (draft.route_data is None) == (
        draft.route_optimization_status == RouteOptimizationStatus.NOT_DONE
    )


async def test_new_draft_starts_unchecked(db, owner_id):
    draft = await DraftsService.create(db, owner_id, ready_form())

    assert draft.compliance_status == ComplianceStatus.NOT_DONE
    assert draft.route_optimization_status == RouteOptimizationStatus.NOT_DONE
    assert draft.expires_at is None
    assert_status_invariants(draft)


async def test_invariants_hold_across_every_mutation(db, owner_id):
    draft = await DraftsService.create(db, owner_id, ready_form())

    result = evaluate_compliance(draft.form_data).to_dict()
    draft = await DraftsService.apply_compliance_result(db, owner_id, draft.id, draft.form_data, result)
    assert draft.compliance_status == ComplianceStatus.COMPLIANT
    assert_status_invariants(draft)

    draft = await DraftsService.apply_route_choice(db, owner_id, draft.id, chosen_route())
    assert draft.route_optimization_status == RouteOptimizationStatus.DONE
    assert_status_invariants(draft)

    draft = await DraftsService.update(db, owner_id, draft.id, {"formData": {"ShipmentDetails": {}}})
    assert draft.compliance_status == ComplianceStatus.COMPLIANT
    assert_status_invariants(draft)

    draft = await DraftsService.apply_carbon_analysis(db, owner_id, draft.id, {"totalEmissions": "1 kg"})
    draft = await DraftsService.apply_map_data(db, owner_id, draft.id, {"routes": {}})
    assert_status_invariants(draft)


async def test_not_ready_result_maps_to_non_compliant(db, owner_id):
    draft = await DraftsService.create_with_compliance(
        db, owner_id, {}, {"complianceStatus": "Not Ready", "riskLevel": {"riskScore": 100}}
    )
    assert draft.compliance_status == ComplianceStatus.NON_COMPLIANT
    assert_status_invariants(draft)


async def test_create_with_route_seeds_shipment_details(db, owner_id):
    draft = await DraftsService.create_with_route(
        db, owner_id, {}, chosen_route(), "IN", "JP", 120.0
    )
    assert draft.form_data["ShipmentDetails"] == {
        "Origin Country": "IN",
        "Destination Country": "JP",
        "Gross Weight": 120.0,
    }
    assert draft.compliance_status == ComplianceStatus.NOT_DONE
    assert draft.route_optimization_status == RouteOptimizationStatus.DONE
    assert draft.expires_at is None


async def test_ready_for_shipment_tab_is_owner_scoped_and_newest_first(db, owner_id, other_owner_id):
    result = {"complianceStatus": "Ready for Shipment"}
    ids = []
    for minutes_ago in (30, 10, 20):
        draft = await DraftsService.create_with_compliance(db, owner_id, ready_form(), result)
        draft = await DraftsService.apply_route_choice(db, owner_id, draft.id, chosen_route())
        draft.timestamp = utcnow() - timedelta(minutes=minutes_ago)
        ids.append(draft.id)
    await db.flush()

    foreign = await DraftsService.create_with_compliance(db, other_owner_id, ready_form(), result)
    await DraftsService.apply_route_choice(db, other_owner_id, foreign.id, chosen_route())
    await DraftsService.create_with_compliance(db, owner_id, ready_form(), result)

    listed = await DraftsService.find_all_by_tab(db, owner_id, "ready-for-shipment")

    assert [draft.id for draft in listed] == [ids[1], ids[2], ids[0]]
    assert all(draft.owner_id == owner_id for draft in listed)


async def test_tabs_partition_by_status(db, owner_id):
    unchecked = await DraftsService.create(db, owner_id, {})
    compliant = await DraftsService.create_with_compliance(
        db, owner_id, {}, {"complianceStatus": "Ready for Shipment"}
    )
    failing = await DraftsService.create_with_compliance(
        db, owner_id, {}, {"complianceStatus": "Not Ready"}
    )
    routed = await DraftsService.create_with_route(db, owner_id, {}, chosen_route(), "IN", "JP", 5)

    async def tab_ids(tab):
        return {draft.id for draft in await DraftsService.find_all_by_tab(db, owner_id, tab)}

    assert await tab_ids("yet-to-be-checked") == {unchecked.id, routed.id}
    assert await tab_ids("compliant") == {compliant.id}
    assert await tab_ids("non-compliant") == {failing.id}
    assert await tab_ids("ready-for-shipment") == set()


async def test_unknown_tab(db, owner_id):
    with pytest.raises(InvalidTabError) as exc:
        await DraftsService.find_all_by_tab(db, owner_id, "archived")
    assert exc.value.status_code == 400


async def test_other_owners_draft_looks_missing(db, owner_id, other_owner_id):
    draft = await DraftsService.create(db, owner_id, ready_form())

    with pytest.raises(NotFoundError):
        await DraftsService.find_one(db, other_owner_id, draft.id)
    with pytest.raises(NotFoundError):
        await DraftsService.update(db, other_owner_id, draft.id, {"formData": {}})
    with pytest.raises(NotFoundError):
        await DraftsService.delete(db, other_owner_id, draft.id)
    with pytest.raises(NotFoundError):
        await DraftsService.find_one(db, owner_id, "no-such-id")


async def test_round_trip_and_idempotent_reads(db, owner_id):
    form = ready_form()
    form["Extra"] = {"note": "kept as-is"}
    draft = await DraftsService.create(db, owner_id, form)

    first = await DraftsService.find_one(db, owner_id, draft.id)
    first_snapshot = (dict(first.form_data), first.compliance_status, first.timestamp)
    second = await DraftsService.find_one(db, owner_id, draft.id)

    assert first.form_data == form
    assert (dict(second.form_data), second.compliance_status, second.timestamp) == first_snapshot


async def test_update_rejects_stage_fields(db, owner_id):
    draft = await DraftsService.create(db, owner_id, {})

    with pytest.raises(ValidationError, match="complianceData"):
        await DraftsService.update(
            db, owner_id, draft.id, {"complianceData": {"complianceStatus": "Ready for Shipment"}}
        )
    with pytest.raises(ValidationError):
        await DraftsService.update(db, owner_id, draft.id, {"formData": "not an object"})
    with pytest.raises(ValidationError):
        await DraftsService.update(db, owner_id, draft.id, {})

    unchanged = await DraftsService.find_one(db, owner_id, draft.id)
    assert unchanged.compliance_status == ComplianceStatus.NOT_DONE
    assert unchanged.compliance_data is None


async def test_update_refreshes_timestamp(db, owner_id):
    draft = await DraftsService.create(db, owner_id, {})
    draft.timestamp = utcnow() - timedelta(hours=1)
    await db.flush()
    before = draft.timestamp

    updated = await DraftsService.update(
        db, owner_id, draft.id, {"carbonAnalysisData": {"totalEmissions": "5 kg"}}
    )
    assert updated.timestamp > before
    assert updated.carbon_analysis_data == {"totalEmissions": "5 kg"}


async def test_ephemeral_drafts_are_hidden_and_purged(db, owner_id):
    live = await DraftsService.create_ephemeral(db, owner_id, {})
    expired = await DraftsService.create(
        db, owner_id, {}, expires_at=utcnow() - timedelta(minutes=1)
    )

    assert (await DraftsService.find_one(db, owner_id, live.id)).id == live.id
    with pytest.raises(NotFoundError):
        await DraftsService.find_one(db, owner_id, expired.id)

    listed = await DraftsService.find_all_by_tab(db, owner_id, "yet-to-be-checked")
    assert listed == []
    assert await DraftsService.purge_expired(db) == 0


async def test_delete(db, owner_id):
    draft = await DraftsService.create(db, owner_id, {})
    await DraftsService.delete(db, owner_id, draft.id)
    with pytest.raises(NotFoundError):
        await DraftsService.find_one(db, owner_id, draft.id)

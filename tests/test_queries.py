import pytest
from datetime import timedelta

from shiftswap.db.models.swap_requests import SwapStatus
from shiftswap.services.swaps import (
    SwapError,
    SwapErrorCode,
    create_swap_request,
    expire_swap_requests,
    get_swap_request_for_viewer,
    list_incoming,
    list_outgoing,
    list_pending_manager_approval,
    list_swap_requests,
    respond_to_swap,
)
from shiftswap.services.swaps.access import (
    Capability,
    can_act,
    get_approvable_restaurant_ids,
    has_permission,
    is_active_member,
    is_elevated,
)

from swap_seed import (
    ADMIN_USER_ID,
    ALICE_SHIFT_ID,
    ALICE_USER_ID,
    BOB_SHIFT_ID,
    BOB_USER_ID,
    CAROL_USER_ID,
    DAVE_USER_ID,
    DOWNTOWN_ID,
    ERIN_USER_ID,
    HARBOUR_ID,
    MANAGER_USER_ID,
    T0,
)


@pytest.fixture
def swaps(db):
    """Alice -> Bob accepted, Bob -> Alice still pending."""
    accepted = create_swap_request(db, ALICE_SHIFT_ID, ALICE_USER_ID, BOB_USER_ID, now=T0)
    respond_to_swap(db, accepted.id, BOB_USER_ID, accept=True, now=T0 + timedelta(hours=1))
    pending = create_swap_request(db, BOB_SHIFT_ID, BOB_USER_ID, ALICE_USER_ID, now=T0 + timedelta(hours=2))
    return accepted, pending


# ==================== Access ====================

class TestAccess:
    def test_global_admin_is_elevated(self, db):
        assert is_elevated(db, ADMIN_USER_ID)
        assert not is_elevated(db, MANAGER_USER_ID)

    def test_membership(self, db):
        assert is_active_member(db, BOB_USER_ID, DOWNTOWN_ID)
        assert not is_active_member(db, BOB_USER_ID, HARBOUR_ID)
        assert not is_active_member(db, DAVE_USER_ID, DOWNTOWN_ID)
        assert not is_active_member(db, ERIN_USER_ID, DOWNTOWN_ID)

    def test_role_capabilities(self, db):
        assert has_permission(db, MANAGER_USER_ID, DOWNTOWN_ID, Capability.APPROVE_SHIFT_SWAP)
        assert has_permission(db, ALICE_USER_ID, DOWNTOWN_ID, Capability.REQUEST_SHIFT_SWAP)
        assert not has_permission(db, ALICE_USER_ID, DOWNTOWN_ID, Capability.APPROVE_SHIFT_SWAP)

    def test_plain_member_gets_request_only(self, db):
        assert has_permission(db, BOB_USER_ID, DOWNTOWN_ID, Capability.REQUEST_SHIFT_SWAP)
        assert not has_permission(db, BOB_USER_ID, DOWNTOWN_ID, Capability.APPROVE_SHIFT_SWAP)
        assert not has_permission(db, DAVE_USER_ID, DOWNTOWN_ID, Capability.REQUEST_SHIFT_SWAP)

    def test_elevated_bypasses_restaurant_checks(self, db):
        assert can_act(db, ADMIN_USER_ID, HARBOUR_ID, Capability.APPROVE_SHIFT_SWAP)

    def test_approvable_restaurants(self, db):
        assert get_approvable_restaurant_ids(db, ADMIN_USER_ID) is None
        assert get_approvable_restaurant_ids(db, MANAGER_USER_ID) == [DOWNTOWN_ID]
        assert get_approvable_restaurant_ids(db, ALICE_USER_ID) == []


# ==================== Single lookup ====================

class TestGetForViewer:
    def test_parties_and_manager_can_see(self, db, swaps):
        accepted, _ = swaps
        for viewer in (ALICE_USER_ID, BOB_USER_ID, MANAGER_USER_ID, ADMIN_USER_ID):
            assert get_swap_request_for_viewer(db, accepted.id, viewer).id == accepted.id

    def test_outsider_refused(self, db, swaps):
        accepted, _ = swaps
        with pytest.raises(SwapError) as exc:
            get_swap_request_for_viewer(db, accepted.id, CAROL_USER_ID)
        assert exc.value.code == SwapErrorCode.NOT_AUTHORIZED

    def test_missing(self, db):
        with pytest.raises(SwapError) as exc:
            get_swap_request_for_viewer(db, 404, ADMIN_USER_ID)
        assert exc.value.code == SwapErrorCode.SWAP_NOT_FOUND


# ==================== Lists ====================

class TestListSwapRequests:
    def test_manager_sees_restaurant(self, db, swaps):
        assert len(list_swap_requests(db, MANAGER_USER_ID)) == 2

    def test_newest_first(self, db, swaps):
        accepted, pending = swaps
        ids = [s.id for s in list_swap_requests(db, ADMIN_USER_ID)]
        assert ids == [pending.id, accepted.id]

    def test_outsider_sees_nothing(self, db, swaps):
        assert list_swap_requests(db, CAROL_USER_ID) == []

    def test_filters(self, db, swaps):
        accepted, pending = swaps
        assert [s.id for s in list_swap_requests(db, ADMIN_USER_ID, status=SwapStatus.ACCEPTED)] == [accepted.id]
        assert [s.id for s in list_swap_requests(db, ADMIN_USER_ID, from_user_id=BOB_USER_ID)] == [pending.id]
        assert [s.id for s in list_swap_requests(db, ADMIN_USER_ID, to_user_id=BOB_USER_ID)] == [accepted.id]
        assert list_swap_requests(db, ADMIN_USER_ID, restaurant_id=HARBOUR_ID) == []

    def test_date_range_on_shift_start(self, db, swaps):
        accepted, _ = swaps
        rows = list_swap_requests(
            db, ADMIN_USER_ID,
            start_date=T0 + timedelta(days=3),
            end_date=T0 + timedelta(days=3, hours=1),
        )
        assert [s.id for s in rows] == [accepted.id]

    def test_expired_hidden_by_default(self, db, swaps):
        _, pending = swaps
        expire_swap_requests(db, now=T0 + timedelta(hours=60))

        assert pending.id not in [s.id for s in list_swap_requests(db, ADMIN_USER_ID)]
        assert pending.id in [s.id for s in list_swap_requests(db, ADMIN_USER_ID, include_expired=True)]
        assert [s.id for s in list_swap_requests(db, ADMIN_USER_ID, status=SwapStatus.EXPIRED)] == [pending.id]

    def test_paging(self, db, swaps):
        accepted, _ = swaps
        assert [s.id for s in list_swap_requests(db, ADMIN_USER_ID, skip=1, limit=1)] == [accepted.id]


class TestInboxes:
    def test_incoming_is_pending_only(self, db, swaps):
        _, pending = swaps
        assert [s.id for s in list_incoming(db, ALICE_USER_ID)] == [pending.id]
        # bob already accepted his
        assert list_incoming(db, BOB_USER_ID) == []

    def test_incoming_restaurant_filter(self, db, swaps):
        assert list_incoming(db, ALICE_USER_ID, restaurant_id=HARBOUR_ID) == []

    def test_outgoing(self, db, swaps):
        accepted, _ = swaps
        assert [s.id for s in list_outgoing(db, ALICE_USER_ID)] == [accepted.id]
        assert list_outgoing(db, ALICE_USER_ID, status=SwapStatus.PENDING) == []

    def test_pending_manager_approval(self, db, swaps):
        accepted, _ = swaps
        assert [s.id for s in list_pending_manager_approval(db, MANAGER_USER_ID)] == [accepted.id]
        assert [s.id for s in list_pending_manager_approval(db, ADMIN_USER_ID)] == [accepted.id]

    def test_pending_manager_approval_needs_approver(self, db, swaps):
        assert list_pending_manager_approval(db, ALICE_USER_ID) == []
        assert list_pending_manager_approval(db, MANAGER_USER_ID, restaurant_id=HARBOUR_ID) == []

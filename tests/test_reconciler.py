# tests/test_reconciler.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List

import pytest

from clientdesk.services.reconciler import (
    MemberDraft,
    PhaseDraft,
    ReconcilePlan,
    RowUpdate,
    add_phase,
    member_is_complete,
    reconcile_members,
    reconcile_phases,
    remove_phase,
    renumber_phases,
)


# --- A tiny in-memory member table, enough to apply a plan ------------------

class _MemberTable:
    def __init__(self, rows: Dict[int, Dict[str, Any]]):
        self.rows = {k: dict(v) for k, v in rows.items()}
        self._next = max(rows, default=0) + 1

    def apply(self, plan: ReconcilePlan) -> List[int]:
        for rid in plan.to_delete:
            self.rows.pop(rid)
        for upd in plan.to_update:
            self.rows[upd.id].update(upd.fields)
        new_ids = []
        for row in plan.to_insert:
            self.rows[self._next] = dict(row)
            new_ids.append(self._next)
            self._next += 1
        return new_ids


# --- Tests: members ---------------------------------------------------------

def test_edit_remove_and_add_member():
    working = [
        MemberDraft(user_id="a", role="lead", id=1),
        MemberDraft(user_id="u9", role="design"),
    ]
    plan = reconcile_members([1, 2], working)

    assert plan.to_delete == (2,)
    assert plan.to_update == (RowUpdate(1, {"role": "lead"}),)
    assert plan.to_insert == ({"user_id": "u9", "role": "design"},)


def test_new_member_without_role_is_dropped_everywhere():
    plan = reconcile_members([], [MemberDraft(user_id="u9", role="")])
    assert plan.is_empty


@pytest.mark.parametrize(
    "draft,ok",
    [
        (MemberDraft(user_id="u1", role="dev"), True),
        (MemberDraft(user_id="", role="dev"), False),
        (MemberDraft(user_id="u1", role="   "), False),
        (MemberDraft(user_id="  ", role="   "), False),
    ],
)
def test_member_completeness(draft, ok):
    assert member_is_complete(draft) is ok
    plan = reconcile_members([], [draft])
    assert (len(plan.to_insert) == 1) is ok


def test_empty_originals_never_delete():
    working = [MemberDraft(user_id="u1", role="dev"), MemberDraft(user_id="u2", role="qa")]
    assert reconcile_members([], working).to_delete == ()
    assert reconcile_members([], []).to_delete == ()


def test_all_existing_working_set_inserts_nothing():
    working = [MemberDraft(user_id="a", role="dev", id=1), MemberDraft(user_id="b", role="qa", id=2)]
    plan = reconcile_members([1, 2], working)
    assert plan.to_insert == ()
    assert plan.to_delete == ()
    assert [u.id for u in plan.to_update] == [1, 2]


def test_existing_member_update_never_rewrites_user():
    plan = reconcile_members([5], [MemberDraft(user_id="someone-else", role=" pm ", id=5)])
    assert plan.to_update == (RowUpdate(5, {"role": "pm"}),)


def test_protected_membership_is_never_deleted():
    # row 7 is the acting user's own membership and is not on the form
    plan = reconcile_members([7, 8], [], protected_ids=[7])
    assert plan.to_delete == (8,)


def test_duplicate_original_ids_delete_once():
    plan = reconcile_members([3, 3, 4], [MemberDraft(user_id="a", role="dev", id=4)])
    assert plan.to_delete == (3,)


def test_update_and_delete_sets_are_disjoint():
    working = [MemberDraft(user_id="a", role="dev", id=1), MemberDraft(user_id="c", role="qa", id=3)]
    plan = reconcile_members([1, 2, 3], working)
    assert set(plan.to_delete).isdisjoint({u.id for u in plan.to_update})


def test_apply_then_rediff_is_empty():
    table = _MemberTable({1: {"user_id": "a", "role": "dev"}, 2: {"user_id": "b", "role": "qa"}})
    working = [
        MemberDraft(user_id="a", role="lead", id=1),
        MemberDraft(user_id="u9", role="design"),
    ]
    plan = reconcile_members(list(table.rows), working)
    new_ids = table.apply(plan)

    # the form now reflects what was written
    working = [working[0], replace(working[1], id=new_ids[0])]
    snapshot = {rid: {"role": r["role"]} for rid, r in table.rows.items()}
    again = reconcile_members(list(table.rows), working).without_unchanged(snapshot)
    assert again.is_empty


def test_without_unchanged_keeps_real_edits():
    plan = reconcile_members([1, 2], [
        MemberDraft(user_id="a", role="dev", id=1),
        MemberDraft(user_id="b", role="lead", id=2),
    ])
    trimmed = plan.without_unchanged({1: {"role": "dev"}, 2: {"role": "qa"}})
    assert trimmed.to_update == (RowUpdate(2, {"role": "lead"}),)


def test_reconcile_is_pure():
    working = [MemberDraft(user_id="a", role="dev", id=1), MemberDraft(user_id="u2", role="qa")]
    before = [replace(m) for m in working]
    first = reconcile_members([1, 9], working)
    second = reconcile_members([1, 9], working)
    assert first == second
    assert working == before


# --- Tests: phases ----------------------------------------------------------

@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_remove_phase_renumbers_contiguously(k):
    phases = renumber_phases([PhaseDraft(name=n) for n in "abcd"])
    left = remove_phase(phases, k)
    assert [p.order for p in left] == [1, 2, 3]
    assert [p.name for p in left] == [n for i, n in enumerate("abcd") if i != k]


def test_remove_phase_out_of_range():
    with pytest.raises(IndexError):
        remove_phase([PhaseDraft(name="a")], 3)


def test_add_phase_appends_blank_with_next_order():
    phases = add_phase([PhaseDraft(name="a", order=1)])
    assert [p.order for p in phases] == [1, 2]
    assert phases[1].name == ""


def test_phase_plan_carries_renumbered_orders():
    drafts = [
        PhaseDraft(name="Design", order=1, id=10),
        PhaseDraft(name="Build", order=3, id=12),
        PhaseDraft(name="Launch", order=7),
    ]
    plan = reconcile_phases([10, 11, 12], drafts)
    assert plan.to_delete == (11,)
    assert [(u.id, u.fields["order_num"]) for u in plan.to_update] == [(10, 1), (12, 2)]
    assert plan.to_insert == (
        {"name": "Launch", "description": "", "order_num": 3, "status": "pending"},
    )


def test_blank_new_phase_leaves_no_gap():
    drafts = renumber_phases([PhaseDraft(name="One"), PhaseDraft(name=""), PhaseDraft(name="Three")])
    plan = reconcile_phases([], drafts)
    assert [r["name"] for r in plan.to_insert] == ["One", "Three"]
    assert [r["order_num"] for r in plan.to_insert] == [1, 2]

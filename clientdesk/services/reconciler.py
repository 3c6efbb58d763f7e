# Rev 0.2.0

"""Edit-form reconciliation (Rev 0.2.0)

A project edit keeps two lists in memory (team members, phases). On save the
working copy is diffed against the ids loaded when editing started:

  to_delete  original ids no longer present in the working copy
  to_update  every working item that carries a persisted id (mutable fields only)
  to_insert  every new working item that passes the completeness check

The diff is a pure function of its inputs. Issuing the resulting writes is
the caller's job (services/project_service.py).
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, TypeVar


# ---------------------------------------------------------------------------
# Working-copy items
# ---------------------------------------------------------------------------

@dataclass
class MemberDraft:
    user_id: str = ""
    role: str = ""
    id: Optional[int] = None

    @property
    def is_existing(self) -> bool:
        return self.id is not None


@dataclass
class PhaseDraft:
    name: str = ""
    description: str = ""
    order: int = 1
    status: str = "pending"
    id: Optional[int] = None

    @property
    def is_existing(self) -> bool:
        return self.id is not None


Item = TypeVar("Item")


class RowUpdate(NamedTuple):
    id: Hashable
    fields: Dict[str, Any]


@dataclass(frozen=True)
class ReconcilePlan:
    to_delete: Tuple[Hashable, ...] = ()
    to_update: Tuple[RowUpdate, ...] = ()
    to_insert: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.to_delete or self.to_update or self.to_insert)

    def without_unchanged(self, snapshot: Mapping[Hashable, Mapping[str, Any]]) -> "ReconcilePlan":
        """Drop updates whose fields already match the persisted row."""
        kept = tuple(
            u for u in self.to_update
            if u.id not in snapshot
            or any(snapshot[u.id].get(k) != v for k, v in u.fields.items())
        )
        return replace(self, to_update=kept)


# ---------------------------------------------------------------------------
# Core diff
# ---------------------------------------------------------------------------

def reconcile(
    original_ids: Iterable[Hashable],
    working: Sequence[Item],
    *,
    fields: Callable[[Item], Dict[str, Any]],
    is_complete: Callable[[Item], bool],
    protected_ids: Iterable[Hashable] = (),
) -> ReconcilePlan:
    """
    Items expose `.id` (None for rows not yet persisted).
    `fields(item)` returns the writable columns for that item; identity and
    ownership columns must not be part of it.
    """
    protected = set(protected_ids)
    present = {item.id for item in working if item.id is not None}

    to_delete: List[Hashable] = []
    seen: set = set()
    for oid in original_ids:
        if oid in seen:
            continue
        seen.add(oid)
        if oid not in present and oid not in protected:
            to_delete.append(oid)

    to_update: List[RowUpdate] = []
    to_insert: List[Dict[str, Any]] = []
    for item in working:
        if item.id is not None:
            to_update.append(RowUpdate(item.id, fields(item)))
        elif is_complete(item):
            to_insert.append(fields(item))

    return ReconcilePlan(tuple(to_delete), tuple(to_update), tuple(to_insert))


# ---------------------------------------------------------------------------
# Team members
# ---------------------------------------------------------------------------

def member_is_complete(m: MemberDraft) -> bool:
    return bool((m.user_id or "").strip()) and bool((m.role or "").strip())


def reconcile_members(
    original_ids: Iterable[Hashable],
    drafts: Sequence[MemberDraft],
    *,
    protected_ids: Iterable[Hashable] = (),
) -> ReconcilePlan:
    # existing rows only ever change role; user_id is part of the row's identity
    def _fields(m: MemberDraft) -> Dict[str, Any]:
        if m.is_existing:
            return {"role": m.role.strip()}
        return {"user_id": m.user_id.strip(), "role": m.role.strip()}

    return reconcile(
        original_ids,
        drafts,
        fields=_fields,
        is_complete=member_is_complete,
        protected_ids=protected_ids,
    )


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

def phase_is_complete(p: PhaseDraft) -> bool:
    return bool((p.name or "").strip())


def _phase_fields(p: PhaseDraft) -> Dict[str, Any]:
    return {
        "name": p.name.strip(),
        "description": p.description or "",
        "order_num": int(p.order),
        "status": p.status,
    }


def renumber_phases(drafts: Sequence[PhaseDraft]) -> List[PhaseDraft]:
    """Contiguous 1-based order, relative order kept."""
    return [replace(p, order=i) for i, p in enumerate(drafts, start=1)]


def add_phase(drafts: Sequence[PhaseDraft]) -> List[PhaseDraft]:
    return renumber_phases(list(drafts) + [PhaseDraft()])


def remove_phase(drafts: Sequence[PhaseDraft], index: int) -> List[PhaseDraft]:
    if not 0 <= index < len(drafts):
        raise IndexError(f"phase index out of range: {index}")
    return renumber_phases([p for i, p in enumerate(drafts) if i != index])


def reconcile_phases(original_ids: Iterable[Hashable], drafts: Sequence[PhaseDraft]) -> ReconcilePlan:
    # blank new rows are dropped before numbering so written orders stay contiguous
    kept = [p for p in drafts if p.is_existing or phase_is_complete(p)]
    return reconcile(
        original_ids,
        renumber_phases(kept),
        fields=_phase_fields,
        is_complete=phase_is_complete,
    )

# Path: src/domain/registration/services/transitions.py
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from src.domain.authentication.models.identity import Role
from src.domain.registration.models.registration import RegistrationStatus, ReviewAction, VehicleRegistration
from src.shared.utilities.result import ErrorKind, Result

# Highest first; the acting role recorded on stamps and audits
ROLE_PRECEDENCE: List[Role] = [Role.SUPER_ADMIN, Role.ADMIN, Role.FINAL_APPROVER, Role.DOCUMENT_VERIFIER]

ACTION_ROLES: Dict[ReviewAction, FrozenSet[Role]] = {
    ReviewAction.VERIFY: frozenset({Role.DOCUMENT_VERIFIER}),
    ReviewAction.APPROVE: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.FINAL_APPROVER}),
    ReviewAction.REJECT: frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.FINAL_APPROVER, Role.DOCUMENT_VERIFIER}),
    ReviewAction.HIDE: frozenset({Role.SUPER_ADMIN}),
    ReviewAction.UNHIDE: frozenset({Role.SUPER_ADMIN}),
}


@dataclass(frozen=True)
class TransitionPlan:
    """What applying an action to a registration would change."""
    action: ReviewAction
    acting_role: Role
    from_status: RegistrationStatus
    to_status: RegistrationStatus
    message_key: str
    noop: bool = False
    assign_reference: bool = False
    stamp: Optional[str] = None
    note: Optional[str] = None
    remember_previous: bool = False
    clear_previous: bool = False


def acting_role(roles: Iterable[Role], action: ReviewAction) -> Optional[Role]:
    permitted = ACTION_ROLES[action]
    held = set(roles)
    for role in ROLE_PRECEDENCE:
        if role in held and role in permitted:
            return role
    return None


def _noop(action: ReviewAction, role: Role, status: RegistrationStatus, message_key: str) -> TransitionPlan:
    return TransitionPlan(action=action, acting_role=role, from_status=status, to_status=status,
                          message_key=message_key, noop=True)


def _plan_verify(registration: VehicleRegistration, role: Role, note: Optional[str]) -> Result[TransitionPlan]:
    status = registration.status
    if status in (RegistrationStatus.UNDER_REVIEW, RegistrationStatus.APPROVED):
        return Result.success(_noop(ReviewAction.VERIFY, role, status, "registration.already_under_review"))
    if status is not RegistrationStatus.PENDING:
        return Result.failure(ErrorKind.INVALID_TRANSITION, "registration.invalid_transition")
    return Result.success(TransitionPlan(
        action=ReviewAction.VERIFY, acting_role=role, from_status=status,
        to_status=RegistrationStatus.UNDER_REVIEW, message_key="registration.under_review"
    ))


def _plan_approve(registration: VehicleRegistration, role: Role, note: Optional[str]) -> Result[TransitionPlan]:
    status = registration.status
    if status is RegistrationStatus.APPROVED:
        return Result.success(_noop(ReviewAction.APPROVE, role, status, "registration.already_approved"))
    # Final approvers only sign off on documents someone already verified
    if role is Role.FINAL_APPROVER and status is RegistrationStatus.PENDING:
        return Result.failure(ErrorKind.INVALID_TRANSITION, "registration.needs_verification")
    return Result.success(TransitionPlan(
        action=ReviewAction.APPROVE, acting_role=role, from_status=status,
        to_status=RegistrationStatus.APPROVED, message_key="registration.approved",
        assign_reference=True, stamp="approval", note=(note or "").strip() or None
    ))


def _plan_reject(registration: VehicleRegistration, role: Role, note: Optional[str]) -> Result[TransitionPlan]:
    status = registration.status
    reason = (note or "").strip()
    if not reason:
        return Result.failure(ErrorKind.REASON_REQUIRED, "registration.reason_required")
    if status is RegistrationStatus.REJECTED:
        return Result.success(_noop(ReviewAction.REJECT, role, status, "registration.already_rejected"))
    return Result.success(TransitionPlan(
        action=ReviewAction.REJECT, acting_role=role, from_status=status,
        to_status=RegistrationStatus.REJECTED, message_key="registration.rejected",
        stamp="rejection", note=reason
    ))


def _plan_hide(registration: VehicleRegistration, role: Role, note: Optional[str]) -> Result[TransitionPlan]:
    return Result.success(TransitionPlan(
        action=ReviewAction.HIDE, acting_role=role, from_status=registration.status,
        to_status=RegistrationStatus.HIDDEN, message_key="registration.hidden_ok", remember_previous=True
    ))


def _plan_unhide(registration: VehicleRegistration, role: Role, note: Optional[str]) -> Result[TransitionPlan]:
    status = registration.status
    if status is not RegistrationStatus.HIDDEN:
        return Result.success(_noop(ReviewAction.UNHIDE, role, status, "registration.not_hidden"))
    return Result.success(TransitionPlan(
        action=ReviewAction.UNHIDE, acting_role=role, from_status=status,
        to_status=registration.previous_status or RegistrationStatus.PENDING,
        message_key="registration.unhidden", clear_previous=True
    ))


Planner = Callable[[VehicleRegistration, Role, Optional[str]], Result[TransitionPlan]]

TRANSITIONS: Dict[ReviewAction, Planner] = {
    ReviewAction.VERIFY: _plan_verify,
    ReviewAction.APPROVE: _plan_approve,
    ReviewAction.REJECT: _plan_reject,
    ReviewAction.HIDE: _plan_hide,
    ReviewAction.UNHIDE: _plan_unhide,
}

if set(TRANSITIONS) != set(ReviewAction) or set(ACTION_ROLES) != set(ReviewAction):
    raise RuntimeError("Every review action needs a planner and a role set")


def plan(action: ReviewAction, registration: VehicleRegistration, roles: Iterable[Role],
         note: Optional[str] = None) -> Result[TransitionPlan]:
    """
    Decide what ``action`` does to ``registration`` for a caller holding ``roles``.

    Checks run in a fixed order: role, hidden state, then the action's own
    preconditions. Nothing is written here.
    """
    role = acting_role(roles, action)
    if role is None:
        return Result.failure(ErrorKind.UNAUTHORIZED)
    if registration.is_hidden and action is ReviewAction.HIDE:
        return Result.failure(ErrorKind.RECORD_HIDDEN, "registration.already_hidden")
    if registration.is_hidden and action is not ReviewAction.UNHIDE:
        return Result.failure(ErrorKind.RECORD_HIDDEN, "registration.hidden")
    return TRANSITIONS[action](registration, role, note)

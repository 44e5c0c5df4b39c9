# Path: src/domain/authentication/models/flows.py
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet

from src.domain.authentication.models.identity import Role


class OtpFlow(str, Enum):
    """Role tag stored on a challenge, naming the flow that issued it."""
    OWNER_LOGIN = "Owner"
    MINISTRY_LOGIN = "MinistryOfficer"
    VEHICLE_OWNER_SIGNUP = "VehicleOwnerSignup"
    VEHICLE_OWNER_LOGIN = "VehicleOwnerLogin"


@dataclass(frozen=True)
class FlowPolicy:
    flow: OtpFlow
    required_roles: FrozenSet[Role]
    creates_account: bool
    success_redirect: str
    restart_redirect: str
    verify_redirect: str


FLOW_POLICIES: Dict[OtpFlow, FlowPolicy] = {
    OtpFlow.OWNER_LOGIN: FlowPolicy(
        flow=OtpFlow.OWNER_LOGIN,
        required_roles=frozenset({Role.OWNER}),
        creates_account=False,
        success_redirect="/",
        restart_redirect="/auth/owner/login",
        verify_redirect="/auth/owner/verify",
    ),
    OtpFlow.MINISTRY_LOGIN: FlowPolicy(
        flow=OtpFlow.MINISTRY_LOGIN,
        required_roles=frozenset({Role.MINISTRY_OFFICER}),
        creates_account=False,
        success_redirect="/vehicles?type=truck",
        restart_redirect="/auth/ministry/login",
        verify_redirect="/auth/ministry/verify",
    ),
    OtpFlow.VEHICLE_OWNER_SIGNUP: FlowPolicy(
        flow=OtpFlow.VEHICLE_OWNER_SIGNUP,
        required_roles=frozenset(),
        creates_account=True,
        success_redirect="/vehicles/register",
        restart_redirect="/auth/vehicle-owner/signup",
        verify_redirect="/auth/vehicle-owner/signup/verify",
    ),
    OtpFlow.VEHICLE_OWNER_LOGIN: FlowPolicy(
        flow=OtpFlow.VEHICLE_OWNER_LOGIN,
        required_roles=frozenset({Role.VEHICLE_OWNER, Role.OWNER}),
        creates_account=False,
        success_redirect="/vehicles?type=truck",
        restart_redirect="/auth/vehicle-owner/login",
        verify_redirect="/auth/vehicle-owner/verify",
    ),
}

if set(FLOW_POLICIES) != set(OtpFlow):
    raise RuntimeError(f"Missing flow policies: {set(OtpFlow) - set(FLOW_POLICIES)}")


def policy_for(flow: OtpFlow) -> FlowPolicy:
    return FLOW_POLICIES[flow]

from typing import Callable

VesselActiveCheck = Callable[[str], bool]


def admit(vessel_id: str, is_active: VesselActiveCheck) -> bool:
    if not vessel_id or not vessel_id.strip():
        return False
    return bool(is_active(vessel_id))

"""
Load planning heuristics for outbound orders.

Pure functions over order totals: vehicle suggestion by volume, stowage
alert from fragile/heavy flags, and loading efficiency against the
suggested vehicle's nominal capacity.
"""
from decimal import Decimal
from typing import Optional, Union

from warehouse_engine.models.fleet import VehicleType


Number = Union[int, float, Decimal]

# Nominal cargo volume (m3) per vehicle type
VEHICLE_CAPACITY_M3 = {
    VehicleType.VAN.value: Decimal("10"),
    VehicleType.TRUCK_3_5T.value: Decimal("20"),
    VehicleType.TORTON.value: Decimal("40"),
}
DEFAULT_CAPACITY_M3 = Decimal("10")

STOW_WARNING = "WARNING: Stow with care. Do not place heavy items on top of fragile ones."
FRAGILE_CAUTION = "CAUTION: The order contains fragile items. Handle with care."


def suggest_vehicle(total_volume_m3: Number) -> str:
    """
    Smallest vehicle type for the order volume.

    Examples:
        >>> suggest_vehicle(Decimal("9.99"))
        'VAN'
        >>> suggest_vehicle(10)
        'TRUCK_3_5T'
        >>> suggest_vehicle(20)
        'TORTON'
    """
    volume = Decimal(str(total_volume_m3))
    if volume < 10:
        return VehicleType.VAN.value
    if volume < 20:
        return VehicleType.TRUCK_3_5T.value
    return VehicleType.TORTON.value


def loading_alert(has_fragile_items: bool, has_heavy_items: bool) -> Optional[str]:
    if has_fragile_items and has_heavy_items:
        return STOW_WARNING
    if has_fragile_items:
        return FRAGILE_CAUTION
    return None


def loading_efficiency(total_volume_m3: Number, vehicle_type: Optional[str]) -> float:
    """Percent of the vehicle's capacity used, capped at 100."""
    capacity = VEHICLE_CAPACITY_M3.get(vehicle_type, DEFAULT_CAPACITY_M3)
    efficiency = Decimal(str(total_volume_m3)) / capacity * 100
    return float(min(Decimal("100"), efficiency))

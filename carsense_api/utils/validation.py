import re
from datetime import date

VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{1,17}$")
DTC_PATTERN = re.compile(r"^[PCBU][0-9A-F]{4}$")

# First production automobile (Benz Patent-Motorwagen)
MIN_VEHICLE_YEAR = 1886


def normalize_vin(v: str) -> str:
    v = v.strip().upper()
    if not VIN_PATTERN.match(v):
        raise ValueError("VIN must be 1-17 characters, letters and digits only (no I, O or Q)")
    return v


def check_vehicle_year(v: int) -> int:
    max_year = date.today().year + 1
    if not (MIN_VEHICLE_YEAR <= v <= max_year):
        raise ValueError(f"Year must be between {MIN_VEHICLE_YEAR} and {max_year}")
    return v


def normalize_dtc_code(v: str) -> str:
    v = v.strip().upper()
    if not DTC_PATTERN.match(v):
        raise ValueError("DTC code must look like P0171 (P, C, B or U followed by 4 hex digits)")
    return v

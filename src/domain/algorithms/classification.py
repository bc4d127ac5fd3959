from __future__ import annotations

from typing import Callable

from src.domain.models import VehicleClass, VehicleMode, VehicleRecord

DEFAULT_COLOR = "#6B7280"

AGENCY_COLORS: dict[str, str] = {
    "40": "#002E6D",  # Sound Transit
    "1": "#EB6209",  # King County Metro
    "3": "#036CB6",  # Pierce Transit
    "29": "#3357A7",  # Community Transit
    "23": "#F37320",  # Kitsap Transit
    "19": "#A81E21",  # Everett Transit
    "95": "#0C7960",  # Washington State Ferries
    "51": "#002E6D",  # Sound Transit Express
    "96": "#298240",  # Link Light Rail
    "97": "#F18A20",  # Tacoma Link
    "20": "#961A2F",  # RapidRide
    "33": "#9BB6D4",  # Sounder
}

MODE_LABELS: dict[VehicleMode, str] = {
    VehicleMode.LIGHT_RAIL: "Light Rail",
    VehicleMode.FERRY: "Ferry",
    VehicleMode.MONORAIL: "Monorail",
    VehicleMode.TRAIN: "Train",
    VehicleMode.BUS: "Bus",
    VehicleMode.UNKNOWN: "Unknown Vehicle",
}

MODE_SYMBOLS: dict[VehicleMode, str] = {
    VehicleMode.LIGHT_RAIL: "L",
    VehicleMode.FERRY: "F",
    VehicleMode.MONORAIL: "M",
    VehicleMode.TRAIN: "T",
    VehicleMode.BUS: "B",
    VehicleMode.UNKNOWN: "",
}

Rule = Callable[[str, str | None], bool]

# Evaluated in order, first match wins. Append new rules; never insert.
RULES: tuple[tuple[Rule, VehicleMode], ...] = (
    (lambda vid, aid: "LLR" in vid, VehicleMode.LIGHT_RAIL),
    (lambda vid, aid: aid == "95", VehicleMode.FERRY),
    (lambda vid, aid: aid == "96", VehicleMode.MONORAIL),
    (lambda vid, aid: aid == "51", VehicleMode.TRAIN),
    (lambda vid, aid: "KPOB" in vid, VehicleMode.BUS),
)


def vehicle_agency_id(vehicle: VehicleRecord) -> str | None:
    if vehicle.agency_id:
        return vehicle.agency_id
    if vehicle.agency is not None:
        return vehicle.agency.id
    return None


def agency_color(agency_id: str | None) -> str:
    if agency_id is None:
        return DEFAULT_COLOR
    return AGENCY_COLORS.get(agency_id, DEFAULT_COLOR)


def vehicle_mode(vehicle_id: str, agency_id: str | None) -> VehicleMode:
    for predicate, mode in RULES:
        if predicate(vehicle_id, agency_id):
            return mode
    return VehicleMode.UNKNOWN


def classify(vehicle: VehicleRecord) -> VehicleClass:
    """Map a vehicle to its display mode and operator color."""

    agency_id = vehicle_agency_id(vehicle)
    return VehicleClass(
        mode=vehicle_mode(vehicle.vehicle_id, agency_id),
        color=agency_color(agency_id),
    )

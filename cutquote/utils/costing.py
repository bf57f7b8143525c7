# costing.py
# Per-unit price from a measurement: price = length * rate_cut + area * rate_material.
# Rates come from rates.csv (material,rate_cut,rate_material); built-in defaults cover a missing file.

import csv
import logging
import os

# $ per inch of cut, $ per square inch of bounding-box stock
DEFAULT_RATES = {
    "acrylic": {"rate_cut": 0.05, "rate_material": 0.04},
    "plastics": {"rate_cut": 0.06, "rate_material": 0.03},
    "wood": {"rate_cut": 0.04, "rate_material": 0.02},
    "composites": {"rate_cut": 0.08, "rate_material": 0.06},
    "veneer": {"rate_cut": 0.03, "rate_material": 0.05},
}


def load_rates(file_path=None):
    """Load the material rate table from CSV, falling back to DEFAULT_RATES."""
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
    search_paths = [
        os.path.join(project_root, "rates.csv"),
        os.path.join(project_root, "cutquote", "rates.csv"),
    ]
    if file_path:
        search_paths.insert(0, file_path)
    for path in search_paths:
        if not os.path.exists(path):
            continue
        try:
            with open(path, "r", encoding='utf-8', newline='') as f:
                reader = csv.DictReader(f)
                required = {"material", "rate_cut", "rate_material"}
                if not reader.fieldnames or not required.issubset(reader.fieldnames):
                    logging.error(f"rates.csv found at {path} but missing required columns {sorted(required)}")
                    break
                rates = {}
                for row in reader:
                    material = (row["material"] or "").strip().lower()
                    if not material:
                        continue
                    try:
                        rates[material] = {"rate_cut": float(row["rate_cut"]),
                                           "rate_material": float(row["rate_material"])}
                    except (TypeError, ValueError):
                        logging.warning(f"Skipping invalid rates.csv row for {material}: {row}")
            if not rates:
                logging.error(f"rates.csv at {path} has no usable rows")
                break
            logging.info(f"rates.csv loaded from {path}: {sorted(rates)}")
            return rates
        except OSError as e:
            logging.error(f"Failed to load rates.csv from {path}: {e}")
            break
    logging.warning("Using built-in default rates")
    return {material: dict(values) for material, values in DEFAULT_RATES.items()}


def get_rates(material, rates):
    """Return (rate_cut, rate_material) for a material."""
    key = (material or "").strip().lower()
    if key not in rates:
        raise ValueError(f"Material {material} not found in rate table. Allowed: {sorted(rates)}")
    return rates[key]["rate_cut"], rates[key]["rate_material"]


def calculate_price(result, rate_cut, rate_material, quantity=1):
    """Price one MeasurementResult; the unit price is multiplied by quantity for the total."""
    if rate_cut < 0 or rate_material < 0:
        raise ValueError(f"Rates must be non-negative: rate_cut={rate_cut}, rate_material={rate_material}")
    if quantity < 1:
        raise ValueError(f"Quantity must be at least 1, got {quantity}")
    cut_cost = result.path_length_inches * rate_cut
    material_cost = result.area_square_inches * rate_material
    unit_price = cut_cost + material_cost
    breakdown = {
        "cut_cost": cut_cost,
        "material_cost": material_cost,
        "unit_price": unit_price,
        "quantity": quantity,
        "total_price": unit_price * quantity,
    }
    logging.info(f"calculate_price returning: {breakdown}")
    return breakdown

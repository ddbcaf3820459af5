"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_LATE_THRESHOLD = time(9, 15)
DEFAULT_SESSION_DAYS = 7
DEFAULT_LIST_LIMIT = 500

# Yearly leave quotas for a permanent employee (days).
FULL_LEAVE_QUOTAS = {
    "annual": 14,
    "sick": 7,
    "casual": 6,
    "maternity": 90,
    "paternity": 7,
    "alternate_day_off": 50,
    "others": 0,
}
# Quotas granted in full regardless of joining month.
NON_PRORATED_LEAVE_KEYS = frozenset({"maternity", "paternity", "others"})

LOW_STOCK_THRESHOLD = 5
PAYROLL_DAYS_PER_MONTH = 30

STORE_DEPARTMENT = "Store"
KITCHEN_TYPE = "Kitchen"
KITCHEN_EQUIPMENT_KEYWORDS = (
    "Oven", "Mixer", "Fridge", "Chiller", "Blender", "Stove", "Microwave",
    "Equipment", "Tool", "Table", "Station", "Range", "Grinder", "Dishwasher",
)
KITCHEN_EQUIPMENT_SUBCATEGORIES = ("Equipment", "Furniture", "Tools")

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple

from ..common.quantities import ZERO
from ..core.constants import KITCHEN_EQUIPMENT_KEYWORDS, KITCHEN_EQUIPMENT_SUBCATEGORIES, KITCHEN_TYPE
from ..core.enums import AssetStatus, MRFStatus, TonerStatus

SPEC_KEYS = ("cpu", "ram", "storage", "gpu", "lcd")


@dataclass(frozen=True)
class InventoryItem:
    id: int
    type: str
    model: str
    status: AssetStatus = AssetStatus.IN_STOCK
    assigned_to: str = ""
    item_code: Optional[str] = None
    item_name: Optional[str] = None
    sub_category: Optional[str] = None
    brand: Optional[str] = None
    serial_number: Optional[str] = None
    location: Optional[str] = None
    condition: Optional[str] = None
    quantity: Decimal = ZERO
    unit: Optional[str] = None
    purchase_date: Optional[date] = None
    cost: Optional[Decimal] = None
    vendor: Optional[str] = None
    issue_date: Optional[date] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    specs: Dict[str, str] = field(default_factory=dict)
    remarks: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.item_name or self.model

    @property
    def is_kitchen(self) -> bool:
        return self.type == KITCHEN_TYPE

    @property
    def is_kitchen_equipment(self) -> bool:
        """Kitchen items that are fixed assets rather than consumable stock."""
        if not self.is_kitchen:
            return False
        if self.sub_category in KITCHEN_EQUIPMENT_SUBCATEGORIES:
            return True
        text = f"{self.model} {self.item_name or ''}".lower()
        return any(k.lower() in text for k in KITCHEN_EQUIPMENT_KEYWORDS)


@dataclass(frozen=True)
class AssetGroup:
    """Assets gathered under one employee, asset type or department."""

    name: str
    items: Tuple[InventoryItem, ...]
    department: str = ""
    designation: str = ""


@dataclass(frozen=True)
class Toner:
    id: int
    model: str
    compatible_printers: Tuple[str, ...]
    quantity: int
    status: TonerStatus


@dataclass(frozen=True)
class TonerSlot:
    id: Optional[int]
    quantity: int


@dataclass(frozen=True)
class GroupedToner:
    model: str
    compatible_printers: Tuple[str, ...]
    filled: TonerSlot
    empty: TonerSlot


@dataclass(frozen=True)
class LabSystem:
    id: int
    lab_id: int
    serial_number: str
    system_model: str = ""
    lcd_model: str = ""
    lcd_inches: str = ""
    cpu: str = ""
    ram: str = ""
    storage: str = ""
    gpu: str = ""
    keyboard: str = ""
    mouse: str = ""
    network_device: str = ""


@dataclass(frozen=True)
class Lab:
    id: int
    name: str
    systems: Tuple[LabSystem, ...] = ()


@dataclass(frozen=True)
class MRF:
    id: int
    mrf_number: str
    demand_number: str
    description: str
    date: date
    status: MRFStatus = MRFStatus.PENDING


@dataclass(frozen=True)
class Ingredient:
    name: str
    quantity: Decimal  # per serving
    unit: str


@dataclass(frozen=True)
class Recipe:
    id: int
    name: str
    ingredients: Tuple[Ingredient, ...] = ()


@dataclass(frozen=True)
class IngredientCheck:
    name: str
    required: Decimal
    unit: str
    available: Decimal
    inventory_id: Optional[int]

    @property
    def sufficient(self) -> bool:
        return self.inventory_id is not None and self.available >= self.required

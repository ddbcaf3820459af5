from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Sequence, Union

from ..common.quantities import to_money, to_quantity
from ..common.validators import require_non_empty, require_positive
from ..core.constants import KITCHEN_TYPE, LOW_STOCK_THRESHOLD
from ..core.enums import AssetReportKind, AssetStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..supply_chain.model import RequestItem
from .model import SPEC_KEYS, AssetGroup, Ingredient, IngredientCheck, InventoryItem, Recipe
from .repository import InventoryRepository, RecipeRepository

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


def _match_key(name: str) -> str:
    return (name or "").strip().lower()


class InventoryService:
    """Use case: assets, kitchen stock and recipes."""

    def __init__(
        self,
        items: InventoryRepository,
        recipes: RecipeRepository,
        employees: EmployeeRepository,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._items = items
        self._recipes = recipes
        self._employees = employees
        self._today = today

    # -------- assets --------
    def _get(self, item_id: int) -> InventoryItem:
        item = self._items.get(int(item_id))
        if not item:
            raise NotFoundError("Inventory item not found")
        return item

    @staticmethod
    def _coerce(raw: Union[InventoryItem, dict]) -> InventoryItem:
        if isinstance(raw, InventoryItem):
            item = raw
        else:
            specs = raw.get("specs") or {}
            item = InventoryItem(
                id=int(raw.get("id") or 0),
                type=str(raw.get("type") or "").strip(),
                model=str(raw.get("model") or "").strip(),
                status=AssetStatus(raw.get("status") or AssetStatus.IN_STOCK.value),
                assigned_to=str(raw.get("assigned_to") or ""),
                item_code=raw.get("item_code"),
                item_name=raw.get("item_name"),
                sub_category=raw.get("sub_category"),
                brand=raw.get("brand"),
                serial_number=raw.get("serial_number"),
                location=raw.get("location"),
                condition=raw.get("condition"),
                quantity=raw.get("quantity"),
                unit=raw.get("unit"),
                purchase_date=raw.get("purchase_date"),
                cost=raw.get("cost"),
                vendor=raw.get("vendor"),
                department=raw.get("department"),
                designation=raw.get("designation"),
                specs={k: str(specs[k]) for k in SPEC_KEYS if specs.get(k)},
                remarks=raw.get("remarks"),
            )
        require_non_empty(item.type, "Category")
        require_non_empty(item.model, "Model")
        quantity = to_quantity(item.quantity)
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        cost = to_money(item.cost, "Cost") if item.cost not in (None, "") else None
        return replace(item, quantity=quantity, cost=cost)

    def list_items(self, *, item_type: Optional[str] = None, status: Optional[AssetStatus] = None) -> list[InventoryItem]:
        rows = self._items.list(item_type=item_type)
        if status is not None:
            rows = [r for r in rows if r.status == status]
        return list(rows)

    def add_assets(self, assets: Sequence[Union[InventoryItem, dict]]) -> list[int]:
        if not assets:
            raise ValidationError("Nothing to add")
        items = [self._coerce(a) for a in assets]
        ids = self._items.create_many(items)
        logger.info("Added %d inventory items", len(ids))
        return ids

    def update_asset(self, asset: Union[InventoryItem, dict]) -> None:
        item = self._coerce(asset)
        self._get(item.id)
        if not self._items.update(item):
            raise ValidationError("Failed to update inventory item")

    def delete_asset(self, item_id: int) -> None:
        if not self._items.delete(int(item_id)):
            raise NotFoundError("Inventory item not found")

    def issue_asset(self, *, item_id: int, employee_name: str, issue_date: Optional[date] = None) -> InventoryItem:
        item = self._get(item_id)
        wanted = _match_key(employee_name)
        employee = next((e for e in self._employees.list_all() if e.full_name.lower() == wanted), None)
        if employee is None:
            raise ValidationError(f"Employee '{employee_name}' not found")

        updated = replace(
            item,
            status=AssetStatus.IN_USE,
            assigned_to=employee.full_name,
            department=employee.department,
            designation=employee.designation,
            issue_date=issue_date or self._today(),
        )
        self._items.update(updated)
        logger.info("Asset %s issued to %s", item.item_code or item.id, employee.full_name)
        return updated

    def return_asset(self, item_id: int) -> InventoryItem:
        item = self._get(item_id)
        updated = replace(item, status=AssetStatus.IN_STOCK, assigned_to="", issue_date=None)
        self._items.update(updated)
        logger.info("Asset %s returned to stock", item.item_code or item.id)
        return updated

    # -------- reports --------
    def _assets(self) -> list[InventoryItem]:
        return [i for i in self._items.list() if not i.is_kitchen or i.is_kitchen_equipment]

    def asset_report(self, kind: Union[AssetReportKind, str]) -> list[AssetGroup]:
        """Assets grouped per employee, per type or per department.

        Kitchen consumables are stock, not assets, and are left out.
        """
        try:
            kind = AssetReportKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown report type '{kind}'") from None

        groups: dict[str, list[InventoryItem]] = {}
        assets = self._assets()
        if kind == AssetReportKind.USER:
            assets = [i for i in assets if i.assigned_to]
        for item in assets:
            if kind == AssetReportKind.USER:
                key = item.assigned_to
            elif kind == AssetReportKind.EQUIPMENT:
                key = item.type
            else:
                key = item.department or UNASSIGNED
            groups.setdefault(key, []).append(item)

        if kind == AssetReportKind.DEPARTMENT:
            names = sorted(groups, key=lambda n: (n == UNASSIGNED, n.lower()))
        else:
            names = sorted(groups, key=str.lower)

        if kind != AssetReportKind.USER:
            return [AssetGroup(name=n, items=tuple(groups[n])) for n in names]

        people = {e.full_name: e for e in self._employees.list_all()}
        out = []
        for name in names:
            items = groups[name]
            emp = people.get(name)
            out.append(
                AssetGroup(
                    name=name,
                    items=tuple(items),
                    department=(emp.department if emp else "") or items[0].department or "-",
                    designation=(emp.designation if emp else "") or items[0].designation or "-",
                )
            )
        return out

    # -------- kitchen --------
    def kitchen_split(self) -> tuple[list[InventoryItem], list[InventoryItem]]:
        """(consumables, fixed assets) of the kitchen."""
        kitchen = self._items.list(item_type=KITCHEN_TYPE)
        consumables = [i for i in kitchen if not i.is_kitchen_equipment]
        fixed = [i for i in kitchen if i.is_kitchen_equipment]
        return consumables, fixed

    def low_stock_count(self) -> int:
        consumables, _ = self.kitchen_split()
        return sum(1 for i in consumables if i.quantity <= LOW_STOCK_THRESHOLD)

    def _kitchen_by_name(self) -> dict[str, InventoryItem]:
        consumables, _ = self.kitchen_split()
        return {_match_key(i.model): i for i in consumables}

    def _get_recipe(self, recipe_id: int) -> Recipe:
        recipe = self._recipes.get(int(recipe_id))
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    def check_recipe(self, *, recipe_id: int, servings: int) -> list[IngredientCheck]:
        if int(servings) <= 0:
            raise ValidationError("Number of servings must be greater than zero")
        recipe = self._get_recipe(recipe_id)
        stock = self._kitchen_by_name()
        checks = []
        for ing in recipe.ingredients:
            item = stock.get(_match_key(ing.name))
            checks.append(
                IngredientCheck(
                    name=ing.name,
                    required=to_quantity(ing.quantity * int(servings)),
                    unit=ing.unit,
                    available=item.quantity if item else Decimal("0"),
                    inventory_id=item.id if item else None,
                )
            )
        return checks

    def use_materials(self, *, recipe_id: int, servings: int) -> list[IngredientCheck]:
        checks = self.check_recipe(recipe_id=recipe_id, servings=servings)
        short = [c.name for c in checks if not c.sufficient]
        if short:
            raise ValidationError(f"Insufficient stock for: {', '.join(short)}")

        deltas: dict[int, Decimal] = {}
        for c in checks:
            deltas[c.inventory_id] = deltas.get(c.inventory_id, Decimal("0")) - c.required
        if not self._items.apply_deltas(deltas):
            raise ValidationError("Stock changed while using materials, please retry")
        logger.info("Used materials for %d servings of recipe %s", servings, recipe_id)
        return checks

    def recipe_cart(self, *, recipe_id: int, portions: int) -> tuple[list[RequestItem], list[str]]:
        """Requisition lines for a dish; also returns ingredients with no stock record."""
        if int(portions) <= 0:
            raise ValidationError("Number of portions must be greater than zero")
        recipe = self._get_recipe(recipe_id)
        stock = self._kitchen_by_name()
        cart: list[RequestItem] = []
        missing: list[str] = []
        for ing in recipe.ingredients:
            item = stock.get(_match_key(ing.name))
            if item is None:
                missing.append(ing.name)
                continue
            cart.append(
                RequestItem(
                    inventory_id=item.id,
                    name=item.model,
                    quantity_requested=to_quantity(ing.quantity * int(portions)),
                    unit=item.unit or "units",
                )
            )
        return cart, missing

    # -------- recipes --------
    def list_recipes(self) -> Sequence[Recipe]:
        return self._recipes.list_all()

    def add_recipe(self, *, name: str, ingredients: Sequence[dict]) -> int:
        name = require_non_empty(name, "Recipe name")
        if not ingredients:
            raise ValidationError("A recipe needs at least one ingredient")
        parsed = []
        for raw in ingredients:
            ing_name = require_non_empty(str(raw.get("name") or ""), "Ingredient name")
            qty = require_positive(to_quantity(raw.get("quantity"), ing_name), f"Quantity for {ing_name}")
            parsed.append(Ingredient(name=ing_name, quantity=qty, unit=str(raw.get("unit") or "units")))
        return self._recipes.create(Recipe(id=0, name=name, ingredients=tuple(parsed)))

    def delete_recipe(self, recipe_id: int) -> None:
        if not self._recipes.delete(int(recipe_id)):
            raise NotFoundError("Recipe not found")

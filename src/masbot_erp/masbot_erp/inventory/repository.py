from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import MRFStatus, TonerStatus
from .model import MRF, InventoryItem, Lab, LabSystem, Recipe, Toner


class InventoryRepository(Protocol):
    def get(self, item_id: int) -> Optional[InventoryItem]:
        raise NotImplementedError

    def get_many(self, item_ids: Sequence[int]) -> dict[int, InventoryItem]:
        raise NotImplementedError

    def list(self, *, item_type: Optional[str] = None) -> Sequence[InventoryItem]:
        raise NotImplementedError

    def create_many(self, items: Sequence[InventoryItem]) -> list[int]:
        """Insert all items in one transaction; the `id` field is ignored."""
        raise NotImplementedError

    def update(self, item: InventoryItem) -> bool:
        raise NotImplementedError

    def delete(self, item_id: int) -> bool:
        raise NotImplementedError

    def apply_deltas(self, deltas: dict[int, Decimal]) -> bool:
        """Add signed deltas to quantities atomically.

        Returns False (and changes nothing) when any row would go negative.
        """
        raise NotImplementedError


class TonerRepository(Protocol):
    def list_all(self) -> Sequence[Toner]:
        raise NotImplementedError

    def create(self, *, model: str, compatible_printers: Sequence[str], quantity: int, status: TonerStatus) -> int:
        raise NotImplementedError

    def set_quantity(self, toner_id: int, quantity: int) -> bool:
        raise NotImplementedError

    def set_printers(self, model: str, compatible_printers: Sequence[str]) -> None:
        raise NotImplementedError

    def move_unit(self, *, from_id: int, to_id: Optional[int], model: str, to_status: TonerStatus) -> bool:
        """Move one unit between the Filled/Empty records of a model.

        Creates the target record when `to_id` is None. Returns False when the
        source has nothing left.
        """
        raise NotImplementedError

    def delete_model(self, model: str) -> int:
        raise NotImplementedError


class LabRepository(Protocol):
    def list_all(self) -> Sequence[Lab]:
        raise NotImplementedError

    def get(self, lab_id: int) -> Optional[Lab]:
        raise NotImplementedError

    def create_lab(self, name: str) -> int:
        raise NotImplementedError

    def add_system(self, system: LabSystem) -> int:
        raise NotImplementedError

    def update_system(self, system: LabSystem) -> bool:
        raise NotImplementedError

    def delete_system(self, *, lab_id: int, system_id: int) -> bool:
        raise NotImplementedError


class MRFRepository(Protocol):
    def list_all(self) -> Sequence[MRF]:
        raise NotImplementedError

    def create(self, mrf: MRF) -> int:
        raise NotImplementedError

    def update(self, mrf: MRF) -> bool:
        raise NotImplementedError

    def delete(self, mrf_id: int) -> bool:
        raise NotImplementedError

    def set_status(self, mrf_id: int, status: MRFStatus) -> bool:
        raise NotImplementedError


class RecipeRepository(Protocol):
    def list_all(self) -> Sequence[Recipe]:
        raise NotImplementedError

    def get(self, recipe_id: int) -> Optional[Recipe]:
        raise NotImplementedError

    def create(self, recipe: Recipe) -> int:
        raise NotImplementedError

    def delete(self, recipe_id: int) -> bool:
        raise NotImplementedError

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import MRFStatus, TonerStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import MRF, GroupedToner, Lab, LabSystem, TonerSlot
from .repository import LabRepository, MRFRepository, TonerRepository

logger = logging.getLogger(__name__)


def _merge_printers(a: Sequence[str], b: Sequence[str]) -> tuple[str, ...]:
    out = list(a)
    for p in b:
        if p not in out:
            out.append(p)
    return tuple(out)


class TonerService:
    def __init__(self, toners: TonerRepository):
        self._toners = toners

    def grouped(self) -> list[GroupedToner]:
        groups: dict[str, GroupedToner] = {}
        for t in self._toners.list_all():
            g = groups.get(t.model) or GroupedToner(
                model=t.model,
                compatible_printers=(),
                filled=TonerSlot(id=None, quantity=0),
                empty=TonerSlot(id=None, quantity=0),
            )
            slot = TonerSlot(id=t.id, quantity=t.quantity)
            printers = _merge_printers(g.compatible_printers, t.compatible_printers)
            if t.status == TonerStatus.FILLED:
                g = replace(g, filled=slot, compatible_printers=printers)
            else:
                g = replace(g, empty=slot, compatible_printers=printers)
            groups[t.model] = g
        return sorted(groups.values(), key=lambda g: g.model.lower())

    def _group(self, model: str) -> Optional[GroupedToner]:
        return next((g for g in self.grouped() if g.model == model), None)

    def save_model(self, *, model: str, compatible_printers: Sequence[str], filled: int, empty: int) -> None:
        model = require_non_empty(model, "Toner model")
        if int(filled) < 0 or int(empty) < 0:
            raise ValidationError("Quantities cannot be negative")
        printers = [p.strip() for p in compatible_printers if p and p.strip()]

        group = self._group(model)
        for status, qty in ((TonerStatus.FILLED, int(filled)), (TonerStatus.EMPTY, int(empty))):
            slot = None
            if group is not None:
                slot = group.filled if status == TonerStatus.FILLED else group.empty
            if slot is not None and slot.id is not None:
                self._toners.set_quantity(slot.id, qty)
            elif qty > 0:
                self._toners.create(model=model, compatible_printers=printers, quantity=qty, status=status)
        if group is not None:
            self._toners.set_printers(model, printers)
        logger.info("Saved toner model %s (filled=%s, empty=%s)", model, filled, empty)

    def _move(self, model: str, to_status: TonerStatus) -> None:
        group = self._group(model)
        if group is None:
            raise NotFoundError("Toner model not found")
        source, target = (group.filled, group.empty) if to_status == TonerStatus.EMPTY else (group.empty, group.filled)
        if source.id is None or source.quantity <= 0:
            raise ValidationError(f"No {'filled' if to_status == TonerStatus.EMPTY else 'empty'} toner left for {model}")
        if not self._toners.move_unit(from_id=source.id, to_id=target.id, model=model, to_status=to_status):
            raise ValidationError("Toner stock changed, please retry")

    def mark_empty(self, model: str) -> None:
        self._move(model, TonerStatus.EMPTY)

    def mark_filled(self, model: str) -> None:
        self._move(model, TonerStatus.FILLED)

    def delete_model(self, model: str) -> None:
        if self._toners.delete_model(model) == 0:
            raise NotFoundError("Toner model not found")


class LabService:
    def __init__(self, labs: LabRepository):
        self._labs = labs

    def list_labs(self) -> Sequence[Lab]:
        return self._labs.list_all()

    def get_lab(self, lab_id: int) -> Lab:
        lab = self._labs.get(int(lab_id))
        if not lab:
            raise NotFoundError("Lab not found")
        return lab

    def add_lab(self, name: str) -> int:
        return self._labs.create_lab(require_non_empty(name, "Lab name"))

    def add_system(self, system: LabSystem) -> int:
        self.get_lab(system.lab_id)
        require_non_empty(system.serial_number, "Serial number")
        return self._labs.add_system(system)

    def update_system(self, system: LabSystem) -> None:
        require_non_empty(system.serial_number, "Serial number")
        if not self._labs.update_system(system):
            raise NotFoundError("System not found")

    def delete_system(self, *, lab_id: int, system_id: int) -> None:
        if not self._labs.delete_system(lab_id=int(lab_id), system_id=int(system_id)):
            raise NotFoundError("System not found")


class MRFService:
    def __init__(self, mrfs: MRFRepository):
        self._mrfs = mrfs

    def list_mrfs(self) -> Sequence[MRF]:
        return sorted(self._mrfs.list_all(), key=lambda m: m.date, reverse=True)

    def _validate(self, mrf: MRF) -> MRF:
        return replace(
            mrf,
            mrf_number=require_non_empty(mrf.mrf_number, "MRF number"),
            demand_number=require_non_empty(mrf.demand_number, "Demand number"),
            description=require_non_empty(mrf.description, "Description"),
            date=mrf.date or date.today(),
        )

    def add_mrf(self, mrf: MRF) -> int:
        return self._mrfs.create(self._validate(mrf))

    def update_mrf(self, mrf: MRF) -> None:
        if not self._mrfs.update(self._validate(mrf)):
            raise NotFoundError("MRF not found")

    def delete_mrf(self, mrf_id: int) -> None:
        if not self._mrfs.delete(int(mrf_id)):
            raise NotFoundError("MRF not found")

    def proceed(self, mrf_id: int) -> None:
        if not self._mrfs.set_status(int(mrf_id), MRFStatus.PROCEED):
            raise NotFoundError("MRF not found")

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.masbot_erp.masbot_erp.core.enums import MRFStatus, TonerStatus
from src.masbot_erp.masbot_erp.core.exceptions import NotFoundError, ValidationError
from src.masbot_erp.masbot_erp.inventory.equipment_service import LabService, MRFService, TonerService
from src.masbot_erp.masbot_erp.inventory.lab_export import lab_csv_filename, lab_inventory_csv
from src.masbot_erp.masbot_erp.inventory.model import MRF, Lab, LabSystem, Toner


class FakeToners:
    def __init__(self):
        self.rows: dict[int, Toner] = {}

    def list_all(self):
        return list(self.rows.values())

    def create(self, *, model, compatible_printers, quantity, status):
        new_id = max(self.rows, default=0) + 1
        self.rows[new_id] = Toner(id=new_id, model=model, compatible_printers=tuple(compatible_printers),
                                  quantity=quantity, status=status)
        return new_id

    def set_quantity(self, toner_id, quantity):
        self.rows[toner_id] = replace(self.rows[toner_id], quantity=quantity)
        return True

    def set_printers(self, model, compatible_printers):
        for tid, t in list(self.rows.items()):
            if t.model == model:
                self.rows[tid] = replace(t, compatible_printers=tuple(compatible_printers))

    def move_unit(self, *, from_id, to_id, model, to_status):
        source = self.rows[from_id]
        if source.quantity <= 0:
            return False
        self.rows[from_id] = replace(source, quantity=source.quantity - 1)
        if to_id is None:
            self.create(model=model, compatible_printers=source.compatible_printers, quantity=1, status=to_status)
        else:
            self.rows[to_id] = replace(self.rows[to_id], quantity=self.rows[to_id].quantity + 1)
        return True

    def delete_model(self, model):
        doomed = [tid for tid, t in self.rows.items() if t.model == model]
        for tid in doomed:
            del self.rows[tid]
        return len(doomed)


class FakeLabs:
    def __init__(self):
        self.labs: dict[int, Lab] = {}

    def list_all(self):
        return list(self.labs.values())

    def get(self, lab_id):
        return self.labs.get(int(lab_id))

    def create_lab(self, name):
        new_id = len(self.labs) + 1
        self.labs[new_id] = Lab(id=new_id, name=name)
        return new_id

    def add_system(self, system):
        lab = self.labs[system.lab_id]
        new_id = sum(len(other.systems) for other in self.labs.values()) + 1
        self.labs[lab.id] = replace(lab, systems=lab.systems + (replace(system, id=new_id),))
        return new_id

    def update_system(self, system):
        return False

    def delete_system(self, *, lab_id, system_id):
        lab = self.labs.get(lab_id)
        if not lab or not any(s.id == system_id for s in lab.systems):
            return False
        self.labs[lab_id] = replace(lab, systems=tuple(s for s in lab.systems if s.id != system_id))
        return True


class FakeMRFs:
    def __init__(self):
        self.rows: dict[int, MRF] = {}

    def list_all(self):
        return list(self.rows.values())

    def create(self, mrf):
        new_id = len(self.rows) + 1
        self.rows[new_id] = replace(mrf, id=new_id)
        return new_id

    def update(self, mrf):
        if mrf.id not in self.rows:
            return False
        self.rows[mrf.id] = mrf
        return True

    def delete(self, mrf_id):
        return self.rows.pop(mrf_id, None) is not None

    def set_status(self, mrf_id, status):
        if mrf_id not in self.rows:
            return False
        self.rows[mrf_id] = replace(self.rows[mrf_id], status=status)
        return True


@pytest.fixture
def toners():
    return FakeToners()


@pytest.fixture
def toner_service(toners):
    return TonerService(toners)


def test_save_model_creates_filled_and_empty_records(toner_service):
    toner_service.save_model(model="HP 85A", compatible_printers=["P1102", " ", "M1132"], filled=3, empty=1)

    group = toner_service.grouped()[0]
    assert group.model == "HP 85A"
    assert group.compatible_printers == ("P1102", "M1132")
    assert (group.filled.quantity, group.empty.quantity) == (3, 1)


def test_mark_empty_moves_one_unit(toner_service):
    toner_service.save_model(model="HP 85A", compatible_printers=["P1102"], filled=2, empty=0)

    toner_service.mark_empty("HP 85A")

    group = toner_service.grouped()[0]
    assert (group.filled.quantity, group.empty.quantity) == (1, 1)

    toner_service.mark_filled("HP 85A")
    group = toner_service.grouped()[0]
    assert (group.filled.quantity, group.empty.quantity) == (2, 0)


def test_mark_empty_with_nothing_filled(toner_service):
    toner_service.save_model(model="Canon 303", compatible_printers=[], filled=0, empty=2)

    with pytest.raises(ValidationError):
        toner_service.mark_empty("Canon 303")
    with pytest.raises(NotFoundError):
        toner_service.mark_empty("Unknown")


def test_delete_toner_model(toner_service, toners):
    toner_service.save_model(model="HP 85A", compatible_printers=[], filled=1, empty=1)

    toner_service.delete_model("HP 85A")

    assert toners.rows == {}
    with pytest.raises(NotFoundError):
        toner_service.delete_model("HP 85A")


def test_lab_systems_and_csv_export():
    labs = LabService(FakeLabs())
    lab_id = labs.add_lab("Computer Lab 1")
    labs.add_system(LabSystem(id=0, lab_id=lab_id, serial_number="SN-1", system_model="OptiPlex", cpu="i5", ram="8GB"))

    with pytest.raises(ValidationError):
        labs.add_system(LabSystem(id=0, lab_id=lab_id, serial_number=""))
    with pytest.raises(NotFoundError):
        labs.add_system(LabSystem(id=0, lab_id=99, serial_number="SN-2"))

    lab = labs.get_lab(lab_id)
    csv_text = lab_inventory_csv(lab)
    lines = csv_text.splitlines()
    assert lines[0].startswith('"ID","Serial Number","System Model"')
    assert lines[1] == '"1","SN-1","OptiPlex","","","i5","8GB","","","","",""'
    assert lab_csv_filename(lab) == "Computer_Lab_1_Inventory.csv"


def test_mrf_crud_and_proceed():
    mrfs = FakeMRFs()
    service = MRFService(mrfs)
    mrf_id = service.add_mrf(MRF(id=0, mrf_number="MRF-1", demand_number="D-9", description="Cables", date=date(2024, 3, 1)))

    service.proceed(mrf_id)
    assert mrfs.rows[mrf_id].status == MRFStatus.PROCEED

    with pytest.raises(ValidationError):
        service.add_mrf(MRF(id=0, mrf_number="", demand_number="D", description="x", date=date(2024, 3, 1)))
    with pytest.raises(NotFoundError):
        service.delete_mrf(42)


def test_grouping_merges_printers_across_records(toners, toner_service):
    toners.create(model="HP 12A", compatible_printers=["1010"], quantity=2, status=TonerStatus.FILLED)
    toners.create(model="HP 12A", compatible_printers=["1020"], quantity=1, status=TonerStatus.EMPTY)

    group = toner_service.grouped()[0]

    assert group.compatible_printers == ("1010", "1020")

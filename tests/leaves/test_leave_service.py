from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.masbot_erp.masbot_erp.core.enums import ApprovalAction, EmploymentType, LeaveStatus, LeaveType, Role
from src.masbot_erp.masbot_erp.core.exceptions import AuthorizationError, TransitionError, ValidationError
from src.masbot_erp.masbot_erp.employees.model import LeaveBalance, LeaveQuota
from src.masbot_erp.masbot_erp.leaves.model import LeaveRequest
from src.masbot_erp.masbot_erp.leaves.service import LeaveService


class FakeLeaveRepo:
    """Keeps requests in memory and charges balances on the shared employee fake."""

    def __init__(self, employees):
        self._employees = employees
        self._rows: dict[int, LeaveRequest] = {}

    def get(self, request_id: int):
        return self._rows.get(int(request_id))

    def create(self, *, employee_id, from_date, to_date, leave_type, reason) -> int:
        rid = len(self._rows) + 1
        self._rows[rid] = LeaveRequest(
            id=rid,
            employee_id=employee_id,
            from_date=from_date,
            to_date=to_date,
            leave_type=leave_type,
            reason=reason,
            status=LeaveStatus.PENDING_HOD,
        )
        return rid

    def list(self, *, employee_id=None, statuses=None):
        rows = list(self._rows.values())
        if employee_id is not None:
            rows = [r for r in rows if r.employee_id == employee_id]
        if statuses is not None:
            rows = [r for r in rows if r.status in statuses]
        return rows

    def list_between(self, *, start, end, status=None):
        return [
            r for r in self._rows.values()
            if r.from_date <= end and r.to_date >= start and (status is None or r.status == status)
        ]

    def decide(self, *, request_id, expected, new_status, decided_by, consume_days=0) -> bool:
        req = self._rows.get(int(request_id))
        if not req or req.status != expected:
            return False
        self._rows[req.id] = replace(req, status=new_status, decided_by=decided_by)
        if consume_days:
            emp = self._employees.get_by_id(req.employee_id)
            if req.leave_type != LeaveType.OTHERS and emp.leave_balance.get(req.leave_type).remaining < consume_days:
                self._rows[req.id] = req
                raise ValidationError("Insufficient balance")
            self._employees._by_id[emp.id] = replace(
                emp, leave_balance=emp.leave_balance.with_used(req.leave_type, consume_days)
            )
        return True


@pytest.fixture
def leaves(employee_repo):
    return FakeLeaveRepo(employee_repo)


@pytest.fixture
def service(leaves, employee_repo):
    return LeaveService(leaves, employee_repo)


@pytest.fixture
def hod(sample_employees, identity_for):
    return identity_for(sample_employees[1])


@pytest.fixture
def hr(sample_employees, identity_for):
    return identity_for(sample_employees[2])


def test_insufficient_balance_is_refused(service, employee_repo):
    emp = employee_repo.get_by_id(1)
    employee_repo._by_id[1] = replace(
        emp, leave_balance=LeaveBalance(quotas={"casual": LeaveQuota(total=6, used=5)})
    )

    with pytest.raises(ValidationError, match="Insufficient balance"):
        service.apply(
            employee_id=1,
            from_date=date(2022, 1, 10),
            to_date=date(2022, 1, 11),
            leave_type=LeaveType.CASUAL,
            reason="Family event",
        )


def test_exhausted_quota_message(service, employee_repo):
    emp = employee_repo.get_by_id(1)
    employee_repo._by_id[1] = replace(
        emp, leave_balance=LeaveBalance(quotas={"casual": LeaveQuota(total=6, used=6)})
    )

    with pytest.raises(ValidationError, match="exhausted"):
        service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 4),
                      leave_type=LeaveType.CASUAL, reason="x")


def test_apply_validations(service, employee_repo):
    with pytest.raises(ValidationError, match="required fields"):
        service.apply(employee_id=1, from_date=None, to_date=date(2024, 3, 4), leave_type=LeaveType.SICK, reason="x")
    with pytest.raises(ValidationError, match="cannot be earlier"):
        service.apply(employee_id=1, from_date=date(2024, 3, 5), to_date=date(2024, 3, 4),
                      leave_type=LeaveType.SICK, reason="x")

    emp = employee_repo.get_by_id(1)
    employee_repo._by_id[1] = replace(emp, employment_type=EmploymentType.PROBATION)
    with pytest.raises(ValidationError, match="probation"):
        service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 4),
                      leave_type=LeaveType.SICK, reason="x")


def test_others_type_skips_balance_check(service):
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 20),
                        leave_type=LeaveType.OTHERS, reason="Hajj")
    assert rid == 1


def test_hod_then_hr_approval_decrements_balance(service, employee_repo, hod, hr):
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 6),
                        leave_type=LeaveType.CASUAL, reason="Wedding")

    assert service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=hod) == LeaveStatus.PENDING_HR
    assert employee_repo.get_by_id(1).leave_balance.get(LeaveType.CASUAL).used == 0

    assert service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=hr) == LeaveStatus.APPROVED
    assert employee_repo.get_by_id(1).leave_balance.get(LeaveType.CASUAL).used == 3


def test_approved_days_never_exceed_quota(service, employee_repo, super_admin):
    for day in (4, 5, 6, 7, 8, 11):
        rid = service.apply(employee_id=1, from_date=date(2024, 3, day), to_date=date(2024, 3, day),
                            leave_type=LeaveType.CASUAL, reason="x")
        service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)
        service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)

    quota = employee_repo.get_by_id(1).leave_balance.get(LeaveType.CASUAL)
    assert quota.used == quota.total == 6
    with pytest.raises(ValidationError):
        service.apply(employee_id=1, from_date=date(2024, 3, 12), to_date=date(2024, 3, 12),
                      leave_type=LeaveType.CASUAL, reason="x")


def test_hod_of_other_department_cannot_act(service, employee_factory, identity_for):
    it_hod = employee_factory(20, "Bilal", "Shah", department="IT", role=Role.HOD)
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 4),
                        leave_type=LeaveType.SICK, reason="Flu")

    with pytest.raises(AuthorizationError):
        service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=identity_for(it_hod))


def test_hr_cannot_skip_hod_stage(service, hr):
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 4),
                        leave_type=LeaveType.SICK, reason="Flu")

    with pytest.raises(AuthorizationError):
        service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=hr)


def test_final_states_never_transition(service, hod, super_admin):
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 4),
                        leave_type=LeaveType.SICK, reason="Flu")
    assert service.act(request_id=rid, action=ApprovalAction.REJECT, actor=hod) == LeaveStatus.REJECTED

    for action in ApprovalAction:
        with pytest.raises(TransitionError):
            service.act(request_id=rid, action=action, actor=super_admin)


def test_actionable_for_filters_by_stage(service, hod, hr):
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 4),
                        leave_type=LeaveType.SICK, reason="Flu")

    assert [r.id for r in service.actionable_for(hod)] == [rid]
    assert service.actionable_for(hr) == []

    service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=hod)
    assert service.actionable_for(hod) == []
    assert [r.id for r in service.actionable_for(hr)] == [rid]


def test_second_pending_request_cannot_overdraw_balance(service, employee_repo, leaves, hod, hr):
    first = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 7),
                          leave_type=LeaveType.CASUAL, reason="Wedding")
    second = service.apply(employee_id=1, from_date=date(2024, 3, 11), to_date=date(2024, 3, 14),
                           leave_type=LeaveType.CASUAL, reason="Travel")

    for rid in (first, second):
        service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=hod)
    service.act(request_id=first, action=ApprovalAction.APPROVE, actor=hr)

    with pytest.raises(ValidationError, match="Insufficient balance"):
        service.act(request_id=second, action=ApprovalAction.APPROVE, actor=hr)

    quota = employee_repo.get_by_id(1).leave_balance.get(LeaveType.CASUAL)
    assert (quota.used, quota.total) == (4, 6)
    assert leaves.get(second).status == LeaveStatus.PENDING_HR
    assert service.act(request_id=second, action=ApprovalAction.REJECT, actor=hr) == LeaveStatus.REJECTED


def test_others_approval_is_not_capped(service, employee_repo, super_admin):
    rid = service.apply(employee_id=1, from_date=date(2024, 3, 4), to_date=date(2024, 3, 13),
                        leave_type=LeaveType.OTHERS, reason="Hajj")
    service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin)

    assert service.act(request_id=rid, action=ApprovalAction.APPROVE, actor=super_admin) == LeaveStatus.APPROVED
    assert employee_repo.get_by_id(1).leave_balance.get(LeaveType.OTHERS).used == 10

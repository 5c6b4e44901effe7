from typing import List, Optional

from app.core.exceptions import NotFoundError
from app.models.employee import Employee
from app.schemas.admin import EmployeeUpsert
from app.schemas.auth import SessionContext
from app.services.base import BaseService


class EmployeeDirectoryService(BaseService):
    """Employees and their teams, as known to the leave system."""

    def find(self, employee_id: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.employee_id == employee_id).first()

    def get(self, employee_id: str) -> Employee:
        employee = self.find(employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    def list_employees(self, team_id: Optional[str] = None, include_inactive: bool = False) -> List[Employee]:
        query = self.db.query(Employee)
        if team_id:
            query = query.filter(Employee.team_id == team_id)
        if not include_inactive:
            query = query.filter(Employee.is_active.is_(True))
        return query.order_by(Employee.display_name, Employee.employee_id).all()

    def upsert(self, employee_id: str, data: EmployeeUpsert) -> Employee:
        with self.transaction():
            employee = self.find(employee_id)
            if employee is None:
                employee = Employee(employee_id=employee_id)
                self.db.add(employee)
            for key, value in data.model_dump().items():
                setattr(employee, key, value)
        return employee

    def sync_from_session(self, ctx: SessionContext) -> Employee:
        """
        Keep the caller's directory entry in step with their token claims.
        Only fills what the token knows; region and active flag stay admin-managed.
        """
        employee = self.find(ctx.employee_id)
        if employee is not None and (
            employee.display_name == ctx.display_name
            and employee.email == ctx.email
            and employee.team_id == ctx.team_id
        ):
            return employee

        with self.transaction():
            if employee is None:
                employee = Employee(employee_id=ctx.employee_id, is_active=True)
                self.db.add(employee)
            employee.display_name = ctx.display_name
            employee.email = ctx.email
            employee.team_id = ctx.team_id
        return employee

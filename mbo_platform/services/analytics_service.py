from collections import OrderedDict
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from mbo_platform.core.config import settings
from mbo_platform.crud.assignment import assignment as assignment_crud
from mbo_platform.crud.catalog import indicator_cluster as cluster_crud
from mbo_platform.crud.user import user as user_crud
from mbo_platform.models.objective import AssignmentStatus, ObjectiveAssignment
from mbo_platform.models.user import User
from mbo_platform.services.aggregation import (
    effective_progress,
    overall_progress,
    payout_summary,
    total_weight,
)
from mbo_platform.services.scoring import round_half_up

UNASSIGNED_DEPARTMENT = "Unassigned"
TOP_EMPLOYEES = 10


def _department(user: User) -> str:
    return user.department or UNASSIGNED_DEPARTMENT


def _group_by_user(assignments: List[ObjectiveAssignment]) -> Dict[int, List[ObjectiveAssignment]]:
    grouped: Dict[int, List[ObjectiveAssignment]] = {}
    for assignment in assignments:
        grouped.setdefault(assignment.user_id, []).append(assignment)
    return grouped


class AnalyticsService:
    @staticmethod
    def user_stats(db: Session, user: User) -> Dict[str, Any]:
        assignments = assignment_crud.get_by_user(db, user.id)
        used_weight = total_weight(assignments)
        summary = payout_summary(assignments, user.mbo_target)
        return {
            "user_id": user.id,
            "total_objectives": len(assignments),
            "completed_objectives": sum(
                1 for a in assignments if a.status == AssignmentStatus.COMPLETED.value
            ),
            "overall_progress": overall_progress(assignments),
            "total_weight": used_weight,
            "available_weight": max(settings.MAX_TOTAL_WEIGHT - used_weight, 0),
            "mbo_target": summary["mbo_target"],
            "target_payout": summary["target_payout"],
            "projected_payout": summary["projected_payout"],
        }

    @staticmethod
    def overview(db: Session) -> Dict[str, Any]:
        assignments = assignment_crud.get_all(db)
        progresses = [effective_progress(a) for a in assignments]
        employees = user_crud.get_employees(db)
        total = len(progresses)
        return {
            "total_objectives": total,
            "completed_objectives": sum(1 for p in progresses if p >= 100),
            "in_progress_objectives": sum(1 for p in progresses if 0 < p < 100),
            "not_started_objectives": sum(1 for p in progresses if p <= 0),
            "average_completion": round_half_up(sum(progresses) / total) if total else 0,
            "total_employees": len(employees),
            "active_employees": sum(1 for u in employees if u.is_active),
        }

    @staticmethod
    def by_department(db: Session) -> List[Dict[str, Any]]:
        employees = {u.id: u for u in user_crud.get_employees(db)}
        departments: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for assignment in assignment_crud.get_all(db):
            employee = employees.get(assignment.user_id)
            if employee is None:
                continue
            name = _department(employee)
            data = departments.setdefault(
                name,
                {"name": name, "completed": 0, "in_progress": 0, "total": 0, "_completion": 0.0},
            )
            progress = effective_progress(assignment)
            data["total"] += 1
            data["_completion"] += progress
            if progress >= 100:
                data["completed"] += 1
            elif progress > 0:
                data["in_progress"] += 1

        result = []
        for data in departments.values():
            completion = data.pop("_completion")
            data["avg_completion"] = round_half_up(completion / data["total"]) if data["total"] else 0
            result.append(data)
        return result

    @staticmethod
    def by_cluster(db: Session) -> List[Dict[str, Any]]:
        counts: "OrderedDict[int, Dict[str, Any]]" = OrderedDict(
            (cluster.id, {"id": cluster.id, "name": cluster.name, "count": 0})
            for cluster in cluster_crud.get_all(db)
        )
        for assignment in assignment_crud.get_all(db):
            objective = assignment.objective
            if objective is not None and objective.cluster_id in counts:
                counts[objective.cluster_id]["count"] += 1
        return list(counts.values())

    @staticmethod
    def eligibles(db: Session) -> List[Dict[str, Any]]:
        departments: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for employee in user_crud.get_employees(db):
            name = _department(employee)
            data = departments.setdefault(name, {"name": name, "eligibles": 0, "total": 0})
            data["total"] += 1
            if (employee.mbo_percentage or 0) > 0:
                data["eligibles"] += 1
        return list(departments.values())

    @staticmethod
    def financial(db: Session) -> Dict[str, Any]:
        """Proyección económica del MBO por empleado, departamento y empresa.

        Solo cuentan los empleados con RAL. Los importes se redondean únicamente
        en esta salida.
        """
        assignments_by_user = _group_by_user(assignment_crud.get_all(db))
        theoretical_total = 0.0
        projected_total = 0.0
        employees = []
        departments: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

        for employee in user_crud.get_employees(db):
            if not employee.ral:
                continue
            assignments = assignments_by_user.get(employee.id, [])
            summary = payout_summary(assignments, employee.mbo_target)
            theoretical = summary["mbo_target"]
            projected = summary["projected_payout"]
            completion = overall_progress(assignments)

            theoretical_total += theoretical
            projected_total += projected
            employees.append(
                {
                    "user_id": employee.id,
                    "name": employee.full_name,
                    "department": _department(employee),
                    "ral": employee.ral,
                    "mbo_percentage": employee.mbo_percentage or 0,
                    "theoretical_mbo": theoretical,
                    "projected_mbo": projected,
                    "completion": completion,
                }
            )

            name = _department(employee)
            data = departments.setdefault(
                name, {"name": name, "theoretical": 0.0, "projected": 0.0, "count": 0, "completion": 0}
            )
            data["theoretical"] += theoretical
            data["projected"] += projected
            data["count"] += 1
            data["completion"] += completion

        savings = theoretical_total - projected_total
        top = sorted(employees, key=lambda e: e["theoretical_mbo"], reverse=True)[:TOP_EMPLOYEES]
        for entry in top:
            entry["theoretical_mbo"] = round_half_up(entry["theoretical_mbo"])
            entry["projected_mbo"] = round_half_up(entry["projected_mbo"])

        return {
            "theoretical_target_payout": round_half_up(theoretical_total),
            "projected_payout": round_half_up(projected_total),
            "savings": round_half_up(savings),
            "savings_percentage": round_half_up(savings / theoretical_total * 100) if theoretical_total else 0,
            "average_theoretical_mbo": round_half_up(theoretical_total / len(employees)) if employees else 0,
            "eligible_employees": len(employees),
            "employee_payouts": top,
            "department_payouts": [
                {
                    "name": data["name"],
                    "theoretical": round_half_up(data["theoretical"]),
                    "projected": round_half_up(data["projected"]),
                    "completion": round_half_up(data["completion"] / data["count"]) if data["count"] else 0,
                }
                for data in departments.values()
            ],
        }

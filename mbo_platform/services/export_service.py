import io
from typing import Any, Dict

from openpyxl import Workbook
from openpyxl.styles import Font


class ExportService:
    """Exporta el informe financiero MBO a Excel."""

    @staticmethod
    def export_financial_to_excel(report: Dict[str, Any]) -> bytes:
        wb = Workbook()
        bold = Font(bold=True)

        summary = wb.active
        summary.title = "Resumen"
        rows = [
            ("Concepto", "Valor"),
            ("MBO teórico total", report["theoretical_target_payout"]),
            ("MBO proyectado total", report["projected_payout"]),
            ("Ahorro", report["savings"]),
            ("Ahorro %", report["savings_percentage"]),
            ("MBO teórico medio", report["average_theoretical_mbo"]),
            ("Empleados elegibles", report["eligible_employees"]),
        ]
        for row in rows:
            summary.append(row)

        employees = wb.create_sheet("Empleados")
        employees.append(("Empleado", "Departamento", "RAL", "% MBO", "MBO teórico", "MBO proyectado", "Cumplimiento %"))
        for entry in report["employee_payouts"]:
            employees.append(
                (
                    entry["name"],
                    entry["department"],
                    entry["ral"],
                    entry["mbo_percentage"],
                    entry["theoretical_mbo"],
                    entry["projected_mbo"],
                    entry["completion"],
                )
            )

        departments = wb.create_sheet("Departamentos")
        departments.append(("Departamento", "MBO teórico", "MBO proyectado", "Cumplimiento %"))
        for entry in report["department_payouts"]:
            departments.append((entry["name"], entry["theoretical"], entry["projected"], entry["completion"]))

        for sheet in (summary, employees, departments):
            for cell in sheet[1]:
                cell.font = bold

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer.read()

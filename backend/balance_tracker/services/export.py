"""Batch result export."""
import csv
from io import BytesIO, StringIO
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from balance_tracker.models.batch import BatchSnapshot

HEADERS = ["Address", "Balance", "Percentage Change", "Status", "Error"]


def _rows(snapshot: BatchSnapshot):
    for result in snapshot.results:
        yield [
            result.address,
            result.balance or "",
            result.percentage_change or "N/A",
            result.status.value,
            result.error or ""
        ]


def generate_excel_export(snapshot: BatchSnapshot) -> BytesIO:
    """
    Generate an Excel workbook from a batch snapshot.
    
    One "Balances" sheet: a row per address in batch order, followed by the
    total under its label ("Total Balance" or "Balance So Far").
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Balances"
    ws.append(HEADERS)
    
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")
    
    for row in _rows(snapshot):
        ws.append(row)
    
    ws.append([])
    ws.append([snapshot.total_label, f"${snapshot.total:,}"])
    ws.cell(row=ws.max_row, column=1).font = Font(bold=True)
    
    # Auto-adjust column widths
    for column in ws.columns:
        column_letter = get_column_letter(column[0].column)
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)
    
    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output


def generate_csv_export(snapshot: BatchSnapshot) -> BytesIO:
    """CSV rendering of the same rows as the Excel export."""
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(HEADERS)
    writer.writerows(_rows(snapshot))
    writer.writerow([snapshot.total_label, f"${snapshot.total:,}"])
    return BytesIO(buffer.getvalue().encode("utf-8"))

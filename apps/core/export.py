"""Shared CSV and Excel export utilities."""
import csv
import io

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.styles import Font

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _resolve(obj, field):
    """
    Value of one export column for obj.

    field may be a callable, a related lookup ('church__name'), or a plain
    attribute; choice fields use their get_FOO_display().
    """
    if callable(field):
        return field(obj)

    if '__' in field:
        val = obj
        for part in field.split('__'):
            val = getattr(val, part, '') if val else ''
        return val

    display_method = f'get_{field}_display'
    if hasattr(obj, display_method):
        return getattr(obj, display_method)()
    return getattr(obj, field, '')


def _header_row(fields, headers):
    if headers:
        return list(headers)
    return [f if isinstance(f, str) else f.__name__ for f in fields]


def export_queryset_csv(queryset, fields, filename, headers=None):
    """
    Export a queryset to CSV.

    Args:
        queryset: Django queryset (or any iterable of objects) to export
        fields: list of field names or callables
        filename: output filename (without .csv)
        headers: optional list of column headers (defaults to field names)

    Returns:
        HttpResponse with CSV content
    """
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'
    response.write('\ufeff')  # BOM for Excel UTF-8

    writer = csv.writer(response)
    writer.writerow(_header_row(fields, headers))

    for obj in queryset:
        writer.writerow([_resolve(obj, field) for field in fields])

    return response


def export_queryset_excel(queryset, fields, filename, headers=None):
    """
    Export a queryset to Excel (.xlsx) with a bold header row.

    Same arguments as export_queryset_csv.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = filename[:31]  # Excel sheet names max 31 chars

    ws.append(_header_row(fields, headers))
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for obj in queryset:
        row = []
        for field in fields:
            val = _resolve(obj, field)
            if val is not None and not isinstance(val, (str, int, float, bool)):
                val = str(val)
            row.append(val if val is not None else '')
        ws.append(row)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)

    response = HttpResponse(output.read(), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}.xlsx"'
    return response


def export_queryset(queryset, fields, filename, headers=None, file_format='xlsx'):
    """Dispatch to CSV or Excel export. Unknown formats fall back to Excel."""
    if file_format == 'csv':
        return export_queryset_csv(queryset, fields, filename, headers=headers)
    return export_queryset_excel(queryset, fields, filename, headers=headers)

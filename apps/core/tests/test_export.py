"""Tests for CSV and Excel export."""
import io
from types import SimpleNamespace

from openpyxl import load_workbook

from apps.core.export import export_queryset, export_queryset_csv, export_queryset_excel


class Row(SimpleNamespace):
    def get_status_display(self):
        return {'NEW': 'New'}.get(self.status, self.status)


ROWS = [
    Row(first_name='Ruth', status='NEW', church=SimpleNamespace(name='Grace Church')),
    Row(first_name='Boaz', status='CONNECTED', church=None),
]
FIELDS = ['first_name', 'status', 'church__name', lambda obj: obj.first_name.upper()]


class TestCsv:
    def test_headers_and_rows(self):
        response = export_queryset_csv(ROWS, FIELDS, 'converts', headers=['First', 'Status', 'Church', 'Upper'])

        assert response['Content-Type'] == 'text/csv'
        assert response['Content-Disposition'] == 'attachment; filename="converts.csv"'
        lines = response.content.decode('utf-8-sig').splitlines()
        assert lines == [
            'First,Status,Church,Upper',
            'Ruth,New,Grace Church,RUTH',
            'Boaz,CONNECTED,,BOAZ',
        ]

    def test_default_headers_are_field_names(self):
        response = export_queryset_csv(ROWS[:1], ['first_name'], 'converts')
        assert response.content.decode('utf-8-sig').splitlines()[0] == 'first_name'


class TestExcel:
    def test_workbook(self):
        response = export_queryset_excel(ROWS, FIELDS[:3], 'converts', headers=['First', 'Status', 'Church'])

        assert response['Content-Disposition'] == 'attachment; filename="converts.xlsx"'
        sheet = load_workbook(io.BytesIO(response.content)).active
        assert sheet.title == 'converts'
        assert [cell.value for cell in sheet[1]] == ['First', 'Status', 'Church']
        assert sheet['A1'].font.bold
        assert [cell.value for cell in sheet[2]] == ['Ruth', 'New', 'Grace Church']


def test_dispatch_by_format():
    assert export_queryset(ROWS, ['first_name'], 'x', file_format='csv')['Content-Type'] == 'text/csv'
    assert export_queryset(ROWS, ['first_name'], 'x', file_format='pdf')['Content-Disposition'].endswith('.xlsx"')

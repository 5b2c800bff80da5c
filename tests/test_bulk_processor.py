import json

import pandas as pd
import pytest

from tzpayroll.payroll.bulk_processor import PayrollBulkProcessor

def _write_csv(path, rows):
    pd.DataFrame(rows).to_csv(path, index=False)
    return path

def test_template_has_payroll_columns():
    df = PayrollBulkProcessor("t1").get_template()
    assert list(df.columns) == [
        'employee_id', 'name', 'basic_salary', 'housing_allowance',
        'transport_allowance', 'other_allowances', 'other_deductions',
    ]
    assert len(df) == 1

def test_process_csv(tmp_path):
    path = _write_csv(tmp_path / "payroll.csv", [
        {'employee_id': 'e1', 'name': 'Asha', 'basic_salary': 500000},
        {'employee_id': 'e2', 'name': 'Juma', 'basic_salary': 1200000},
    ])
    result = PayrollBulkProcessor("t1").process_file(path, payroll_period="2024-08")
    assert result['success']
    assert result['total_rows'] == 2
    assert result['processed_rows'] == 2
    assert result['error_rows'] == 0
    run = result['payroll_run']
    assert [line.employee_id for line in run.lines] == ['E1', 'E2']
    calc = result['payroll_calculations']
    assert calc['period'] == "2024-08"
    assert calc['totals']['gross'] == 1700000.0
    assert calc['totals']['paye'] == 154400.0
    assert calc['averages']['gross'] == 850000.0
    assert calc['tra']['employee_count'] == 2

def test_column_mapping(tmp_path):
    path = _write_csv(tmp_path / "payroll.csv", [
        {'Staff No': 'a1', 'Full Name': 'Asha', 'Basic Pay': '500000', 'Housing': 100000},
    ])
    mappings = [
        {'source': 'Staff No', 'target': 'employee_id', 'transform': 'upper'},
        {'source': 'Full Name', 'target': 'name'},
        {'source': 'Basic Pay', 'target': 'basic_salary', 'transform': 'number'},
        {'source': 'Housing', 'target': 'housing_allowance'},
    ]
    result = PayrollBulkProcessor("t1").process_file(path, column_mappings=mappings, payroll_period="2024-08")
    line = result['payroll_run'].lines[0]
    assert line.employee_id == 'A1'
    assert line.name == 'Asha'
    assert line.result.gross_salary == 600000

def test_bad_rows_are_reported_with_row_numbers(tmp_path):
    path = _write_csv(tmp_path / "payroll.csv", [
        {'employee_id': 'E1', 'name': 'Asha', 'basic_salary': '500000', 'housing_allowance': None},
        {'employee_id': 'E2', 'name': 'Juma', 'basic_salary': 'lots', 'housing_allowance': None},
        {'employee_id': 'E3', 'name': 'Neema', 'basic_salary': None, 'housing_allowance': None},
        {'employee_id': 'E4', 'name': 'Baraka', 'basic_salary': '300000', 'housing_allowance': -10},
    ])
    result = PayrollBulkProcessor("t1").process_file(path, payroll_period="2024-08")
    assert result['processed_rows'] == 1
    assert result['error_rows'] == 3
    errors = {e['row']: e['errors'] for e in result['row_errors']}
    assert errors[2] == ["basic_salary: must be a number"]
    assert errors[3] == ["Missing required field: basic_salary"]
    assert errors[4] == ["Housing allowance cannot be negative"]

def test_headcount_defaults_to_sheet_rows(tmp_path):
    rows = [{'employee_id': f'E{i}', 'name': f'Staff {i}', 'basic_salary': 400000} for i in range(10)]
    path = _write_csv(tmp_path / "payroll.csv", rows)
    processor = PayrollBulkProcessor("t1")
    run = processor.process_file(path, payroll_period="2024-08")['payroll_run']
    assert run.total_employees == 10
    assert all(r.sdl_employer == 14000 for r in run.results)
    run = processor.process_file(path, payroll_period="2024-08", total_employees=5)['payroll_run']
    assert all(r.sdl_employer == 0 for r in run.results)

def test_json_input(tmp_path):
    path = tmp_path / "payroll.json"
    path.write_text(json.dumps({'employee_id': 'E1', 'name': 'Asha', 'basic_salary': 500000}))
    result = PayrollBulkProcessor("t1").process_file(path, payroll_period="2024-08")
    assert result['payroll_run'].lines[0].result.net_salary == 435600

def test_empty_file(tmp_path):
    path = tmp_path / "payroll.csv"
    pd.DataFrame(columns=['employee_id', 'basic_salary']).to_csv(path, index=False)
    result = PayrollBulkProcessor("t1").process_file(path)
    assert not result['success']
    assert result['errors'] == ["File is empty"]

def test_missing_and_unsupported_files(tmp_path):
    processor = PayrollBulkProcessor("t1")
    with pytest.raises(FileNotFoundError):
        processor.load_file(tmp_path / "nope.csv")
    for name in ("payroll.txt", "payroll.xls"):
        other = tmp_path / name
        other.write_text("basic_salary\n1\n")
        with pytest.raises(ValueError, match="Unsupported file format"):
            processor.load_file(other)

def test_export_payroll_register(tmp_path):
    path = _write_csv(tmp_path / "payroll.csv", [
        {'employee_id': 'E1', 'name': 'Asha', 'basic_salary': 500000},
        {'employee_id': 'E2', 'name': 'Juma', 'basic_salary': 1200000},
    ])
    processor = PayrollBulkProcessor("t1")
    run = processor.process_file(path, payroll_period="2024-08")['payroll_run']
    out = tmp_path / "exports" / "register.xlsx"
    assert processor.export_payroll(run, out)
    df = pd.read_excel(out)
    assert len(df) == 3
    assert df.iloc[-1]['Employee Name'] == 'TOTAL'
    assert df.iloc[-1]['Net Salary'] == 435600 + 940000

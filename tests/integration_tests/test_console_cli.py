# tests/integration_tests/test_console_cli.py

import pytest

from run_console import main
from scripts.generate_records import generate_records

RECORDS = (
    "id,kind,created_at,level,label,message,task_id,url,host,method,status_code,duration,state\n"
    "m1,log,1,info,app,Started,,,,,,,\n"
    "m2,log,2,error,db,Connection lost,,,,,,,\n"
    "t1,task,3,,,,,https://api.example.com/v1,api.example.com,GET,500,1.5,failure\n"
    "m3,log,4,error,network,GET /v1 500,t1,,,,,,\n"
    "t2,task,5,,,,,https://cdn.example.com/app.js,cdn.example.com,GET,200,0.2,success\n"
)


@pytest.fixture
def records_file(tmp_path):
    path = tmp_path / "records.csv"
    path.write_text(RECORDS, encoding="utf-8")
    return str(path)


class TestConsoleCli:
    """Command line entry point and its exit codes."""

    def test_01_lists_all_records(self, records_file, capsys):
        assert main(["-r", records_file]) == 0
        out = capsys.readouterr().out
        assert "5 records (messages: 2, tasks: 2)" in out

    def test_02_only_errors_in_task_mode(self, records_file, capsys):
        assert main(["-r", records_file, "--mode", "tasks", "--only-errors"]) == 0
        out = capsys.readouterr().out
        assert "1 records (messages: 1, tasks: 1)" in out

    def test_03_grouping_prints_section_headers(self, records_file, capsys):
        assert main(["-r", records_file, "--mode", "tasks", "--group-by", "host", "--order", "asc"]) == 0
        out = capsys.readouterr().out
        assert "== api.example.com (1) ==" in out
        assert "== cdn.example.com (1) ==" in out

    def test_04_limit_truncates_window(self, tmp_path, capsys):
        path = tmp_path / "many.csv"
        path.write_text(generate_records(30, seed=1), encoding="utf-8")
        assert main(["-r", str(path), "--limit", "10"]) == 0
        assert "... 20 more" in capsys.readouterr().out

    def test_05_validate_only(self, records_file, capsys):
        assert main(["-r", records_file, "--validate-only"]) == 0
        assert capsys.readouterr().out == ""

    def test_06_missing_record_file(self, tmp_path):
        assert main(["-r", str(tmp_path / "absent.csv")]) == 1

    def test_07_malformed_filter_expression(self, records_file):
        assert main(["-r", records_file, "--where", "level >="]) == 2

    @pytest.mark.parametrize(
        "flags",
        [["--level", "loud"], ["--mode", "tasks", "--sort", "level"], ["--limit", "0"]],
    )
    def test_08_configuration_errors(self, records_file, flags):
        assert main(["-r", records_file, *flags]) == 3

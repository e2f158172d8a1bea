# tests/utils_tests/test_record_reader_scenarios.py

import pytest

from model.record import Level, RecordKind, TaskState
from scripts.generate_records import generate_records
from utils.record_reader import RecordFormatError, read_records, validate_record_file

HEADER = "id,kind,created_at,level,label,message,task_id,url,host,method,status_code,duration,state\n"


def write(tmp_path, body, header=HEADER):
    path = tmp_path / "records.csv"
    path.write_text(header + body, encoding="utf-8")
    return str(path)


class TestRecordReaderScenarios:
    """CSV record files: parsing, defaults and format errors."""

    def test_01_reads_messages_and_tasks(self, tmp_path):
        path = write(
            tmp_path,
            "m1,log,1.0,warning,auth,Token expired,,,,,,,\n"
            "t1,task,2.5,,,,,https://api.example.com/v1,api.example.com,post,503,0.42,failure\n"
            "m2,log,2.6,error,network,POST /v1 503,t1,,,,,,\n",
        )
        m1, t1, m2 = read_records(path)
        assert m1.kind is RecordKind.LOG
        assert (m1.level, m1.label, m1.message) == (Level.WARNING, "auth", "Token expired")
        assert m1.task_id is None
        assert t1.kind is RecordKind.TASK
        assert (t1.method, t1.status_code, t1.duration, t1.state) == ("POST", 503, 0.42, TaskState.FAILURE)
        assert m2.task_id == "t1"

    def test_02_defaults_for_empty_cells(self, tmp_path):
        path = write(tmp_path, "m1,log,1,,,,,,,,,,\nt1,task,2,,,,,,,,,,\n")
        m1, t1 = read_records(path)
        assert (m1.level, m1.label, m1.message) == (Level.INFO, "default", "")
        assert (t1.method, t1.state, t1.status_code) == ("GET", TaskState.PENDING, None)

    def test_03_missing_file(self, tmp_path):
        with pytest.raises(RecordFormatError, match="not found"):
            list(read_records(str(tmp_path / "absent.csv")))

    def test_04_missing_required_headers(self, tmp_path):
        path = write(tmp_path, "m1,1.0\n", header="id,created_at\n")
        with pytest.raises(RecordFormatError, match="kind"):
            list(read_records(path))

    @pytest.mark.parametrize(
        "row",
        [
            ",log,1.0,,,,,,,,,,",
            "m1,event,1.0,,,,,,,,,,",
            "m1,log,,,,,,,,,,,",
            "m1,log,yesterday,,,,,,,,,,",
            "m1,log,1.0,loud,,,,,,,,,",
            "t1,task,1.0,,,,,,,,abc,,",
            "t1,task,1.0,,,,,,,,,,done",
        ],
    )
    def test_05_malformed_rows_name_the_row(self, tmp_path, row):
        path = write(tmp_path, "m0,log,0.5,,,,,,,,,,\n" + row + "\n")
        with pytest.raises(RecordFormatError, match="row 3"):
            list(read_records(path))

    def test_06_validate_counts_records(self, tmp_path):
        path = write(tmp_path, "m1,log,1,,,,,,,,,,\nm2,log,2,,,,,,,,,,\n")
        assert validate_record_file(path) == 2

    def test_07_validate_rejects_duplicate_ids(self, tmp_path):
        path = write(tmp_path, "m1,log,1,,,,,,,,,,\nm1,log,2,,,,,,,,,,\n")
        with pytest.raises(RecordFormatError, match="Duplicate"):
            validate_record_file(path)

    def test_08_generated_files_are_readable(self, tmp_path):
        path = tmp_path / "generated.csv"
        path.write_text(generate_records(200, task_ratio=0.4, seed=7), encoding="utf-8")
        records = list(read_records(str(path)))
        assert len(records) == 200
        assert validate_record_file(str(path)) == 200

        tasks = {r.rid for r in records if r.kind is RecordKind.TASK}
        attached = [r for r in records if r.kind is RecordKind.LOG and r.task_id is not None]
        assert tasks
        assert {r.task_id for r in attached} == tasks

    def test_09_generator_is_reproducible(self):
        assert generate_records(50, seed=3) == generate_records(50, seed=3)

"""Tests for the command line entry point."""
import io
import json
import pytest
from taf_timeline.main import main


KLAX_TAF = (
    "TAF KLAX 261130Z 2612/2718 25010KT P6SM FEW020 "
    "FM261800 28012G20KT 6SM BKN030 "
    "TEMPO 2618/2620 3SM TSRA"
)
AT = '2025-10-26T15:00:00Z'


class TestMain:
    """Test cases for main()"""

    def test_json_output(self, capsys):
        exit_code = main([KLAX_TAF, '--at', AT, '--format', 'json'])
        data = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert data['station'] == 'KLAX'
        assert data['current_block_index'] == 0
        assert [block['source_type'] for block in data['blocks']] == ['INITIAL', 'FM', 'TEMPO']
        assert data['blocks'][1]['start'] == '2025-10-26T18:00:00Z'

    def test_table_output(self, capsys):
        exit_code = main([KLAX_TAF, '--at', AT, '--format', 'table'])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert out.startswith("TAF KLAX")
        assert "Start" in out and "Ceiling" in out
        assert "28012G20KT" in out
        assert "3 period(s), worst category IFR." in out

    def test_read_from_file(self, tmp_path, capsys):
        path = tmp_path / 'klax.taf'
        path.write_text(KLAX_TAF + "=\n", encoding='utf-8')

        assert main(['--file', str(path), '--at', AT, '--format', 'json']) == 0
        assert json.loads(capsys.readouterr().out)['station'] == 'KLAX'

    def test_empty_file_has_no_timeline(self, tmp_path, capsys):
        path = tmp_path / 'empty.taf'
        path.write_text("", encoding='utf-8')

        assert main(['--file', str(path), '--format', 'table']) == 1
        assert "No forecast periods." in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert main(['--file', str(tmp_path / 'missing.taf')]) == 2

    def test_read_from_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr('sys.stdin', io.StringIO(KLAX_TAF))

        assert main(['--at', AT, '--format', 'json']) == 0
        assert len(json.loads(capsys.readouterr().out)['blocks']) == 3

    def test_invalid_reference_instant(self):
        with pytest.raises(SystemExit) as exc_info:
            main([KLAX_TAF, '--at', 'yesterday'])
        assert exc_info.value.code == 2

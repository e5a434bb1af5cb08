import json

import pytest

from services.dme.errors import NoteNotFoundError, InvalidNoteFormatError
from services.dme.dme import parse_fields, extract_device_type, extract_patient_name, extract_date_of_birth
from services.dme.note_loader import load_note, unwrap_note


def test_load_plain_note_is_trimmed(tmp_path):
    note = tmp_path / "physician_note1.txt"
    note.write_text("\n\n  Prescription: CPAP\nDOB: 01/01/1980  \n\n", encoding="utf-8")
    assert load_note(note) == "Prescription: CPAP\nDOB: 01/01/1980"


def test_load_json_envelope(tmp_path):
    note = tmp_path / "physician_note2.json"
    note.write_text(
        json.dumps({"data": "Prescription: oxygen 2 L\nUsage: sleep and exertion"}),
        encoding="utf-8",
    )
    assert load_note(str(note)) == "Prescription: oxygen 2 L\nUsage: sleep and exertion"


def test_missing_file_raises_not_found(tmp_path):
    missing = tmp_path / "nope.txt"
    with pytest.raises(NoteNotFoundError) as exc:
        load_note(missing)
    assert exc.value.kind == "NotFound"
    assert exc.value.exit_code == 1


def test_malformed_envelope_raises_invalid_format():
    with pytest.raises(InvalidNoteFormatError) as exc:
        unwrap_note('{"data": "Prescription: CPAP"')
    assert exc.value.kind == "InvalidFormat"
    assert exc.value.exit_code == 2


@pytest.mark.parametrize("content", [
    '{"data": 42}',
    '{"data": null}',
    '{"note": "x", "data": ["Prescription: CPAP"]}',
])
def test_envelope_without_string_data_raises_invalid_format(content):
    with pytest.raises(InvalidNoteFormatError):
        unwrap_note(content)


def test_brace_without_data_key_is_plain_text():
    assert unwrap_note("{Prescription: CPAP}") == "{Prescription: CPAP}"


def test_plain_text_mentioning_data_is_not_unwrapped():
    text = 'Diagnosis: "data" entry error'
    assert unwrap_note(text) == text


def test_directory_path_raises_not_found(tmp_path):
    with pytest.raises(NoteNotFoundError):
        load_note(tmp_path)


def test_bom_prefixed_json_envelope_is_unwrapped(tmp_path):
    note = tmp_path / "bom_note.json"
    note.write_bytes(b"\xef\xbb\xbf" + json.dumps({"data": "Prescription: CPAP"}).encode("utf-8"))
    assert load_note(note) == "Prescription: CPAP"


def test_bom_prefixed_plain_note_keeps_first_key(tmp_path):
    note = tmp_path / "bom_note.txt"
    note.write_bytes(b"\xef\xbb\xbfPatient Name: Harold Finch\nDOB: 04/12/1952")
    fields = parse_fields(load_note(note))
    assert extract_patient_name(fields) == "Harold Finch"


def test_invalid_utf8_bytes_are_replaced(tmp_path):
    note = tmp_path / "latin1_note.txt"
    note.write_bytes(b"Prescription: CPAP \xff\nDOB: 01/01/1980")
    text = load_note(note)
    assert "\ufffd" in text
    fields = parse_fields(text)
    assert extract_device_type(fields) == "CPAP"
    assert extract_date_of_birth(fields) == "01/01/1980"

from __future__ import annotations

from dataclasses import replace

from ex_certificates.cert_parser import CertType, confidence, parse
from ex_certificates.cert_parser.record import CertificateRecord, ProtectionType

SCENARIO_TEXT = "IECEx ABC 12.0001X  Ex db IIC T4 Gb  Manufacturer: Acme Corp  Zone 1"

CERTIFICATE_TEXT = """IECEx Certificate of Conformity

Certificate No.: IECEx BAS 12.0034X
Date of Issue: 2019-06-12
Applicant:
Acme Instruments Ltd
Equipment: Pressure transmitter type PT-100
Ex db ia IIC T4 Gb
Ambient temperature: -20°C to +60°C
Enclosure rated IP66
Standards: IEC 60079-0:2017, IEC 60079-1:2014, IEC 60079-11:2011
Issued by SGS Baseefa Limited

Special Conditions for Safe Use:
The enclosure shall be earthed.
Avoid mechanical impact.

SCHEDULE
"""


def test_scenario_fields() -> None:
    record = parse(SCENARIO_TEXT)
    assert record.cert_number == "IECEx ABC 12.0001X"
    assert record.cert_type == CertType.IECEX
    assert record.cert_type == "IECEx"
    assert record.marking == "Ex db IIC T4 Gb"
    assert record.gas_group == "IIC"
    assert record.temp_class == "T4"
    assert record.epl == "Gb"
    assert record.zone == "Zone 1"
    assert record.manufacturer == "Acme Corp"
    assert confidence(record) >= 70


def test_sparse_text_only_populates_temperature_class() -> None:
    record = parse("T4")
    assert record.temp_class == "T4"
    assert record.temp_class_max == "135°C"
    assert confidence(record) == 10
    data = record.to_dict(include_raw=False)
    populated = {key for key, value in data.items() if value not in (None, [], ())}
    assert populated == {"tempClass", "tempClassMax"}


def test_empty_text_yields_empty_record() -> None:
    record = parse("")
    assert record.raw == ""
    assert record.marking is None
    assert record.markings == ()
    assert record.protection_types == ()
    assert confidence(record) == 0


def test_parse_is_deterministic() -> None:
    first = parse(CERTIFICATE_TEXT)
    second = parse(CERTIFICATE_TEXT)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_longest_marking_is_selected() -> None:
    record = parse("Ex d IIC\nsee below\nEx db IIC T4 Gb")
    assert record.marking == "Ex db IIC T4 Gb"
    assert record.markings[0] == "Ex db IIC T4 Gb"
    assert "Ex d IIC" in record.markings
    assert record.markings.index("Ex db IIC T4 Gb") < record.markings.index("Ex d IIC")
    lengths = [len(marking) for marking in record.markings]
    assert lengths == sorted(lengths, reverse=True)
    assert len(set(record.markings)) == len(record.markings)


def test_marking_whitespace_is_normalized() -> None:
    record = parse("Marking:  Ex  db\n IIC   T4  Gb")
    assert record.marking == "Ex db IIC T4 Gb"


def test_zone_is_derived_from_epl_when_absent() -> None:
    record = parse("Ex db IIC T4 Gb")
    assert record.zone == "Zone 1 (derived from EPL)"


def test_explicit_zone_is_not_marked_as_derived() -> None:
    record = parse("Ex db IIC T4 Gb suitable for Zone 1")
    assert record.zone == "Zone 1"
    assert "derived" not in record.zone


def test_protection_types_from_marking() -> None:
    record = parse("Ex db ia IIC T4 Gb")
    assert record.protection_types == (
        ProtectionType(code="db", base_type="d", level="b", description="Flameproof enclosure"),
        ProtectionType(code="ia", base_type="i", level="a", description="Intrinsic safety"),
    )


def test_protection_types_ignore_text_outside_marking() -> None:
    record = parse("Type e terminal box, protection d and i.\nEx db IIC T6 Gb")
    assert [entry.code for entry in record.protection_types] == ["db"]


def test_running_text_is_not_a_marking() -> None:
    record = parse("The enclosure is type Ex d in accordance with the standard.")
    assert record.marking is None
    assert record.markings == ()
    assert confidence(record) == 0


def test_lower_case_gas_group_does_not_form_a_marking() -> None:
    assert parse("Ex d iib T4").marking is None
    assert parse("ex d IIB T4").marking == "ex d IIB T4"


def test_notified_body_prefers_longer_name() -> None:
    record = parse("Certified by CSA Group on behalf of CSA")
    assert record.notified_body == "CSA Group"
    record = parse("SGS-CSTC Standards Technical Services")
    assert record.notified_body == "SGS-CSTC"


def test_notified_body_requires_whole_word() -> None:
    assert parse("ULTRASONIC FMCW level radar").notified_body is None


def test_full_certificate() -> None:
    record = parse(CERTIFICATE_TEXT)
    assert record.cert_number == "IECEx BAS 12.0034X"
    assert record.marking == "Ex db ia IIC T4 Gb"
    assert record.gas_group_info == "Hydrogen, acetylene (most stringent)"
    assert record.temp_class_max == "135°C"
    assert record.zone == "Zone 1 (derived from EPL)"
    assert record.manufacturer == "Acme Instruments Ltd"
    assert record.equipment == "Pressure transmitter type PT-100"
    assert record.issue_date == "2019-06-12"
    assert record.ambient_temp == "-20°C to +60°C"
    assert record.ip_rating == "IP66"
    assert record.notified_body == "SGS"
    assert record.standard == "IEC 60079-0:2017, IEC 60079-1:2014, IEC 60079-11:2011"
    assert record.special_conditions == "The enclosure shall be earthed.\nAvoid mechanical impact."
    assert confidence(record) == 98


def test_mining_marking() -> None:
    record = parse("Ex ia I Ma")
    assert record.marking == "Ex ia I Ma"
    assert record.gas_group == "I"
    assert record.gas_group_info == "Mining (methane)"
    assert record.epl == "Ma"
    assert record.zone == "Zone M1 (derived from EPL)"
    assert [entry.code for entry in record.protection_types] == ["ia"]


def test_dust_marking_with_absolute_temperature() -> None:
    record = parse("Ex tb IIIC T135°C Db")
    assert record.marking == "Ex tb IIIC T135°C Db"
    assert record.gas_group == "IIIC"
    assert record.temp_class is None
    assert record.epl == "Db"
    assert record.zone == "Zone 21 (derived from EPL)"


def test_marking_scoped_fields_prefer_marking() -> None:
    text = "Group IIA apparatus, T6 ambient, Gc elsewhere.\nEx db IIB T3 Gb"
    record = parse(text)
    assert record.gas_group == "IIB"
    assert record.temp_class == "T3"
    assert record.epl == "Gb"


def test_scalar_fields_are_never_empty_strings() -> None:
    record = parse(CERTIFICATE_TEXT + "\nManufacturer:    \n")
    for key, value in record.to_dict(include_raw=False).items():
        assert value != "", key


def test_to_dict_serializes_contract_keys() -> None:
    data = parse(SCENARIO_TEXT).to_dict()
    assert data["certType"] == "IECEx"
    assert data["raw"] == SCENARIO_TEXT
    assert data["protectionTypes"] == [
        {"code": "db", "baseType": "d", "level": "b", "description": "Flameproof enclosure"}
    ]
    assert "raw" not in parse(SCENARIO_TEXT).to_dict(include_raw=False)


def test_confidence_is_bounded_and_monotonic() -> None:
    record = CertificateRecord(raw="")
    steps = [
        {"cert_number": "IECEx BAS 12.0001X"},
        {"marking": "Ex db IIC T4 Gb"},
        {"gas_group": "IIC"},
        {"temp_class": "T4"},
        {"protection_types": (ProtectionType("db", "d", "b", "Flameproof enclosure"),)},
        {"epl": "Gb"},
        {"manufacturer": "Acme"},
        {"equipment": "Junction box"},
        {"notified_body": "CML"},
        {"ip_rating": "IP66"},
        {"ambient_temp": "-20°C to +60°C"},
        {"issue_date": "2020-01-01"},
        {"expiry_date": "2030-01-01"},
    ]
    previous = confidence(record)
    assert previous == 0
    for change in steps:
        record = replace(record, **change)
        score = confidence(record)
        assert previous <= score <= 100
        previous = score
    assert previous == 100


def test_confidence_accepts_serialized_records() -> None:
    record = parse(SCENARIO_TEXT)
    assert confidence(record.to_dict(include_raw=False)) == confidence(record)
    assert confidence({"protectionTypes": []}) == 0

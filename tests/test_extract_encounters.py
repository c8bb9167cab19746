"""
Tests for typed encounter ingestion
"""
from dataclasses import replace

import pandas as pd
import pytest

from clinical_anon.core.errors import LoadError, SchemaError
from clinical_anon.extract.extract_encounters import read_encounters
from clinical_anon.models.schema import build_ingestion_schema


@pytest.fixture
def schema(hierarchies, settings):
    return build_ingestion_schema(hierarchies, settings)


def test_columns_are_typed(write_encounters, schema, settings):
    path = write_encounters([
        "P1;42;female;Uniklinik;91054;91052;E11.9;12.4;15.75",
        "P2;57;male;Uniklinik;91054;90403;I10;NULL;",
    ])
    df = read_encounters(path, schema, settings)

    assert list(df.columns) == [c.name for c in schema]
    assert str(df["age"].dtype) == "Int64"
    assert df["gender"].cat.ordered
    assert list(df["gender"].cat.categories) == ["male", "female", "other", "unknown"]
    assert df["bird_flight_distance"].iloc[0] == pytest.approx(12.4)
    assert pd.isna(df["bird_flight_distance"].iloc[1])
    assert pd.isna(df["route_distance"].iloc[1])
    assert df["patient_zip"].tolist() == ["91052", "90403"]


def test_header_only_file(write_encounters, schema, settings):
    df = read_encounters(write_encounters([]), schema, settings)
    assert len(df) == 0
    assert list(df.columns) == [c.name for c in schema]


def test_value_outside_domain(write_encounters, schema, settings):
    path = write_encounters(["P1;42;female;Uniklinik;91054;91052;Z99;12;15"])
    with pytest.raises(SchemaError, match="diagnosis"):
        read_encounters(path, schema, settings)


def test_bad_integer(write_encounters, schema, settings):
    path = write_encounters(["P1;forty;female;Uniklinik;91054;91052;I10;12;15"])
    with pytest.raises(SchemaError, match="age"):
        read_encounters(path, schema, settings)


def test_fractional_age_rejected(write_encounters, schema, settings):
    path = write_encounters(["P1;42.5;female;Uniklinik;91054;91052;I10;12;15"])
    with pytest.raises(SchemaError, match="age"):
        read_encounters(path, schema, settings)


def test_bad_decimal(write_encounters, schema, settings):
    path = write_encounters(["P1;42;female;Uniklinik;91054;91052;I10;12km;15"])
    with pytest.raises(SchemaError, match="bird_flight_distance"):
        read_encounters(path, schema, settings)


def test_missing_pseudonym(write_encounters, schema, settings):
    path = write_encounters(["NULL;42;female;Uniklinik;91054;91052;I10;12;15"])
    with pytest.raises(SchemaError, match="patient_id"):
        read_encounters(path, schema, settings)


def test_too_few_columns(write_encounters, schema, settings):
    path = write_encounters(["P1;42;female"], header="patient_id;age;gender")
    with pytest.raises(SchemaError):
        read_encounters(path, schema, settings)


def test_unreadable_file(tmp_path, schema, settings):
    with pytest.raises(LoadError):
        read_encounters(tmp_path / "missing.csv", schema, settings)


def test_decimal_comma(write_encounters, hierarchies, settings):
    comma = settings.with_overrides(decimal_point=",")
    schema = build_ingestion_schema(hierarchies, comma)
    path = write_encounters(["P1;42;female;Uniklinik;91054;91052;I10;12,6;3"])
    df = read_encounters(path, schema, comma)
    assert df["bird_flight_distance"].iloc[0] == pytest.approx(12.6)


@pytest.mark.parametrize("distance", ["inf", "-inf", "Infinity", "1e400"])
def test_non_finite_distance_rejected(write_encounters, schema, settings, distance):
    path = write_encounters([f"P1;42;female;Uniklinik;91054;91052;I10;{distance};15"])
    with pytest.raises(SchemaError, match="bird_flight_distance"):
        read_encounters(path, schema, settings)


def test_optional_column_may_be_absent(write_encounters, schema, settings):
    schema = [*schema[:-1], replace(schema[-1], required=False)]
    header = "patient_id;age;gender;hospital_name;hospital_zip;patient_zip;diagnosis;bird_flight_distance"
    path = write_encounters(["P1;42;female;Uniklinik;91054;91052;I10;12"], header=header)

    df = read_encounters(path, schema, settings)
    assert str(df["route_distance"].dtype) == "float64"
    assert df["route_distance"].isna().all()


def test_required_column_absent(write_encounters, schema, settings):
    header = "patient_id;age;gender;hospital_name;hospital_zip;patient_zip;diagnosis;bird_flight_distance"
    path = write_encounters(["P1;42;female;Uniklinik;91054;91052;I10;12"], header=header)
    with pytest.raises(SchemaError, match="route_distance"):
        read_encounters(path, schema, settings)

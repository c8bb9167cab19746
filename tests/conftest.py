"""
Shared fixtures: hierarchy files and raw encounter files under tmp_path.
"""
import pytest

from clinical_anon.core.config import DEFAULT_SETTINGS
from clinical_anon.extract.extract_hierarchies import clear_hierarchy_cache, load_hierarchies

HIERARCHIES = {
    "age.csv": ["30;30-39;*", "42;40-49;*", "57;50-59;*", "61;60-69;*"],
    "diagnosis.csv": ["C50.9;C50;C00-D48;*", "E11.9;E11;E00-E90;*", "I10;I10;I00-I99;*", "A09;A09;A00-B99;*"],
    "distance.csv": ["0;0-9;*", "12;10-19;*", "25;20-29;*"],
    "zip.csv": ["91054;9105*;910**;*", "91052;9105*;910**;*", "90403;9040*;904**;*"],
}

ENCOUNTER_HEADER = "patient_id;age;gender;hospital_name;hospital_zip;patient_zip;diagnosis;bird_flight_distance;route_distance"


@pytest.fixture
def hierarchy_dir(tmp_path):
    d = tmp_path / "hierarchies"
    d.mkdir()
    for name, rows in HIERARCHIES.items():
        (d / name).write_text("\n".join(rows) + "\n", encoding="utf-8")
    return d


@pytest.fixture
def settings(hierarchy_dir):
    clear_hierarchy_cache()
    yield DEFAULT_SETTINGS.with_overrides(hierarchy_dir=hierarchy_dir)
    clear_hierarchy_cache()


@pytest.fixture
def hierarchies(settings):
    return load_hierarchies(settings)


@pytest.fixture
def write_encounters(tmp_path):
    def _write(rows, name="encounters.csv", header=ENCOUNTER_HEADER):
        path = tmp_path / name
        path.write_text("\n".join([header, *rows]) + "\n", encoding="utf-8")
        return path
    return _write

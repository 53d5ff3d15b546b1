# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
import csv
from pathlib import Path
from typing import List

import pytest
from neo4j import Driver
from rich.console import Console
from testcontainers.neo4j import Neo4jContainer

from py_neo_transparence.loader import Neo4jLoader

console = Console()

NEO4J_VERSION = "5.18"

BENEFIT_COLUMNS = 37


def _write_delimited(filepath: Path, rows: List[List[str]], delimiter: str, quotechar: str = '"'):
    """Helper to create a delimited source file the way the csv module writes it."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter=delimiter, quotechar=quotechar, lineterminator="\n")
        writer.writerows(rows)
    return filepath


def benefit_fields(lab, recipient_type, last_name, first_name, specialty_code, specialty_name, date, amount, benefit_type):
    """Spreads one benefit over the 37 positional columns of the benefits extract."""
    fields = [""] * BENEFIT_COLUMNS
    fields[0] = lab
    fields[4] = recipient_type
    fields[6] = last_name
    fields[7] = first_name
    fields[8] = specialty_code
    fields[9] = specialty_name
    fields[32] = date
    fields[33] = amount
    fields[34] = benefit_type
    return fields


COMPANIES_HEADER = [
    "identifiant", "pays_code", "pays", "secteur_activite_code", "secteur", "denomination_sociale",
    "adresse_1", "adresse_2", "adresse_3", "adresse_4", "code_postal", "ville",
]

COMPANIES = [
    ["QBSTAWWV", "[FR]", "France", "[PA]", "Pharmaceutique", "Boiron",
     "2 avenue de l'Ouest Lyonnais", '""', "", "", "69510", "Messimy"],
    ["IOINTYMQ", "[US]", "États-Unis", "[DM]", "Dispositifs médicaux", "Iointymq Labs",
     "1 Main Street", "Suite 100", "", "", "10001", "New York"],
    ["WFBBGLCU", "[FR]", "France", "[PA]", "Pharmaceutique", "Laboratoire WFB",
     "12 rue des Lilas", "", '""', "", "75011", "Paris"],
]

PACKAGES = [
    ["60002283", "4949729", "plaquette(s) thermoformée(s) aluminium de 30 comprimé(s)", "Présentation active",
     "Déclaration de commercialisation", "16/03/2011", "3400949497294", "oui", "65%", "2,82", "3,84", "1,02", ""],
    ["60002283", "4949770", "plaquette(s) thermoformée(s) aluminium de 90 comprimé(s)", "Présentation active",
     "Déclaration de commercialisation", "19/09/2011", "3400949497706", "oui", "65%", "7,77", "9,60", "1,83", ""],
    ["60002504", "3320863", "1 tube(s) de 4 g", "Présentation active",
     "Déclaration de commercialisation", "31/12/1999", "3400933208639", "non", "", "", "", "", ""],
    ["60003620", "3696350", "20 sachet(s) papier aluminium polyéthylène", "Présentation active",
     "Déclaration de commercialisation", "01/09/2004", "3400936963504", "oui", "30%", "5,46", "6,48", "1,02", ""],
]

DRUGS = [
    ["60538772", "ABIES CANADENSIS BOIRON, degré de dilution compris entre 2CH et 30CH", "comprimé et granules",
     "orale;sublinguale", "Autorisation active", "Enreg homéo (Proc. Nat.)", "Commercialisée", "20/09/2013", "", "",
     " BOIRON", "Non"],
    ["61266250", "A 313 200 000 UI POUR CENT, pommade", "pommade",
     "cutanée", "Autorisation active", "Procédure nationale", "Commercialisée", "12/03/1998", "", "",
     " PHARMA DEVELOPPEMENT", "Non"],
    ["62170486", "ABACAVIR/LAMIVUDINE MYLAN PHARMA 600 mg/300 mg, comprimé pelliculé", "comprimé pelliculé",
     "orale", "Autorisation active", "Procédure décentralisée", "Commercialisée", "22/12/2016", "", "",
     " MYLAN SAS", "Non"],
    ["62869109", "A 313 50 000 U.I., capsule molle", "capsule molle",
     "orale", "Autorisation active", "Procédure nationale", "Commercialisée", "23/07/1997", "", "",
     " MYLAN SAS; PHARMA DEVELOPPEMENT", "Non"],
]

BENEFITS = [
    benefit_fields("IOINTYMQ", "[PRS]", "Marques", "Catherine", "[21]", "Pharmacien", "30/01/2014", "25", "Repas"),
    benefit_fields("IOINTYMQ", "[PRS]", "Berceron", "Isabelle", "[60]", "Infirmier", "03/06/2014", "38", "Transport"),
    benefit_fields("WFBBGLCU", "[PRS]", "Marques", "Catherine", "[21]", "Pharmacien", "31/05/2014", "45", "Repas"),
    benefit_fields("WFBBGLCU", "[ETA]", "Hôpital", "Central", "", "", "12/02/2014", "1500", "Don"),
    benefit_fields("WFBBGLCU", "[PRS]", "Berceron", "Isabelle", "[60]", "Infirmier", "02/06/2014", "48", "Repas"),
]


@pytest.fixture
def companies_file(tmp_path: Path) -> Path:
    return _write_delimited(tmp_path / "companies.csv", [COMPANIES_HEADER] + COMPANIES, delimiter=",")


@pytest.fixture
def packages_file(tmp_path: Path) -> Path:
    return _write_delimited(tmp_path / "packages.tsv", PACKAGES, delimiter="\t", quotechar="£")


@pytest.fixture
def drugs_file(tmp_path: Path) -> Path:
    return _write_delimited(tmp_path / "drugs.tsv", DRUGS, delimiter="\t")


@pytest.fixture
def benefits_file(tmp_path: Path) -> Path:
    header = [f"column_{i}" for i in range(BENEFIT_COLUMNS)]
    return _write_delimited(tmp_path / "benefits.csv", [header] + BENEFITS, delimiter=";")


@pytest.fixture(scope="session")
def neo4j_container():
    """
    A pytest fixture that starts and stops a Neo4j container for the test session.
    Every test depending on it is skipped when Docker cannot start the container.
    """
    container = Neo4jContainer(image=f"neo4j:{NEO4J_VERSION}")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Neo4j test container unavailable (is Docker running?): {e}")

    container.driver = container.get_driver()
    console.log(f"[green]Neo4j test container ready at {container.get_connection_url()}[/green]")
    yield container
    container.driver.close()
    container.stop()


@pytest.fixture
def neo4j_driver(neo4j_container: Neo4jContainer) -> Driver:
    """
    Provides a driver to the test Neo4j container and cleans the database
    before and after each test function. Constraints and indexes are kept:
    every import ensures them idempotently.
    """
    driver = neo4j_container.driver
    with driver.session() as session:
        session.run("MATCH (n) DETACH DELETE n").consume()
    yield driver
    with driver.session() as session:
        session.run("MATCH (n) DETACH DELETE n").consume()


@pytest.fixture
def loader(neo4j_driver: Driver) -> Neo4jLoader:
    return Neo4jLoader(driver=neo4j_driver, database="neo4j")

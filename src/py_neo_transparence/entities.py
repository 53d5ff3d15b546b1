# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Import definitions for the four open-data extracts.

Each definition bundles what differs between sources: the column projection
and file layout, how a raw record is reshaped into a row model, which rows
qualify, the Cypher upsert run once per batch, and the schema statements
ensured before any data is written. The batching, transaction and schema
orchestration shared by all of them lives in ``loader.Neo4jLoader``.
"""
from typing import Any, Dict, Iterator, List, Mapping, TextIO, Tuple, Type

from neo4j import Transaction
from pydantic import BaseModel
from rich.console import Console

from .errors import MalformedRowError, UnknownEntityError
from .models import BenefitRow, CompanyRow, DrugRow, LabCandidate, PackageRow, SourceFormat
from .parser import read_records
from .resolver import DEFAULT_THRESHOLD, LabResolver
from .text import normalize

console = Console()

# Recipient type of an individual health professional in the benefits extract.
INDIVIDUAL_RECIPIENT = "[PRS]"

# Address lines holding only this literal are empty in the companies extract.
ADDRESS_PLACEHOLDER = '""'

# --- Schema statements shared across imports --------------------------------
# Constraint and index names are fixed so that `IF NOT EXISTS` recognizes a
# statement already run by another import.

COMPANY_IDENTIFIER_UNIQUE = "CREATE CONSTRAINT company_identifier_unique IF NOT EXISTS FOR (c:Company) REQUIRE c.identifier IS UNIQUE"
COMPANY_NAME_INDEX = "CREATE INDEX company_name_index IF NOT EXISTS FOR (c:Company) ON (c.name)"
DRUG_CIS_CODE_UNIQUE = "CREATE CONSTRAINT drug_cis_code_unique IF NOT EXISTS FOR (d:Drug) REQUIRE d.cis_code IS UNIQUE"


def merge_address(*lines: str) -> str:
    """Joins the non-blank address lines with newlines."""
    return "\n".join(
        line for line in lines
        if line is not None and line.strip() and line != ADDRESS_PLACEHOLDER
    )


def split_lab_names(value: str) -> List[str]:
    """Splits a ';'-joined lab list, dropping blanks and repeated names."""
    names = []
    for name in value.split(";"):
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


def split_benefit_date(value: str) -> Tuple[str, str, str]:
    """Splits a dd/mm/yyyy date into (year, month, day) strings."""
    parts = value.strip().split("/")
    if len(parts) != 3 or not all(parts):
        raise MalformedRowError(
            f"Benefit date '{value}' is not in dd/mm/yyyy format",
            context={"benefit_date": value},
        )
    day, month, year = parts
    return year, month, day


class EntityImport:
    """
    Base import definition: reads, normalizes, filters and reshapes records
    into `row_model` instances, and writes one batch with `upsert_query`.
    """
    name: str = ""
    columns: Mapping[int, str] = {}
    source_format: SourceFormat = SourceFormat()
    row_model: Type[BaseModel] = BaseModel
    upsert_query: str = ""
    schema_statements: List[str] = []

    def __init__(self, locale: str = "fr"):
        self.locale = locale

    def accepts(self, record: Dict[str, Any]) -> bool:
        return True

    def reshape(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return record

    def rows(self, source: TextIO) -> Iterator[BaseModel]:
        """Lazily yields the qualifying rows of `source`, one per record."""
        for record in read_records(source, self.columns, self.source_format):
            record = normalize(record, self.locale)
            if not self.accepts(record):
                continue
            yield self.row_model(**self.reshape(record))

    def write_batch(self, tx: Transaction, rows: List[BaseModel]) -> None:
        tx.run(self.upsert_query, rows=[row.model_dump() for row in rows])


class CompanyImport(EntityImport):
    """Companies directory: comma-separated, 12 columns, with a header line."""
    name = "companies"
    columns = {
        0: "company_id",
        1: "country_code",
        2: "country_name",
        3: "segment_code",
        4: "segment_label",
        5: "company_name",
        6: "address_1",
        7: "address_2",
        8: "address_3",
        9: "address_4",
        10: "zipcode",
        11: "city_name",
    }
    source_format = SourceFormat(delimiter=",", quotechar='"', skip_header=True)
    row_model = CompanyRow
    upsert_query = """
        UNWIND $rows AS row
        MERGE (country:Country {code: row.country_code})
        SET country.name = row.country_name
        MERGE (city:City {name: row.city_name})
        MERGE (city)-[:LOCATED_IN_COUNTRY]->(country)
        MERGE (address:Address {address: row.address})
        MERGE (address)-[:LOCATED_IN_CITY {zipcode: row.zipcode}]->(city)
        MERGE (segment:BusinessSegment {code: row.segment_code})
        SET segment.label = row.segment_label
        MERGE (company:Company {identifier: row.company_id})
        SET company.name = row.company_name
        MERGE (company)-[:IN_BUSINESS_SEGMENT]->(segment)
        MERGE (company)-[:LOCATED_AT_ADDRESS]->(address)
    """
    schema_statements = [
        "CREATE CONSTRAINT country_code_unique IF NOT EXISTS FOR (c:Country) REQUIRE c.code IS UNIQUE",
        "CREATE INDEX country_name_index IF NOT EXISTS FOR (c:Country) ON (c.name)",
        "CREATE INDEX city_name_index IF NOT EXISTS FOR (c:City) ON (c.name)",
        "CREATE INDEX address_address_index IF NOT EXISTS FOR (a:Address) ON (a.address)",
        "CREATE CONSTRAINT business_segment_code_unique IF NOT EXISTS FOR (b:BusinessSegment) REQUIRE b.code IS UNIQUE",
        "CREATE INDEX business_segment_label_index IF NOT EXISTS FOR (b:BusinessSegment) ON (b.label)",
        COMPANY_IDENTIFIER_UNIQUE,
        COMPANY_NAME_INDEX,
    ]

    def reshape(self, record: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(record)
        row["address"] = merge_address(*(row.pop(f"address_{i}") for i in range(1, 5)))
        return row


class PackageImport(EntityImport):
    """Drug packages: '£'-quoted, tab-delimited, 13 columns, no header."""
    name = "packages"
    columns = {
        0: "cis_code",
        2: "package_name",
        6: "cip13_code",
    }
    source_format = SourceFormat(delimiter="\t", quotechar="£", skip_header=False)
    row_model = PackageRow
    upsert_query = """
        UNWIND $rows AS row
        MERGE (drug:Drug {cis_code: row.cis_code})
          ON CREATE SET drug:DrugFromPackage
        MERGE (package:Package {cip13_code: row.cip13_code})
        SET package.name = row.package_name
        MERGE (drug)-[:DRUG_PACKAGED_AS]->(package)
    """
    schema_statements = [
        "CREATE CONSTRAINT package_cip13_code_unique IF NOT EXISTS FOR (p:Package) REQUIRE p.cip13_code IS UNIQUE",
        "CREATE INDEX package_name_index IF NOT EXISTS FOR (p:Package) ON (p.name)",
        DRUG_CIS_CODE_UNIQUE,
        "CREATE CONSTRAINT drug_from_package_cis_code_unique IF NOT EXISTS FOR (d:DrugFromPackage) REQUIRE d.cis_code IS UNIQUE",
    ]


class DrugImport(EntityImport):
    """
    Drugs: tab-delimited, 12 columns, no header. Column 10 lists the holding
    labs, which are resolved against existing companies by `LabResolver`.
    """
    name = "drugs"
    columns = {
        0: "cis_code",
        1: "drug_name",
        10: "lab_names",
    }
    source_format = SourceFormat(delimiter="\t", quotechar='"', skip_header=False)
    row_model = DrugRow
    upsert_query = """
        UNWIND $rows AS row
        MERGE (drug:Drug {cis_code: row.cis_code})
        SET drug.name = row.drug_name
    """
    lab_candidates_query = """
        MATCH (lab:Company)
        WHERE lab.name IS NOT NULL
        RETURN elementId(lab) AS element_id, lab.identifier AS identifier, lab.name AS name
    """
    link_existing_query = """
        UNWIND $links AS link
        MATCH (drug:Drug {cis_code: link.cis_code})
        MATCH (lab:Company) WHERE elementId(lab) = link.element_id
        MERGE (drug)-[:DRUG_HELD_BY]->(lab)
    """
    link_fallback_query = """
        UNWIND $links AS link
        MATCH (drug:Drug {cis_code: link.cis_code})
        MERGE (fallback:Company:Ansm {name: link.lab_name})
        MERGE (drug)-[:DRUG_HELD_BY]->(fallback)
    """
    schema_statements = [
        DRUG_CIS_CODE_UNIQUE,
        "CREATE INDEX drug_name_index IF NOT EXISTS FOR (d:Drug) ON (d.name)",
        "CREATE INDEX ansm_name_index IF NOT EXISTS FOR (a:Ansm) ON (a.name)",
        COMPANY_NAME_INDEX,
    ]

    def __init__(self, locale: str = "fr", lab_name_similarity: float = DEFAULT_THRESHOLD):
        super().__init__(locale=locale)
        self.resolver = LabResolver(threshold=lab_name_similarity, locale=locale)

    def reshape(self, record: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(record)
        row["lab_names"] = split_lab_names(row["lab_names"])
        return row

    def write_batch(self, tx: Transaction, rows: List[DrugRow]) -> None:
        super().write_batch(tx, rows)

        # The candidate pool is read inside the batch transaction, so it sees
        # every company committed so far plus this batch's own writes.
        candidates = [
            LabCandidate(**record.data())
            for record in tx.run(self.lab_candidates_query)
        ]
        links = self.resolver.resolve(rows, candidates)
        existing = [link.model_dump() for link in links if not link.is_fallback]
        fallbacks = [link.model_dump() for link in links if link.is_fallback]
        if existing:
            tx.run(self.link_existing_query, links=existing)
        if fallbacks:
            tx.run(self.link_fallback_query, links=fallbacks)
            created = len({link["lab_name"] for link in fallbacks})
            console.log(f"Created {created} fallback [bold]Ansm[/bold] lab(s).")


class BenefitImport(EntityImport):
    """
    Benefits: '"'-quoted, ';'-delimited, 37 columns, with a header line.
    Only benefits received by individual health professionals are imported.
    """
    name = "benefits"
    columns = {
        0: "lab_identifier",
        4: "benefit_recipient_type",
        6: "last_name",
        7: "first_name",
        8: "specialty_code",
        9: "specialty_name",
        32: "benefit_date",
        33: "benefit_amount",
        34: "benefit_type",
    }
    source_format = SourceFormat(delimiter=";", quotechar='"', skip_header=True)
    row_model = BenefitRow
    # Month and Day nodes are keyed by their bare value, not by their parent
    # Year/Month: day "01" is one node shared by every month of every year.
    upsert_query = """
        UNWIND $rows AS row
        MERGE (hp:HealthProfessional {first_name: row.first_name, last_name: row.last_name})
        MERGE (ms:MedicalSpecialty {code: row.specialty_code})
        SET ms.name = row.specialty_name
        MERGE (hp)-[:SPECIALIZES_IN]->(ms)
        MERGE (year:Year {year: row.year})
        MERGE (month:Month {month: row.month})
        MERGE (month)-[:MONTH_IN_YEAR]->(year)
        MERGE (day:Day {day: row.day})
        MERGE (day)-[:DAY_IN_MONTH]->(month)
        MERGE (bt:BenefitType {type: row.benefit_type})
        MERGE (lab:Company {identifier: row.lab_identifier})
        CREATE (benefit:Benefit {amount: row.benefit_amount})
        CREATE (benefit)-[:GIVEN_AT_DATE]->(day)
        CREATE (benefit)-[:HAS_BENEFIT_TYPE]->(bt)
        CREATE (lab)-[:HAS_GIVEN_BENEFIT]->(benefit)
        CREATE (benefit)-[:HAS_RECEIVED_BENEFIT]->(hp)
    """
    schema_statements = [
        "CREATE INDEX health_professional_name_index IF NOT EXISTS FOR (hp:HealthProfessional) ON (hp.first_name, hp.last_name)",
        "CREATE CONSTRAINT medical_specialty_code_unique IF NOT EXISTS FOR (ms:MedicalSpecialty) REQUIRE ms.code IS UNIQUE",
        "CREATE CONSTRAINT year_unique IF NOT EXISTS FOR (y:Year) REQUIRE y.year IS UNIQUE",
        "CREATE CONSTRAINT month_unique IF NOT EXISTS FOR (m:Month) REQUIRE m.month IS UNIQUE",
        "CREATE CONSTRAINT day_unique IF NOT EXISTS FOR (d:Day) REQUIRE d.day IS UNIQUE",
        "CREATE CONSTRAINT benefit_type_unique IF NOT EXISTS FOR (bt:BenefitType) REQUIRE bt.type IS UNIQUE",
        COMPANY_IDENTIFIER_UNIQUE,
    ]

    def accepts(self, record: Dict[str, Any]) -> bool:
        return record.get("benefit_recipient_type") == INDIVIDUAL_RECIPIENT

    def reshape(self, record: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(record)
        row.pop("benefit_recipient_type")
        row["year"], row["month"], row["day"] = split_benefit_date(row.pop("benefit_date"))
        return row


ENTITY_IMPORTS: Dict[str, Type[EntityImport]] = {
    CompanyImport.name: CompanyImport,
    PackageImport.name: PackageImport,
    DrugImport.name: DrugImport,
    BenefitImport.name: BenefitImport,
}


def get_entity_import(name: str, **options: Any) -> EntityImport:
    """Builds the import definition registered under `name`."""
    try:
        entity_class = ENTITY_IMPORTS[name]
    except KeyError:
        raise UnknownEntityError(
            f"Unsupported entity: {name}",
            context={"supported": sorted(ENTITY_IMPORTS)},
        ) from None
    return entity_class(**options)

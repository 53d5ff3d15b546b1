# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pydantic import BaseModel
from typing import List, Optional


class SourceFormat(BaseModel):
    """
    Delimiter, quoting and header layout of one positional source file.
    """
    delimiter: str = ","
    quotechar: str = '"'
    skip_header: bool = False


# --- Import rows -------------------------------------------------------------
# One model per source file, holding the normalized fields sent to Neo4j as
# the `$rows` parameter of the batch upsert.

class CompanyRow(BaseModel):
    """
    A company from the companies directory, with its segment and address.
    This feeds the :Company, :BusinessSegment, :Address, :City and :Country nodes.
    """
    company_id: str
    company_name: str
    country_code: str
    country_name: str
    segment_code: str
    segment_label: str
    address: str  # Non-blank address lines joined with "\n"
    zipcode: str
    city_name: str


class PackageRow(BaseModel):
    """
    A marketed package of a drug. The drug is only known by its CIS code here.
    """
    cis_code: str
    package_name: str
    cip13_code: str


class DrugRow(BaseModel):
    """
    A drug and the names of the labs holding it, as spelled in the drug database.
    """
    cis_code: str
    drug_name: str
    lab_names: List[str]


class BenefitRow(BaseModel):
    """
    A benefit given by a lab to an individual health professional.
    """
    lab_identifier: str
    last_name: str
    first_name: str
    specialty_code: str
    specialty_name: str
    year: str
    month: str
    day: str
    benefit_amount: str  # Decimal kept as the source text
    benefit_type: str


class ImportReport(BaseModel):
    """
    Outcome of one successful import run.
    """
    entity: str
    rows: int = 0
    batches: int = 0


# --- Fuzzy lab resolution ------------------------------------------------------

class LabCandidate(BaseModel):
    """
    A :Company node a drug lab name may be linked to.
    `element_id` is None for fallback labs created earlier in the same batch.
    """
    element_id: Optional[str] = None
    identifier: Optional[str] = None
    name: str


class LabLink(BaseModel):
    """
    The resolved :DRUG_HELD_BY target for one lab name of one drug.
    """
    cis_code: str
    lab_name: str
    element_id: Optional[str] = None  # Set when an existing company matched
    similarity: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.element_id is None


# --- Read models -------------------------------------------------------------

class Country(BaseModel):
    code: str
    name: str


class City(BaseModel):
    name: str
    country: Country


class Address(BaseModel):
    address: str
    zipcode: str
    city: City


class BusinessSegment(BaseModel):
    code: str
    label: str


class Lab(BaseModel):
    """
    A company as returned by the read queries. Segment and address are only
    filled in when the company import provided the whole enrichment chain.
    """
    identifier: Optional[str] = None
    name: Optional[str] = None
    segment: Optional[BusinessSegment] = None
    address: Optional[Address] = None


class BenefitType(BaseModel):
    type: str


class BenefitDate(BaseModel):
    year: str
    month: str
    day: str


class Benefit(BaseModel):
    type: BenefitType
    amount: str
    date: BenefitDate
    sender: Lab


class MedicalSpecialty(BaseModel):
    code: str
    name: str


class HealthProfessional(BaseModel):
    first_name: str
    last_name: str
    specialty: MedicalSpecialty


class AggregatedBenefits(BaseModel):
    """
    Benefits received by one health professional over a year.
    """
    total_amount: str
    labs: List[str]
    benefit_types: List[str]

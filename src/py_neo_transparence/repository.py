# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Read-only queries over the imported graph.

Arguments go through the same upper-casing as the imported data, so
"Isabelle" finds the professional stored as "ISABELLE".
"""
from typing import Any, Dict, List, Optional, Tuple

from neo4j import Driver, RoutingControl

from .config import settings
from .models import (
    Address,
    AggregatedBenefits,
    Benefit,
    BenefitDate,
    BenefitType,
    BusinessSegment,
    City,
    Country,
    HealthProfessional,
    Lab,
    MedicalSpecialty,
)
from .text import upper


class HealthGraphRepository:
    """Queries benefits, health professionals and labs."""

    def __init__(self, driver: Driver, database: Optional[str] = None, locale: Optional[str] = None):
        self._driver = driver
        self.database = database or settings.neo4j_database
        self.locale = locale or settings.locale

    def _read(self, query: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        records, _, _ = self._driver.execute_query(
            query,
            parameters_=params,
            database_=self.database,
            routing_=RoutingControl.READ,
        )
        return [record.data() for record in records]

    def find_benefits_by_health_professional(self, first_name: str, last_name: str) -> List[Benefit]:
        """Benefits received by a professional, oldest first, largest amount first within a day."""
        rows = self._read(
            """
            MATCH (hp:HealthProfessional {first_name: $first_name, last_name: $last_name}),
                  (hp)<-[:HAS_RECEIVED_BENEFIT]-(b:Benefit),
                  (b)<-[:HAS_GIVEN_BENEFIT]-(lab:Company),
                  (b)-[:HAS_BENEFIT_TYPE]->(bt:BenefitType),
                  (b)-[:GIVEN_AT_DATE]->(d:Day)-[:DAY_IN_MONTH]->(m:Month)-[:MONTH_IN_YEAR]->(y:Year)
            RETURN bt {.type}, b {.amount}, d {.day}, m {.month}, y {.year}, lab {.identifier, .name}
            ORDER BY y.year, m.month, d.day, b.amount DESC
            """,
            {"first_name": upper(first_name, self.locale), "last_name": upper(last_name, self.locale)},
        )
        return [
            Benefit(
                type=BenefitType(**row["bt"]),
                amount=row["b"]["amount"],
                date=BenefitDate(year=row["y"]["year"], month=row["m"]["month"], day=row["d"]["day"]),
                sender=Lab(**row["lab"]),
            )
            for row in rows
        ]

    def find_top_three_by_benefits_within_year(self, year: str) -> List[Tuple[HealthProfessional, AggregatedBenefits]]:
        """The three professionals who received the largest total amount in `year`."""
        rows = self._read(
            """
            MATCH (:Year {year: $year})<-[:MONTH_IN_YEAR]-(:Month)<-[:DAY_IN_MONTH]-(d:Day),
                  (bt:BenefitType)<-[:HAS_BENEFIT_TYPE]-(b:Benefit)-[:GIVEN_AT_DATE]->(d),
                  (lab:Company)-[:HAS_GIVEN_BENEFIT]->(b)-[:HAS_RECEIVED_BENEFIT]->(hp:HealthProfessional),
                  (hp)-[:SPECIALIZES_IN]->(ms:MedicalSpecialty)
            WITH ms, hp,
                 SUM(toFloat(b.amount)) AS total_amount,
                 COLLECT(DISTINCT lab.name) AS labs,
                 COLLECT(bt.type) AS benefit_types
            ORDER BY total_amount DESC
            RETURN ms {.code, .name}, hp {.first_name, .last_name}, total_amount, labs, benefit_types
            LIMIT 3
            """,
            {"year": year.strip()},
        )
        return [
            (
                HealthProfessional(
                    first_name=row["hp"]["first_name"],
                    last_name=row["hp"]["last_name"],
                    specialty=MedicalSpecialty(**row["ms"]),
                ),
                AggregatedBenefits(
                    total_amount=str(float(row["total_amount"])),
                    labs=[name for name in row["labs"] if name is not None],
                    benefit_types=row["benefit_types"],
                ),
            )
            for row in rows
        ]

    def find_labs_by_marketed_package(self, package_name: str) -> List[Lab]:
        """
        Labs holding a drug sold in the package named `package_name`.
        Segment and address are set only when the full company chain exists.
        """
        rows = self._read(
            """
            MATCH (lab:Company)<-[:DRUG_HELD_BY]-(:Drug)-[:DRUG_PACKAGED_AS]->(:Package {name: $name})
            OPTIONAL MATCH (lab)-[:IN_BUSINESS_SEGMENT]->(segment:BusinessSegment),
                           (lab)-[:LOCATED_AT_ADDRESS]->(address:Address)-[city_loc:LOCATED_IN_CITY]->(city:City),
                           (city)-[:LOCATED_IN_COUNTRY]->(country:Country)
            RETURN lab {.identifier, .name},
                   segment {.code, .label},
                   address {.address},
                   city_loc {.zipcode},
                   city {.name},
                   country {.code, .name}
            ORDER BY lab.identifier ASC
            """,
            {"name": upper(package_name, self.locale)},
        )
        labs = []
        for row in rows:
            enrichment = ("segment", "address", "city_loc", "city", "country")
            if any(row[key] is None for key in enrichment):
                labs.append(Lab(**row["lab"]))
                continue
            city = City(name=row["city"]["name"], country=Country(**row["country"]))
            labs.append(Lab(
                **row["lab"],
                segment=BusinessSegment(**row["segment"]),
                address=Address(address=row["address"]["address"], zipcode=row["city_loc"]["zipcode"], city=city),
            ))
        return labs

# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from unittest.mock import patch

import pytest

from py_neo_transparence.models import DrugRow, LabCandidate
from py_neo_transparence.resolver import LabResolver
from py_neo_transparence.similarity import profile

BOIRON = LabCandidate(element_id="4:db:1", identifier="SOMEREF.", name="Labo. Boiron")
MYLAN = LabCandidate(element_id="4:db:2", identifier="ARHHJTWT", name="MYLAN SAS")


def test_best_match_above_threshold():
    match = LabResolver().best_match("LAB. BOIRON", [MYLAN, BOIRON])

    assert match is not None
    candidate, score = match
    assert candidate == BOIRON
    assert score == pytest.approx(14 / 17)


def test_best_match_below_threshold_is_none():
    assert LabResolver().best_match("BONJOUR TOUT LE MONDE", [MYLAN, BOIRON]) is None


def test_threshold_is_strict():
    # An exact match scores 1.0, which is not strictly above a 1.0 threshold.
    assert LabResolver(threshold=1.0).best_match("MYLAN SAS", [MYLAN]) is None


def test_best_match_with_empty_pool():
    assert LabResolver().best_match("MYLAN SAS", []) is None


def test_ties_go_to_lowest_identifier():
    second = LabCandidate(element_id="4:db:8", identifier="ZZZ", name="BOIRON")
    first = LabCandidate(element_id="4:db:9", identifier="AAA", name="BOIRON")

    candidate, score = LabResolver().best_match("BOIRON", [second, first])

    assert candidate == first
    assert score == 1.0


def test_ties_prefer_candidates_with_an_identifier():
    fallback = LabCandidate(element_id="4:db:3", name="BOIRON")
    company = LabCandidate(element_id="4:db:4", identifier="QBSTAWWV", name="BOIRON")

    candidate, _ = LabResolver().best_match("BOIRON", [fallback, company])

    assert candidate == company


def test_higher_score_wins_over_identifier_order():
    close = LabCandidate(element_id="4:db:5", identifier="ZZZ", name="LABO. BOIRON")
    exact = LabCandidate(element_id="4:db:6", identifier="ZZZZ", name="LAB. BOIRON")

    candidate, _ = LabResolver().best_match("LAB. BOIRON", [close, exact])

    assert candidate == exact


def test_resolve_links_each_lab_name_in_order():
    rows = [
        DrugRow(cis_code="60538772", drug_name="ABIES", lab_names=["LAB. BOIRON", "BONJOUR TOUT LE MONDE"]),
        DrugRow(cis_code="62170486", drug_name="ABACAVIR", lab_names=["MYLAN SAS"]),
    ]

    links = LabResolver().resolve(rows, [BOIRON, MYLAN])

    assert [(link.cis_code, link.lab_name, link.element_id, link.is_fallback) for link in links] == [
        ("60538772", "Labo. Boiron", "4:db:1", False),
        ("60538772", "BONJOUR TOUT LE MONDE", None, True),
        ("62170486", "MYLAN SAS", "4:db:2", False),
    ]
    assert links[2].similarity == 1.0


def test_resolve_reuses_fallbacks_created_in_the_same_batch():
    rows = [
        DrugRow(cis_code="1", drug_name="A", lab_names=["UNKNOWN LAB"]),
        DrugRow(cis_code="2", drug_name="B", lab_names=["UNKNOWN LAB"]),
    ]

    links = LabResolver().resolve(rows, [])

    assert [(link.cis_code, link.lab_name, link.is_fallback) for link in links] == [
        ("1", "UNKNOWN LAB", True),
        ("2", "UNKNOWN LAB", True),
    ]


def test_resolve_does_not_mutate_given_candidates():
    candidates = [MYLAN]
    rows = [DrugRow(cis_code="1", drug_name="A", lab_names=["UNKNOWN LAB"])]

    LabResolver().resolve(rows, candidates)

    assert candidates == [MYLAN]


def test_resolve_profiles_each_candidate_once():
    rows = [
        DrugRow(cis_code="1", drug_name="A", lab_names=["MYLAN SAS"]),
        DrugRow(cis_code="2", drug_name="B", lab_names=["LAB. BOIRON"]),
        DrugRow(cis_code="3", drug_name="C", lab_names=["MYLAN SAS"]),
    ]

    with patch("py_neo_transparence.resolver.profile", wraps=profile) as mock_profile:
        links = LabResolver().resolve(rows, [BOIRON, MYLAN])

    # Two candidate profiles plus one per lab name, however many rows there are.
    assert mock_profile.call_count == 2 + 3
    assert [link.element_id for link in links] == ["4:db:2", "4:db:1", "4:db:2"]

# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Links the lab names of the drug database to known companies.

The drug database spells lab names freely ("LAB. BOIRON") while the company
directory has its own spelling ("LABO. BOIRON"), so a drug is linked to the
company whose name scores best on the bigram similarity, provided the score
is strictly above a threshold. A lab name that matches nothing gets a
fallback :Company:Ansm node keyed by the name itself.
"""
from typing import Iterable, List, Optional, Tuple

from .models import DrugRow, LabCandidate, LabLink
from .similarity import LabelProfile, compare, profile

DEFAULT_THRESHOLD = 0.8

ProfiledCandidate = Tuple[LabCandidate, LabelProfile]


def _tie_break_key(scored: Tuple[float, LabCandidate]):
    score, candidate = scored
    # Highest score first, then lowest business identifier; labs without an
    # identifier (fallbacks) rank after those with one.
    return (-score, candidate.identifier is None, candidate.identifier or "", candidate.name)


class LabResolver:
    """Resolves drug lab names against a pool of :Company candidates."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, locale: str = "fr"):
        self.threshold = threshold
        self.locale = locale

    def _profiled(self, candidates: Iterable[LabCandidate]) -> List[ProfiledCandidate]:
        return [(candidate, profile(candidate.name, self.locale)) for candidate in candidates]

    def _best_match(self, lab: LabelProfile, pool: List[ProfiledCandidate]) -> Optional[Tuple[LabCandidate, float]]:
        scored = [(compare(lab, candidate_profile), candidate) for candidate, candidate_profile in pool]
        surviving = [item for item in scored if item[0] > self.threshold]
        if not surviving:
            return None
        score, candidate = min(surviving, key=_tie_break_key)
        return candidate, score

    def best_match(self, lab_name: str, candidates: Iterable[LabCandidate]) -> Optional[Tuple[LabCandidate, float]]:
        """Returns the best candidate above the threshold with its score, or None."""
        return self._best_match(profile(lab_name, self.locale), self._profiled(candidates))

    def resolve(self, rows: Iterable[DrugRow], candidates: Iterable[LabCandidate]) -> List[LabLink]:
        """
        Resolves every lab name of every row, in order.

        Candidate names are profiled once per call. Fallback labs created for
        earlier names join the pool, so the same unknown lab spelled twice in
        a batch yields a single fallback node.
        """
        pool = self._profiled(candidates)
        links = []
        for row in rows:
            for lab_name in row.lab_names:
                lab = profile(lab_name, self.locale)
                match = self._best_match(lab, pool)
                if match is None:
                    pool.append((LabCandidate(name=lab_name), lab))
                    links.append(LabLink(cis_code=row.cis_code, lab_name=lab_name))
                    continue
                candidate, score = match
                links.append(LabLink(
                    cis_code=row.cis_code,
                    lab_name=candidate.name,
                    element_id=candidate.element_id,
                    similarity=score,
                ))
        return links

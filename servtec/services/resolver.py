"""
Entity Resolver

Matches free text against the equipment catalog to find which equipment and
which client a message talks about. Resolution is best-effort: no match on
either axis is a normal outcome.

Scoring per catalog entry:
- equipment name, brand or model contained in the text: +10 (ends the term scan)
- each word longer than 3 chars of name/brand/model found in the text: +5
- each word longer than 2 chars of the client name found in the text: +8

The highest-scoring entry wins; ties keep the first entry in catalog order.
"""
import re
from typing import Iterable, List, Optional, Pattern

from servtec.models.schemas import CatalogEntry, ClientRef, EntityRef, Resolution
from servtec.utils.logger import get_logger
from servtec.utils.text import fold, title_case

logger = get_logger(__name__)

FULL_MATCH_SCORE = 10
EQUIPMENT_WORD_SCORE = 5
CLIENT_WORD_SCORE = 8

LEGAL_SUFFIXES = {"srl", "sa", "ltda", "inc", "corp", "s.a.", "s.r.l.", "s.a", "s.r.l"}

# Patterns for the client fragment a user mentions ("de la clinica norte")
CLIENT_PATTERNS: List[Pattern] = [
    re.compile(r"\b(?:clinica|hospital|centro|consultorio|sanatorio)\s+([a-zñ]+(?:\s+[a-zñ]+)?)"),
    re.compile(r"\b(?:cliente|paciente)\s+([a-zñ]+(?:\s+[a-zñ]+)?)"),
    re.compile(r"\b(?:dr\.?|dra\.?|doctor|doctora|doc)\s+([a-zñ]+(?:\s+[a-zñ]+)?)"),
    re.compile(r"\b(?:empresa|compania|corporacion)\s+([a-zñ]+(?:\s+[a-zñ]+)?)"),
    re.compile(r"([a-zñ]+(?:\s+[a-zñ]+)?)\s+(?:srl|s\.r\.l\.|sa|s\.a\.|ltda)\b"),
]

# Known equipment families, used as a hint when the catalog has no match
EQUIPMENT_PATTERNS: List[Pattern] = [
    re.compile(r"(nd-elite|nd\s*elite|ndelite|nd\s*elyte)"),
    re.compile(r"(ultraformer(?:\s*mpt)?|ultra\s*former)"),
    re.compile(r"(hydrafacial|hidrafacial|hydra\s*facial|hidra\s*facial|hidrafeisial)"),
    re.compile(r"\b(hifu|hyfu|haifu)\b"),
    re.compile(r"\b(laser|lazer|lasser|lacer)\b"),
    re.compile(r"(ultrasonido|ultra\s*sonido|ultrasonico)"),
    re.compile(r"(radiofrecuencia|radio\s*frecuencia)"),
    re.compile(r"(criolipolisis|crio\s*lipolisis|cryo)"),
    re.compile(r"(cavitacion)"),
    re.compile(r"(nd\s*yag|ndyag)"),
    re.compile(r"\b(ipl|luz\s*pulsada)\b"),
    re.compile(r"\b(co2)\b"),
    re.compile(r"\b(alma|candela|syneron|lumenis|fotona)\b"),
    re.compile(r"\b(soprano|lightsheer|coolsculpting|thermage)\b"),
]

COMPONENT_PATTERNS: List[Pattern] = [
    re.compile(r"(pieza\s+de\s+mano|piesa\s+de\s+mano|handpiece|hand\s*piece|paleta|punta|aplicador)"),
    re.compile(r"(unidad\s+principal|consola|torre|gabinete)"),
    re.compile(r"(manguera|tubo|cable|conector|conexion)"),
    re.compile(r"(filtro|cartucho|repuesto|consumible)"),
    re.compile(r"(pantalla|display|monitor|screen|lcd)"),
    re.compile(r"(bomba|motor|ventilador|cooler)"),
    re.compile(r"(sensor|sonda|detector|medidor)"),
    re.compile(r"(fuente|transformador|placa|circuito)"),
]


def short_client_name(full_name: str) -> str:
    """First significant word of a client name, skipping legal suffixes"""
    words = full_name.strip().split()
    for word in words:
        if len(word) > 2 and word.lower() not in LEGAL_SUFFIXES:
            return word
    return words[0] if words else full_name


def _first_match(patterns: Iterable[Pattern], folded: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(folded)
        if match:
            return title_case(match.group(1) if match.groups() else match.group(0))
    return None


class EntityResolver:
    """Scores catalog entries against message text"""

    def resolve(self, text: str, catalog: Iterable[CatalogEntry]) -> Resolution:
        """
        Resolve equipment and client references.

        Args:
            text: Raw message text
            catalog: Catalog snapshot, iterated in order

        Returns:
            Resolution (possibly empty)
        """
        folded = fold(text)
        entries = list(catalog)

        best: Optional[CatalogEntry] = None
        best_score = 0
        best_equipment_match = False
        best_client_match = False

        for entry in entries:
            score, equipment_match, client_match = self.score(folded, entry)
            if score > best_score and (equipment_match or client_match):
                best, best_score = entry, score
                best_equipment_match, best_client_match = equipment_match, client_match

        resolution = Resolution(
            client_hint=_first_match(CLIENT_PATTERNS, folded),
            equipment_hint=_first_match(EQUIPMENT_PATTERNS, folded),
            component=_first_match(COMPONENT_PATTERNS, folded),
        )

        if best is not None:
            if best_equipment_match:
                resolution.equipment = EntityRef(id=best.id, name=best.name or best.model)
            if best_client_match:
                resolution.client = self._client_ref(best.client)

        if resolution.client is None and resolution.client_hint:
            fallback = self.find_client(resolution.client_hint, entries)
            if fallback is not None:
                resolution.client = self._client_ref(fallback.client)
                if resolution.equipment is None:
                    logger.debug(f"Client resolved by fragment only: {fallback.client}")

        logger.info(
            f"Resolution: equipment={resolution.equipment_display} "
            f"client={resolution.client_display} (score={best_score})"
        )
        return resolution

    @staticmethod
    def score(folded_text: str, entry: CatalogEntry):
        """
        Score one catalog entry.

        Returns:
            (score, equipment_match, client_match)
        """
        score = 0
        equipment_match = False
        client_match = False

        for term in (fold(entry.name), fold(entry.brand), fold(entry.model)):
            term = term.strip()
            if not term:
                continue
            if term in folded_text:
                score += FULL_MATCH_SCORE
                equipment_match = True
                break
            for word in term.split():
                if len(word) > 3 and word in folded_text:
                    score += EQUIPMENT_WORD_SCORE
                    equipment_match = True

        for word in fold(entry.client).split():
            if len(word) > 2 and word in folded_text:
                score += CLIENT_WORD_SCORE
                client_match = True

        return score, equipment_match, client_match

    @staticmethod
    def find_client(fragment: str, entries: Iterable[CatalogEntry]) -> Optional[CatalogEntry]:
        """First entry whose client name contains the mentioned fragment"""
        wanted = fold(fragment).strip()
        if not wanted:
            return None
        for entry in entries:
            if entry.client and wanted in fold(entry.client):
                return entry
        return None

    @staticmethod
    def _client_ref(full_name: str) -> ClientRef:
        full_name = full_name.strip()
        return ClientRef(name=short_client_name(full_name), full_name=full_name)

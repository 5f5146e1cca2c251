"""
Unit tests for EntityResolver

Tests:
- Catalog scoring and tie-breaking
- Client short names
- Client-only fallback from mentioned fragments
- Equipment/component hints
"""
import pytest

from servtec.models.schemas import CatalogEntry
from servtec.services.resolver import EntityResolver, short_client_name
from servtec.utils.text import fold


@pytest.fixture
def resolver():
    return EntityResolver()


class TestCatalogScoring:
    """Test scoring against catalog entries"""

    def test_scenario_client_from_name_words(self, resolver, catalog):
        resolution = resolver.resolve("URGENTE no enciende el equipo de Clinica Norte", catalog)

        assert resolution.client is not None
        assert resolution.client.full_name == "Clinica Norte SRL"
        assert resolution.client.name == "Clinica"
        assert resolution.equipment is None

    def test_full_equipment_name_match(self, resolver, catalog):
        resolution = resolver.resolve("la hydrafacial no prende", catalog)

        assert resolution.equipment.id == "EQ-002"
        assert resolution.equipment.name == "Hydrafacial"
        assert resolution.client is None

    def test_equipment_and_client_from_same_entry(self, resolver, catalog):
        resolution = resolver.resolve(
            "la ultraformer de la clinica norte no funciona", catalog
        )

        assert resolution.equipment.id == "EQ-001"
        assert resolution.client.full_name == "Clinica Norte SRL"

    def test_score_values(self, catalog):
        text = fold("la ultraformer de la clinica norte no funciona")

        score, equipment_match, client_match = EntityResolver.score(text, catalog[0])

        # name word +5, model word +5, two client words +8 each
        assert score == 26
        assert equipment_match and client_match

    def test_full_match_ends_term_scan(self, catalog):
        score, _, _ = EntityResolver.score(fold("falla en nd-elite"), catalog[2])
        assert score == 10

    def test_ties_keep_first_entry(self, resolver):
        catalog = [
            CatalogEntry(id="A", name="Laser X1", client="Alfa"),
            CatalogEntry(id="B", name="Laser X1", client="Beta"),
        ]
        resolution = resolver.resolve("el laser x1 falla", catalog)
        assert resolution.equipment.id == "A"

    def test_no_match_is_empty_resolution(self, resolver, catalog):
        resolution = resolver.resolve("se corto la luz", catalog)

        assert resolution.equipment is None
        assert resolution.client is None

    def test_empty_catalog(self, resolver):
        resolution = resolver.resolve("no anda el hifu de la clinica sur", [])

        assert resolution.equipment is None
        assert resolution.equipment_hint == "Hifu"
        assert resolution.client_hint == "Sur"


class TestClientFallback:
    """Test client-only resolution from mentioned fragments"""

    def test_fragment_matches_short_client_name(self, resolver):
        catalog = [CatalogEntry(id="EQ-9", name="Soprano", client="JM SA")]

        resolution = resolver.resolve("problema en empresa jm", catalog)

        assert resolution.client.full_name == "JM SA"
        assert resolution.client.name == "JM"
        assert resolution.equipment is None

    def test_find_client_requires_fragment(self, catalog):
        assert EntityResolver.find_client("", catalog) is None
        assert EntityResolver.find_client("norte", catalog).id == "EQ-001"


class TestShortClientName:
    """Test client name normalization"""

    @pytest.mark.parametrize("full_name,expected", [
        ("Clinica Norte SRL", "Clinica"),
        ("SA Belleza Total", "Belleza"),
        ("Dr Ortiz", "Ortiz"),
        ("JM", "JM"),
    ])
    def test_short_name(self, full_name, expected):
        assert short_client_name(full_name) == expected


class TestHints:
    """Test free-text hints"""

    def test_component_hint(self, resolver):
        resolution = resolver.resolve("se rompio la pieza de mano del laser", [])

        assert resolution.component == "Pieza De Mano"
        assert resolution.equipment_hint == "Laser"

    def test_equipment_display_falls_back_to_hint(self, resolver):
        resolution = resolver.resolve("el ultraformer no enciende", [])
        assert resolution.equipment_display == "Ultraformer"

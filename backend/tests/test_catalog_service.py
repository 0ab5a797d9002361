"""
Kavin's Catalog Backend — Catalog Service Tests
=================================================

What we test:
    ✅ BRL price formatting
    ✅ Category pills (order of first appearance, missing → Geral)
    ✅ Search by name / reference, category and highlight filters
    ✅ Role-based price visibility on product cards
    ✅ Catalog assembly: title, totals, variant groups
"""

import pytest

from app.schemas.user import User, UserRole
from app.services.catalog_service import CatalogService, format_brl


class TestFormatBrl:

    @pytest.mark.parametrize(
        "value,expected",
        [
            (89.9, "R$ 89,90"),
            (0, "R$ 0,00"),
            (1234.56, "R$ 1.234,56"),
            (1000000, "R$ 1.000.000,00"),
        ],
    )
    def test_formats_like_pt_br(self, value, expected):
        assert format_brl(value) == expected


class TestFiltering:

    def setup_method(self):
        self.service = CatalogService()

    def test_categories_in_order_of_first_appearance(self, make_product):
        products = [
            make_product(category="Vestidos"),
            make_product(category="Blusas"),
            make_product(category=None),
            make_product(category="Vestidos"),
        ]
        assert self.service.categories(products) == ["Vestidos", "Blusas", "Geral"]

    def test_search_matches_name_or_reference_case_insensitive(self, make_product):
        dress = make_product(name="Vestido Floral", reference="REF-1")
        shirt = make_product(name="Blusa Lisa", reference="ABC-99")

        assert self.service.filter_products([dress, shirt], search="floral") == [dress]
        assert self.service.filter_products([dress, shirt], search="abc") == [shirt]
        assert self.service.filter_products([dress, shirt], search="") == [dress, shirt]

    def test_highlights_filter(self, make_product):
        featured = make_product(is_highlight=True)
        regular = make_product(is_highlight=False)
        assert self.service.filter_products([featured, regular], category="highlights") == [featured]

    def test_category_filter_is_exact(self, make_product):
        dress = make_product(category="Vestidos")
        shirt = make_product(category="Blusas")
        assert self.service.filter_products([dress, shirt], category="Blusas") == [shirt]
        assert self.service.filter_products([dress, shirt], category="Saias") == []

    def test_search_and_category_combine(self, make_product):
        a = make_product(name="Vestido Azul", category="Vestidos")
        b = make_product(name="Vestido Azul", category="Promo")
        assert self.service.filter_products([a, b], search="azul", category="Vestidos") == [a]

    def test_titles(self):
        assert self.service.catalog_title("all") == "Coleção Completa"
        assert self.service.catalog_title("highlights") == "Destaques da Kavin's"
        assert self.service.catalog_title("Blusas") == "Blusas"


class TestPriceVisibility:

    def setup_method(self):
        self.service = CatalogService()

    def _user(self, role):
        return User(id="u1", name="Test", email="t@example.com", role=role)

    def test_anonymous_sees_no_prices(self, make_product):
        card = self.service.build_card(make_product(), None)
        assert card.show_price is False
        assert card.price_representative is None
        assert card.price_sacoleira is None
        assert card.can_edit is False

    def test_guest_sees_no_prices(self, make_product):
        card = self.service.build_card(make_product(), self._user(UserRole.GUEST))
        assert card.show_price is False
        assert card.price_representative is None

    def test_representative_sees_only_representative_price(self, make_product):
        card = self.service.build_card(make_product(), self._user(UserRole.REPRESENTANTE))
        assert card.show_price is True
        assert card.price_representative == 59.9
        assert card.price_representative_display == "R$ 59,90"
        assert card.price_sacoleira is None
        assert card.can_edit is False

    def test_sacoleira_sees_only_sacoleira_price(self, make_product):
        card = self.service.build_card(make_product(), self._user(UserRole.SACOLEIRA))
        assert card.price_sacoleira_display == "R$ 79,90"
        assert card.price_representative is None

    def test_admin_sees_both_prices_and_can_edit(self, make_product):
        card = self.service.build_card(make_product(), self._user(UserRole.ADMIN))
        assert card.price_representative == 59.9
        assert card.price_sacoleira == 79.9
        assert card.can_edit is True


class TestBuildCatalog:

    def setup_method(self):
        self.service = CatalogService()

    def test_groups_variants_and_counts(self, make_product):
        standard = make_product(group_id="group-000001", reference="REF-1")
        loose = make_product(reference="REF-2", category="Blusas")
        plus = make_product(group_id="group-000001", reference="REF-1-PLUS")

        catalog = self.service.build_catalog([standard, loose, plus], None)

        assert catalog.title == "Coleção Completa"
        assert catalog.total_count == 3
        assert [g.references for g in catalog.groups] == [["REF-1", "REF-1-PLUS"], ["REF-2"]]
        assert catalog.groups[1].key == loose.id
        assert catalog.categories == ["Vestidos", "Blusas"]

    def test_categories_ignore_filters(self, make_product):
        dress = make_product(category="Vestidos")
        shirt = make_product(category="Blusas", name="Blusa")

        catalog = self.service.build_catalog([dress, shirt], None, search="blusa")

        assert catalog.total_count == 1
        assert catalog.categories == ["Vestidos", "Blusas"]

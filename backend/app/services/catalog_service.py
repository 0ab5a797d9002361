"""
Kavin's Catalog Backend — Catalog Service
===========================================

What:  Search, category filtering, variant grouping and role-based pricing
       for the public catalog.
How:   Pure functions over `Product` lists; no I/O. The catalog route loads
       products through ProductService and hands them here.

Pricing visibility:
    ┌───────────────┬────────────────────┬─────────────────┐
    │ Role          │ Representative     │ Sacoleira       │
    ├───────────────┼────────────────────┼─────────────────┤
    │ ADMIN         │ yes                │ yes             │
    │ REPRESENTANTE │ yes                │ no              │
    │ SACOLEIRA     │ no                 │ yes             │
    │ GUEST / anon  │ no                 │ no              │
    └───────────────┴────────────────────┴─────────────────┘
"""

from typing import List, Optional

from app.schemas.product import (
    CatalogGroup,
    CatalogResponse,
    Product,
    ProductCard,
)
from app.schemas.user import User, UserRole
from app.services.product_service import group_products

DEFAULT_CATEGORY = "Geral"
ALL_CATEGORIES = "all"
HIGHLIGHTS = "highlights"

_REPRESENTATIVE_ROLES = {UserRole.ADMIN, UserRole.REPRESENTANTE}
_SACOLEIRA_ROLES = {UserRole.ADMIN, UserRole.SACOLEIRA}


def format_brl(value: float) -> str:
    """Formats a price the way pt-BR Intl.NumberFormat does: R$ 1.234,56"""
    formatted = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {formatted}"


class CatalogService:

    def categories(self, products: List[Product]) -> List[str]:
        """Distinct categories in order of first appearance; missing counts as Geral."""
        seen: List[str] = []
        for product in products:
            category = product.category or DEFAULT_CATEGORY
            if category not in seen:
                seen.append(category)
        return seen

    def filter_products(
        self,
        products: List[Product],
        search: str = "",
        category: str = ALL_CATEGORIES,
    ) -> List[Product]:
        term = (search or "").lower()
        filtered = []
        for product in products:
            matches_search = term in product.name.lower() or term in product.reference.lower()

            if category == HIGHLIGHTS:
                matches_category = product.is_highlight
            elif category != ALL_CATEGORIES:
                matches_category = product.category == category
            else:
                matches_category = True

            if matches_search and matches_category:
                filtered.append(product)
        return filtered

    def catalog_title(self, category: str) -> str:
        if category == ALL_CATEGORIES:
            return "Coleção Completa"
        if category == HIGHLIGHTS:
            return "Destaques da Kavin's"
        return category

    def build_card(self, product: Product, user: Optional[User]) -> ProductCard:
        role = user.role if user else None
        sees_representative = role in _REPRESENTATIVE_ROLES
        sees_sacoleira = role in _SACOLEIRA_ROLES

        card = ProductCard(
            id=product.id,
            group_id=product.group_id,
            reference=product.reference,
            name=product.name,
            description=product.description,
            sizes=product.sizes,
            colors=product.colors,
            images=product.images,
            category=product.category,
            fabric=product.fabric,
            is_highlight=product.is_highlight,
            show_price=sees_representative or sees_sacoleira,
            can_edit=role == UserRole.ADMIN,
        )
        if sees_representative:
            card.price_representative = product.price_representative
            card.price_representative_display = format_brl(product.price_representative)
        if sees_sacoleira:
            card.price_sacoleira = product.price_sacoleira
            card.price_sacoleira_display = format_brl(product.price_sacoleira)
        return card

    def build_catalog(
        self,
        products: List[Product],
        user: Optional[User],
        search: str = "",
        category: str = ALL_CATEGORIES,
    ) -> CatalogResponse:
        """
        Assemble one catalog page.

        Category pills are derived from the full product list so that the
        pills stay put while the user narrows the search.
        """
        filtered = self.filter_products(products, search=search, category=category)
        groups = [
            CatalogGroup(
                key=group.key,
                references=group.references,
                product_ids=[p.id for p in group.products],
            )
            for group in group_products(filtered)
        ]
        return CatalogResponse(
            title=self.catalog_title(category),
            search=search,
            category=category,
            categories=self.categories(products),
            products=[self.build_card(p, user) for p in filtered],
            groups=groups,
            total_count=len(filtered),
        )


catalog_service = CatalogService()

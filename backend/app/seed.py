"""
Kavin's Catalog Backend — Built-in Accounts and Demo Catalog
==============================================================

What:  Static data the application falls back on.
       - INITIAL_USERS:    accounts accepted in offline mode
       - VIP_USERS:        accounts auto-provisioned on first sign-in
       - INITIAL_PRODUCTS: catalog shown when the products table is unreachable
"""

from typing import Dict, List, Optional

from app.schemas.product import ColorVariant, Product
from app.schemas.user import SeedUser, UserRole


MOCK_ADMIN = SeedUser(
    id="admin-001",
    name="Administrador Kavin",
    email="admin@kavins.com",
    role=UserRole.ADMIN,
    password="admin123",
)

INITIAL_USERS: List[SeedUser] = [
    MOCK_ADMIN,
    SeedUser(
        id="user-002",
        name="Maria Representante",
        email="maria@rep.com",
        role=UserRole.REPRESENTANTE,
        password="123",
    ),
    SeedUser(
        id="user-003",
        name="Ana Sacoleira",
        email="ana@sacola.com",
        role=UserRole.SACOLEIRA,
        password="123",
    ),
]

# If one of these emails signs in and the account does not exist yet,
# the account and its profile are created on the spot.
VIP_USERS: Dict[str, Dict[str, object]] = {
    "admin@kavins.com": {"role": UserRole.ADMIN, "name": "Administrador Kavin"},
    "representante@kavins.com": {"role": UserRole.REPRESENTANTE, "name": "Representante Kavin"},
    "sacoleira@kavins.com": {"role": UserRole.SACOLEIRA, "name": "Sacoleira Kavin"},
}


def find_vip(email: str) -> Optional[Dict[str, object]]:
    return VIP_USERS.get(email.strip().lower())


def find_seed_user(email: str, password: str) -> Optional[SeedUser]:
    """Exact email + password match against the built-in accounts."""
    for user in INITIAL_USERS:
        if user.email == email and user.password == password:
            return user
    return None


INITIAL_PRODUCTS: List[Product] = [
    Product(
        id="prod-001",
        reference="REF-2024-A",
        name="Vestido Longo Floral",
        description=(
            "Vestido elegante com estampa floral, perfeito para eventos de verão. "
            "Tecido leve e respirável."
        ),
        sizes=["P", "M", "G"],
        colors=[
            ColorVariant(hex="#FF5733", name="Coral Vivo"),
            ColorVariant(hex="#C70039", name="Vermelho Intenso"),
        ],
        price_representative=89.90,
        price_sacoleira=110.00,
        images=["https://picsum.photos/400/600?random=1"],
        category="Vestidos",
        fabric="Viscose Premium",
        is_highlight=True,
    ),
    Product(
        id="prod-002",
        reference="REF-2024-B",
        name="Blusa Básica Premium",
        description="Blusa básica essencial para o dia a dia, confeccionada em algodão egípcio.",
        sizes=["G1", "G2", "G3"],
        colors=[
            ColorVariant(hex="#000000", name="Preto"),
            ColorVariant(hex="#FFFFFF", name="Branco"),
            ColorVariant(hex="#2C3E50", name="Azul Marinho"),
        ],
        price_representative=29.90,
        price_sacoleira=39.90,
        images=["https://picsum.photos/400/600?random=2"],
        category="Blusas",
        fabric="Algodão Egípcio",
        is_highlight=False,
    ),
]

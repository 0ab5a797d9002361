# Services package init
"""
Kavin's Catalog Backend — Services Layer
==========================================

What:  Business logic between the routes (HTTP) and the database / external platforms.
How:   Services receive the request's AsyncSession and schema objects and return
       schemas; module-level singletons are imported by the routes.

Service Inventory:
    - ProductService: product rows, variant grouping, read fallback
    - CatalogService: search, category filters, role-based prices
    - ProductFormService: admin editor load/save, AI description
    - variant_editor: pure size/color/photo/variation helpers
    - ImageService: Pillow resize + upload of product photos
    - AuthService: online → VIP → offline login chain, sessions, profiles
    - UserService: admin user management
    - SupabaseGateway: auth and storage calls to the platform
    - LLMService (abstract) / GeminiService: product copywriting
"""

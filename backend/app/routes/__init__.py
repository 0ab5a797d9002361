"""
Kavin's Catalog Backend — API Routes Package
==============================================

Route Inventory:
    - catalog.py:   GET    /api/catalog                          (public, role-priced)
                    GET    /api/products/{id}                    (public card)
    - auth.py:      POST   /api/auth/login
                    POST   /api/auth/logout
                    GET    /api/auth/me
    - products.py:  GET    /api/admin/products/{id}/form
                    POST   /api/admin/products/form
                    PUT    /api/admin/products/{id}/form
                    POST   /api/admin/products/form/edit         (variant editor actions)
                    DELETE /api/admin/products/{id}
                    DELETE /api/admin/product-groups/{group_id}
                    POST   /api/admin/images
                    POST   /api/admin/products/description
    - users.py:     GET    /api/admin/users
                    POST   /api/admin/users
                    DELETE /api/admin/users/{id}
    - health.py:    GET    /health

Routes stay thin: read the request, call a service, shape the response.
"""

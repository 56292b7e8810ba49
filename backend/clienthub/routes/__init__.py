# Routes package init
"""
ClientHub Backend - API Routes Package
=======================================

What:  HTTP route handlers for the admin UI and client apps.
How:   One module per resource; every module exposes `router`.

Route Inventory:
    - auth.py:     POST /api/login, /api/logout, /api/change-password
    - clients.py:  GET  /api/clients, /api/client_status/{client_name}
                   POST /api/add_client, PUT /api/update_client
                   GET/POST /api/app_update
    - images.py:   POST /api/upload-image, GET /api/client-image/{imageFileName}
    - health.py:   GET  /health

Routes stay thin: collect input, call a service, shape the response.
Errors are raised as ClientHubError subclasses and formatted in main.py.
"""

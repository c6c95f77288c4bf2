"""Flask blueprint package for the invoice dashboard.

The ``invoice`` blueprint in :mod:`app.routes.invoice_routes` is registered in
:func:`app.create_app`.  Its mutating views delegate to the handlers in
:mod:`app.services.invoice_actions` and translate their outcomes into
redirects, re-rendered forms or JSON.
"""

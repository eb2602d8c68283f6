"""API routers, registered explicitly in lot_api.app."""

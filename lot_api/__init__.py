"""HTTP surface of the lot tracker."""

from lot_api.app import create_app

__all__ = ["create_app"]

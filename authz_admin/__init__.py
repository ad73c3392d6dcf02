"""Descope identity and ReBAC administration package.

To use the Flask admin API:
    from authz_admin.flask_app import create_app

To use the Descope client library:
    from authz_admin.core.descope import create_client, AuthzService

To use the operation services:
    from authz_admin.core import authz_service, provisioning_service
"""
# Note: flask_app is not imported here so that CLI use does not require Flask

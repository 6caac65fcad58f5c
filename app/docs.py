# =============================================================================
# app/docs.py - API Documentation
# =============================================================================
# OpenAPI / Swagger settings for the public API. The generated schema
# documents the bearer scheme and marks every operation whose route has a
# non-anonymous authorization policy as requiring it.
#
# Usage:
#   options = DocumentationOptions()
#   app = FastAPI(**options.fastapi_kwargs())
#   install_openapi(app, options)
# =============================================================================

from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

POLICY_EXTENSION = "x-authorization-policy"

DESCRIPTION = """
## Catalog Public API

Read access to the catalog is anonymous. Creating, updating and deleting
catalog items requires a bearer token for a user in the **Administrators**
role.

### Quick Start

```bash
# 1. Get a token
curl -X POST http://localhost:8000/api/authenticate \\
  -H "Content-Type: application/json" \\
  -d '{"username": "admin@microsoft.com", "password": "Pass@word1"}'

# 2. Use it
curl -X DELETE http://localhost:8000/api/catalog-items/1 \\
  -H "Authorization: Bearer <token>"
```
"""

OPENAPI_TAGS = [
    {"name": "AuthEndpoints", "description": "Exchange credentials for a bearer token"},
    {"name": "CatalogBrandEndpoints", "description": "Catalog brands"},
    {"name": "CatalogTypeEndpoints", "description": "Catalog types"},
    {"name": "CatalogItemEndpoints", "description": "Browse and manage catalog items"},
]


@dataclass(frozen=True)
class DocumentationOptions:
    title: str = "PublicApi"
    version: str = "v1"
    description: str = DESCRIPTION
    docs_url: str | None = "/swagger"
    redoc_url: str | None = "/redoc"
    openapi_url: str | None = "/swagger/v1/swagger.json"
    security_scheme_name: str = "Bearer"
    tags: list[dict[str, str]] = field(default_factory=lambda: list(OPENAPI_TAGS))

    def fastapi_kwargs(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "version": self.version,
            "description": self.description,
            "docs_url": self.docs_url,
            "redoc_url": self.redoc_url,
            "openapi_url": self.openapi_url,
            "openapi_tags": self.tags,
        }


def install_openapi(app: FastAPI, options: DocumentationOptions) -> None:
    """Replace `app.openapi` with a generator that adds the bearer scheme."""

    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            tags=options.tags,
        )

        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {})[options.security_scheme_name] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT Authorization header using the Bearer scheme.",
        }

        for operations in schema.get("paths", {}).values():
            for operation in operations.values():
                policy = operation.get(POLICY_EXTENSION)
                if policy and policy != "Anonymous":
                    operation["security"] = [{options.security_scheme_name: []}]

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi

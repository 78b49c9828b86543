"""Minimal deterministic OpenAPI description of the HTTP surface.

Paths and their required permissions are declared once in ``ROUTES``; the
Order schema advertises the pipeline via ``x-transitions`` so clients can
render the progress bar without hard-coding stages.
"""
from typing import Any, Dict
from .constants.orders import ORDER_PIPELINE, STATUS_LABELS, ALL_URGENCIES, COST_CENTERS
from .constants.permissions import ALL_ROLES

__all__ = ["build_openapi_spec"]

# (path, method, summary, required permission or None, auth required, success code)
ROUTES = [
    ("/auth/signup", "post", "Register an account awaiting approval", None, False, "201"),
    ("/auth/login", "post", "Login", None, False, "200"),
    ("/auth/logout", "post", "Revoke current token", None, True, "200"),
    ("/auth/me", "get", "Current user", None, True, "200"),
    ("/users/pending", "get", "Users awaiting approval", "USER.APPROVE", True, "200"),
    ("/users/{user_id}/approve", "post", "Assign a role to a pending user", "USER.APPROVE", True, "200"),
    ("/orders", "get", "List visible orders", "ORDER.READ", True, "200"),
    ("/orders", "post", "Create a material request", "ORDER.CREATE", True, "201"),
    ("/orders/stats", "get", "Order counters", "ORDER.READ", True, "200"),
    ("/orders/{order_id}", "get", "Single order", "ORDER.READ", True, "200"),
    ("/orders/{order_id}/claim", "post", "Claim an unclaimed pending order", "ORDER.CLAIM", True, "200"),
    ("/orders/{order_id}/advance", "post", "Advance a claimed order one stage", "ORDER.ADVANCE", True, "200"),
    ("/orders/{order_id}/comments", "get", "Comment thread", "COMMENT.READ", True, "200"),
    ("/orders/{order_id}/comments", "post", "Append a comment", "COMMENT.CREATE", True, "201"),
]


def _schemas() -> Dict[str, Any]:
    return {
        "Order": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "materials": {"type": "string"},
                "cost_center": {"type": "string", "enum": list(COST_CENTERS)},
                "deadline": {"type": "string", "format": "date"},
                "urgency": {"type": "string", "enum": list(ALL_URGENCIES)},
                "status": {"type": "string", "enum": list(ORDER_PIPELINE)},
                "responsible_id": {"type": "integer", "nullable": True},
            },
            "x-transitions": list(ORDER_PIPELINE),
            "x-status-labels": dict(STATUS_LABELS),
        },
        "User": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "email": {"type": "string"},
                "name": {"type": "string"},
                "role": {"type": "string", "enum": list(ALL_ROLES), "nullable": True},
            },
        },
        "Comment": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "order_id": {"type": "integer"},
                "comment": {"type": "string"},
                "created_at": {"type": "string", "format": "date-time"},
            },
        },
        "Pagination": {
            "type": "object",
            "properties": {
                "total": {"type": "integer"},
                "limit": {"type": "integer"},
                "offset": {"type": "integer"},
                "returned": {"type": "integer"},
            },
            "required": ["total", "limit", "offset", "returned"],
        },
        "Error": {
            "type": "object",
            "properties": {
                "error": {
                    "type": "object",
                    "properties": {
                        "status": {"type": "integer"},
                        "title": {"type": "string"},
                        "detail": {"type": "string"},
                        "code": {"type": "string"},
                    },
                }
            },
            "required": ["error"],
        },
    }


def build_openapi_spec() -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    for path, method, summary, perm, auth, ok in ROUTES:
        rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
        op: Dict[str, Any] = {
            "summary": summary,
            "operationId": f"{method}_{rid}",
            "tags": [path.split("/")[1].capitalize()],
            "responses": {
                ok: {"description": "OK"},
                "default": {"description": "Error", "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}},
            },
        }
        if auth:
            op["security"] = [{"BearerAuth": []}]
        if perm:
            op["x-required-permissions"] = [perm]
        paths.setdefault(path, {})[method] = op

    return {
        "openapi": "3.0.3",
        "info": {"title": "Materials Procurement API", "version": "0.1.0"},
        "paths": paths,
        "components": {
            "schemas": _schemas(),
            "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        },
    }

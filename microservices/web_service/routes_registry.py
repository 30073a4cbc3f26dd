"""
Web Service Routes Registry
Defines all routes served by the web service
"""

from typing import List, Dict, Any

# Define all routes
SERVICE_ROUTES = [
    # Health Check
    {
        "path": "/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Basic health check"
    },
    {
        "path": "/api/v1/web/info",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service information and routes"
    },

    # Pages
    {
        "path": "/",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Redirect to home or login"
    },
    {
        "path": "/login",
        "methods": ["GET", "POST"],
        "auth_required": False,
        "description": "Login form and sign-in"
    },
    {
        "path": "/register",
        "methods": ["GET", "POST"],
        "auth_required": False,
        "description": "Registration form and sign-up"
    },
    {
        "path": "/home",
        "methods": ["GET", "POST"],
        "auth_required": True,
        "description": "Home page and logout"
    },
    {
        "path": "/crud",
        "methods": ["GET", "POST"],
        "auth_required": True,
        "description": "Items list, add, edit and delete"
    },
]


def get_routes_summary() -> Dict[str, Any]:
    """
    Get compact route summary

    Returns:
        Route paths grouped by purpose plus counts
    """
    health_routes = []
    page_routes = []

    for route in SERVICE_ROUTES:
        path = route["path"]
        if path.startswith("/health") or path.startswith("/api/"):
            health_routes.append(path)
        else:
            page_routes.append(path)

    return {
        "route_count": len(SERVICE_ROUTES),
        "health": health_routes,
        "pages": page_routes,
        "methods": sorted({m for r in SERVICE_ROUTES for m in r["methods"]}),
        "public_count": sum(1 for r in SERVICE_ROUTES if not r["auth_required"]),
        "protected_count": sum(1 for r in SERVICE_ROUTES if r["auth_required"]),
    }


def get_all_routes() -> List[Dict[str, Any]]:
    return SERVICE_ROUTES


# Service metadata
SERVICE_METADATA = {
    "service_name": "web_service",
    "version": "1.0.0",
    "tags": ["v1", "web", "auth", "items"],
    "capabilities": [
        "login",
        "registration",
        "logout",
        "items_crud",
        "session_cookie_bridging"
    ]
}

"""
FastAPI Dependencies
"""

from fastapi import Request

from dadd_explorer.database.connection import QueryGateway


def get_gateway(request: Request) -> QueryGateway:
    """
    Query gateway attached to the application by ``create_app``.

    Use this in route handlers:

    Example:
        @router.get("/regions")
        async def list_regions(gateway: QueryGateway = Depends(get_gateway)):
            ...
    """
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise RuntimeError("Query gateway not configured on the application")
    return gateway

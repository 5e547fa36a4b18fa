"""FastAPI dependencies for the course catalog."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from academy.courses.service import CourseCatalogService


async def get_catalog_service(request: Request) -> CourseCatalogService:
    """Get catalog service from app state."""
    service = getattr(request.app.state, "catalog_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Course catalog not available",
        )
    return service


CatalogServiceDep = Annotated[CourseCatalogService, Depends(get_catalog_service)]

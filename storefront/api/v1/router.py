from fastapi import APIRouter

from storefront.api.v1.endpoints import auth, categories, products, reviews, roles, uploads, users
from storefront.schemas.common import EnvelopeResponse, ValidationErrorResponse

# Documented failure shapes shared by every endpoint
api_router = APIRouter(
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation failed"},
        404: {"model": EnvelopeResponse, "description": "Resource not found"},
        409: {"model": EnvelopeResponse, "description": "Conflict"},
        500: {"model": EnvelopeResponse, "description": "Store failure"},
    }
)

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(roles.router, prefix="/roles", tags=["Roles"])
api_router.include_router(categories.router, prefix="/categories", tags=["Categories"])
api_router.include_router(products.router, prefix="/products", tags=["Products"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])

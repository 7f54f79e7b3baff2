from fastapi import APIRouter
from app.api.products import routes as products
from app.api.users import routes as users
from app.core.exceptions import ErrorResponse

error_responses = {
    500: {"model": ErrorResponse, "description": "Datastore failure"},
    504: {"model": ErrorResponse, "description": "Request deadline exceeded"},
}

api_router = APIRouter(responses=error_responses)
api_router.include_router(products.router)
api_router.include_router(users.router)

from fastapi import APIRouter

from app.api.routes import (
    ai,
    applications,
    blogs,
    comments,
    countries,
    login,
    media,
    products,
    questions,
    taxonomies,
    users,
    utils,
    visa_requirements,
)

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(utils.router)
api_router.include_router(countries.router)
api_router.include_router(blogs.router)
api_router.include_router(taxonomies.router)
api_router.include_router(products.router)
api_router.include_router(comments.router)
api_router.include_router(questions.router)
api_router.include_router(applications.router)
api_router.include_router(visa_requirements.router)
api_router.include_router(ai.router)
api_router.include_router(media.router)

from fastapi import APIRouter

from copydesk.api.routes import business_profiles, chats, frameworks, generate, login, users, utils

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(utils.router)
api_router.include_router(business_profiles.router, prefix="/business-profiles", tags=["business-profiles"])
api_router.include_router(chats.router, prefix="/chats", tags=["chats"])
api_router.include_router(frameworks.router, prefix="/frameworks", tags=["frameworks"])
api_router.include_router(generate.router, prefix="/generate", tags=["generate"])

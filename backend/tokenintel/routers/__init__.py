# This file makes the routers directory a Python package

from .onchain import router as onchain_router
from .social import router as social_router
from .research import router as research_router
from .chat import router as chat_router

routers = [
    onchain_router,
    social_router,
    research_router,
    chat_router,
]

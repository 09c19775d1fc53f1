"""API v1 router that aggregates all sub-routers."""

from fastapi import APIRouter

from discuss_board.api.v1.admin import router as admin_router
from discuss_board.api.v1.appeals import router as appeals_router
from discuss_board.api.v1.attachments import router as attachments_router
from discuss_board.api.v1.auth import router as auth_router
from discuss_board.api.v1.comments import router as comments_router
from discuss_board.api.v1.forbidden_words import router as forbidden_words_router
from discuss_board.api.v1.members import router as members_router
from discuss_board.api.v1.moderation_actions import router as actions_router
from discuss_board.api.v1.notifications import admin_router as admin_notifications_router
from discuss_board.api.v1.notifications import channels_router
from discuss_board.api.v1.notifications import router as notifications_router
from discuss_board.api.v1.post_reactions import router as post_reactions_router
from discuss_board.api.v1.posts import router as posts_router
from discuss_board.api.v1.posts import tags_router
from discuss_board.api.v1.reactions import router as reactions_router
from discuss_board.api.v1.reports import router as reports_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(members_router)
api_router.include_router(posts_router)
api_router.include_router(tags_router)
api_router.include_router(post_reactions_router)
api_router.include_router(comments_router)
api_router.include_router(attachments_router)
api_router.include_router(reactions_router)
api_router.include_router(reports_router)
api_router.include_router(actions_router)
api_router.include_router(appeals_router)
api_router.include_router(forbidden_words_router)
api_router.include_router(notifications_router)
api_router.include_router(channels_router)
api_router.include_router(admin_notifications_router)
api_router.include_router(admin_router)

"""API routers, one per resource, all mounted under /api."""

from server.routes import (
    auth,
    chat,
    essays,
    flashcards,
    health,
    lessons,
    progress,
    quizzes,
    settings,
    study_plans,
    tests,
)

ROUTERS = [
    health.router,
    auth.router,
    lessons.router,
    quizzes.router,
    tests.router,
    chat.router,
    study_plans.router,
    essays.router,
    flashcards.router,
    progress.router,
    settings.router,
]

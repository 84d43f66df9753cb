import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wellnest.config import CORS_ORIGINS
from wellnest.database import init_db
from wellnest.errors import NotFoundOrForbidden, StoreUnavailable, ValidationError
from wellnest.routes.feedback_routes import router as feedback_router
from wellnest.routes.journal_routes import router as journal_router
from wellnest.routes.practice_routes import router as practice_router
from wellnest.routes.streak_routes import router as streak_router
from wellnest.routes.timeline_routes import router as timeline_router
from wellnest.routes.user_routes import router as user_router
from wellnest.services.llm_router import get_llm_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Wellnest", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundOrForbidden)
async def not_found_handler(request: Request, exc: NotFoundOrForbidden):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.warning("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable, please retry"})


@app.get("/api/v1/health-check")
async def health():
    return {
        "status": "ok",
        "message": "Backend is alive!",
        "ai_providers": get_llm_router().get_provider_status(),
    }


app.include_router(user_router)
app.include_router(journal_router)
app.include_router(practice_router)
app.include_router(streak_router)
app.include_router(timeline_router)
app.include_router(feedback_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("wellnest.main:app", host="0.0.0.0", port=8000, reload=True)

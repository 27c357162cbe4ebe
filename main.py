import logging
import sys
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from doodle.infrastructure import settings
from doodle.infrastructure.db.init_db import init_db
from doodle.infrastructure.db.session import engine
from doodle.presentation.api.routers.ai_feedback_router import router as ai_feedback_router
from doodle.presentation.api.routers.ai_router import router as ai_router
from doodle.presentation.api.routers.analytics_router import router as analytics_router
from doodle.presentation.api.routers.assessment_router import router as assessment_router
from doodle.presentation.api.routers.auth_routes import router as auth_router
from doodle.presentation.api.routers.course_router import router as course_router
from doodle.presentation.api.routers.question_bank_router import router as question_bank_router
from doodle.presentation.api.routers.student_assessment_router import router as student_assessment_router
from doodle.presentation.dependencies import get_storage
from doodle.presentation.errors import ServiceError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

# Create tables
init_db(engine)

SERVICE_NAME = "DoodleOnMoodle API"
SERVICE_VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", [])), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    content = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=500, content=content)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "An internal server error occurred.", "details": str(exc)},
    )


# Include routers
app.include_router(auth_router)
app.include_router(course_router)
app.include_router(ai_feedback_router)
app.include_router(ai_router)
app.include_router(assessment_router)
app.include_router(question_bank_router)
app.include_router(analytics_router)
app.include_router(student_assessment_router)

app.mount("/uploads", StaticFiles(directory=get_storage().root_dir), name="uploads")


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@app.get("/")
def root():
    return {"message": "Welcome to DoodleOnMoodle API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

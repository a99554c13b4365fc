import os
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import find_dotenv, load_dotenv

# db reads DATABASE_URL at import time
load_dotenv(find_dotenv(usecwd=True))

from . import db
from . import models  # noqa: F401  registers tables on Base
from .errors import TrackerError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Job Tracker Backend")

origins_env = os.getenv("CORS_ORIGINS")
origins = [o.strip() for o in (origins_env or "").split(",") if o.strip()]
if not origins:
    # Local dev frontends (Next.js 3000, Vite 5173)
    origins = ["http://localhost:3000", "http://localhost:5173"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

db.Base.metadata.create_all(bind=db.engine)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    return JSONResponse({"error": exc.message or "Request failed"}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        message = f"{loc}: {errors[0].get('msg', 'invalid value')}" if loc else errors[0].get("msg", "Invalid request")
    else:
        message = "Invalid request"
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse({"error": message}, status_code=400)


@app.get("/health")
def health():
    return {"ok": True}


from .api.routes_ai import router as ai_router
from .api.routes_jobs import router as jobs_router
from .api.routes_resume import router as resume_router
app.include_router(ai_router)
app.include_router(jobs_router)
app.include_router(resume_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))

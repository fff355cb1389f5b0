from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse, RedirectResponse

from .db import ensure_schema
from .errors import AIServiceError
from .logging_config import setup_logging
from .settings import settings
from .user_settings import SettingsStore, get_settings_store
from .routers import ai_settings
from .routers import read
from .routers import speaking
from .routers import write

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"

logger = setup_logging(settings.log_level)

app = FastAPI(title="IELTS Coach API")
app.include_router(ai_settings.router)
app.include_router(write.router)
app.include_router(read.router)
app.include_router(speaking.router)

# Sessions built from old settings are dropped, never migrated
get_settings_store().add_reload_hook(speaking.reset_sessions)

# Static frontend at /app when a build is present (absolute path so cwd doesn't matter)
if FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")

	@app.get("/", include_in_schema=False)
	async def redirect_root_to_app():
		return RedirectResponse(url="/app")


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
	log = logger.warning if exc.status_code < 500 else logger.error
	log("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
	return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/info")
def root(store: SettingsStore = Depends(get_settings_store)):
	user_settings = store.load()
	return {
		"status": "ok",
		"provider": user_settings.provider.value,
		"model": user_settings.model,
		"configured": bool(user_settings.api_key.strip()),
	}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema for the key-value store
	ensure_schema()

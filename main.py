# main.py
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from utils.config import BRAND_NAME, LOG_LEVEL
from routers.dashboard import router as dashboard_router
from routers.invoices import router as invoices_router
from routers.site_settings import router as settings_router

logging.basicConfig(level=LOG_LEVEL)

app = FastAPI(title=f"Dashboard quản trị — {BRAND_NAME}")

STATIC_DIR = Path(__file__).resolve().parent / "static"
if STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Routers
app.include_router(dashboard_router)
app.include_router(invoices_router)
app.include_router(settings_router)


@app.get("/healthz")
def healthz():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8887, reload=True)

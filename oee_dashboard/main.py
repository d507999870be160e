# oee_dashboard/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oee_dashboard.core.config import get_settings

# Import routers
from oee_dashboard.api.v1.dashboard import router as dashboard_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="OEE Dashboard Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers under /api/v1
app.include_router(dashboard_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"message": "Welcome to the OEE Dashboard Backend API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("oee_dashboard.main:app", host=settings.APP_HOST, port=settings.APP_PORT)

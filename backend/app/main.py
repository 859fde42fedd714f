import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.page import router as page_router
from app.api.router import router
from app.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="Home Energy Estimator API",
    version="0.1.0",
    description="House size, window count and energy usage estimates for an address",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(page_router)


@app.get("/health")
async def health():
    return {"status": "ok"}

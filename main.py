from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.exceptions import RegistrationError

# Base and engine are needed to create the tables
from app.db.session import engine, Base

# Registers every model on Base.metadata before create_all
from app.db.models import _all

from app.api.auth import router as auth_router
from app.api.public import router as public_router
from app.api.admin import router as admin_router

setup_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0"
)

Base.metadata.create_all(bind=engine)

app.include_router(auth_router)
app.include_router(public_router)
app.include_router(admin_router)

# Public form and dashboard run on a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


@app.get("/")
def read_root():
    return {"message": "API ComUniMo attiva"}

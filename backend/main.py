# backend/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv
import logging

load_dotenv()

from config import settings
from database import init_db
from utils.storage import image_store

# Routers
from routes.products import router as products_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router
from routes.profile import router as profile_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# Create tables
init_db()

app = FastAPI(title="Filament Store API", version="1.0.0")

# Uploads - make sure the directory exists before mounting it
app.mount("/uploads", StaticFiles(directory=str(image_store.ensure_root())), name="uploads")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173"
]

if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(profile_router)

@app.get("/")
def read_root():
    return {"message": "Filament Store API is running"}

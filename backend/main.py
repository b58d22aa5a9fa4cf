import os
import sys
import logging

# Ensure this directory is in the path for Vercel and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS
from database import init_db
from stores import uses_supabase
from routes.routine_routes import router as routine_router
from routes.profile_routes import router as profile_router

logger = logging.getLogger(__name__)

# Tables live in the hosted project when Supabase is configured
if not uses_supabase():
    try:
        init_db()
    except Exception as e:
        logger.warning(f"Database init skipped or failed: {e}")

app = FastAPI(title="Skincare Routine Tracker")

@app.get("/api/v1/health-check")
async def health():
    return {
        "status": "ok",
        "message": "Backend is alive!",
        "store": "supabase" if uses_supabase() else "sql",
    }

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routine_router)
app.include_router(profile_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

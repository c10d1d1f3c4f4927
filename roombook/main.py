from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Registers every model on Base.metadata before the routers import them
import roombook.db.base  # noqa: F401
from roombook.api.routes import auth, bookings, buildings, rooms
from roombook.api.routes import admin_analytics, admin_panel

# ⭐ Import logging system
from roombook.core.logging_config import get_logger

logger = get_logger()

app = FastAPI(
    title="Library Room Booking API",
    version="1.0.0",
    description="Room availability, booking requests with email verification, and library admin tools"
)

# ⭐ Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url}")

    try:
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url}")
        return response

    except Exception as e:
        logger.error(f"ERROR: {request.url} -> {str(e)}")
        raise e


# ⭐ CORS (booking site and admin dashboard are separate frontends)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Can restrict later for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------- ROUTERS REGISTER ORDER MATTERS --------
app.include_router(auth.router)
app.include_router(buildings.router)
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(admin_panel.router)
app.include_router(admin_analytics.router)

@app.get("/", tags=["Root"])
def root():
    return {"message": "Backend running successfully"}

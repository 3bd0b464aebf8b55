import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import grounds, payments
from app.core.exceptions import BookingServiceError
from app.core.logging_config import get_logger

logger = get_logger()

app = FastAPI(
    title="Ground Booking API",
    version="1.0.0",
    description="API for ground slot booking and Razorpay payments"
)

# Request logging
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


# Error responses
@app.exception_handler(BookingServiceError)
async def booking_error_handler(request: Request, exc: BookingServiceError):
    logger.warning(f"{type(exc).__name__}: {request.url} -> {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error: {request.url}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "details": str(exc) if os.getenv("APP_ENV") == "development" else None,
        },
    )


# Checkout page calls these endpoints directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(grounds.router)
app.include_router(payments.router)

@app.get("/", tags=["Root"])
def root():
    return {"message": "Backend running successfully"}

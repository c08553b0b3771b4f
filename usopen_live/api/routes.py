import re
from datetime import date

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from usopen_live.config.settings import AppSettings
from usopen_live.models.enums import Gender
from usopen_live.models.responses import ErrorResponse, MatchesResponse
from usopen_live.normalization.service import MatchService
from usopen_live.utils.time_utils import current_home_date, tournament_dates, utc_now_iso

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

GENDER_ERROR = 'Gender must be "men" or "women"'
DATE_FORMAT_ERROR = "Date must be in YYYY-MM-DD format"
DATE_CALENDAR_ERROR = "Date must be a valid calendar date"

router = APIRouter()


class InvalidRequest(ValueError):
    """Raised when a path parameter fails validation."""

    pass


def validate_gender(value: str) -> Gender:
    try:
        return Gender(value)
    except ValueError:
        raise InvalidRequest(GENDER_ERROR) from None


def validate_date(value: str) -> str:
    if not DATE_PATTERN.fullmatch(value):
        raise InvalidRequest(DATE_FORMAT_ERROR)
    try:
        date.fromisoformat(value)
    except ValueError:
        raise InvalidRequest(DATE_CALENDAR_ERROR) from None
    return value


def _service(request: Request) -> MatchService:
    return request.app.state.match_service


def _settings(request: Request) -> AppSettings:
    return request.app.state.settings


@router.get("/health")
async def health() -> dict:
    """Simple health check endpoint."""
    return {"status": "ok"}


@router.get("/tournament")
async def tournament(request: Request) -> dict:
    """Tournament metadata and the date strip the client offers."""
    app_settings = _settings(request)
    return {
        "name": app_settings.tournament_name,
        "timezone": app_settings.home_timezone,
        "today": current_home_date(app_settings.home_timezone),
        "dates": tournament_dates(
            app_settings.tournament_start_date, app_settings.tournament_end_date
        ),
    }


@router.get("/{gender}/{date_iso}")
async def matches_by_date(request: Request, gender: str, date_iso: str) -> JSONResponse:
    """Live, upcoming and completed singles matches for one gender and day."""
    try:
        try:
            gender_value = validate_gender(gender)
            date_value = validate_date(date_iso)
        except InvalidRequest as e:
            logger.info(f"Rejected request /{gender}/{date_iso}: {e}")
            return JSONResponse(ErrorResponse(error=str(e)).to_api(), status_code=400)

        grouped = await _service(request).get_matches_by_date(gender_value, date_value)
        body = MatchesResponse(
            date=date_value,
            gender=gender_value.value,
            live=grouped.live,
            upcoming=grouped.upcoming,
            completed=grouped.completed,
            last_updated=utc_now_iso(),
        )
        response = JSONResponse(body.to_api())
        response.headers["Cache-Control"] = _settings(request).cache_control_header
        return response
    except Exception as e:
        logger.exception(f"Error serving /{gender}/{date_iso}: {e}")
        body = ErrorResponse(
            error="Internal server error",
            message=str(e) or type(e).__name__,
            date=date_iso or "unknown",
            gender=gender or "unknown",
            live=[],
            upcoming=[],
            completed=[],
            last_updated=utc_now_iso(),
        )
        return JSONResponse(body.to_api(), status_code=500)

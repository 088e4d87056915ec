"""FastAPI application exposing pin control over HTTP."""

import logging
from typing import Any, Dict, Optional

from fastapi import Cookie, FastAPI, HTTPException, Response, status

from relay_control import __version__
from relay_control.config import ConfigManager
from relay_control.hardware.pins import PinRegistry
from relay_control.pin_controller import ActuationResult, PinController
from relay_control.web.models import HealthResponse, KeyUpdate, PinListResponse, PinModel

logger = logging.getLogger(__name__)

KEY_COOKIE = "key"
DEFAULT_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def _to_response(result: ActuationResult) -> Response:
    """Map an actuation outcome to an HTTP response.

    Denied and applied look the same to the caller.
    """
    if result is ActuationResult.FAULT:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pin driver unavailable",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def create_app(
    pin_controller: PinController,
    config_manager: ConfigManager,
    registry: PinRegistry,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        pin_controller: PinController instance
        config_manager: ConfigManager instance
        registry: Pin registry whose lines the controller drives

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Relay Control",
        description="Credential-scoped control of relay output pins",
        version=__version__,
    )

    # Store references for API handlers
    app.state.pin_controller = pin_controller
    app.state.config_manager = config_manager
    app.state.registry = registry

    @app.get("/api/health")
    async def health() -> HealthResponse:
        """Report that the service is up and how many lines it drives."""
        return HealthResponse(status="ok", lines=len(app.state.registry.line_numbers))

    @app.get("/api/config")
    async def get_config() -> Dict[str, Any]:
        """Get current configuration (with credential keys masked)."""
        result: Dict[str, Any] = app.state.config_manager.to_dict_safe()
        return result

    @app.get("/api/pins")
    def list_pins(
        credential: Optional[str] = Cookie(default=None, alias=KEY_COOKIE),
    ) -> PinListResponse:
        """List the pins the caller's key may control."""
        pins = app.state.pin_controller.resolver.accessible_pins(credential)
        return PinListResponse(pins=[PinModel(**pin.to_dict()) for pin in pins])

    @app.post("/api/pins/{number}/on", status_code=status.HTTP_204_NO_CONTENT)
    def pin_on(
        number: int,
        credential: Optional[str] = Cookie(default=None, alias=KEY_COOKIE),
    ) -> Response:
        """Turn a pin on."""
        return _to_response(app.state.pin_controller.turn_on(credential, number))

    @app.post("/api/pins/{number}/off", status_code=status.HTTP_204_NO_CONTENT)
    def pin_off(
        number: int,
        credential: Optional[str] = Cookie(default=None, alias=KEY_COOKIE),
    ) -> Response:
        """Turn a pin off."""
        return _to_response(app.state.pin_controller.turn_off(credential, number))

    @app.post("/api/pins/{number}/blink", status_code=status.HTTP_204_NO_CONTENT)
    async def pin_blink(
        number: int,
        credential: Optional[str] = Cookie(default=None, alias=KEY_COOKIE),
    ) -> Response:
        """Blink a pin and respond once the sequence has finished."""
        return _to_response(await app.state.pin_controller.blink(credential, number))

    @app.put("/api/key", status_code=status.HTTP_204_NO_CONTENT)
    async def set_key(update: KeyUpdate) -> Response:
        """Store a key in the caller's cookie.

        The key is not checked, so the response says nothing about its validity.
        """
        cm = app.state.config_manager
        response = Response(status_code=status.HTTP_204_NO_CONTENT)
        response.set_cookie(
            KEY_COOKIE,
            update.key,
            max_age=cm.get("web.cookie_max_age", DEFAULT_COOKIE_MAX_AGE),
            httponly=True,
            samesite="strict",
            secure=bool(cm.get("web.secure_cookie", False)),
        )
        return response

    @app.delete("/api/key", status_code=status.HTTP_204_NO_CONTENT)
    async def clear_key() -> Response:
        """Remove the key cookie."""
        response = Response(status_code=status.HTTP_204_NO_CONTENT)
        response.delete_cookie(KEY_COOKIE)
        return response

    logger.info("FastAPI application created")
    return app

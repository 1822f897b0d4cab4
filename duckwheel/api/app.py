"""FastAPI application exposing the wheel over HTTP."""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from ..app import WheelApp
from ..domain.exceptions import (
    DuckWheelError,
    InvalidInput,
    PrizeNotFound,
    UserNotFound,
)
from ..loaders.json_loader import load_seed_from_json
from ..loaders.rows import (
    dump_duck_history,
    dump_prize,
    dump_shop_order,
    dump_spin_log,
    dump_spin_result,
    dump_user,
    dump_user_overview,
    dump_wheel_setting,
    parse_prize,
    parse_wheel_setting,
)
from .schemas import AddDucksIn, AdminIn, AdminPrizeIn, AdminSettingIn, BuyIn, OrderStatusIn, SpinIn

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS = (UserNotFound, PrizeNotFound)


class Unauthorized(Exception):
    """Raised when an admin request lacks the shared secret."""


def create_app(wheel: WheelApp, *, seed_file: Path | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await wheel.init_backend()
        if seed_file is not None:
            definition = await load_seed_from_json(wheel, seed_file)
            logger.info(
                "Seeded %s levels, %s prizes, %s users from %s",
                len(definition.settings),
                len(definition.prizes),
                len(definition.users),
                seed_file,
            )
        try:
            yield
        finally:
            await wheel.close()
            logger.info("Stop Server")

    api = FastAPI(title=wheel.config.app_name, lifespan=lifespan)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    api.include_router(build_router(wheel))
    _install_error_handlers(api)
    return api


def build_router(wheel: WheelApp) -> APIRouter:
    router = APIRouter(prefix="/api")
    players = wheel.player_service
    service = wheel.wheel_service
    admin = wheel.admin_service

    def ensure_admin(request: Request, body: AdminIn | None = None) -> None:
        expected = wheel.config.admin.auth_secret
        if not expected:
            return
        provided = (
            request.headers.get("x-auth-secret")
            or (body.auth_secret if body else None)
            or request.query_params.get("authSecret")
        )
        if not provided or not secrets.compare_digest(provided.encode(), expected.encode()):
            raise Unauthorized()

    @router.get("/health")
    async def health() -> dict:
        return {"status": "ok", "appName": wheel.config.app_name}

    @router.get("/me")
    async def me(user_id: Optional[str] = Query(default=None, alias="userId")):
        if not user_id:
            return _error(400, "USER_ID_REQUIRED")
        user = await players.fetch(user_id)
        return {"user": dump_user(user), "appName": wheel.config.app_name}

    @router.get("/prizes")
    async def prizes() -> dict:
        return {"prizes": [dump_prize(prize) for prize in await wheel.prize_store.list()]}

    @router.get("/settings")
    async def settings() -> dict:
        levels = await wheel.settings_store.list()
        return {
            "settings": {level.value: dump_wheel_setting(setting) for level, setting in levels.items()}
        }

    @router.get("/weights")
    async def weights(level: str, luck: float = Query(default=0.0, ge=0)) -> dict:
        weighted = await service.prize_weights(level, luck)
        total = sum(item.weight for item in weighted)
        return {
            "weights": [
                {
                    "prizeId": item.prize.prize_id,
                    "effectiveRarity": int(item.effective_rarity),
                    "weight": item.weight,
                    "chance": item.weight / total if total > 0 else 0.0,
                }
                for item in weighted
            ]
        }

    @router.get("/users-overview")
    async def users_overview() -> dict:
        return {"users": [dump_user_overview(item) for item in await players.users_overview()]}

    @router.get("/logs")
    async def logs(user_id: Optional[str] = Query(default=None, alias="userId")) -> dict:
        return {"logs": [dump_spin_log(entry) for entry in await players.spin_history(user_id)]}

    @router.get("/orders")
    async def orders(user_id: Optional[str] = Query(default=None, alias="userId")) -> dict:
        return {"orders": [dump_shop_order(order) for order in await players.orders(user_id)]}

    @router.get("/duck-history")
    async def duck_history(user_id: Optional[str] = Query(default=None, alias="userId")):
        if not user_id:
            return _error(400, "USER_ID_REQUIRED")
        history = await players.duck_history(user_id)
        return {"history": [dump_duck_history(entry) for entry in history]}

    @router.post("/spin")
    async def spin(body: SpinIn) -> dict:
        outcome = await service.spin(body.user_id, body.bet_level, seed=body.seed)
        return {"result": dump_spin_result(outcome.result), "user": dump_user(outcome.next_user)}

    @router.post("/buy")
    async def buy(body: BuyIn) -> dict:
        outcome = await service.buy(body.user_id, body.prize_id)
        return {"order": dump_shop_order(outcome.order), "user": dump_user(outcome.next_user)}

    @router.post("/admin/add-ducks")
    async def add_ducks(body: AddDucksIn, request: Request) -> dict:
        ensure_admin(request, body)
        adjustment = await admin.add_ducks(body.user_id, body.amount, body.note)
        return {"user": dump_user(adjustment.next_user), "entry": dump_duck_history(adjustment.entry)}

    @router.post("/admin/prizes")
    async def save_prize(body: AdminPrizeIn, request: Request) -> dict:
        ensure_admin(request, body)
        await admin.save_prize(_parse_or_invalid(parse_prize, body.prize))
        return {"success": True}

    @router.post("/admin/settings")
    async def save_setting(body: AdminSettingIn, request: Request) -> dict:
        ensure_admin(request, body)
        await admin.save_setting(_parse_or_invalid(parse_wheel_setting, body.setting))
        return {"success": True}

    @router.post("/admin/orders/{order_id}/status")
    async def update_order_status(order_id: str, body: OrderStatusIn, request: Request) -> dict:
        ensure_admin(request, body)
        order = await admin.update_order_status(order_id, body.status)
        return {"order": dump_shop_order(order)}

    return router


def _parse_or_invalid(parser, payload: dict):
    try:
        return parser(payload)
    except (KeyError, ValueError) as exc:
        raise InvalidInput(str(exc)) from exc


def _error(status: int, code: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": code, **extra})


def _install_error_handlers(api: FastAPI) -> None:
    @api.exception_handler(Unauthorized)
    async def handle_unauthorized(_request: Request, _exc: Unauthorized) -> JSONResponse:
        return _error(401, "UNAUTHORIZED")

    @api.exception_handler(DuckWheelError)
    async def handle_domain_error(request: Request, exc: DuckWheelError) -> JSONResponse:
        status = 404 if isinstance(exc, NOT_FOUND_ERRORS) else 400
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error(status, exc.code)

    @api.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("%s %s invalid input: %s", request.method, request.url.path, exc.errors())
        return _error(400, InvalidInput.code)

    @api.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "INTERNAL_SERVER_ERROR", details=str(exc))

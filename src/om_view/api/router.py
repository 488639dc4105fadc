# src/om_view/api/router.py
"""Monitor REST API: a thin view over MonitorContext."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.context import MonitorContext
from src.om_common.response import ApiResponse, success_response
from src.om_view.application.schemas import DraftUpdate, FormOut, MonitorView, SubmitResult

router = APIRouter(prefix="/monitor", tags=["monitor"])


def get_context(request: Request) -> MonitorContext:
    return request.app.state.context  # type: ignore[no-any-return]


Context = Annotated[MonitorContext, Depends(get_context)]


@router.get("")
async def get_monitor(ctx: Context) -> ApiResponse:
    view = MonitorView.render(ctx.store.snapshot, ctx.controller)
    return success_response(view.model_dump())


@router.put("/draft")
async def update_draft(req: DraftUpdate, ctx: Context) -> ApiResponse:
    ctx.controller.edit(side=req.side, price=req.price, quantity=req.quantity)
    return success_response(FormOut.from_controller(ctx.controller).model_dump())


@router.post("/submit")
async def submit_order(ctx: Context) -> ApiResponse:
    outcome = await ctx.controller.submit()
    return ApiResponse(
        code=outcome.error_code or 0,
        message=outcome.message,
        data=SubmitResult.from_outcome(outcome).model_dump(),
    )


@router.post("/orders/{order_id}/cancel")
async def cancel_order(order_id: str, ctx: Context) -> ApiResponse:
    result = await ctx.controller.cancel(order_id)
    return success_response(result.model_dump(), message=ctx.controller.message)


@router.post("/refresh")
async def force_refresh(ctx: Context) -> ApiResponse:
    applied = await ctx.scheduler.refresh()
    return success_response({"applied": applied, "seq": ctx.store.last_applied_seq})
